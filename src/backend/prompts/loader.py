"""
提示词加载器

每个提示词是 templates/ 下的一个 YAML 文件：

    name: review_generator
    system_prompt: |        # 必需
      ...
    templates:
      user: |               # 可选，Jinja2 模板
        ...
    variables:              # 模板变量默认值
      count: 5

渲染使用 StrictUndefined，缺少变量直接报错，不会静默渲染出空串。
"""

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from jinja2 import StrictUndefined, Template, TemplateError

SYSTEM_KEY = "system_prompt"


class PromptLoadError(Exception):
    """提示词文件不存在或格式不对"""
    pass


class PromptRenderError(Exception):
    """模板缺失或渲染失败"""
    pass


@dataclass
class PromptTemplate:
    """解析后的提示词文件"""
    name: str
    system_prompt: str
    templates: Dict[str, str] = field(default_factory=dict)
    variables: Dict[str, Any] = field(default_factory=dict)
    description: str = ""

    def source(self, key: str) -> str:
        if key == SYSTEM_KEY:
            return self.system_prompt
        return self.templates.get(key, "")

    def render(self, key: str = SYSTEM_KEY, /, **variables) -> str:
        text = self.source(key)
        if not text:
            raise PromptRenderError(f"Template '{key}' not found in {self.name}.yaml")
        try:
            template = Template(text, undefined=StrictUndefined)
            return template.render(**{**self.variables, **variables}).strip()
        except TemplateError as e:
            raise PromptRenderError(f"Failed to render {self.name}.{key}: {e}")


def _parse(name: str, raw: Any) -> PromptTemplate:
    if not isinstance(raw, dict) or not raw.get(SYSTEM_KEY):
        raise PromptLoadError(f"Missing required field '{SYSTEM_KEY}' in {name}.yaml")
    return PromptTemplate(
        name=raw.get("name") or name,
        system_prompt=raw[SYSTEM_KEY],
        templates=dict(raw.get("templates") or {}),
        variables=dict(raw.get("variables") or {}),
        description=raw.get("description", ""),
    )


class PromptLoader:
    """
    按名称加载并渲染提示词

    使用示例：
        messages = prompt_loader.get_messages("review_generator", mistakes=contexts, count=5)
    """

    def __init__(self, templates_dir: Optional[Path] = None, enable_cache: bool = True):
        self.templates_dir = Path(templates_dir) if templates_dir else Path(__file__).parent / "templates"
        self.enable_cache = enable_cache
        self._cache: Dict[str, PromptTemplate] = {}
        self._lock = threading.Lock()

    def load(self, name: str) -> PromptTemplate:
        """
        Raises:
            PromptLoadError: 文件不存在、YAML 无法解析或缺少 system_prompt
        """
        with self._lock:
            cached = self._cache.get(name) if self.enable_cache else None
            if cached is not None:
                return cached

            path = self.templates_dir / f"{name}.yaml"
            if not path.exists():
                raise PromptLoadError(f"Prompt template not found: {path}")
            try:
                raw = yaml.safe_load(path.read_text(encoding="utf-8"))
            except yaml.YAMLError as e:
                raise PromptLoadError(f"Failed to parse {path.name}: {e}")

            template = _parse(name, raw)
            if self.enable_cache:
                self._cache[name] = template
            return template

    def render(self, name: str, template_key: str = SYSTEM_KEY, /, **variables) -> str:
        return self.load(name).render(template_key, **variables)

    def get_messages(self, name: str, /, **variables) -> List[Dict[str, str]]:
        """OpenAI 格式消息：system，以及存在时的 user"""
        template = self.load(name)
        messages = [{"role": "system", "content": template.render(SYSTEM_KEY, **variables)}]
        if template.source("user"):
            messages.append({"role": "user", "content": template.render("user", **variables)})
        return messages

    def clear_cache(self, name: Optional[str] = None):
        with self._lock:
            if name:
                self._cache.pop(name, None)
            else:
                self._cache.clear()


prompt_loader = PromptLoader()
