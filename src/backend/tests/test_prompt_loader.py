"""
提示词加载器测试
"""
import pytest

from prompts import PromptLoader, PromptLoadError, PromptRenderError


@pytest.fixture
def templates_dir(tmp_path):
    (tmp_path / "greeting.yaml").write_text(
        "system_prompt: |\n"
        "  你好，{{ name }}\n"
        "templates:\n"
        "  user: |\n"
        "    今天学习 {{ count }} 个字\n"
        "variables:\n"
        "  count: 3\n",
        encoding="utf-8",
    )
    (tmp_path / "broken.yaml").write_text("templates: {}\n", encoding="utf-8")
    return tmp_path


class TestPromptLoader:
    """测试 YAML 加载与 Jinja2 渲染"""

    def test_render_with_defaults(self, templates_dir):
        loader = PromptLoader(templates_dir)

        assert loader.render("greeting", name="小明") == "你好，小明"
        assert loader.render("greeting", "user") == "今天学习 3 个字"
        assert loader.render("greeting", "user", count=5) == "今天学习 5 个字"

    def test_get_messages(self, templates_dir):
        messages = PromptLoader(templates_dir).get_messages("greeting", name="小明")

        assert messages == [
            {"role": "system", "content": "你好，小明"},
            {"role": "user", "content": "今天学习 3 个字"},
        ]

    def test_missing_variable_raises(self, templates_dir):
        with pytest.raises(PromptRenderError):
            PromptLoader(templates_dir).render("greeting")

    def test_missing_template_key_raises(self, templates_dir):
        with pytest.raises(PromptRenderError):
            PromptLoader(templates_dir).render("greeting", "assistant", name="x")

    def test_missing_file_raises(self, templates_dir):
        with pytest.raises(PromptLoadError):
            PromptLoader(templates_dir).load("nope")

    def test_missing_system_prompt_raises(self, templates_dir):
        with pytest.raises(PromptLoadError):
            PromptLoader(templates_dir).load("broken")

    def test_cache_can_be_cleared(self, templates_dir):
        loader = PromptLoader(templates_dir)
        loader.load("greeting")
        (templates_dir / "greeting.yaml").write_text("system_prompt: 新内容\n", encoding="utf-8")

        assert loader.render("greeting", name="x") == "你好，x"
        loader.clear_cache("greeting")
        assert loader.render("greeting") == "新内容"

    def test_bundled_review_generator_template(self):
        loader = PromptLoader()

        template = loader.load("review_generator")

        assert template.name == "review_generator"
        assert template.variables["count"] == 5
        assert "user" in template.templates

    def test_variables_may_share_parameter_names(self, tmp_path):
        (tmp_path / "clash.yaml").write_text(
            "system_prompt: '{{ name }}/{{ template_key }}'\n",
            encoding="utf-8",
        )
        loader = PromptLoader(tmp_path)

        assert loader.render("clash", name="小明", template_key="k") == "小明/k"
        assert loader.get_messages("clash", name="小红", template_key="k") == [
            {"role": "system", "content": "小红/k"}
        ]
