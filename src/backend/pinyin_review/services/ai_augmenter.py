"""
AI 扩充服务（错题举一反三）

把用户最近的易错字发给 LLM，生成新的练习题追加到复习队列末尾。

设计说明：
- LLM 输出视为不可信数据：先解析再逐条校验，得到 AugmentResult（成功列表或失败原因）
- 任何失败（未配置、超时、网络错误、非 JSON、无有效题目）都不抛异常，
  复习会话照常进行，只是没有 AI 题
- 调用受 asyncio.wait_for 超时约束，超时即取消请求
"""
import asyncio
import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, List, Optional

from pinyin_review.core.pinyin import contains_chinese, numeric_to_diacritic, question_type_for
from pinyin_review.llm import ChatResponse, LLMClient, LLMError, trace_llm_call
from prompts import PromptLoader, PromptLoadError, PromptRenderError, prompt_loader

logger = logging.getLogger(__name__)

PROMPT_NAME = "review_generator"


@dataclass
class MistakeContext:
    """发送给 LLM 的一道易错题"""
    question_content: str
    correct_pinyin: str
    wrong_pinyin: str = ""


@dataclass
class ValidatedItem:
    """
    通过校验的 AI 题目

    Attributes:
        item_id: 临时ID（ai-xxxx），不落库
        content: 中文内容
        pinyin: 声调符号形式的拼音
        raw_pinyin: LLM 返回的原始数字声调拼音
        question_type: character | word | sentence
    """
    item_id: str
    content: str
    pinyin: str
    raw_pinyin: str
    question_type: str


@dataclass
class AugmentResult:
    """AI 扩充结果：成功时 items 非空，失败时 error 为原因"""
    items: List[ValidatedItem] = field(default_factory=list)
    error: Optional[str] = None
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, reason: str, skipped: int = 0) -> "AugmentResult":
        return cls(items=[], error=reason, skipped=skipped)


def _clean_llm_response(content: str) -> str:
    """清理 LLM 响应中的 Markdown 代码块标记"""
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


def _new_item_id() -> str:
    return f"ai-{uuid.uuid4().hex[:12]}"


def _validate_candidate(candidate: Any) -> Optional[ValidatedItem]:
    if not isinstance(candidate, dict):
        return None

    content = candidate.get("content")
    raw_pinyin = candidate.get("pinyin")
    if not isinstance(content, str) or not isinstance(raw_pinyin, str):
        return None

    content = content.strip()
    raw_pinyin = raw_pinyin.strip()
    if not content or not raw_pinyin or not contains_chinese(content):
        return None

    pinyin = numeric_to_diacritic(raw_pinyin)
    if not pinyin or any(ch.isdigit() for ch in pinyin):
        return None

    return ValidatedItem(
        item_id=_new_item_id(),
        content=content,
        pinyin=pinyin,
        raw_pinyin=raw_pinyin,
        question_type=question_type_for(content),
    )


def parse_candidates(
    raw_text: str,
    limit: Optional[int] = None,
    exclude_contents: Optional[set] = None
) -> AugmentResult:
    """
    解析并校验 LLM 返回的题目列表

    Args:
        raw_text: LLM 返回的原始文本（期望是 JSON 数组，允许包在 ```json 代码块里）
        limit: 最多保留的题目数
        exclude_contents: 需要排除的内容（例如已经在队列中的错题）

    Returns:
        AugmentResult: 全部无效时为失败结果
    """
    try:
        data = json.loads(_clean_llm_response(raw_text or ""))
    except json.JSONDecodeError as e:
        return AugmentResult.failure(f"LLM 返回的 JSON 格式无效: {e}")

    if not isinstance(data, list):
        return AugmentResult.failure(f"LLM 返回的不是 JSON 数组: {type(data).__name__}")

    seen = set(exclude_contents or ())
    items: List[ValidatedItem] = []
    skipped = 0
    for candidate in data:
        item = _validate_candidate(candidate)
        if item is None or item.content in seen:
            skipped += 1
            continue
        seen.add(item.content)
        items.append(item)
        if limit is not None and len(items) >= limit:
            break

    if not items:
        return AugmentResult.failure("LLM 没有返回有效题目", skipped=skipped)
    return AugmentResult(items=items, skipped=skipped)


class AIAugmenter:
    """
    AI 扩充器

    使用示例:
        augmenter = AIAugmenter(get_llm_client(settings.llm), timeout=8.0)
        result = await augmenter.generate(contexts, count=5)
        if result.ok:
            ...
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient],
        timeout: float = 8.0,
        loader: Optional[PromptLoader] = None,
        temperature: float = 0.7
    ):
        self.llm_client = llm_client
        self.timeout = timeout
        self.loader = loader or prompt_loader
        self.temperature = temperature

    @property
    def is_available(self) -> bool:
        return self.llm_client is not None and self.llm_client.is_available

    @trace_llm_call("review_generation", tags=["review", "ai_augment"])
    async def _request(self, messages: List[dict]) -> ChatResponse:
        return await self.llm_client.chat(messages, temperature=self.temperature)

    async def generate(
        self,
        mistakes: List[MistakeContext],
        count: int,
        exclude_contents: Optional[set] = None
    ) -> AugmentResult:
        """
        基于易错题生成新的练习题

        Args:
            mistakes: 易错题上下文（调用方负责截取前几道）
            count: 期望生成的题目数
            exclude_contents: 不希望重复出现的内容

        Returns:
            AugmentResult: 永不抛异常，失败时 error 说明原因
        """
        if not self.is_available:
            return AugmentResult.failure("AI 配置缺失")
        if not mistakes or count <= 0:
            return AugmentResult.failure("没有可用的错题上下文")

        try:
            messages = self.loader.get_messages(PROMPT_NAME, mistakes=mistakes, count=count)
        except (PromptLoadError, PromptRenderError) as e:
            logger.error(f"复习题提示词加载失败: {e}")
            return AugmentResult.failure(f"提示词加载失败: {e}")

        try:
            response = await asyncio.wait_for(self._request(messages), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"AI 生成复习题超时（{self.timeout}s），本次不追加 AI 题")
            return AugmentResult.failure("AI 调用超时")
        except LLMError as e:
            logger.warning(f"AI 生成复习题失败: {e}")
            return AugmentResult.failure(f"AI 调用失败: {e}")

        result = parse_candidates(response.content, limit=count, exclude_contents=exclude_contents)
        if result.ok:
            logger.info(f"AI 生成复习题 {len(result.items)} 道（丢弃 {result.skipped} 道无效题）")
        else:
            logger.warning(f"AI 返回内容不可用: {result.error}")
        return result
