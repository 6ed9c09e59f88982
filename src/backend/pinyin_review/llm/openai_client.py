"""
OpenAI 兼容客户端
"""

import logging
from typing import Dict, List, Optional

from .base import ChatResponse, LLMClient, LLMError
from .config import LLMConfig

logger = logging.getLogger(__name__)


class OpenAIClient(LLMClient):
    """
    基于 openai.AsyncOpenAI 的客户端，SDK 在第一次调用时才创建

    使用示例:
        client = OpenAIClient(LLMConfig(api_key="sk-xxx", model="deepseek-chat",
                                        base_url="https://api.deepseek.com/v1"))
        response = await client.chat(messages, temperature=0.7)
    """

    def __init__(self, config: LLMConfig):
        self._config = config
        self._sdk = None

    def _client(self):
        if self._sdk is None:
            from openai import AsyncOpenAI
            self._sdk = AsyncOpenAI(
                api_key=self._config.api_key,
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                max_retries=self._config.max_retries,
            )
        return self._sdk

    async def chat(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> ChatResponse:
        try:
            completion = await self._client().chat.completions.create(
                model=self._config.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens or self._config.max_tokens,
            )
        except Exception as e:
            logger.error(f"LLM 请求失败 model={self._config.model}: {e}")
            raise LLMError("LLM 请求失败", cause=e) from e

        if not completion.choices:
            raise LLMError("LLM 没有返回任何结果")

        choice = completion.choices[0]
        if choice.finish_reason == "length":
            logger.warning(f"LLM 输出被截断 model={completion.model}")

        return ChatResponse(
            content=choice.message.content or "",
            model=completion.model,
            total_tokens=completion.usage.total_tokens if completion.usage else None,
            truncated=choice.finish_reason == "length",
        )

    @property
    def model_name(self) -> str:
        return self._config.model

    @property
    def is_available(self) -> bool:
        return bool(self._config.api_key)
