"""
LLM 客户端接口

复习题生成只需要一问一答：发送 system + user 两条消息，拿回一段 JSON 文本。
AI 扩充服务只依赖 LLMClient，测试里可以换成返回固定内容的假客户端。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass
class ChatResponse:
    """
    一次补全的结果

    Attributes:
        content: 模型输出文本
        model: 实际应答的模型
        total_tokens: 消耗的 token 数（服务端未返回时为 None）
        truncated: 是否因为长度上限被截断（截断的 JSON 通常无法解析）
    """
    content: str
    model: str
    total_tokens: Optional[int] = None
    truncated: bool = False


class LLMClient(ABC):
    """LLM 客户端基类"""

    @abstractmethod
    async def chat(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> ChatResponse:
        """
        发送消息并等待完整回复

        Raises:
            LLMError: 网络错误、鉴权失败、服务端非 2xx 等
        """

    @property
    @abstractmethod
    def model_name(self) -> str:
        pass

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """是否具备调用条件（已配置 API Key）"""


class LLMError(Exception):
    """LLM 调用失败"""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.message = message
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message
