"""
LLM 接入

AI 扩充复习题只用到一个 OpenAI 兼容的补全接口，外加可选的 Langfuse 追踪：

    from pinyin_review.llm import get_llm_client

    client = get_llm_client(settings.llm)
    response = await client.chat(messages, temperature=0.7)
"""

from typing import Dict, Optional

from .base import ChatResponse, LLMClient, LLMError
from .config import LLMConfig, LangfuseConfig, get_langfuse_config, get_llm_config
from .langfuse_wrapper import is_langfuse_enabled, reset_langfuse_client, trace_llm_call
from .openai_client import OpenAIClient

# (base_url, model, api_key) -> 客户端，复用底层 HTTP 连接池
_clients: Dict[tuple, LLMClient] = {}


def get_llm_client(config: Optional[LLMConfig] = None) -> LLMClient:
    """
    按配置取得（或创建）客户端

    Args:
        config: 为 None 时从环境变量读取

    Raises:
        ValueError: config 为 None 且没有设置 LLM_API_KEY
    """
    config = config or get_llm_config()
    key = (config.base_url, config.model, config.api_key)
    client = _clients.get(key)
    if client is None:
        client = _clients[key] = OpenAIClient(config)
    return client


def reset_llm_client():
    """丢弃已创建的客户端（测试或切换配置时使用）"""
    _clients.clear()


__all__ = [
    "ChatResponse",
    "LLMClient",
    "LLMError",
    "LLMConfig",
    "LangfuseConfig",
    "OpenAIClient",
    "get_langfuse_config",
    "get_llm_client",
    "get_llm_config",
    "is_langfuse_enabled",
    "reset_langfuse_client",
    "reset_llm_client",
    "trace_llm_call",
]
