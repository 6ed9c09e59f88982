"""
LLM 与 Langfuse 配置

都从环境变量读取；LLM_API_KEY 缺失时 get_llm_config() 抛 ValueError，
上层据此关闭 AI 扩充。
"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_LANGFUSE_HOST = "https://cloud.langfuse.com"


@dataclass
class LLMConfig:
    """
    OpenAI 兼容服务的连接参数

    Attributes:
        api_key: 密钥
        base_url: 服务地址，可指向 DeepSeek、通义千问兼容模式等
        model: 生成复习题用的模型
        timeout: HTTP 层超时（秒）；整次生成的超时由 ReviewSettings.ai_timeout 控制
        max_retries: SDK 自动重试次数
        max_tokens: 单次生成的 token 上限，几道练习题用不了太多
    """
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    timeout: float = 30.0
    max_retries: int = 1
    max_tokens: int = 800


@dataclass
class LangfuseConfig:
    """Langfuse 追踪配置"""
    public_key: Optional[str] = None
    secret_key: Optional[str] = None
    host: str = DEFAULT_LANGFUSE_HOST
    enabled: bool = False

    def is_valid(self) -> bool:
        if not self.enabled:
            return True
        return bool(self.public_key and self.secret_key)


def get_llm_config() -> LLMConfig:
    """
    读取 LLM_API_KEY / LLM_BASE_URL / LLM_MODEL / LLM_TIMEOUT /
    LLM_MAX_RETRIES / LLM_MAX_TOKENS

    Raises:
        ValueError: 没有设置 LLM_API_KEY
    """
    api_key = os.getenv("LLM_API_KEY")
    if not api_key:
        raise ValueError("LLM API Key 未配置，请设置 LLM_API_KEY 环境变量")

    return LLMConfig(
        api_key=api_key,
        base_url=os.getenv("LLM_BASE_URL", DEFAULT_BASE_URL),
        model=os.getenv("LLM_MODEL", DEFAULT_MODEL),
        timeout=float(os.getenv("LLM_TIMEOUT", "30")),
        max_retries=int(os.getenv("LLM_MAX_RETRIES", "1")),
        max_tokens=int(os.getenv("LLM_MAX_TOKENS", "800")),
    )


def get_langfuse_config() -> LangfuseConfig:
    """
    读取 LANGFUSE_PUBLIC_KEY / LANGFUSE_SECRET_KEY / LANGFUSE_HOST / LANGFUSE_ENABLED

    LANGFUSE_ENABLED 没有显式设为 true/false 时，两把密钥都有就启用。
    """
    public_key = os.getenv("LANGFUSE_PUBLIC_KEY")
    secret_key = os.getenv("LANGFUSE_SECRET_KEY")
    flag = os.getenv("LANGFUSE_ENABLED", "").lower()
    enabled = flag == "true" if flag in ("true", "false") else bool(public_key and secret_key)

    return LangfuseConfig(
        public_key=public_key,
        secret_key=secret_key,
        host=os.getenv("LANGFUSE_HOST", DEFAULT_LANGFUSE_HOST),
        enabled=enabled,
    )
