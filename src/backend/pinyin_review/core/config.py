"""
复习会话配置

AI 凭据和练习模式都收拢在显式的配置对象里，由调用方构造后传给 ReviewSessionBuilder。
配置优先级：显式参数 > 环境变量 > 默认值
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from pinyin_review.llm.config import LLMConfig, get_llm_config

logger = logging.getLogger(__name__)

PRACTICE_MODES = ("all", "character", "word", "sentence")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ReviewSettings:
    """
    复习会话配置

    Attributes:
        llm: LLM 配置，为 None 时不做 AI 扩充
        ai_item_count: 期望 AI 生成的题目数
        ai_context_size: 作为上下文发送给 AI 的错题数上限
        ai_timeout: AI 调用超时时间（秒），超时按零条 AI 题处理
        practice_mode: all | character | word | sentence，只复习该题型的错题
        shuffle: 是否在"错题组"和"AI组"内部打乱顺序（两组之间不混排）
        persist_ai_misses: AI 题答错时是否先落库题目再记录错题
    """
    llm: Optional[LLMConfig] = None
    ai_item_count: int = 5
    ai_context_size: int = 5
    ai_timeout: float = 8.0
    practice_mode: str = "all"
    shuffle: bool = False
    persist_ai_misses: bool = True

    def __post_init__(self):
        if self.practice_mode not in PRACTICE_MODES:
            raise ValueError(
                f"practice_mode 必须是 {PRACTICE_MODES} 之一，当前: {self.practice_mode}"
            )

    @property
    def ai_enabled(self) -> bool:
        return self.llm is not None and bool(self.llm.api_key)


def get_review_settings() -> ReviewSettings:
    """
    从环境变量获取复习配置

    环境变量：
        LLM_API_KEY 等: 见 get_llm_config()，未配置时关闭 AI 扩充
        REVIEW_AI_ITEM_COUNT: AI 题目数（默认 5）
        REVIEW_AI_CONTEXT_SIZE: 上下文错题数（默认 5）
        REVIEW_AI_TIMEOUT: AI 超时秒数（默认 8）
        REVIEW_PRACTICE_MODE: 练习模式（默认 all）
        REVIEW_SHUFFLE: 是否打乱（默认 false）
        REVIEW_PERSIST_AI_MISSES: AI 题答错是否落库（默认 true）

    Returns:
        ReviewSettings 配置对象
    """
    try:
        llm = get_llm_config()
    except ValueError:
        logger.info("未配置 LLM_API_KEY，复习会话不启用 AI 扩充")
        llm = None

    return ReviewSettings(
        llm=llm,
        ai_item_count=int(os.getenv("REVIEW_AI_ITEM_COUNT", "5")),
        ai_context_size=int(os.getenv("REVIEW_AI_CONTEXT_SIZE", "5")),
        ai_timeout=float(os.getenv("REVIEW_AI_TIMEOUT", "8.0")),
        practice_mode=os.getenv("REVIEW_PRACTICE_MODE", "all"),
        shuffle=_env_bool("REVIEW_SHUFFLE", False),
        persist_ai_misses=_env_bool("REVIEW_PERSIST_AI_MISSES", True),
    )
