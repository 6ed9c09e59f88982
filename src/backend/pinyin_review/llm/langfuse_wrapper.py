"""
Langfuse 追踪

trace_llm_call 装饰异步的 LLM 请求函数，把提示词、输出、耗时写成一条 trace。
没有配置 Langfuse 时装饰器原样调用被装饰函数。

基于 Langfuse SDK v2（client.trace / trace.span）。
"""

import logging
import time
from datetime import datetime
from functools import wraps
from typing import Any, Awaitable, Callable, Dict, List, Optional, ParamSpec, TypeVar

from .config import get_langfuse_config

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

# None = 尚未检查；False = 未启用；其余为 Langfuse 实例
_client: Any = None


def _langfuse():
    """返回 Langfuse 客户端，未启用时返回 None（结果会被缓存）"""
    global _client

    if _client is False:
        return None
    if _client is not None:
        return _client

    config = get_langfuse_config()
    if not config.enabled or not config.is_valid():
        _client = False
        return None

    from langfuse import Langfuse

    try:
        _client = Langfuse(
            public_key=config.public_key,
            secret_key=config.secret_key,
            host=config.host,
        )
    except Exception as e:
        logger.error(f"Langfuse 初始化失败，关闭追踪: {e}")
        _client = False
        return None

    logger.info(f"Langfuse 追踪已启用: {config.host}")
    return _client


def reset_langfuse_client():
    """下次调用时重新读取配置（测试用）"""
    global _client
    _client = None


def is_langfuse_enabled() -> bool:
    return _langfuse() is not None


def _extract_messages(args: tuple, kwargs: dict) -> Optional[List[Dict[str, str]]]:
    # 被装饰的是方法：args[0] 为 self，消息列表是第一个位置参数或 messages=
    messages = kwargs.get("messages")
    if messages is None and len(args) > 1:
        messages = args[1]
    if isinstance(messages, list):
        return [
            {"role": str(m.get("role")), "content": str(m.get("content"))[:1000]}
            for m in messages if isinstance(m, dict)
        ]
    return None


def trace_llm_call(
    name: str,
    *,
    metadata: Optional[Dict[str, Any]] = None,
    tags: Optional[List[str]] = None,
):
    """
    追踪一次异步 LLM 请求

    被 asyncio.wait_for 取消（超时）时同样会记录一条带 error 标签的 trace。

    使用示例:
        @trace_llm_call("review_generation", tags=["review"])
        async def _request(self, messages):
            return await self.llm_client.chat(messages)
    """
    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            client = _langfuse()
            if client is None:
                return await func(*args, **kwargs)

            prompt = _extract_messages(args, kwargs)
            started_at = datetime.now()
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except BaseException as e:
                client.trace(
                    name=name,
                    input=prompt,
                    output={"error": repr(e)},
                    metadata={
                        **(metadata or {}),
                        "duration_ms": round((time.perf_counter() - start) * 1000),
                    },
                    tags=(tags or []) + ["error"],
                )
                client.flush()
                raise

            output = {"content": str(getattr(result, "content", result))[:1000]}
            duration_ms = round((time.perf_counter() - start) * 1000)
            trace = client.trace(
                name=name,
                input=prompt,
                output=output,
                metadata=metadata or {},
                tags=tags or [],
            )
            trace.span(
                name=f"{name}.completion",
                input=prompt,
                output=output,
                start_time=started_at,
                end_time=datetime.now(),
                metadata={
                    "duration_ms": duration_ms,
                    "model": getattr(result, "model", None),
                    "total_tokens": getattr(result, "total_tokens", None),
                },
            )
            client.flush()
            return result

        return wrapper

    return decorator
