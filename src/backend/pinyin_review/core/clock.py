"""
复习时钟

数据库统一存储不带时区的 UTC 时间（SQLite 会丢弃 tzinfo），
所有调度器在比较/计算前都先把 now 归一化到这个约定。
"""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """当前 UTC 时间（naive）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> datetime:
    """
    归一化时间

    Args:
        value: 任意 datetime；带时区的转换为 UTC 后去掉 tzinfo，None 取当前时间

    Returns:
        datetime: naive UTC 时间
    """
    if value is None:
        return utcnow()
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
