"""
拼音符号掌握度规则

符号只有 ~63 个，复习频率高，用两档间隔即可：
已掌握 3 天后复习，未掌握 1 天后复习（按自然日计算）。
"""
from datetime import datetime, timedelta

MASTERED_INTERVAL_DAYS = 3
UNMASTERED_INTERVAL_DAYS = 1

MIN_MASTERY_LEVEL = 0
MAX_MASTERY_LEVEL = 5


def next_review_at(is_mastered: bool, now: datetime) -> datetime:
    days = MASTERED_INTERVAL_DAYS if is_mastered else UNMASTERED_INTERVAL_DAYS
    return now + timedelta(days=days)


def initial_mastery_level(is_mastered: bool) -> int:
    return 1 if is_mastered else 0


def adjust_mastery_level(level: int, is_mastered: bool) -> int:
    """
    记住 +1，没记住 -1，限制在 [0, 5]

    Args:
        level: 当前掌握等级
        is_mastered: 本次是否记住

    Returns:
        int: 新的掌握等级
    """
    level = level + 1 if is_mastered else level - 1
    return max(MIN_MASTERY_LEVEL, min(level, MAX_MASTERY_LEVEL))
