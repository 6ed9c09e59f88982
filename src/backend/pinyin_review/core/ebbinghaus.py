"""
艾宾浩斯复习算法工具类（错题阶梯）
"""
from datetime import datetime, timedelta
from typing import Tuple


class EbbinghausScheduler:
    """艾宾浩斯记忆复习调度器（固定间隔阶梯）"""

    # 复习间隔（分钟），下标即 review_stage
    REVIEW_INTERVALS = (
        5,       # 0: 5分钟后
        30,      # 1: 30分钟后
        720,     # 2: 12小时
        1440,    # 3: 1天
        2880,    # 4: 2天
        5760,    # 5: 4天
        10080,   # 6: 7天
        21600,   # 7: 15天
    )

    MAX_STAGE = len(REVIEW_INTERVALS)  # 8 = 已掌握

    # 已掌握的题目不删除，而是推到30天后再看
    MASTERED_PARKING = timedelta(days=30)

    @classmethod
    def interval_for(cls, stage: int) -> timedelta:
        """
        获取某个阶段对应的复习间隔

        Args:
            stage: 复习阶段（>= MAX_STAGE 视为已掌握）

        Returns:
            timedelta: 间隔
        """
        if stage >= cls.MAX_STAGE:
            return cls.MASTERED_PARKING
        return timedelta(minutes=cls.REVIEW_INTERVALS[stage])

    @classmethod
    def on_miss(cls, now: datetime) -> Tuple[int, datetime]:
        """
        答错：回到第0阶段

        Returns:
            tuple: (0, now + 5分钟)
        """
        return 0, now + cls.interval_for(0)

    @classmethod
    def on_success(cls, current_stage: int, now: datetime) -> Tuple[int, datetime]:
        """
        答对：前进一个阶段

        Args:
            current_stage: 当前复习阶段（以数据库中的阶段为准，重复调用结果一致）
            now: 当前时间

        Returns:
            tuple: (next_stage, next_review_at)
        """
        next_stage = current_stage + 1
        return next_stage, now + cls.interval_for(next_stage)

    @classmethod
    def is_mastered(cls, stage: int) -> bool:
        return stage >= cls.MAX_STAGE
