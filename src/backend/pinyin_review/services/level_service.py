"""
关卡成绩服务

闯关结束后保存星级和得分；重玩只会刷新更好的成绩，不会覆盖成更低的分数。
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pinyin_review.core.clock import to_naive_utc
from pinyin_review.core.errors import PersistenceError
from pinyin_review.models import LevelProgressRecord

logger = logging.getLogger(__name__)

MAX_STARS = 3


class LevelProgressService:
    """关卡成绩读写"""

    def __init__(self, db: Session):
        self.db = db

    def save_progress(
        self,
        user_id: str,
        level_id: int,
        stars: int,
        score: int,
        now: Optional[datetime] = None
    ) -> LevelProgressRecord:
        """
        保存一次闯关成绩（星级、得分各自取历史最高）

        Args:
            user_id: 用户ID
            level_id: 关卡ID
            stars: 本次星级 0-3
            score: 本次得分（>= 0）
            now: 完成时间

        Returns:
            LevelProgressRecord: 合并后的成绩

        Raises:
            ValueError: 星级或得分超出范围
            PersistenceError: 写入数据库失败
        """
        if not 0 <= stars <= MAX_STARS:
            raise ValueError(f"stars 必须在 0-{MAX_STARS} 之间，当前: {stars}")
        if score < 0:
            raise ValueError(f"score 不能为负数，当前: {score}")

        now = to_naive_utc(now)
        try:
            record = self.db.query(LevelProgressRecord).filter(
                LevelProgressRecord.user_id == user_id,
                LevelProgressRecord.level_id == level_id
            ).first()

            if record:
                record.stars = max(record.stars, stars)
                record.score = max(record.score, score)
                record.completed_at = now
            else:
                record = LevelProgressRecord(
                    user_id=user_id,
                    level_id=level_id,
                    stars=stars,
                    score=score,
                    completed_at=now,
                )
                self.db.add(record)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"保存关卡成绩失败: user={user_id} level={level_id}: {e}")
            raise PersistenceError("保存关卡成绩失败", cause=e) from e

        self.db.refresh(record)
        return record

    def get_user_progress(self, user_id: str) -> List[LevelProgressRecord]:
        """用户全部关卡成绩，按关卡顺序"""
        return self.db.query(LevelProgressRecord).filter(
            LevelProgressRecord.user_id == user_id
        ).order_by(LevelProgressRecord.level_id).all()

    def total_score(self, user_id: str) -> int:
        """各关最高分之和，没有记录时为 0"""
        total = self.db.query(func.sum(LevelProgressRecord.score)).filter(
            LevelProgressRecord.user_id == user_id
        ).scalar()
        return total or 0
