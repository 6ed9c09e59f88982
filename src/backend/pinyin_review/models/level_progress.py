"""
关卡成绩模型
"""
from sqlalchemy import Column, String, DateTime, Integer, UniqueConstraint

from .base import Base


class LevelProgressRecord(Base):
    """
    用户在某一关的最好成绩

    每个 (user_id, level_id) 一条记录，stars / score 只保留历史最高值
    """
    __tablename__ = "level_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "level_id", name="uq_level_progress_user_level"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False, index=True)
    level_id = Column(Integer, nullable=False, index=True)
    stars = Column(Integer, nullable=False, default=0)  # 0-3
    score = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<LevelProgress(user='{self.user_id}' level={self.level_id} stars={self.stars} score={self.score})>"
