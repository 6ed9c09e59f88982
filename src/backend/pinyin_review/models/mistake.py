"""
错题记录模型（艾宾浩斯阶梯复习）
"""
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from .base import Base


class MistakeRecord(Base):
    """
    错题记录

    每个 (user_id, question_id) 只有一条记录：
    - 首次答错时创建，之后每次答错都重置 review_stage 为 0
    - 答对时 review_stage + 1，>= 8 视为已掌握，推迟30天而不是删除
    """
    __tablename__ = "mistakes"
    __table_args__ = (
        UniqueConstraint("user_id", "question_id", name="uq_mistakes_user_question"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False, index=True)
    question_id = Column(String(36), ForeignKey("questions.id"), nullable=False, index=True)
    wrong_pinyin = Column(String(200), nullable=False, default="")  # 最近一次的错误答案
    error_count = Column(Integer, nullable=False, default=1)
    review_stage = Column(Integer, nullable=False, default=0, index=True)  # 0-7, >=8 = 已掌握
    last_reviewed_at = Column(DateTime, nullable=True)
    next_review_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # 关系
    question = relationship("Question", back_populates="mistakes")

    def __repr__(self):
        return f"<Mistake(id={self.id} user='{self.user_id}' qid='{self.question_id}' stage={self.review_stage})>"
