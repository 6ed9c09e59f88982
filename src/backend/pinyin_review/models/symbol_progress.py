"""
拼音符号学习进度模型
"""
from sqlalchemy import Column, String, DateTime, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class SymbolProgressRecord(Base):
    """
    拼音符号学习进度

    字段说明：
    - is_mastered: 最近一次学习结果（直接覆盖，不由 mastery_level 推导）
    - mastery_level: 0-5 的累计熟练度，记住 +1、没记住 -1
    """
    __tablename__ = "symbol_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "symbol_id", name="uq_symbol_progress_user_symbol"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False, index=True)
    symbol_id = Column(String(16), ForeignKey("pinyin_symbols.id"), nullable=False, index=True)
    study_count = Column(Integer, nullable=False, default=1)
    is_mastered = Column(Boolean, nullable=False, default=False, index=True)
    mastery_level = Column(Integer, nullable=False, default=0)
    last_studied_at = Column(DateTime, nullable=False)
    next_review_at = Column(DateTime, nullable=False, index=True)

    # 关系
    symbol = relationship("PinyinSymbol")

    def __repr__(self):
        return (
            f"<SymbolProgress(id={self.id} user='{self.user_id}' symbol='{self.symbol_id}' "
            f"mastered={self.is_mastered} level={self.mastery_level})>"
        )
