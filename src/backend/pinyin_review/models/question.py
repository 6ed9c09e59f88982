"""
题目模型（题库中的汉字/词语/句子）
"""
from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime

from .base import Base


class Question(Base):
    """
    题目模型

    字段说明：
    - pinyin: 标准答案，统一存储为声调符号形式（nǐ hǎo）
    - source: bank（题库自带）| ai（AI 生成后因答错而落库）
    - is_deleted: 软删除，已删除题目对应的错题在查询时被过滤
    """
    __tablename__ = "questions"

    id = Column(String(36), primary_key=True, index=True)
    level_id = Column(Integer, nullable=True, index=True)
    question_type = Column(String(20), nullable=False, index=True)  # character | word | sentence
    content = Column(Text, nullable=False)
    pinyin = Column(String(200), nullable=False)
    audio_url = Column(String(500), nullable=True)
    hint_emoji = Column(String(16), nullable=True)
    source = Column(String(10), default="bank", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    is_deleted = Column(Boolean, nullable=False, default=False)

    # 关系
    mistakes = relationship("MistakeRecord", back_populates="question")

    def __repr__(self):
        return f"<Question(id='{self.id}' type='{self.question_type}' content='{self.content[:10]}')>"
