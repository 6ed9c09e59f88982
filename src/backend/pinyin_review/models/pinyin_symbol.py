"""
拼音符号模型（声母 / 韵母 / 整体认读音节）
"""
from sqlalchemy import Column, String, Integer, Text

from .base import Base


class PinyinSymbol(Base):
    """拼音符号（固定的 ~63 个学习单元）"""
    __tablename__ = "pinyin_symbols"

    id = Column(String(16), primary_key=True)  # 直接使用符号本身，例如 "zh"
    category = Column(String(16), nullable=False, index=True)  # initial | final | overall
    group_name = Column(String(50), nullable=False, default="")
    pinyin = Column(String(16), nullable=False)
    mnemonic = Column(Text, nullable=False, default="")
    emoji = Column(String(16), nullable=True)
    example_word = Column(String(50), nullable=False, default="")
    example_pinyin = Column(String(100), nullable=False, default="")
    sort_order = Column(Integer, nullable=False, default=0, index=True)

    def __repr__(self):
        return f"<PinyinSymbol(id='{self.id}' category='{self.category}')>"
