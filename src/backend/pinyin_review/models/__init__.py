"""
Models package
Export all database models
"""
import logging

from .base import Base
from .question import Question
from .mistake import MistakeRecord
from .pinyin_symbol import PinyinSymbol
from .symbol_progress import SymbolProgressRecord
from .level_progress import LevelProgressRecord

logger = logging.getLogger(__name__)

__all__ = [
    "Base",
    "Question",
    "MistakeRecord",
    "PinyinSymbol",
    "SymbolProgressRecord",
    "LevelProgressRecord",
]


def init_db(bind=None):
    """初始化数据库（创建所有表）"""
    if bind is None:
        from ..core.database import engine
        bind = engine

    Base.metadata.create_all(bind=bind)
    logger.info("Database tables created successfully")


def drop_all(bind=None):
    """删除所有表（仅开发测试用）"""
    if bind is None:
        from ..core.database import engine
        bind = engine

    Base.metadata.drop_all(bind=bind)
    logger.warning("All tables dropped")
