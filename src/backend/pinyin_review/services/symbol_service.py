"""
拼音符号掌握度调度服务

- 学习结果：记住 -> 3天后复习，没记住 -> 1天后复习；熟练度 ±1 并限制在 [0, 5]
- 复习列表：未掌握 或 已到期 的符号，最多 limit 个
- 写入失败不抛异常，返回 False，调用方自行判断
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pinyin_review.core import mastery
from pinyin_review.core.clock import to_naive_utc
from pinyin_review.models import PinyinSymbol, SymbolProgressRecord
from pinyin_review.services.base import Scheduler

logger = logging.getLogger(__name__)

DEFAULT_REVIEW_LIMIT = 20


@dataclass
class DueSymbol:
    """学习进度 + 拼音符号展示信息（口诀、例词、分类）"""
    progress: SymbolProgressRecord
    symbol: PinyinSymbol

    @property
    def symbol_id(self) -> str:
        return self.symbol.id

    @property
    def is_mastered(self) -> bool:
        return self.progress.is_mastered

    @property
    def study_count(self) -> int:
        return self.progress.study_count


class SymbolMasterySchedule(Scheduler):
    """拼音符号掌握度调度器"""

    def __init__(self, db: Session):
        self.db = db

    def record_study_outcome(
        self,
        user_id: str,
        symbol_id: str,
        is_mastered: bool,
        now: Optional[datetime] = None
    ) -> bool:
        """
        记录一次符号学习结果

        Args:
            user_id: 用户ID
            symbol_id: 拼音符号ID
            is_mastered: 本次是否记住（直接覆盖 is_mastered，不与旧值合并）
            now: 当前时间

        Returns:
            bool: 是否写入成功
        """
        now = to_naive_utc(now)
        next_time = mastery.next_review_at(is_mastered, now)

        try:
            progress = self.db.query(SymbolProgressRecord).filter(
                SymbolProgressRecord.user_id == user_id,
                SymbolProgressRecord.symbol_id == symbol_id
            ).first()

            if progress:
                progress.study_count += 1
                progress.is_mastered = is_mastered
                progress.mastery_level = mastery.adjust_mastery_level(
                    progress.mastery_level, is_mastered
                )
                progress.last_studied_at = now
                progress.next_review_at = next_time
            else:
                self.db.add(SymbolProgressRecord(
                    user_id=user_id,
                    symbol_id=symbol_id,
                    study_count=1,
                    is_mastered=is_mastered,
                    mastery_level=mastery.initial_mastery_level(is_mastered),
                    last_studied_at=now,
                    next_review_at=next_time,
                ))

            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"更新拼音学习进度失败: user={user_id} symbol={symbol_id}: {e}")
            return False

        return True

    def due_or_unmastered(
        self,
        user_id: str,
        now: Optional[datetime] = None,
        limit: int = DEFAULT_REVIEW_LIMIT
    ) -> List[DueSymbol]:
        """
        获取需要复习的拼音符号

        条件：is_mastered = False 或 next_review_at <= now。
        未掌握的排在前面，其次按到期时间升序。

        Args:
            user_id: 用户ID
            now: 当前时间
            limit: 最多返回数量（<= 0 时返回空列表）

        Returns:
            List[DueSymbol]: 空列表表示暂无需复习
        """
        # SQLite 把负数 LIMIT 当作不限制
        if limit <= 0:
            return []

        now = to_naive_utc(now)
        rows = (
            self.db.query(SymbolProgressRecord, PinyinSymbol)
            .join(PinyinSymbol, PinyinSymbol.id == SymbolProgressRecord.symbol_id)
            .filter(
                SymbolProgressRecord.user_id == user_id,
                or_(
                    SymbolProgressRecord.is_mastered == False,  # noqa: E712
                    SymbolProgressRecord.next_review_at <= now
                )
            )
            .order_by(
                SymbolProgressRecord.is_mastered,
                SymbolProgressRecord.next_review_at,
                PinyinSymbol.sort_order
            )
            .limit(limit)
            .all()
        )
        return [DueSymbol(progress=p, symbol=s) for p, s in rows]

    def list_symbols(self, category: Optional[str] = None) -> List[PinyinSymbol]:
        """获取拼音符号表（按 sort_order 排序，可按分类过滤）"""
        query = self.db.query(PinyinSymbol)
        if category:
            query = query.filter(PinyinSymbol.category == category)
        return query.order_by(PinyinSymbol.sort_order, PinyinSymbol.id).all()

    def user_progress(self, user_id: str) -> List[SymbolProgressRecord]:
        return self.db.query(SymbolProgressRecord).filter(
            SymbolProgressRecord.user_id == user_id
        ).all()

    def summary(self, user_id: str) -> Dict[str, int]:
        """
        学习概况

        Returns:
            dict: {"total_symbols": 符号总数, "studied": 学过的数量, "mastered": 已掌握数量}
        """
        progress = self.user_progress(user_id)
        return {
            "total_symbols": self.db.query(PinyinSymbol).count(),
            "studied": len(progress),
            "mastered": sum(1 for p in progress if p.is_mastered),
        }

    def record_outcome(
        self,
        user_id: str,
        item_id: str,
        success: bool,
        now: Optional[datetime] = None,
        **kwargs
    ) -> bool:
        return self.record_study_outcome(user_id, item_id, success, now)

    def due_items(self, user_id: str, now: Optional[datetime] = None) -> List[DueSymbol]:
        return self.due_or_unmastered(user_id, now)
