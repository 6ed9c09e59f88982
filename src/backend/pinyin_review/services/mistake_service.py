"""
错题复习调度服务（艾宾浩斯固定阶梯）

- 答错：创建错题或把已有错题重置到第0阶段，5分钟后复习
- 答对：前进一个阶段，间隔按阶梯取值；超过最后一阶视为已掌握，推迟30天
- 到期查询：next_review_at <= now，按到期时间升序，过滤已失效题目
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pinyin_review.core.clock import to_naive_utc
from pinyin_review.core.ebbinghaus import EbbinghausScheduler
from pinyin_review.core.errors import PersistenceError
from pinyin_review.models import MistakeRecord, Question
from pinyin_review.services.base import Scheduler

logger = logging.getLogger(__name__)


@dataclass
class DueMistake:
    """错题记录 + 对应题目"""
    record: MistakeRecord
    question: Question

    @property
    def mistake_id(self) -> int:
        return self.record.id

    @property
    def question_id(self) -> str:
        return self.record.question_id

    @property
    def content(self) -> str:
        return self.question.content

    @property
    def pinyin(self) -> str:
        return self.question.pinyin

    @property
    def wrong_pinyin(self) -> str:
        return self.record.wrong_pinyin

    @property
    def review_stage(self) -> int:
        return self.record.review_stage

    @property
    def next_review_at(self) -> datetime:
        return self.record.next_review_at


class MistakeScheduler(Scheduler):
    """
    错题调度器

    本身不保存状态，每次调用都基于数据库中的当前记录计算并写回。
    写入失败时回滚会话并抛出 PersistenceError。
    """

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"{action}失败: {e}")
            raise PersistenceError(f"{action}失败", cause=e) from e

    def _find(self, user_id: str, question_id: str) -> Optional[MistakeRecord]:
        return self.db.query(MistakeRecord).filter(
            MistakeRecord.user_id == user_id,
            MistakeRecord.question_id == question_id
        ).first()

    def record_miss(
        self,
        user_id: str,
        question_id: str,
        wrong_text: str,
        now: Optional[datetime] = None
    ) -> MistakeRecord:
        """
        记录一次答错

        关键业务逻辑：无论之前复习到哪一阶段，答错都回到第0阶段（复习中答错也算答错）

        Args:
            user_id: 用户ID
            question_id: 题目ID
            wrong_text: 用户的错误答案
            now: 当前时间

        Returns:
            MistakeRecord: 更新后的错题记录

        Raises:
            PersistenceError: 写入数据库失败
        """
        now = to_naive_utc(now)
        stage, next_time = EbbinghausScheduler.on_miss(now)

        try:
            record = self._find(user_id, question_id)
            if record:
                record.wrong_pinyin = wrong_text
                record.error_count += 1
                record.review_stage = stage
                record.last_reviewed_at = now
                record.next_review_at = next_time
            else:
                record = MistakeRecord(
                    user_id=user_id,
                    question_id=question_id,
                    wrong_pinyin=wrong_text,
                    error_count=1,
                    review_stage=stage,
                    last_reviewed_at=None,
                    next_review_at=next_time,
                    created_at=now,
                )
                self.db.add(record)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"记录错题失败: {e}")
            raise PersistenceError("记录错题失败", cause=e) from e

        self._commit("记录错题")
        self.db.refresh(record)
        logger.debug(f"错题已记录: user={user_id} question={question_id} errors={record.error_count}")
        return record

    def record_success(
        self,
        mistake_id: int,
        current_stage: int,
        now: Optional[datetime] = None
    ) -> Optional[MistakeRecord]:
        """
        记录一次复习答对

        以调用方传入的 current_stage 为基准计算下一阶段，
        对同一阶段重复调用得到相同结果。

        Args:
            mistake_id: 错题记录ID
            current_stage: 答题时的复习阶段
            now: 当前时间

        Returns:
            Optional[MistakeRecord]: 更新后的记录，记录不存在时返回 None

        Raises:
            PersistenceError: 写入数据库失败
        """
        now = to_naive_utc(now)

        try:
            record = self.db.get(MistakeRecord, mistake_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("读取错题失败", cause=e) from e

        if record is None:
            logger.warning(f"错题记录不存在，忽略复习结果: mistake_id={mistake_id}")
            return None

        next_stage, next_time = EbbinghausScheduler.on_success(current_stage, now)
        record.review_stage = next_stage
        record.last_reviewed_at = now
        record.next_review_at = next_time

        self._commit("更新复习进度")
        self.db.refresh(record)

        if EbbinghausScheduler.is_mastered(next_stage):
            logger.info(f"错题已掌握: mistake_id={mistake_id}，下次复习 {next_time.isoformat()}")
        return record

    def _joined_query(self, user_id: str):
        # inner join：题目已删除的错题直接被过滤
        return (
            self.db.query(MistakeRecord, Question)
            .join(Question, Question.id == MistakeRecord.question_id)
            .filter(
                MistakeRecord.user_id == user_id,
                Question.is_deleted == False  # noqa: E712
            )
        )

    def due_mistakes(self, user_id: str, now: Optional[datetime] = None) -> List[DueMistake]:
        """
        获取到期的错题（按到期时间升序，最早到期的排最前）

        Args:
            user_id: 用户ID
            now: 当前时间

        Returns:
            List[DueMistake]: 到期错题，空列表表示暂无需复习
        """
        now = to_naive_utc(now)
        rows = (
            self._joined_query(user_id)
            .filter(MistakeRecord.next_review_at <= now)
            .order_by(MistakeRecord.next_review_at, MistakeRecord.id)
            .all()
        )
        return [DueMistake(record=r, question=q) for r, q in rows]

    def list_mistakes(self, user_id: str) -> List[DueMistake]:
        """获取用户的全部错题（错题本），按下次复习时间排序"""
        rows = (
            self._joined_query(user_id)
            .order_by(MistakeRecord.next_review_at, MistakeRecord.id)
            .all()
        )
        return [DueMistake(record=r, question=q) for r, q in rows]

    def count_due(self, user_id: str, now: Optional[datetime] = None) -> int:
        now = to_naive_utc(now)
        query = (
            self.db.query(func.count(MistakeRecord.id))
            .join(Question, Question.id == MistakeRecord.question_id)
            .filter(
                MistakeRecord.user_id == user_id,
                MistakeRecord.next_review_at <= now,
                Question.is_deleted == False  # noqa: E712
            )
        )
        return query.scalar() or 0

    def stats(self, user_id: str, now: Optional[datetime] = None) -> Dict[str, int]:
        """
        错题统计

        Returns:
            dict: {"total": 错题总数, "due": 到期数, "mastered": 已掌握数（stage >= 8）}
        """
        mistakes = self.list_mistakes(user_id)
        return {
            "total": len(mistakes),
            "due": self.count_due(user_id, now),
            "mastered": sum(
                1 for m in mistakes if EbbinghausScheduler.is_mastered(m.review_stage)
            ),
        }

    def record_outcome(
        self,
        user_id: str,
        item_id: str,
        success: bool,
        now: Optional[datetime] = None,
        answer: str = "",
        **kwargs
    ) -> Optional[MistakeRecord]:
        """
        按题目ID记录复习结果

        答对但该题没有错题记录时不做任何事（从未答错的题不进入阶梯）。
        """
        if not success:
            return self.record_miss(user_id, item_id, answer, now)

        record = self._find(user_id, item_id)
        if record is None:
            return None
        return self.record_success(record.id, record.review_stage, now)

    def due_items(self, user_id: str, now: Optional[datetime] = None) -> List[DueMistake]:
        return self.due_mistakes(user_id, now)
