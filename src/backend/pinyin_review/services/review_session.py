"""
复习会话服务

组装一次复习的题目队列：
1. 到期错题（按到期时间升序），标记为 mistake
2. 配置了 AI 且有错题时，取前几道错题作为上下文让 AI 生成新题，标记为 ai，追加在末尾
3. 逐题作答：答对/答错分别写回错题调度器

写回失败不会中断会话：SubmitResult.persisted = False，队列照常前进。
"""
import logging
import random
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pinyin_review.core.clock import to_naive_utc
from pinyin_review.core.config import ReviewSettings
from pinyin_review.core.errors import PersistenceError, ReviewSessionError
from pinyin_review.core.pinyin import answers_match
from pinyin_review.models import Question
from pinyin_review.services.ai_augmenter import AIAugmenter, MistakeContext, ValidatedItem
from pinyin_review.services.mistake_service import DueMistake, MistakeScheduler

logger = logging.getLogger(__name__)


class ItemKind(str, Enum):
    """队列题目来源"""
    MISTAKE = "mistake"
    AI = "ai"


@dataclass
class ReviewQueueItem:
    """
    队列中的一道题（仅存在于内存）

    mistake 题带有 mistake_id / question_id / review_stage；
    ai 题只有临时 item_id，答错落库后才会得到 question_id。
    """
    kind: ItemKind
    item_id: str
    content: str
    pinyin: str
    question_type: str
    mistake_id: Optional[int] = None
    question_id: Optional[str] = None
    review_stage: Optional[int] = None
    hint_emoji: Optional[str] = None
    answered: bool = False

    @classmethod
    def from_mistake(cls, due: DueMistake) -> "ReviewQueueItem":
        return cls(
            kind=ItemKind.MISTAKE,
            item_id=f"mistake-{due.mistake_id}",
            content=due.content,
            pinyin=due.pinyin,
            question_type=due.question.question_type,
            mistake_id=due.mistake_id,
            question_id=due.question_id,
            review_stage=due.review_stage,
            hint_emoji=due.question.hint_emoji,
        )

    @classmethod
    def from_ai(cls, item: ValidatedItem) -> "ReviewQueueItem":
        return cls(
            kind=ItemKind.AI,
            item_id=item.item_id,
            content=item.content,
            pinyin=item.pinyin,
            question_type=item.question_type,
            hint_emoji="🤖",
        )


@dataclass
class SubmitResult:
    """
    作答结果

    Attributes:
        correct: 是否答对
        correct_pinyin: 标准答案（用于答错时展示）
        persisted: 复习进度是否成功写回
        error: 写回失败原因
    """
    correct: bool
    correct_pinyin: str
    persisted: bool = True
    error: Optional[str] = None


class ReviewQueue:
    """
    一次复习会话的题目队列（单线程、按顺序遍历）

    使用示例:
        queue = await builder.start_session(user_id)
        while (item := queue.current()) is not None:
            result = queue.submit(user_input)
            queue.advance()
    """

    def __init__(
        self,
        user_id: str,
        items: List[ReviewQueueItem],
        scheduler: MistakeScheduler,
        persist_ai_misses: bool = True,
        session_id: Optional[str] = None,
        created_at: Optional[datetime] = None
    ):
        self.user_id = user_id
        self.items = items
        self.scheduler = scheduler
        self.persist_ai_misses = persist_ai_misses
        self.session_id = session_id or uuid.uuid4().hex
        self.created_at = to_naive_utc(created_at)
        self.position = 0
        self.correct_count = 0

    def __len__(self) -> int:
        return len(self.items)

    @property
    def is_finished(self) -> bool:
        return self.position >= len(self.items)

    def current(self) -> Optional[ReviewQueueItem]:
        """当前题目，队列结束时返回 None"""
        if self.is_finished:
            return None
        return self.items[self.position]

    def has_next(self) -> bool:
        """当前题目之后是否还有题"""
        return self.position + 1 < len(self.items)

    def advance(self) -> Optional[ReviewQueueItem]:
        """前进到下一题，返回新的当前题目（队列结束时为 None）"""
        if not self.is_finished:
            self.position += 1
        return self.current()

    def submit(self, answer: str, now: Optional[datetime] = None) -> SubmitResult:
        """
        提交当前题目的答案

        Args:
            answer: 用户输入（忽略大小写和空白，支持数字声调）
            now: 当前时间

        Returns:
            SubmitResult: 判题结果与写回状态

        Raises:
            ReviewSessionError: 队列已结束，或当前题目已经作答
        """
        item = self.current()
        if item is None:
            raise ReviewSessionError("复习队列已结束")
        if item.answered:
            raise ReviewSessionError(f"题目已作答: {item.item_id}")

        now = to_naive_utc(now)
        correct = answers_match(answer, item.pinyin)
        item.answered = True
        if correct:
            self.correct_count += 1

        result = SubmitResult(correct=correct, correct_pinyin=item.pinyin)
        try:
            if item.kind == ItemKind.MISTAKE:
                self._record_mistake_item(item, correct, answer, now)
            else:
                result.persisted = self._record_ai_item(item, correct, answer, now)
        except PersistenceError as e:
            logger.error(f"复习结果写回失败，会话继续: session={self.session_id} item={item.item_id}: {e}")
            result.persisted = False
            result.error = str(e)
        return result

    def _record_mistake_item(self, item: ReviewQueueItem, correct: bool, answer: str, now: datetime):
        if correct:
            self.scheduler.record_success(item.mistake_id, item.review_stage, now)
        else:
            self.scheduler.record_miss(self.user_id, item.question_id, answer, now)

    def _record_ai_item(self, item: ReviewQueueItem, correct: bool, answer: str, now: datetime) -> bool:
        # AI 题答对不需要记录；答错时先把题目落库，再记为错题
        if correct:
            return True
        if not self.persist_ai_misses:
            return False

        db = self.scheduler.db
        if item.question_id is None:
            question = Question(
                id=str(uuid.uuid4()),
                question_type=item.question_type,
                content=item.content,
                pinyin=item.pinyin,
                hint_emoji=item.hint_emoji,
                source="ai",
                created_at=now,
            )
            try:
                db.add(question)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceError("保存 AI 题目失败", cause=e) from e
            item.question_id = question.id
            logger.info(f"AI 题答错，已落库为题目: {item.item_id} -> {question.id}")

        self.scheduler.record_miss(self.user_id, item.question_id, answer, now)
        return True


class ReviewSessionBuilder:
    """
    复习会话组装器

    使用示例:
        builder = ReviewSessionBuilder(db, settings, augmenter=AIAugmenter(client))
        queue = await builder.start_session("user-1")
    """

    def __init__(
        self,
        db: Session,
        settings: Optional[ReviewSettings] = None,
        augmenter: Optional[AIAugmenter] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Args:
            db: 数据库会话
            settings: 复习配置，为 None 时使用默认值（不启用 AI）
            augmenter: AI 扩充器，为 None 或 settings 未配置 LLM 时跳过 AI 扩充
            rng: 打乱顺序用的随机源，测试时传入固定种子
        """
        self.settings = settings or ReviewSettings()
        self.scheduler = MistakeScheduler(db)
        self.augmenter = augmenter
        self.rng = rng or random.Random()

    def _filter_by_mode(self, due: List[DueMistake]) -> List[DueMistake]:
        mode = self.settings.practice_mode
        if mode == "all":
            return due
        return [d for d in due if d.question.question_type == mode]

    async def _augment(self, due: List[DueMistake]) -> List[ValidatedItem]:
        if not due or self.augmenter is None or not self.settings.ai_enabled:
            return []

        contexts = [
            MistakeContext(
                question_content=d.content,
                correct_pinyin=d.pinyin,
                wrong_pinyin=d.wrong_pinyin,
            )
            for d in due[:self.settings.ai_context_size]
        ]
        try:
            result = await self.augmenter.generate(
                contexts,
                self.settings.ai_item_count,
                exclude_contents={d.content for d in due},
            )
        except Exception:
            # AI 扩充失败永远不影响会话
            logger.exception("AI 扩充异常，本次不追加 AI 题")
            return []

        if not result.ok:
            logger.info(f"本次复习不追加 AI 题: {result.error}")
            return []
        return result.items

    async def start_session(self, user_id: str, now: Optional[datetime] = None) -> ReviewQueue:
        """
        开始一次复习会话

        Args:
            user_id: 用户ID
            now: 当前时间

        Returns:
            ReviewQueue: 错题在前、AI 题在后；没有到期错题时为空队列

        Raises:
            PersistenceError: 读取到期错题失败
        """
        now = to_naive_utc(now)
        try:
            due = self._filter_by_mode(self.scheduler.due_mistakes(user_id, now))
        except SQLAlchemyError as e:
            raise PersistenceError("读取到期错题失败", cause=e) from e

        mistake_items = [ReviewQueueItem.from_mistake(d) for d in due]
        ai_items = [ReviewQueueItem.from_ai(item) for item in await self._augment(due)]

        if self.settings.shuffle:
            self.rng.shuffle(mistake_items)
            self.rng.shuffle(ai_items)

        queue = ReviewQueue(
            user_id=user_id,
            items=mistake_items + ai_items,
            scheduler=self.scheduler,
            persist_ai_misses=self.settings.persist_ai_misses,
            created_at=now,
        )
        logger.info(
            f"复习会话开始: user={user_id} session={queue.session_id} "
            f"mistakes={len(mistake_items)} ai={len(ai_items)}"
        )
        return queue
