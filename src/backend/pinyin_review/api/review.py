"""
复习会话API路由

会话队列只保存在当前进程内存中（按 session_id 索引），不落库；
每次请求把队列重新绑定到本次请求的数据库会话上。
每个用户同时只保留一个会话（新开会话替换旧会话），超过 SESSION_TTL 未结束的会话被清理。
"""
from datetime import datetime, timedelta
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from pinyin_review.core.clock import utcnow
from pinyin_review.core.config import ReviewSettings, get_review_settings
from pinyin_review.core.database import get_db
from pinyin_review.core.errors import PersistenceError, ReviewSessionError
from pinyin_review.llm import get_llm_client
from pinyin_review.services import (
    AIAugmenter,
    MistakeScheduler,
    ReviewQueue,
    ReviewQueueItem,
    ReviewSessionBuilder,
)

router = APIRouter(prefix="/review", tags=["复习会话"])

SESSION_TTL = timedelta(hours=2)

# session_id -> ReviewQueue
_sessions: Dict[str, ReviewQueue] = {}
# user_id -> session_id
_user_sessions: Dict[str, str] = {}
_settings: Optional[ReviewSettings] = None


def get_settings() -> ReviewSettings:
    """复习配置依赖（首次使用时从环境变量加载）"""
    global _settings
    if _settings is None:
        _settings = get_review_settings()
    return _settings


def get_session_builder(
    db: Session = Depends(get_db),
    settings: ReviewSettings = Depends(get_settings)
) -> ReviewSessionBuilder:
    """会话组装器依赖：配置了 LLM 时附带 AI 扩充器"""
    augmenter = None
    if settings.ai_enabled:
        augmenter = AIAugmenter(get_llm_client(settings.llm), timeout=settings.ai_timeout)
    return ReviewSessionBuilder(db, settings, augmenter=augmenter)


def reset_sessions():
    """清空内存中的会话（用于测试）"""
    _sessions.clear()
    _user_sessions.clear()


def _discard(session_id: str):
    queue = _sessions.pop(session_id, None)
    if queue is not None and _user_sessions.get(queue.user_id) == session_id:
        del _user_sessions[queue.user_id]


def _is_expired(queue: ReviewQueue, now: datetime) -> bool:
    return now - queue.created_at > SESSION_TTL


def prune_sessions(now: Optional[datetime] = None) -> int:
    """清理过期会话，返回清理数量"""
    now = now or utcnow()
    expired = [sid for sid, queue in _sessions.items() if _is_expired(queue, now)]
    for sid in expired:
        _discard(sid)
    return len(expired)


def register_session(queue: ReviewQueue):
    """登记新会话：同一用户的旧会话被替换，已结束的会话不登记"""
    prune_sessions()
    previous = _user_sessions.get(queue.user_id)
    if previous is not None:
        _discard(previous)
    if not queue.is_finished:
        _sessions[queue.session_id] = queue
        _user_sessions[queue.user_id] = queue.session_id


# Schemas
class StartSessionRequest(BaseModel):
    """开始复习请求"""
    user_id: str


class AnswerRequest(BaseModel):
    """作答请求"""
    answer: str


class QueueItemResponse(BaseModel):
    """队列题目（不包含答案）"""
    item_id: str
    kind: str
    content: str
    question_type: str
    review_stage: Optional[int] = None
    hint_emoji: Optional[str] = None


class SessionStateResponse(BaseModel):
    """会话状态"""
    session_id: str
    total: int
    position: int
    correct_count: int
    finished: bool
    has_next: bool
    current: Optional[QueueItemResponse] = None


class AnswerResponse(BaseModel):
    """作答结果"""
    correct: bool
    correct_pinyin: str
    persisted: bool
    error: Optional[str] = None
    has_next: bool


def _item_response(item: Optional[ReviewQueueItem]) -> Optional[QueueItemResponse]:
    if item is None:
        return None
    return QueueItemResponse(
        item_id=item.item_id,
        kind=item.kind.value,
        content=item.content,
        question_type=item.question_type,
        review_stage=item.review_stage,
        hint_emoji=item.hint_emoji,
    )


def _state_response(queue: ReviewQueue) -> SessionStateResponse:
    return SessionStateResponse(
        session_id=queue.session_id,
        total=len(queue),
        position=queue.position,
        correct_count=queue.correct_count,
        finished=queue.is_finished,
        has_next=queue.has_next(),
        current=_item_response(queue.current()),
    )


def _get_queue(session_id: str, db: Session) -> ReviewQueue:
    queue = _sessions.get(session_id)
    if queue is not None and _is_expired(queue, utcnow()):
        _discard(session_id)
        queue = None
    if queue is None:
        raise HTTPException(status_code=404, detail="复习会话不存在或已结束")
    queue.scheduler = MistakeScheduler(db)
    return queue


# Endpoints
@router.post("/sessions", response_model=SessionStateResponse, status_code=status.HTTP_201_CREATED)
async def start_session(
    request: StartSessionRequest,
    builder: ReviewSessionBuilder = Depends(get_session_builder)
):
    """
    开始一次复习

    到期错题在前，AI 生成题在后；没有到期错题时返回 total=0、finished=true
    """
    try:
        queue = await builder.start_session(request.user_id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    register_session(queue)
    return _state_response(queue)


@router.get("/sessions/{session_id}", response_model=SessionStateResponse)
async def get_session(session_id: str, db: Session = Depends(get_db)):
    """获取会话当前状态"""
    return _state_response(_get_queue(session_id, db))


@router.post("/sessions/{session_id}/answer", response_model=AnswerResponse)
async def submit_answer(session_id: str, request: AnswerRequest, db: Session = Depends(get_db)):
    """提交当前题目的答案（写回失败时 persisted=false，会话继续）"""
    queue = _get_queue(session_id, db)
    try:
        result = queue.submit(request.answer)
    except ReviewSessionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return AnswerResponse(
        correct=result.correct,
        correct_pinyin=result.correct_pinyin,
        persisted=result.persisted,
        error=result.error,
        has_next=queue.has_next(),
    )


@router.post("/sessions/{session_id}/advance", response_model=SessionStateResponse)
async def advance_session(session_id: str, db: Session = Depends(get_db)):
    """前进到下一题；队列结束后会话被移除"""
    queue = _get_queue(session_id, db)
    queue.advance()
    if queue.is_finished:
        _discard(session_id)
    return _state_response(queue)
