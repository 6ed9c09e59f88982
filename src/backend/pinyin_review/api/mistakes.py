"""
错题本API

功能说明：
- 错题列表 / 到期错题 / 统计
- 记录答错、记录复习答对
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from pinyin_review.core.database import get_db
from pinyin_review.core.errors import PersistenceError
from pinyin_review.models import MistakeRecord, Question
from pinyin_review.services import DueMistake, MistakeScheduler

router = APIRouter(prefix="/mistakes", tags=["错题本"])


# Schemas
class RecordMissRequest(BaseModel):
    """记录答错请求"""
    user_id: str
    question_id: str
    wrong_pinyin: str


class RecordSuccessRequest(BaseModel):
    """复习答对请求（current_stage 为答题时看到的阶段）"""
    current_stage: int


class MistakeResponse(BaseModel):
    """错题记录"""
    id: int
    question_id: str
    content: Optional[str] = None
    pinyin: Optional[str] = None
    wrong_pinyin: str
    error_count: int
    review_stage: int
    last_reviewed_at: Optional[datetime]
    next_review_at: datetime


class MistakeStatsResponse(BaseModel):
    """错题统计"""
    total: int
    due: int
    mastered: int


def _to_response(record: MistakeRecord, question: Optional[Question] = None) -> MistakeResponse:
    return MistakeResponse(
        id=record.id,
        question_id=record.question_id,
        content=question.content if question else None,
        pinyin=question.pinyin if question else None,
        wrong_pinyin=record.wrong_pinyin,
        error_count=record.error_count,
        review_stage=record.review_stage,
        last_reviewed_at=record.last_reviewed_at,
        next_review_at=record.next_review_at,
    )


def _from_due(items: List[DueMistake]) -> List[MistakeResponse]:
    return [_to_response(d.record, d.question) for d in items]


# Endpoints
@router.get("", response_model=List[MistakeResponse])
async def list_mistakes(user_id: str, db: Session = Depends(get_db)):
    """错题本：用户全部错题（含已掌握），按下次复习时间排序"""
    return _from_due(MistakeScheduler(db).list_mistakes(user_id))


@router.get("/due", response_model=List[MistakeResponse])
async def get_due_mistakes(user_id: str, db: Session = Depends(get_db)):
    """到期需要复习的错题，空列表表示全部复习完了"""
    return _from_due(MistakeScheduler(db).due_mistakes(user_id))


@router.get("/stats", response_model=MistakeStatsResponse)
async def get_mistake_stats(user_id: str, db: Session = Depends(get_db)):
    """错题统计"""
    return MistakeStatsResponse(**MistakeScheduler(db).stats(user_id))


@router.post("", response_model=MistakeResponse, status_code=status.HTTP_201_CREATED)
async def record_miss(request: RecordMissRequest, db: Session = Depends(get_db)):
    """记录一次答错（已有错题会重置到第0阶段）"""
    if db.get(Question, request.question_id) is None:
        raise HTTPException(status_code=404, detail="题目不存在")

    try:
        record = MistakeScheduler(db).record_miss(
            request.user_id, request.question_id, request.wrong_pinyin
        )
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _to_response(record, record.question)


@router.post("/{mistake_id}/success", response_model=MistakeResponse)
async def record_success(mistake_id: int, request: RecordSuccessRequest, db: Session = Depends(get_db)):
    """记录一次复习答对"""
    try:
        record = MistakeScheduler(db).record_success(mistake_id, request.current_stage)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if record is None:
        raise HTTPException(status_code=404, detail="错题记录不存在")
    return _to_response(record, record.question)
