"""
拼音学习API
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from pinyin_review.core.database import get_db
from pinyin_review.models import PinyinSymbol
from pinyin_review.services import SymbolMasterySchedule
from pinyin_review.services.symbol_service import DEFAULT_REVIEW_LIMIT

MAX_REVIEW_LIMIT = 100

router = APIRouter(prefix="/pinyin", tags=["拼音学习"])


# Schemas
class SymbolResponse(BaseModel):
    """拼音符号"""
    id: str
    category: str
    group_name: str
    pinyin: str
    mnemonic: str
    emoji: Optional[str]
    example_word: str
    example_pinyin: str
    sort_order: int

    class Config:
        from_attributes = True


class ProgressResponse(BaseModel):
    """单个符号的学习进度"""
    symbol_id: str
    study_count: int
    is_mastered: bool
    mastery_level: int
    last_studied_at: datetime
    next_review_at: datetime

    class Config:
        from_attributes = True


class ProgressOverviewResponse(BaseModel):
    """学习概况 + 明细"""
    total_symbols: int
    studied: int
    mastered: int
    progress: List[ProgressResponse]


class ReviewSymbolResponse(SymbolResponse):
    """待复习符号（带进度）"""
    progress_id: int
    study_count: int
    is_mastered: bool


class StudyOutcomeRequest(BaseModel):
    """学习结果"""
    user_id: str
    symbol_id: str
    is_mastered: bool


# Endpoints
@router.get("/symbols", response_model=List[SymbolResponse])
async def list_symbols(category: Optional[str] = None, db: Session = Depends(get_db)):
    """拼音符号表（可按 initial / final / overall 过滤）"""
    return SymbolMasterySchedule(db).list_symbols(category)


@router.get("/progress", response_model=ProgressOverviewResponse)
async def get_progress(user_id: str, db: Session = Depends(get_db)):
    """用户的拼音学习进度"""
    schedule = SymbolMasterySchedule(db)
    return ProgressOverviewResponse(
        **schedule.summary(user_id),
        progress=[ProgressResponse.model_validate(p) for p in schedule.user_progress(user_id)],
    )


@router.get("/review", response_model=List[ReviewSymbolResponse])
async def get_review_list(
    user_id: str,
    limit: int = Query(DEFAULT_REVIEW_LIMIT, ge=1, le=MAX_REVIEW_LIMIT),
    db: Session = Depends(get_db)
):
    """需要复习的拼音符号（未掌握或已到期）"""
    due = SymbolMasterySchedule(db).due_or_unmastered(user_id, limit=limit)
    return [
        ReviewSymbolResponse(
            **SymbolResponse.model_validate(d.symbol).model_dump(),
            progress_id=d.progress.id,
            study_count=d.study_count,
            is_mastered=d.is_mastered,
        )
        for d in due
    ]


@router.post("/progress")
async def record_study_outcome(request: StudyOutcomeRequest, db: Session = Depends(get_db)):
    """记录一次拼音卡片学习结果"""
    if db.get(PinyinSymbol, request.symbol_id) is None:
        raise HTTPException(status_code=404, detail="拼音符号不存在")

    ok = SymbolMasterySchedule(db).record_study_outcome(
        request.user_id, request.symbol_id, request.is_mastered
    )
    if not ok:
        raise HTTPException(status_code=500, detail="学习进度保存失败")
    return {"success": True}
