"""
关卡成绩API
"""
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from pinyin_review.core.database import get_db
from pinyin_review.core.errors import PersistenceError
from pinyin_review.services import LevelProgressService
from pinyin_review.services.level_service import MAX_STARS

router = APIRouter(prefix="/levels", tags=["关卡成绩"])


# Schemas
class SaveProgressRequest(BaseModel):
    """闯关结果"""
    user_id: str
    level_id: int
    stars: int = Field(ge=0, le=MAX_STARS)
    score: int = Field(ge=0)


class LevelProgressResponse(BaseModel):
    """单关最好成绩"""
    level_id: int
    stars: int
    score: int
    completed_at: datetime

    class Config:
        from_attributes = True


class UserLevelsResponse(BaseModel):
    """用户闯关概况"""
    total_score: int
    levels: List[LevelProgressResponse]


# Endpoints
@router.get("/progress", response_model=UserLevelsResponse)
async def get_level_progress(user_id: str, db: Session = Depends(get_db)):
    """用户各关最好成绩与总分"""
    service = LevelProgressService(db)
    return UserLevelsResponse(
        total_score=service.total_score(user_id),
        levels=[LevelProgressResponse.model_validate(r) for r in service.get_user_progress(user_id)],
    )


@router.post("/progress", response_model=LevelProgressResponse)
async def save_level_progress(request: SaveProgressRequest, db: Session = Depends(get_db)):
    """保存闯关成绩（只保留最好成绩）"""
    try:
        return LevelProgressService(db).save_progress(
            request.user_id, request.level_id, request.stars, request.score
        )
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
