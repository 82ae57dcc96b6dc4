"""
Leaderboard API endpoint
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dsalytics.database import get_db
from dsalytics.schemas.analytics import Leaderboard
from dsalytics.services.analytics_service import analytics_service

router = APIRouter(prefix="/api", tags=["analytics"])


@router.get("/leaderboard", response_model=Leaderboard)
def get_leaderboard(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Users ranked by solved problems, then completed study plan topics"""
    return Leaderboard(entries=analytics_service.get_leaderboard(db, limit=limit))
