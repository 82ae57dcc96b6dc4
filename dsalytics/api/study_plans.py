"""
Study plan catalog API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from dsalytics.database import get_db
from dsalytics.schemas.study_plan import StudyPlanCreate, StudyPlanResponse
from dsalytics.services.study_plan_service import study_plan_service

router = APIRouter(prefix="/api/study-plans", tags=["study-plans"])


@router.get("", response_model=List[StudyPlanResponse])
def list_study_plans(db: Session = Depends(get_db)):
    """List every catalog plan with its ordered topics"""
    return study_plan_service.list_plans(db)


@router.get("/{plan_id}", response_model=StudyPlanResponse)
def get_study_plan(plan_id: UUID, db: Session = Depends(get_db)):
    return study_plan_service.get_plan(db, plan_id)


@router.post("", response_model=StudyPlanResponse, status_code=201)
def create_study_plan(request: StudyPlanCreate, db: Session = Depends(get_db)):
    """Create a catalog plan; topic order follows the request"""
    return study_plan_service.create_plan(
        db,
        title=request.title,
        topics=[t.model_dump() for t in request.topics],
        description=request.description,
        category=request.category,
        difficulty=request.difficulty.value,
        duration=request.duration,
        youtube_url=request.youtube_url,
    )
