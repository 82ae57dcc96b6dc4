"""
Problem browser API endpoints
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from dsalytics.api.deps import get_current_user
from dsalytics.database import get_db
from dsalytics.schemas.auth import Principal
from dsalytics.schemas.problem import (
    ProblemListResponse, ProblemResponse, ProblemStatusList,
    ProblemStatusResponse, ProblemStatusUpdate,
)
from dsalytics.services.problem_service import problem_service

router = APIRouter(prefix="/api/problems", tags=["problems"])


@router.get("", response_model=ProblemListResponse)
def list_problems(
    difficulty: Optional[str] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = Query(None, max_length=200),
    sort_by: str = "title",
    order: str = "asc",
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Problems with the caller's status and favorite flag

    Filters are combined; search matches title or description.
    Sort by title, difficulty (easy to hard) or category.
    """
    return problem_service.list_problems(
        db,
        current_user.id,
        difficulty=difficulty,
        status=status,
        category=category,
        search=search,
        sort_by=sort_by,
        order=order,
    )


@router.get("/status/all", response_model=ProblemStatusList)
def get_statuses(
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    statuses = problem_service.get_statuses(db, current_user.id)
    return ProblemStatusList(statuses=[ProblemStatusResponse.model_validate(s) for s in statuses])


@router.post("/status", response_model=ProblemStatusResponse)
def set_status(
    request: ProblemStatusUpdate,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Set status and/or favorite for one problem"""
    return problem_service.set_status(
        db,
        current_user.id,
        request.problem_id,
        status=request.status.value if request.status else None,
        favorite=request.favorite,
    )


@router.get("/categories/{category}", response_model=List[ProblemResponse])
def list_category(category: str):
    return problem_service.list_category(category)
