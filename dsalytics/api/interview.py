"""
Interview practice API endpoints
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional
import logging

from dsalytics.api.deps import get_current_user
from dsalytics.schemas.auth import Principal
from dsalytics.schemas.interview import AnswerAnalysis, AnswerAnalysisRequest
from dsalytics.schemas.problem import ProblemResponse
from dsalytics.services.interview_service import interview_service

router = APIRouter(prefix="/api/interview", tags=["interview"])
logger = logging.getLogger(__name__)


@router.get("/questions", response_model=List[ProblemResponse])
def get_questions(
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    count: int = Query(5, ge=1, le=20),
    current_user: Principal = Depends(get_current_user)
):
    return interview_service.pick_questions(category=category, difficulty=difficulty, count=count)


@router.post("/analyze", response_model=AnswerAnalysis)
def analyze_answer(
    request: AnswerAnalysisRequest,
    current_user: Principal = Depends(get_current_user)
):
    """
    Score a free-text answer with Gemini

    Returns score (0-100), covered key points, improvements and feedback.
    """
    logger.info(f"Analyzing interview answer for user {current_user.id}")
    return AnswerAnalysis(**interview_service.analyze_answer(request.question, request.answer))
