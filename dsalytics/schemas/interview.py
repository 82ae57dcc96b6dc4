"""
Pydantic schemas for the interview helper
"""
from pydantic import BaseModel, Field
from typing import List


class AnswerAnalysisRequest(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)


class AnswerAnalysis(BaseModel):
    score: int = Field(..., ge=0, le=100)
    key_points: List[str]
    improvements: List[str]
    feedback: str
