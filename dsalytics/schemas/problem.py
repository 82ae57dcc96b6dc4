"""
Pydantic schemas for the problem browser
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from dsalytics.models.enums import ProblemStatus


class ProblemResponse(BaseModel):
    """Catalog problem merged with the caller's status"""
    id: str
    title: str
    description: str = ""
    difficulty: str
    category: str
    tags: List[str] = Field(default_factory=list)
    status: ProblemStatus = ProblemStatus.UNSOLVED
    favorite: bool = False


class ProblemStats(BaseModel):
    total: int
    solved: int
    attempted: int
    unsolved: int


class ProblemListResponse(BaseModel):
    problems: List[ProblemResponse]
    stats: ProblemStats


class ProblemStatusUpdate(BaseModel):
    """Upsert of a user's status for one problem"""
    problem_id: str = Field(..., max_length=64)
    status: Optional[ProblemStatus] = None
    favorite: Optional[bool] = None


class ProblemStatusResponse(BaseModel):
    problem_id: str
    status: ProblemStatus
    favorite: bool
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProblemStatusList(BaseModel):
    statuses: List[ProblemStatusResponse]
