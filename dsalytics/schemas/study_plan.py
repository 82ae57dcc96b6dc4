"""
Pydantic schemas for the study plan catalog
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from dsalytics.models.enums import PlanDifficulty


class TopicCreate(BaseModel):
    """Topic entry when creating a plan"""
    title: str = Field(..., min_length=1, max_length=255)
    duration: Optional[str] = Field(None, max_length=50, description="Free text, e.g. '1 week'")


class StudyPlanCreate(BaseModel):
    """Schema for creating a catalog study plan"""
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=50)
    difficulty: PlanDifficulty = PlanDifficulty.BEGINNER
    duration: Optional[str] = Field(None, max_length=50)
    youtube_url: Optional[str] = Field(None, max_length=500)
    topics: List[TopicCreate] = Field(default_factory=list)


class TopicResponse(BaseModel):
    id: UUID
    position: int
    title: str
    duration: Optional[str] = None

    class Config:
        from_attributes = True


class StudyPlanResponse(BaseModel):
    """A catalog plan with its ordered topics"""
    id: UUID
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    duration: Optional[str] = None
    youtube_url: Optional[str] = None
    topics: List[TopicResponse]
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
