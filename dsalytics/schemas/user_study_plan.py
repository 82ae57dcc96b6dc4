"""
Pydantic schemas for per-user study plan progress
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from dsalytics.models.enums import PlanStatus, TopicStatus
from dsalytics.schemas.study_plan import TopicCreate


class TopicProgressResponse(BaseModel):
    """Progress of a single topic; locked is derived from the previous topic"""
    topic_id: str
    position: int
    title: Optional[str] = None
    duration: Optional[str] = None
    status: TopicStatus
    completed_at: Optional[datetime] = None
    locked: bool = False


class UserStudyPlanResponse(BaseModel):
    """A user's progress record against a plan"""
    id: UUID
    user_id: str
    study_plan_id: Optional[UUID] = None
    title: Optional[str] = None
    description: Optional[str] = None
    is_custom: bool
    status: PlanStatus
    progress: int
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None
    topics_progress: List[TopicProgressResponse]


class TopicStatusUpdate(BaseModel):
    """Schema for changing one topic's status"""
    status: TopicStatus


class PlanProgressUpdate(BaseModel):
    """Direct override of plan-level fields, applied verbatim"""
    status: Optional[PlanStatus] = None
    progress: Optional[int] = Field(None, ge=0, le=100)


class CustomPlanCreate(BaseModel):
    """Schema for a user-authored plan"""
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    topics: List[TopicCreate] = Field(..., min_length=1)


class MessageResponse(BaseModel):
    message: str
