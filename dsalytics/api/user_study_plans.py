"""
User study plan progress and analytics API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from dsalytics.api.deps import get_current_user
from dsalytics.database import get_db
from dsalytics.models import UserStudyPlan
from dsalytics.schemas.analytics import UserAnalytics
from dsalytics.schemas.auth import Principal
from dsalytics.schemas.user_study_plan import (
    CustomPlanCreate, MessageResponse, PlanProgressUpdate,
    TopicProgressResponse, TopicStatusUpdate, UserStudyPlanResponse,
)
from dsalytics.services.analytics_service import analytics_service
from dsalytics.services.tracking_service import is_topic_locked, tracking_service

router = APIRouter(prefix="/api/user-study-plans", tags=["user-study-plans"])


def to_response(user_plan: UserStudyPlan) -> UserStudyPlanResponse:
    """Attach topic titles and lock flags to a progress record"""
    if user_plan.is_custom:
        title = user_plan.custom_title
        description = user_plan.custom_description
        definitions = {str(i): t for i, t in enumerate(user_plan.custom_topics or [])}
    else:
        plan = user_plan.study_plan
        title = plan.title if plan else None
        description = plan.description if plan else None
        definitions = {
            str(t.id): {"title": t.title, "duration": t.duration}
            for t in (plan.topics if plan else [])
        }

    topics = user_plan.topics_progress
    return UserStudyPlanResponse(
        id=user_plan.id,
        user_id=user_plan.user_id,
        study_plan_id=user_plan.study_plan_id,
        title=title,
        description=description,
        is_custom=user_plan.is_custom,
        status=user_plan.status,
        progress=user_plan.progress,
        started_at=user_plan.started_at,
        completed_at=user_plan.completed_at,
        last_activity_at=user_plan.last_activity_at,
        topics_progress=[
            TopicProgressResponse(
                topic_id=topic.topic_id,
                position=topic.position,
                title=definitions.get(topic.topic_id, {}).get("title"),
                duration=definitions.get(topic.topic_id, {}).get("duration"),
                status=topic.status,
                completed_at=topic.completed_at,
                locked=is_topic_locked(topics, i),
            )
            for i, topic in enumerate(topics)
        ],
    )


# Static routes first so they are not captured by /{plan_id}

@router.get("/analytics/summary", response_model=UserAnalytics)
def get_analytics(
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Activity counters for the current user

    Returns:
    - total_completed: topics completed across all plans
    - completed_today: topics completed today
    - streak: consecutive days ending today with a completion
    """
    return UserAnalytics(**analytics_service.get_user_analytics(db, current_user.id))


@router.post("/custom", response_model=UserStudyPlanResponse, status_code=201)
def create_custom_plan(
    request: CustomPlanCreate,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user_plan = tracking_service.create_custom_plan(
        db,
        current_user.id,
        title=request.title,
        description=request.description,
        topics=[t.model_dump() for t in request.topics],
    )
    return to_response(user_plan)


@router.put("/custom/{user_plan_id}", response_model=UserStudyPlanResponse)
def update_custom_plan(
    user_plan_id: UUID,
    request: CustomPlanCreate,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Replace a custom plan's definition; topic progress is reset"""
    user_plan = tracking_service.update_custom_plan(
        db,
        current_user.id,
        user_plan_id,
        title=request.title,
        description=request.description,
        topics=[t.model_dump() for t in request.topics],
    )
    return to_response(user_plan)


@router.delete("/custom/{user_plan_id}", response_model=MessageResponse)
def delete_custom_plan(
    user_plan_id: UUID,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    tracking_service.delete_custom_plan(db, current_user.id, user_plan_id)
    return MessageResponse(message="Custom plan deleted")


@router.patch("/custom/{user_plan_id}/topics/{topic_id}", response_model=UserStudyPlanResponse)
def update_custom_topic(
    user_plan_id: UUID,
    topic_id: str,
    request: TopicStatusUpdate,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user_plan = tracking_service.update_custom_topic_status(
        db, current_user.id, user_plan_id, topic_id, request.status.value
    )
    return to_response(user_plan)


@router.get("", response_model=List[UserStudyPlanResponse])
def list_user_plans(
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return [to_response(p) for p in tracking_service.list_user_plans(db, current_user.id)]


@router.get("/{plan_id}", response_model=UserStudyPlanResponse)
def get_user_plan(
    plan_id: UUID,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Progress record for a catalog plan, created on first access"""
    return to_response(tracking_service.get_or_create(db, current_user.id, plan_id))


@router.patch("/{plan_id}/topics/{topic_id}", response_model=UserStudyPlanResponse)
def update_topic(
    plan_id: UUID,
    topic_id: str,
    request: TopicStatusUpdate,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Change one topic's status

    Recomputes progress and plan status. A topic is locked until the previous
    topic is completed; starting or completing a locked topic returns 409.
    """
    user_plan = tracking_service.update_topic_status(
        db, current_user.id, plan_id, topic_id, request.status.value
    )
    return to_response(user_plan)


@router.patch("/{plan_id}", response_model=UserStudyPlanResponse)
def update_plan(
    plan_id: UUID,
    request: PlanProgressUpdate,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Overwrite plan status and/or progress verbatim"""
    user_plan = tracking_service.update_plan_progress(
        db,
        current_user.id,
        plan_id,
        status=request.status.value if request.status else None,
        progress=request.progress,
    )
    return to_response(user_plan)
