"""
Study plan tracking service
Per-user progress against an ordered topic sequence
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dsalytics.config import settings
from dsalytics.database import storage_errors
from dsalytics.exceptions import InvalidInput, InvalidTransition, NotFound
from dsalytics.models import TopicProgress, UserStudyPlan
from dsalytics.models.enums import PlanStatus, TopicStatus
from dsalytics.services.study_plan_service import study_plan_service

logger = logging.getLogger(__name__)


def completion_percentage(completed: int, total: int) -> int:
    """
    Percentage of completed topics rounded to the nearest integer, halves up

    Integer arithmetic: floor(100 * completed / total + 0.5)
    """
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


def plan_status_for(completed: int, total: int) -> PlanStatus:
    if total > 0 and completed == total:
        return PlanStatus.COMPLETED
    if completed > 0:
        return PlanStatus.IN_PROGRESS
    return PlanStatus.NOT_STARTED


def is_topic_locked(topics: List[TopicProgress], index: int) -> bool:
    """A topic is locked until the one before it is completed"""
    if index == 0:
        return False
    return topics[index - 1].status != TopicStatus.COMPLETED.value


def _coerce(enum_cls, value, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidInput(f"Invalid {label} '{value}'") from None


class TrackingService:
    """
    Service maintaining UserStudyPlan records

    Every topic status change recomputes the derived plan fields:
    - progress: rounded percentage of completed topics
    - status: completed / in-progress / not-started from the completed count
    - started_at: stamped once, when the first topic leaves not-started
    - completed_at: stamped when the completed count reaches the total
    """

    def __init__(self, enforce_sequential_unlock: bool = True):
        self.enforce_sequential_unlock = enforce_sequential_unlock

    # ------------------ Catalog plans ------------------

    def get_or_create(self, db: Session, user_id: str, plan_id: UUID) -> UserStudyPlan:
        """
        Return the user's record for a plan, creating it on first access

        New records hold one not-started topic per plan topic, in plan order.

        Raises:
            NotFound: if the plan does not exist
        """
        user_plan = self._find(db, user_id, plan_id)
        if user_plan:
            return user_plan

        plan = study_plan_service.get_plan(db, plan_id)

        user_plan = UserStudyPlan(
            user_id=user_id,
            study_plan_id=plan.id,
            status=PlanStatus.NOT_STARTED.value,
            progress=0,
            is_custom=False,
            topics_progress=[
                TopicProgress(topic_id=str(topic.id), position=i, status=TopicStatus.NOT_STARTED.value)
                for i, topic in enumerate(plan.topics)
            ],
        )

        with storage_errors(db, "create user study plan"):
            db.add(user_plan)
            try:
                db.commit()
            except IntegrityError:
                # A concurrent request created the same (user, plan) record first
                db.rollback()
                existing = self._find(db, user_id, plan_id)
                if existing:
                    return existing
                raise
            db.refresh(user_plan)

        logger.info(f"User study plan created: user={user_id}, plan={plan_id}")
        return user_plan

    def update_topic_status(
        self,
        db: Session,
        user_id: str,
        plan_id: UUID,
        topic_id: str,
        new_status: str,
        now: Optional[datetime] = None,
    ) -> UserStudyPlan:
        """
        Set one topic's status and recompute the plan

        Args:
            db: Database session
            user_id: Owner of the progress record
            plan_id: Catalog plan id
            topic_id: Topic id within the plan
            new_status: not-started / in-progress / completed
            now: Timestamp to record (defaults to the current local time)

        Returns:
            The updated record

        Raises:
            InvalidInput: unknown status
            NotFound: plan or topic absent
            InvalidTransition: topic is locked behind an incomplete predecessor
        """
        status = _coerce(TopicStatus, new_status, "topic status")
        user_plan = self.get_or_create(db, user_id, plan_id)
        return self._set_topic_status(db, user_plan, topic_id, status, now)

    def update_plan_progress(
        self,
        db: Session,
        user_id: str,
        plan_id: UUID,
        status: Optional[str] = None,
        progress: Optional[int] = None,
    ) -> UserStudyPlan:
        """
        Overwrite plan-level status and/or progress verbatim

        No recomputation happens here; callers keep the record consistent.
        """
        user_plan = self._find(db, user_id, plan_id)
        if not user_plan:
            raise NotFound(f"User study plan for plan {plan_id} not found")

        if status is not None:
            user_plan.status = _coerce(PlanStatus, status, "plan status").value
        if progress is not None:
            if not 0 <= progress <= 100:
                raise InvalidInput(f"Progress must be between 0 and 100, got {progress}")
            user_plan.progress = progress

        with storage_errors(db, "update plan progress"):
            db.commit()
            db.refresh(user_plan)

        logger.info(
            f"Plan progress overridden: user={user_id}, plan={plan_id}, "
            f"status={user_plan.status}, progress={user_plan.progress}"
        )
        return user_plan

    def list_user_plans(self, db: Session, user_id: str) -> List[UserStudyPlan]:
        with storage_errors(db, "fetch user study plans"):
            return (
                db.query(UserStudyPlan)
                .filter(UserStudyPlan.user_id == user_id)
                .order_by(UserStudyPlan.created_at)
                .all()
            )

    # ------------------ Custom plans ------------------

    def create_custom_plan(
        self,
        db: Session,
        user_id: str,
        title: str,
        topics: List[Dict[str, Any]],
        description: Optional[str] = None,
    ) -> UserStudyPlan:
        """Create a user-authored plan; its topic ids are the ordinal positions"""
        user_plan = UserStudyPlan(
            user_id=user_id,
            study_plan_id=None,
            is_custom=True,
            custom_title=title,
            custom_description=description,
            custom_topics=[self._topic_entry(t) for t in topics],
            status=PlanStatus.NOT_STARTED.value,
            progress=0,
            topics_progress=self._fresh_custom_topics(topics),
        )

        with storage_errors(db, "create custom plan"):
            db.add(user_plan)
            db.commit()
            db.refresh(user_plan)

        logger.info(f"Custom plan created: {user_plan.id} for user {user_id}")
        return user_plan

    def update_custom_plan(
        self,
        db: Session,
        user_id: str,
        user_plan_id: UUID,
        title: str,
        topics: List[Dict[str, Any]],
        description: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> UserStudyPlan:
        """Replace a custom plan's definition; topic progress starts over"""
        user_plan = self._get_custom(db, user_id, user_plan_id)

        user_plan.custom_title = title
        user_plan.custom_description = description
        user_plan.custom_topics = [self._topic_entry(t) for t in topics]
        user_plan.topics_progress = self._fresh_custom_topics(topics)
        self._recompute(user_plan, previous_completed=0, now=now or datetime.now())

        with storage_errors(db, "update custom plan"):
            db.commit()
            db.refresh(user_plan)

        logger.info(f"Custom plan updated: {user_plan.id}")
        return user_plan

    def delete_custom_plan(self, db: Session, user_id: str, user_plan_id: UUID) -> None:
        user_plan = self._get_custom(db, user_id, user_plan_id)

        with storage_errors(db, "delete custom plan"):
            db.delete(user_plan)
            db.commit()

        logger.info(f"Custom plan deleted: {user_plan_id}")

    def update_custom_topic_status(
        self,
        db: Session,
        user_id: str,
        user_plan_id: UUID,
        topic_id: str,
        new_status: str,
        now: Optional[datetime] = None,
    ) -> UserStudyPlan:
        """Same rules as update_topic_status, for a custom plan"""
        status = _coerce(TopicStatus, new_status, "topic status")
        user_plan = self._get_custom(db, user_id, user_plan_id)
        return self._set_topic_status(db, user_plan, topic_id, status, now)

    # ------------------ Administration ------------------

    def delete_all(self, db: Session) -> int:
        """Delete every user study plan; returns the number removed"""
        with storage_errors(db, "delete user study plans"):
            plans = db.query(UserStudyPlan).all()
            for user_plan in plans:
                db.delete(user_plan)
            db.commit()

        logger.warning(f"Deleted {len(plans)} user study plans")
        return len(plans)

    # ------------------ Internals ------------------

    def _find(self, db: Session, user_id: str, plan_id: UUID) -> Optional[UserStudyPlan]:
        with storage_errors(db, "fetch user study plan"):
            return (
                db.query(UserStudyPlan)
                .filter(
                    UserStudyPlan.user_id == user_id,
                    UserStudyPlan.study_plan_id == plan_id,
                )
                .first()
            )

    def _get_custom(self, db: Session, user_id: str, user_plan_id: UUID) -> UserStudyPlan:
        with storage_errors(db, "fetch custom plan"):
            user_plan = (
                db.query(UserStudyPlan)
                .filter(
                    UserStudyPlan.id == user_plan_id,
                    UserStudyPlan.user_id == user_id,
                    UserStudyPlan.is_custom.is_(True),
                )
                .first()
            )

        if not user_plan:
            raise NotFound(f"Custom plan {user_plan_id} not found")

        return user_plan

    def _set_topic_status(
        self,
        db: Session,
        user_plan: UserStudyPlan,
        topic_id: str,
        status: TopicStatus,
        now: Optional[datetime],
    ) -> UserStudyPlan:
        now = now or datetime.now()
        topics = user_plan.topics_progress

        index = next((i for i, t in enumerate(topics) if t.topic_id == str(topic_id)), None)
        if index is None:
            raise NotFound(f"Topic {topic_id} not found in user plan")

        if (
            self.enforce_sequential_unlock
            and status != TopicStatus.NOT_STARTED
            and topics[index].status != status.value
            and is_topic_locked(topics, index)
        ):
            raise InvalidTransition(
                f"Topic {topic_id} is locked: complete the previous topic first"
            )

        previous_completed = self._completed_count(topics)

        topic = topics[index]
        topic.status = status.value
        topic.completed_at = now if status == TopicStatus.COMPLETED else None
        user_plan.last_activity_at = now

        self._recompute(user_plan, previous_completed, now)

        with storage_errors(db, "update topic progress"):
            db.commit()
            db.refresh(user_plan)

        logger.info(
            f"Topic status updated: user={user_plan.user_id}, plan={user_plan.id}, "
            f"topic={topic_id}, status={status.value}, progress={user_plan.progress}"
        )
        return user_plan

    def _recompute(self, user_plan: UserStudyPlan, previous_completed: int, now: datetime) -> None:
        topics = user_plan.topics_progress
        total = len(topics)
        completed = self._completed_count(topics)

        user_plan.progress = completion_percentage(completed, total)
        status = plan_status_for(completed, total)
        user_plan.status = status.value

        if user_plan.started_at is None and any(
            t.status != TopicStatus.NOT_STARTED.value for t in topics
        ):
            user_plan.started_at = now

        if status == PlanStatus.COMPLETED:
            if previous_completed < total or user_plan.completed_at is None:
                user_plan.completed_at = now
        else:
            user_plan.completed_at = None

    @staticmethod
    def _completed_count(topics: List[TopicProgress]) -> int:
        return sum(1 for t in topics if t.status == TopicStatus.COMPLETED.value)

    @staticmethod
    def _topic_entry(topic: Dict[str, Any]) -> Dict[str, Any]:
        return {"title": topic["title"], "duration": topic.get("duration")}

    @staticmethod
    def _fresh_custom_topics(topics: List[Dict[str, Any]]) -> List[TopicProgress]:
        return [
            TopicProgress(topic_id=str(i), position=i, status=TopicStatus.NOT_STARTED.value)
            for i in range(len(topics))
        ]


# Global instance
tracking_service = TrackingService(enforce_sequential_unlock=settings.ENFORCE_SEQUENTIAL_UNLOCK)
