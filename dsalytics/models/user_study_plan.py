"""
Per-user study plan progress - one row per (user, plan) plus one row per topic
"""
from sqlalchemy import (
    Column, String, Integer, Boolean, Text, TIMESTAMP, ForeignKey, JSON, Uuid,
    UniqueConstraint, func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from dsalytics.database import Base
from dsalytics.models.enums import PlanStatus, TopicStatus
import uuid


class UserStudyPlan(Base):
    """
    User study plans table - progress of one user against a catalog plan or a custom plan
    """
    __tablename__ = "user_study_plans"
    __table_args__ = (
        UniqueConstraint("user_id", "study_plan_id", name="uq_user_study_plan"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    study_plan_id = Column(Uuid, ForeignKey("study_plans.id", ondelete="CASCADE"), nullable=True, index=True)
    status = Column(String(20), nullable=False, default=PlanStatus.NOT_STARTED.value)
    progress = Column(Integer, nullable=False, default=0)  # 0 - 100
    started_at = Column(TIMESTAMP)
    completed_at = Column(TIMESTAMP)
    last_activity_at = Column(TIMESTAMP)

    is_custom = Column(Boolean, nullable=False, default=False)
    custom_title = Column(String(255))
    custom_description = Column(Text)
    custom_topics = Column(JSON().with_variant(JSONB, "postgresql"))  # [{"title": ..., "duration": ...}]

    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    topics_progress = relationship(
        "TopicProgress",
        back_populates="user_study_plan",
        order_by="TopicProgress.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    study_plan = relationship("StudyPlan", lazy="joined")

    def __repr__(self):
        return (
            f"<UserStudyPlan(user_id={self.user_id}, study_plan_id={self.study_plan_id}, "
            f"status={self.status}, progress={self.progress})>"
        )


class TopicProgress(Base):
    """
    Topic progress table - completed_at is set iff status is completed
    """
    __tablename__ = "topic_progress"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_study_plan_id = Column(
        Uuid, ForeignKey("user_study_plans.id", ondelete="CASCADE"), nullable=False, index=True
    )
    topic_id = Column(String(64), nullable=False)
    position = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=TopicStatus.NOT_STARTED.value)
    completed_at = Column(TIMESTAMP, index=True)

    user_study_plan = relationship("UserStudyPlan", back_populates="topics_progress")

    def __repr__(self):
        return f"<TopicProgress(topic_id={self.topic_id}, status={self.status})>"
