"""
Study plan catalog models - shared, read-mostly learning paths
"""
from sqlalchemy import Column, String, Integer, Text, TIMESTAMP, ForeignKey, Uuid, func
from sqlalchemy.orm import relationship
from dsalytics.database import Base
from dsalytics.models.enums import PlanDifficulty
import uuid


class StudyPlan(Base):
    """
    Study plans table - a fixed sequence of topics shared by every user
    """
    __tablename__ = "study_plans"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    category = Column(String(50), index=True)
    difficulty = Column(String(20), default=PlanDifficulty.BEGINNER.value)
    duration = Column(String(50))  # "8 weeks"
    youtube_url = Column(String(500))
    created_at = Column(TIMESTAMP, server_default=func.now())

    topics = relationship(
        "StudyPlanTopic",
        back_populates="study_plan",
        order_by="StudyPlanTopic.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<StudyPlan(id={self.id}, title={self.title}, topics={len(self.topics)})>"


class StudyPlanTopic(Base):
    """
    Topics of a study plan, ordered by position
    """
    __tablename__ = "study_plan_topics"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    study_plan_id = Column(Uuid, ForeignKey("study_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    duration = Column(String(50))  # "1 week"

    study_plan = relationship("StudyPlan", back_populates="topics")

    def __repr__(self):
        return f"<StudyPlanTopic(id={self.id}, position={self.position}, title={self.title})>"
