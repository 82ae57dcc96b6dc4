"""
UserProblemStatus model - per-user solve/favorite state of catalog problems
"""
from sqlalchemy import Column, String, Boolean, TIMESTAMP, Uuid, UniqueConstraint, func
from dsalytics.database import Base
from dsalytics.models.enums import ProblemStatus
import uuid


class UserProblemStatus(Base):
    __tablename__ = "user_problem_status"
    __table_args__ = (
        UniqueConstraint("user_id", "problem_id", name="uq_user_problem"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    problem_id = Column(String(64), nullable=False)  # id from the problem catalog
    status = Column(String(20), nullable=False, default=ProblemStatus.UNSOLVED.value)
    favorite = Column(Boolean, nullable=False, default=False)
    updated_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return f"<UserProblemStatus(user_id={self.user_id}, problem_id={self.problem_id}, status={self.status})>"
