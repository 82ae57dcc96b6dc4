"""
Database models package
"""
from dsalytics.models.study_plan import StudyPlan, StudyPlanTopic
from dsalytics.models.user_study_plan import UserStudyPlan, TopicProgress
from dsalytics.models.user_problem_status import UserProblemStatus
from dsalytics.models.user import User

__all__ = [
    "StudyPlan",
    "StudyPlanTopic",
    "UserStudyPlan",
    "TopicProgress",
    "UserProblemStatus",
    "User",
]
