"""
Analytics service - activity counters and leaderboard
"""
import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Any, Optional
from sqlalchemy.orm import Session
from sqlalchemy import func

from dsalytics.config import settings
from dsalytics.database import storage_errors
from dsalytics.models import TopicProgress, User, UserProblemStatus, UserStudyPlan
from dsalytics.models.enums import ProblemStatus, TopicStatus

logger = logging.getLogger(__name__)


def summarize_completions(timestamps: Iterable[datetime], today: date) -> Dict[str, int]:
    """
    Derive counters from topic completion timestamps

    Args:
        timestamps: completed_at values across all of a user's plans
        today: the server's current calendar date

    Returns:
        total_completed: number of timestamps
        completed_today: timestamps falling on today
        streak: consecutive days ending today with at least one completion
    """
    days = [ts.date() for ts in timestamps]
    active_days = set(days)

    streak = 0
    day = today
    while day in active_days:
        streak += 1
        day -= timedelta(days=1)

    return {
        "total_completed": len(days),
        "completed_today": sum(1 for d in days if d == today),
        "streak": streak,
    }


class AnalyticsService:
    """Service for deriving activity analytics"""

    def get_user_analytics(
        self,
        db: Session,
        user_id: str,
        today: Optional[date] = None
    ) -> Dict[str, int]:
        """
        Recompute a user's activity counters

        Full scan of the user's completion timestamps on every call; the
        streak is never stored.

        Args:
            db: Database session
            user_id: User id
            today: Override for the current date

        Returns:
            Dictionary with total_completed, completed_today, streak
        """
        with storage_errors(db, "fetch analytics"):
            rows = (
                db.query(TopicProgress.completed_at)
                .join(UserStudyPlan, TopicProgress.user_study_plan_id == UserStudyPlan.id)
                .filter(
                    UserStudyPlan.user_id == user_id,
                    TopicProgress.completed_at.isnot(None),
                )
                .all()
            )

        summary = summarize_completions((completed_at for (completed_at,) in rows), today or date.today())

        logger.info(
            f"Analytics for user {user_id}: total={summary['total_completed']}, "
            f"today={summary['completed_today']}, streak={summary['streak']}"
        )
        return summary

    def get_leaderboard(self, db: Session, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Rank users by solved problems, then by completed study plan topics

        Returns:
            Ranked entries, best first
        """
        with storage_errors(db, "fetch leaderboard"):
            solved_rows = (
                db.query(UserProblemStatus.user_id, func.count(UserProblemStatus.id))
                .filter(UserProblemStatus.status == ProblemStatus.SOLVED.value)
                .group_by(UserProblemStatus.user_id)
                .all()
            )
            topic_rows = (
                db.query(UserStudyPlan.user_id, func.count(TopicProgress.id))
                .join(TopicProgress, TopicProgress.user_study_plan_id == UserStudyPlan.id)
                .filter(TopicProgress.status == TopicStatus.COMPLETED.value)
                .group_by(UserStudyPlan.user_id)
                .all()
            )

            scores: Dict[str, Dict[str, int]] = {}
            for user_id, count in solved_rows:
                scores.setdefault(user_id, {"solved": 0, "topics": 0})["solved"] = count
            for user_id, count in topic_rows:
                scores.setdefault(user_id, {"solved": 0, "topics": 0})["topics"] = count

            names = self._display_names(db, list(scores))

        ranked = sorted(
            scores.items(),
            key=lambda item: (-item[1]["solved"], -item[1]["topics"], item[0])
        )[:limit]

        return [
            {
                "rank": i + 1,
                "user_id": user_id,
                "name": names.get(user_id, user_id),
                "solved_problems": score["solved"],
                "completed_topics": score["topics"],
            }
            for i, (user_id, score) in enumerate(ranked)
        ]

    def _display_names(self, db: Session, user_ids: List[str]) -> Dict[str, str]:
        names = {settings.DEV_USER_ID: settings.DEV_USER_NAME}
        if user_ids:
            for user_id, name in db.query(User.id, User.name).filter(User.id.in_(user_ids)).all():
                names[user_id] = name
        return names


# Global instance
analytics_service = AnalyticsService()
