"""
Study plan catalog service - shared plan definitions and seeding
"""
import json
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from dsalytics.database import storage_errors
from dsalytics.exceptions import InvalidInput, NotFound, StorageFailure
from dsalytics.models import StudyPlan, StudyPlanTopic
from dsalytics.models.enums import PlanDifficulty

logger = logging.getLogger(__name__)


class StudyPlanService:
    """Read and create catalog study plans"""

    def list_plans(self, db: Session) -> List[StudyPlan]:
        with storage_errors(db, "fetch study plans"):
            return db.query(StudyPlan).order_by(StudyPlan.created_at, StudyPlan.title).all()

    def get_plan(self, db: Session, plan_id: UUID) -> StudyPlan:
        """
        Fetch a plan definition

        Raises:
            NotFound: if no plan has this id
        """
        with storage_errors(db, "fetch study plan"):
            plan = db.query(StudyPlan).filter(StudyPlan.id == plan_id).first()

        if not plan:
            raise NotFound(f"Study plan {plan_id} not found")

        return plan

    def create_plan(
        self,
        db: Session,
        title: str,
        topics: List[Dict[str, Any]],
        description: Optional[str] = None,
        category: Optional[str] = None,
        difficulty: str = PlanDifficulty.BEGINNER.value,
        duration: Optional[str] = None,
        youtube_url: Optional[str] = None,
    ) -> StudyPlan:
        """
        Create a plan whose topic order follows the input order

        Args:
            db: Database session
            title: Plan title
            topics: [{"title": ..., "duration": ...}] in study order
            description, category, difficulty, duration, youtube_url: plan metadata

        Returns:
            The persisted plan
        """
        try:
            difficulty = PlanDifficulty(difficulty).value
        except ValueError:
            raise InvalidInput(f"Invalid difficulty '{difficulty}'") from None

        plan = StudyPlan(
            title=title,
            description=description,
            category=category,
            difficulty=difficulty,
            duration=duration,
            youtube_url=youtube_url,
            topics=[
                StudyPlanTopic(position=i, title=topic["title"], duration=topic.get("duration"))
                for i, topic in enumerate(topics)
            ],
        )

        with storage_errors(db, "create study plan"):
            db.add(plan)
            db.commit()
            db.refresh(plan)

        logger.info(f"Study plan created: {plan.id} ({plan.title}, {len(plan.topics)} topics)")
        return plan

    def seed_from_file(self, db: Session, path: str) -> int:
        """
        Create every plan from a JSON seed file whose title is not in the catalog yet

        Returns:
            Number of plans created
        """
        try:
            with open(path, encoding="utf-8") as f:
                seed = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read study plan seed {path}: {str(e)}")
            raise StorageFailure(f"Cannot read study plan seed file {path}") from e

        with storage_errors(db, "read existing study plans"):
            existing = {title for (title,) in db.query(StudyPlan.title).all()}

        created = 0
        for entry in seed:
            if entry["title"] in existing:
                continue
            self.create_plan(
                db,
                title=entry["title"],
                topics=entry.get("topics", []),
                description=entry.get("description"),
                category=entry.get("category"),
                difficulty=entry.get("difficulty", PlanDifficulty.BEGINNER.value),
                duration=entry.get("duration"),
                youtube_url=entry.get("youtube_url"),
            )
            existing.add(entry["title"])
            created += 1

        logger.info(f"Seeded {created} study plans from {path}")
        return created


# Global instance
study_plan_service = StudyPlanService()
