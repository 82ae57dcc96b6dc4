"""
Problem browser service
Catalog loading, per-user status merge, filtering and sorting
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dsalytics.config import settings
from dsalytics.database import storage_errors
from dsalytics.exceptions import InvalidInput, NotFound, StorageFailure
from dsalytics.models import UserProblemStatus
from dsalytics.models.enums import ProblemDifficulty, ProblemStatus
from dsalytics.utils.cache import cache_service

logger = logging.getLogger(__name__)


class ProblemService:
    """
    Service for the practice problem catalog

    The catalog is a JSON document (a list of problems, or {"data": [...]})
    cached in Redis; per-user status lives in the database.
    """

    CATALOG_CACHE_KEY = "problems:catalog"
    DIFFICULTY_ORDER = {d.value: i for i, d in enumerate(ProblemDifficulty, start=1)}
    SORT_FIELDS = ("title", "difficulty", "category")
    SORT_ORDERS = ("asc", "desc")

    def __init__(self, data_path: str):
        self.data_path = data_path

    def load_catalog(self) -> List[Dict[str, Any]]:
        """
        Load the problem catalog, from cache when possible

        Raises:
            StorageFailure: catalog file missing or malformed
        """
        cached = cache_service.get(self.CATALOG_CACHE_KEY)
        if cached is not None:
            return cached

        try:
            with open(self.data_path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            logger.error(f"Failed to read problem catalog {self.data_path}: {str(e)}")
            raise StorageFailure("Problem catalog unavailable") from e
        except json.JSONDecodeError as e:
            logger.error(f"Problem catalog is not valid JSON: {str(e)}")
            raise StorageFailure("Problem catalog is malformed") from e

        problems = data.get("data") if isinstance(data, dict) else data
        if not isinstance(problems, list):
            raise StorageFailure("Problem catalog is malformed")

        cache_service.set(self.CATALOG_CACHE_KEY, problems, ttl=settings.PROBLEM_CATALOG_CACHE_TTL)
        logger.info(f"Loaded {len(problems)} problems from {self.data_path}")
        return problems

    def reload_catalog(self) -> List[Dict[str, Any]]:
        """Drop the cached catalog and read the file again"""
        cache_service.delete(self.CATALOG_CACHE_KEY)
        return self.load_catalog()

    def list_problems(
        self,
        db: Session,
        user_id: str,
        difficulty: Optional[str] = None,
        status: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "title",
        order: str = "asc",
    ) -> Dict[str, Any]:
        """
        Problems merged with the user's status, filtered and sorted

        Stats are computed over the merged list before filtering.
        """
        if sort_by not in self.SORT_FIELDS:
            raise InvalidInput(f"Cannot sort by '{sort_by}'")
        if order not in self.SORT_ORDERS:
            raise InvalidInput(f"Sort order must be one of {', '.join(self.SORT_ORDERS)}")
        if status is not None and status not in {s.value for s in ProblemStatus}:
            raise InvalidInput(f"Invalid problem status '{status}'")

        statuses = {s.problem_id: s for s in self.get_statuses(db, user_id)}
        merged = self.merge_statuses(self.load_catalog(), statuses)

        filtered = self.filter_problems(merged, difficulty, status, category, search)

        return {
            "problems": self.sort_problems(filtered, sort_by, order),
            "stats": self.compute_stats(merged),
        }

    def list_category(self, category: str) -> List[Dict[str, Any]]:
        """
        Problems of one category

        Raises:
            NotFound: no problem in that category
        """
        wanted = category.lower()
        problems = [p for p in self.load_catalog() if str(p.get("category", "")).lower() == wanted]
        if not problems:
            raise NotFound(f"Category '{category}' not found")
        return problems

    @staticmethod
    def merge_statuses(
        problems: List[Dict[str, Any]],
        statuses: Dict[str, UserProblemStatus]
    ) -> List[Dict[str, Any]]:
        merged = []
        for problem in problems:
            record = statuses.get(str(problem["id"]))
            merged.append({
                **problem,
                "id": str(problem["id"]),
                "status": record.status if record else ProblemStatus.UNSOLVED.value,
                "favorite": record.favorite if record else False,
            })
        return merged

    @staticmethod
    def filter_problems(
        problems: List[Dict[str, Any]],
        difficulty: Optional[str] = None,
        status: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """All given filters must match; search looks in title and description"""
        needle = search.lower() if search else None

        def matches(problem: Dict[str, Any]) -> bool:
            if difficulty and problem.get("difficulty") != difficulty:
                return False
            if status and problem.get("status") != status:
                return False
            if category and problem.get("category") != category:
                return False
            if needle:
                haystack = f"{problem.get('title', '')}\n{problem.get('description', '')}".lower()
                if needle not in haystack:
                    return False
            return True

        return [p for p in problems if matches(p)]

    @classmethod
    def sort_problems(
        cls,
        problems: List[Dict[str, Any]],
        sort_by: str = "title",
        order: str = "asc"
    ) -> List[Dict[str, Any]]:
        if sort_by == "difficulty":
            key = lambda p: cls.DIFFICULTY_ORDER.get(p.get("difficulty"), len(cls.DIFFICULTY_ORDER) + 1)
        else:
            key = lambda p: str(p.get(sort_by, "")).lower()
        return sorted(problems, key=key, reverse=(order == "desc"))

    @staticmethod
    def compute_stats(problems: List[Dict[str, Any]]) -> Dict[str, int]:
        counts = {s.value: 0 for s in ProblemStatus}
        for problem in problems:
            counts[problem["status"]] = counts.get(problem["status"], 0) + 1
        return {
            "total": len(problems),
            "solved": counts[ProblemStatus.SOLVED.value],
            "attempted": counts[ProblemStatus.ATTEMPTED.value],
            "unsolved": counts[ProblemStatus.UNSOLVED.value],
        }

    def get_statuses(self, db: Session, user_id: str) -> List[UserProblemStatus]:
        with storage_errors(db, "fetch problem statuses"):
            return db.query(UserProblemStatus).filter(UserProblemStatus.user_id == user_id).all()

    def set_status(
        self,
        db: Session,
        user_id: str,
        problem_id: str,
        status: Optional[str] = None,
        favorite: Optional[bool] = None,
        now: Optional[datetime] = None,
    ) -> UserProblemStatus:
        """
        Upsert a user's status and/or favorite flag for a problem

        Raises:
            InvalidInput: empty problem id or unknown status
        """
        problem_id = (problem_id or "").strip()
        if not problem_id:
            raise InvalidInput("problem_id is required")
        if status is not None:
            try:
                status = ProblemStatus(status).value
            except ValueError:
                raise InvalidInput(f"Invalid problem status '{status}'") from None

        with storage_errors(db, "update problem status"):
            record = self._find(db, user_id, problem_id)
            if not record:
                record = UserProblemStatus(
                    user_id=user_id,
                    problem_id=problem_id,
                    status=ProblemStatus.UNSOLVED.value,
                    favorite=False,
                )
                db.add(record)
                try:
                    db.flush()
                except IntegrityError:
                    # Lost an insert race; update the winner's row instead
                    db.rollback()
                    record = self._find(db, user_id, problem_id)

            if status is not None:
                record.status = status
            if favorite is not None:
                record.favorite = favorite
            record.updated_at = now or datetime.now()

            db.commit()
            db.refresh(record)

        logger.info(
            f"Problem status updated: user={user_id}, problem={problem_id}, "
            f"status={record.status}, favorite={record.favorite}"
        )
        return record

    @staticmethod
    def _find(db: Session, user_id: str, problem_id: str) -> Optional[UserProblemStatus]:
        return (
            db.query(UserProblemStatus)
            .filter(
                UserProblemStatus.user_id == user_id,
                UserProblemStatus.problem_id == problem_id,
            )
            .first()
        )


# Global instance
problem_service = ProblemService(settings.PROBLEMS_DATA_PATH)
