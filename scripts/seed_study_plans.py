"""
Seed the study plan catalog

Usage: python scripts/seed_study_plans.py [path/to/study_plans.json]
"""
import sys
import logging

from dsalytics.config import settings
from dsalytics.database import SessionLocal, init_db
from dsalytics.services.study_plan_service import study_plan_service

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def main():
    path = sys.argv[1] if len(sys.argv) > 1 else settings.STUDY_PLANS_SEED_PATH

    init_db()
    db = SessionLocal()
    try:
        created = study_plan_service.seed_from_file(db, path)
    finally:
        db.close()

    logger.info(f"Study plans seeded: {created} new")


if __name__ == "__main__":
    main()
