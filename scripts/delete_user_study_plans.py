"""
Delete every user study plan (administrative reset)

Usage: python scripts/delete_user_study_plans.py --yes
"""
import sys
import logging

from dsalytics.database import SessionLocal
from dsalytics.services.tracking_service import tracking_service

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def main():
    if "--yes" not in sys.argv:
        logger.error("Refusing to delete without --yes")
        sys.exit(1)

    db = SessionLocal()
    try:
        deleted = tracking_service.delete_all(db)
    finally:
        db.close()

    logger.info(f"Deleted {deleted} UserStudyPlan records")


if __name__ == "__main__":
    main()
