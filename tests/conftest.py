"""
Shared fixtures

Environment is configured before the application modules are imported so
that settings, the engine and the global services pick it up.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["CACHE_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["AUTH_MODE"] = "dev"
os.environ["ENFORCE_SEQUENTIAL_UNLOCK"] = "true"
os.environ["JWT_SECRET"] = "test-secret-with-enough-length-for-hs256"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import dsalytics.models  # noqa: F401
from dsalytics.database import Base, SessionLocal, engine
from dsalytics.main import app
from dsalytics.services.study_plan_service import study_plan_service

DEV_USER = "fake-user-id"


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Fresh in-memory schema per test"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_plan(db: Session):
    """Create a catalog plan with n topics"""

    def _make(n_topics: int = 4, title: str = "DSA with Python"):
        return study_plan_service.create_plan(
            db,
            title=title,
            topics=[{"title": f"Topic {i + 1}", "duration": "1 week"} for i in range(n_topics)],
            category="dsa",
        )

    return _make
