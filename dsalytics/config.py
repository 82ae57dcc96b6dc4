"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


DATA_DIR = Path(__file__).resolve().parent / "data"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str

    # Gemini API
    GEMINI_API_KEY: str
    GEMINI_MODEL: str = "gemini-1.5-flash"

    # Redis
    REDIS_URL: str = "redis://redis:6379/0"
    CACHE_ENABLED: bool = True
    PROBLEM_CATALOG_CACHE_TTL: int = 3600  # 1 hour

    # Application
    APP_NAME: str = "DSAlytics"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://localhost:5173",
    ]

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000

    # Authentication: "dev" resolves every request to a fixed user, "jwt" verifies bearer tokens
    AUTH_MODE: str = "dev"
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24 * 7
    DEV_USER_ID: str = "fake-user-id"
    DEV_USER_NAME: str = "Any User"
    DEV_USER_EMAIL: str = "any@email.com"

    # Study plans
    ENFORCE_SEQUENTIAL_UNLOCK: bool = True
    STUDY_PLANS_SEED_PATH: str = str(DATA_DIR / "study_plans.json")
    SEED_ON_STARTUP: bool = False

    # Problems
    PROBLEMS_DATA_PATH: str = str(DATA_DIR / "problems.json")

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
