"""
Authentication API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from dsalytics.api.deps import get_current_user
from dsalytics.database import get_db
from dsalytics.schemas.auth import AuthResponse, LoginRequest, Principal, RegisterRequest
from dsalytics.services.auth_service import auth_service, create_access_token

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Register a user and return an access token"""
    principal = auth_service.register(db, request.name, request.email, request.password)
    return AuthResponse(
        message="User registered successfully",
        token=create_access_token(principal),
        user=principal
    )


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Exchange credentials for an access token"""
    principal = auth_service.login(db, request.email, request.password)
    logger.info(f"User logged in: {principal.id}")
    return AuthResponse(
        message="Login successful",
        token=create_access_token(principal),
        user=principal
    )


@router.get("/me", response_model=Principal)
def me(current_user: Principal = Depends(get_current_user)):
    """Return the authenticated principal"""
    return current_user
