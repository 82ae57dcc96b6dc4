"""
Shared API dependencies
"""
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from dsalytics.database import get_db
from dsalytics.schemas.auth import Principal
from dsalytics.services.auth_service import auth_service


def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db)
) -> Principal:
    """Resolve the caller through the configured authentication backend"""
    principal = auth_service.authenticate(db, authorization)
    request.state.user_id = principal.id
    return principal
