"""
Authentication service
Pluggable backends resolving a request to a Principal
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt
from email_validator import EmailNotValidError, validate_email
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dsalytics.config import settings
from dsalytics.database import storage_errors
from dsalytics.exceptions import InvalidInput, Unauthenticated
from dsalytics.models import User
from dsalytics.schemas.auth import Principal

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def create_access_token(principal: Principal) -> str:
    expires = datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload = {
        "sub": principal.id,
        "email": principal.email,
        "name": principal.name,
        "role": principal.role,
        "exp": expires,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token expired") from None
    except jwt.InvalidTokenError:
        raise Unauthenticated("Invalid token") from None


def _normalize_email(email: str) -> str:
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise InvalidInput(f"Invalid email: {str(e)}") from None


def _bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise Unauthenticated("Authentication required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated("Authorization header must be 'Bearer <token>'")
    return token.strip()


class AuthBackend:
    """Strategy interface: resolve, register and log in principals"""

    def authenticate(self, db: Session, authorization: Optional[str]) -> Principal:
        raise NotImplementedError

    def register(
        self, db: Session, name: Optional[str], email: Optional[str], password: Optional[str]
    ) -> Principal:
        raise NotImplementedError

    def login(self, db: Session, email: Optional[str], password: Optional[str]) -> Principal:
        raise NotImplementedError

    def identify(self, authorization: Optional[str]) -> Optional[str]:
        """User id the request claims, without touching the database; None if unknown"""
        raise NotImplementedError


class DevAuthBackend(AuthBackend):
    """
    Development backend: every caller is the same fixed user

    Credentials are ignored and registration/login always succeed.
    """

    def _principal(self, name: Optional[str] = None, email: Optional[str] = None) -> Principal:
        return Principal(
            id=settings.DEV_USER_ID,
            name=name or settings.DEV_USER_NAME,
            email=email or settings.DEV_USER_EMAIL,
        )

    def authenticate(self, db, authorization):
        return self._principal()

    def register(self, db, name, email, password):
        return self._principal(name, email)

    def login(self, db, email, password):
        return self._principal(email=email)

    def identify(self, authorization):
        return settings.DEV_USER_ID


class JWTAuthBackend(AuthBackend):
    """Bearer JWT verification against stored users"""

    def authenticate(self, db, authorization):
        claims = decode_access_token(_bearer_token(authorization))

        user_id = claims.get("sub")
        if not user_id:
            raise Unauthenticated("Token has no subject")

        with storage_errors(db, "resolve user"):
            user = db.query(User).filter(User.id == user_id).first()

        if not user or not user.is_active:
            raise Unauthenticated("User not found or inactive")

        return self._to_principal(user)

    def register(self, db, name, email, password):
        if not name or not email or not password:
            raise InvalidInput("name, email and password are required")
        email = _normalize_email(email)

        user = User(name=name, email=email, password_hash=hash_password(password))

        with storage_errors(db, "register user"):
            if db.query(User).filter(User.email == email).first():
                raise InvalidInput("Email already registered")
            db.add(user)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise InvalidInput("Email already registered") from None
            db.refresh(user)

        logger.info(f"User registered: {user.id}")
        return self._to_principal(user)

    def login(self, db, email, password):
        if not email or not password:
            raise InvalidInput("email and password are required")
        email = _normalize_email(email)

        with storage_errors(db, "load user"):
            user = db.query(User).filter(User.email == email).first()

        if not user or not user.is_active or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login for {email}")
            raise Unauthenticated("Invalid credentials")

        return self._to_principal(user)

    def identify(self, authorization):
        try:
            return decode_access_token(_bearer_token(authorization)).get("sub")
        except Unauthenticated:
            return None

    @staticmethod
    def _to_principal(user: User) -> Principal:
        return Principal(id=user.id, name=user.name, email=user.email, role=user.role)


class AuthService:
    """Dispatch to the backend named by settings.AUTH_MODE"""

    def __init__(self):
        self.backends: Dict[str, AuthBackend] = {
            "dev": DevAuthBackend(),
            "jwt": JWTAuthBackend(),
        }

    @property
    def backend(self) -> AuthBackend:
        try:
            return self.backends[settings.AUTH_MODE]
        except KeyError:
            raise RuntimeError(f"Unknown AUTH_MODE '{settings.AUTH_MODE}'") from None

    def authenticate(self, db: Session, authorization: Optional[str]) -> Principal:
        return self.backend.authenticate(db, authorization)

    def register(self, db: Session, name, email, password) -> Principal:
        return self.backend.register(db, name, email, password)

    def login(self, db: Session, email, password) -> Principal:
        return self.backend.login(db, email, password)

    def identify(self, authorization: Optional[str]) -> Optional[str]:
        return self.backend.identify(authorization)


# Global instance
auth_service = AuthService()
