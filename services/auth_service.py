"""
Account lifecycle: registration, login, email verification and password reset.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from uuid import UUID

import jwt
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ConflictError, ServiceValidationError, UnauthorizedError
from domain.mappers import encode_list
from domain.models import User, utc_now
from domain.schemas.user_schemas import RegistrationData
from repositories import UserRepository
from services.email_service import email_service
from services.security import (
    hash_password,
    login_rate_limiter,
    normalize_email,
    sanitize_input,
    validate_email,
    validate_password_security,
    verify_password,
)

logger = logging.getLogger("dietplanner.auth")

INVALID_CREDENTIALS = "Invalid email or password"


# ============================================================================
# Tokens
# ============================================================================


def create_access_token(user: User) -> str:
    """Signed JWT carrying the user id and email, valid for ``jwt_expires_days``"""
    now = datetime.now(timezone.utc)
    payload = {
        "userId": str(user.id),
        "email": user.email,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expires_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[dict]:
    """Return the token claims, or None when the token is invalid or expired"""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        logger.debug("token_rejected error=%s", e)
        return None


def user_from_token(db: Session, token: Optional[str]) -> Optional[User]:
    """Resolve a bearer token to a user; any failure yields an anonymous caller"""
    if not token:
        return None
    claims = decode_access_token(token)
    if not claims or "userId" not in claims:
        return None
    try:
        user_id = UUID(str(claims["userId"]))
    except ValueError:
        return None
    return UserRepository(db).get_by_id(user_id)


def _new_token() -> str:
    return secrets.token_hex(settings.verification_token_bytes)


def _require_valid_password(password: str) -> None:
    is_valid, errors = validate_password_security(password)
    if not is_valid:
        raise ServiceValidationError(
            f"Password requirements not met: {', '.join(errors)}",
            details={"errors": errors},
        )


# ============================================================================
# Service
# ============================================================================


class AuthService:
    """Business logic for authentication flows"""

    @staticmethod
    def register(db: Session, data: RegistrationData) -> Tuple[str, User]:
        """
        Create an account and send the verification email.

        Returns:
            (token, user) so the client is signed in immediately
        """
        email = normalize_email(data.email)
        name = sanitize_input(data.name)

        if not validate_email(email):
            raise ServiceValidationError("Invalid email format")
        if not name:
            raise ServiceValidationError("Name is required")
        _require_valid_password(data.password)

        repo = UserRepository(db)
        if repo.get_by_email(email):
            raise ConflictError("User with this email already exists")

        user = User(
            email=email,
            name=name,
            password=hash_password(data.password),
            age=data.age,
            weight=data.weight,
            height=data.height,
            gender=data.gender,
            nationality=sanitize_input(data.nationality) if data.nationality else None,
            goal=data.goal,
            activity_level=data.activity_level,
            preferences=encode_list(sanitize_input(p) for p in data.preferences),
            email_verified=False,
            verification_token=_new_token(),
        )
        user = repo.create_user(user)
        logger.info(f"user_registered user_id={user.id}")

        email_service.dispatch(
            email_service.send_verification_email, user.email, user.name, user.verification_token
        )
        return create_access_token(user), user

    @staticmethod
    def login(db: Session, email: str, password: str) -> Tuple[str, User]:
        email = normalize_email(email)
        login_rate_limiter.hit(email)

        if not validate_email(email):
            raise UnauthorizedError(INVALID_CREDENTIALS)

        user = UserRepository(db).get_by_email(email)
        if not user or not verify_password(user.password, password):
            logger.info(f"login_failed email={email}")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        logger.info(f"login_succeeded user_id={user.id}")
        return create_access_token(user), user

    @staticmethod
    def verify_email(db: Session, token: str) -> Tuple[str, User]:
        repo = UserRepository(db)
        user = repo.get_by_verification_token(token) if token else None
        if not user:
            raise ServiceValidationError("Invalid or expired verification token")

        user.email_verified = True
        user.verification_token = None
        repo.update(user)
        logger.info(f"email_verified user_id={user.id}")
        return create_access_token(user), user

    @staticmethod
    def resend_verification(db: Session, email: str) -> bool:
        email = normalize_email(email)
        if not validate_email(email):
            raise ServiceValidationError("Invalid email format")

        repo = UserRepository(db)
        user = repo.get_by_email(email)
        if not user:
            # Same answer for unknown addresses
            return True
        if user.email_verified:
            raise ServiceValidationError("Email is already verified")

        user.verification_token = _new_token()
        repo.update(user)
        email_service.dispatch(
            email_service.send_verification_email, user.email, user.name, user.verification_token
        )
        return True

    @staticmethod
    def forgot_password(db: Session, email: str) -> bool:
        email = normalize_email(email)
        if not validate_email(email):
            raise ServiceValidationError("Invalid email format")

        repo = UserRepository(db)
        user = repo.get_by_email(email)
        if not user:
            return True

        user.reset_token = _new_token()
        user.reset_token_expiry = utc_now() + timedelta(seconds=settings.reset_token_ttl_sec)
        repo.update(user)
        logger.info(f"password_reset_requested user_id={user.id}")
        email_service.dispatch(
            email_service.send_password_reset_email, user.email, user.name, user.reset_token
        )
        return True

    @staticmethod
    def reset_password(db: Session, token: str, new_password: str) -> bool:
        _require_valid_password(new_password)

        repo = UserRepository(db)
        user = repo.get_by_reset_token(token) if token else None
        if not user or not user.reset_token_expiry:
            raise ServiceValidationError("Invalid or expired reset token")
        if user.reset_token_expiry < utc_now():
            raise ServiceValidationError("Reset token has expired")

        user.password = hash_password(new_password)
        user.reset_token = None
        user.reset_token_expiry = None
        repo.update(user)
        logger.info(f"password_reset user_id={user.id}")

        email_service.dispatch(
            email_service.send_password_changed_confirmation, user.email, user.name
        )
        return True
