"""
API dependencies for dependency injection
"""

from typing import Generator, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from domain.models import User, get_db_session
from services.auth_service import user_from_token


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db session here
            pass
    """
    yield from get_db_session()


def bearer_token(request: Request) -> Optional[str]:
    """Token from an ``Authorization: Bearer <jwt>`` header, if any"""
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """Current user, or None for anonymous callers and bad tokens"""
    return user_from_token(db, bearer_token(request))
