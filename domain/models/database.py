"""
Database configuration and session management.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from app.config import settings

logger = logging.getLogger("dietplanner.database")

# Create SQLAlchemy Base
Base = declarative_base()


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, matching the naive DateTime columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _engine_options(url: str) -> dict:
    options = {"echo": settings.db_echo, "future": True}
    if url.startswith("sqlite"):
        # One shared connection so an in-memory database survives across sessions
        options["connect_args"] = {"check_same_thread": False}
        options["poolclass"] = StaticPool
    else:
        options["pool_pre_ping"] = True
    return options


# Create engine
engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

# Create session factory
SessionLocal = sessionmaker(bind=engine, autoflush=False, future=True)


def init_database():
    """Initialize database schema"""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")


def get_db_session():
    """Get database session (for FastAPI dependency injection)"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
