"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    init_database,
    get_db_session,
    utc_now,
)
from domain.models.user import User
from domain.models.diet_plan import DietPlan, Meal
from domain.models.feedback import Feedback

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "init_database",
    "get_db_session",
    "utc_now",
    # User models
    "User",
    # Plan models
    "DietPlan",
    "Meal",
    # Contact
    "Feedback",
]
