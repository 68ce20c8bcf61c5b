"""
Shared test fixtures and utilities for the Diet Planner test suite.

This module contains the test client, a database session fixture backed by
the in-memory SQLite engine, and factories for users and plans that are
reused across multiple test files.
"""

import uuid
from datetime import datetime
from typing import Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from domain.enums import ActivityLevel, Gender, Goal
from domain.mappers import PlanMapper, encode_list
from domain.models import Base, DietPlan, SessionLocal, User, engine
from main import app
from services.auth_service import create_access_token
from services.fallback_plans import create_fallback_diet_plan
from services.security import hash_password, login_rate_limiter

# Create TestClient without running the lifespan; tables come from db_session
client = TestClient(app)

STRONG_PASSWORD = "Sunny-Day-42!"
WEEK_START = datetime(2024, 1, 1)


# Helper function to generate unique emails
def unique_email(prefix: str = "test") -> str:
    """Generate unique email address using UUID to avoid conflicts"""
    return f"{prefix}-{uuid.uuid4()}@example.com"


# Realistic default user profiles
REALISTIC_USERS = {
    "default": {
        "name": "Sarah Martinez",
        "email_prefix": "sarah.martinez",
        "age": 34,
        "weight": 64.0,
        "height": 168.0,
        "gender": Gender.FEMALE,
        "goal": Goal.WEIGHT_LOSS,
        "activity_level": ActivityLevel.LIGHTLY_ACTIVE,
        "preferences": ["mediterranean"],
    },
    "athlete": {
        "name": "Michael Chen",
        "email_prefix": "michael.chen",
        "age": 27,
        "weight": 78.0,
        "height": 181.0,
        "gender": Gender.MALE,
        "goal": Goal.MUSCLE_GAIN,
        "activity_level": ActivityLevel.VERY_ACTIVE,
        "preferences": ["high-protein"],
    },
    "vegetarian": {
        "name": "Raj Patel",
        "email_prefix": "raj.patel",
        "age": 41,
        "weight": 72.0,
        "height": 174.0,
        "gender": Gender.MALE,
        "goal": Goal.MAINTENANCE,
        "activity_level": ActivityLevel.MODERATELY_ACTIVE,
        "preferences": ["vegetarian"],
    },
}


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """
    Fresh schema per test on the shared in-memory engine.

    The API resolves sessions from the same engine, so rows committed here are
    visible to requests made with ``client`` and vice versa.

    Yields:
        Session: SQLAlchemy database session
    """
    Base.metadata.create_all(bind=engine)
    login_rate_limiter.reset()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


def make_user(db: Session, profile_type: str = "default", email: Optional[str] = None, **overrides) -> User:
    """
    Persist a user with a realistic profile.

    Args:
        db: session from the ``db_session`` fixture
        profile_type: key of REALISTIC_USERS
        email: defaults to a unique address derived from the profile
        overrides: any User column, e.g. ``email_verified=True``

    Returns:
        User: committed ORM instance; the password is STRONG_PASSWORD
    """
    profile = dict(REALISTIC_USERS.get(profile_type, REALISTIC_USERS["default"]))
    email_prefix = profile.pop("email_prefix")
    preferences = overrides.pop("preferences", profile.pop("preferences"))

    fields = {
        **profile,
        "email": email or unique_email(email_prefix),
        "password": hash_password(STRONG_PASSWORD),
        "nationality": "Spanish",
        "preferences": encode_list(preferences),
        "email_verified": False,
        **overrides,
    }
    user = User(**fields)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_plan(db: Session, user: User, name: str = "Weekly Plan", is_active: bool = True, meals=None) -> DietPlan:
    """Persist a plan; defaults to the 28 fallback meals"""
    if meals is None:
        meals = create_fallback_diet_plan()["meals"]
    plan = DietPlan(
        user_id=user.id,
        name=name,
        description="Balanced week",
        week_start=WEEK_START,
        week_end=datetime(2024, 1, 7),
        is_active=is_active,
    )
    plan.meals = [PlanMapper.meal_from_data(meal) for meal in meals]
    db.add(plan)
    db.commit()
    db.refresh(plan)
    return plan


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


def graphql(query: str, variables: Optional[dict] = None, headers: Optional[dict] = None) -> dict:
    """POST a GraphQL operation and return the decoded body"""
    response = client.post(
        "/graphql",
        json={"query": query, "variables": variables or {}},
        headers=headers or {},
    )
    assert response.status_code == 200, response.text
    return response.json()


def error_codes(body: dict) -> list:
    return [error.get("extensions", {}).get("code") for error in body.get("errors") or []]


def error_messages(body: dict) -> list:
    return [error["message"] for error in body.get("errors") or []]
