"""
Repository layer tests.

These exercise the data access classes directly against the in-memory
database:
- BaseRepository CRUD helpers
- UserRepository lookups and duplicate handling
- DietPlanRepository / MealRepository ownership scoping and activation
- FeedbackRepository ordering
"""

import uuid
from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import Session

from app.exceptions import ConflictError
from domain.enums import DayOfWeek, FeedbackCategory, MealType
from domain.models import Feedback, Meal, User, utc_now
from repositories import DietPlanRepository, FeedbackRepository, MealRepository, UserRepository
from test_fixtures import db_session, make_plan, make_user, unique_email


# =============================================================================
# USER REPOSITORY
# =============================================================================


def test_create_and_find_user(db_session: Session):
    """
    Verifies:
    - create_user persists and refreshes the row
    - get_by_email and get_by_id return the same user
    - preferences default to an empty JSON array
    """
    repo = UserRepository(db_session)
    email = unique_email("anna")
    before = utc_now()
    user = repo.create_user(User(email=email, name="Anna Kowalski", password="hashed"))

    assert user.id is not None
    assert user.created_at.tzinfo is None
    assert before - timedelta(seconds=1) <= user.created_at <= utc_now()
    assert user.preferences == "[]"
    assert user.email_verified is False
    assert repo.get_by_email(email).id == user.id
    assert repo.get_by_id(user.id).name == "Anna Kowalski"
    assert repo.get_by_email("nobody@example.com") is None


def test_duplicate_email_raises_conflict(db_session: Session):
    repo = UserRepository(db_session)
    email = unique_email("dup")
    repo.create_user(User(email=email, name="First", password="hashed"))

    with pytest.raises(ConflictError) as exc_info:
        repo.create_user(User(email=email, name="Second", password="hashed"))

    assert exc_info.value.code == "CONFLICT"
    # Session is usable after the rollback
    assert repo.get_by_email(email).name == "First"


def test_token_lookups(db_session: Session):
    user = make_user(
        db_session,
        verification_token="verify-abc",
        reset_token="reset-xyz",
        reset_token_expiry=utc_now() + timedelta(hours=1),
    )
    repo = UserRepository(db_session)

    assert repo.get_by_verification_token("verify-abc").id == user.id
    assert repo.get_by_reset_token("reset-xyz").id == user.id
    assert repo.get_by_verification_token("reset-xyz") is None
    assert repo.get_by_reset_token("unknown") is None


# =============================================================================
# DIET PLAN REPOSITORY
# =============================================================================


def test_get_owned_scopes_to_user(db_session: Session):
    """
    Verifies:
    - owner gets the plan with its meals
    - another user and an unknown id both get None
    """
    owner = make_user(db_session)
    stranger = make_user(db_session, "athlete")
    plan = make_plan(db_session, owner)
    repo = DietPlanRepository(db_session)

    owned = repo.get_owned(plan.id, owner.id)
    assert owned is not None
    assert len(owned.meals) == 28
    assert repo.get_owned(plan.id, stranger.id) is None
    assert repo.get_owned(uuid.uuid4(), owner.id) is None


def test_list_for_user_newest_first(db_session: Session):
    owner = make_user(db_session)
    other = make_user(db_session, "vegetarian")
    older = make_plan(db_session, owner, name="January", is_active=False, meals=[])
    newer = make_plan(db_session, owner, name="February", meals=[])
    make_plan(db_session, other, name="Not mine", meals=[])

    older.created_at = datetime(2024, 1, 1)
    newer.created_at = datetime(2024, 2, 1)
    db_session.commit()

    plans = DietPlanRepository(db_session).list_for_user(owner.id)
    assert [plan.name for plan in plans] == ["February", "January"]


def test_deactivate_all_and_get_active(db_session: Session):
    owner = make_user(db_session)
    first = make_plan(db_session, owner, name="First", meals=[])
    second = make_plan(db_session, owner, name="Second", meals=[])
    repo = DietPlanRepository(db_session)

    assert repo.deactivate_all(owner.id) == 2
    db_session.commit()
    assert repo.get_active(owner.id) is None

    second.is_active = True
    repo.update(second)
    db_session.refresh(first)

    assert repo.get_active(owner.id).id == second.id
    assert first.is_active is False


def test_delete_plan_removes_meals(db_session: Session):
    owner = make_user(db_session)
    plan = make_plan(db_session, owner)
    plan_id = plan.id

    assert DietPlanRepository(db_session).delete(plan_id) is True
    assert db_session.query(Meal).filter(Meal.diet_plan_id == plan_id).count() == 0
    assert DietPlanRepository(db_session).delete(plan_id) is False


# =============================================================================
# MEAL REPOSITORY
# =============================================================================


def test_meal_ownership_and_day_listing(db_session: Session):
    owner = make_user(db_session)
    stranger = make_user(db_session, "athlete")
    plan = make_plan(db_session, owner)
    repo = MealRepository(db_session)

    monday = repo.list_by_day(plan.id, DayOfWeek.MONDAY)
    assert len(monday) == 4
    assert {meal.meal_type for meal in monday} == set(MealType)

    meal = monday[0]
    assert repo.get_owned(meal.id, owner.id).id == meal.id
    assert repo.get_owned(meal.id, stranger.id) is None
    assert repo.get_owned(uuid.uuid4(), owner.id) is None


# =============================================================================
# FEEDBACK REPOSITORY
# =============================================================================


def test_feedback_recent_orders_and_limits(db_session: Session):
    repo = FeedbackRepository(db_session)
    for i, day in enumerate([3, 1, 2]):
        repo.create(
            Feedback(
                name=f"Visitor {i}",
                email="visitor@example.com",
                subject="Hello",
                message="Nice app",
                created_at=datetime(2024, 5, day),
            )
        )

    recent = repo.recent(limit=2)
    assert [item.created_at.day for item in recent] == [3, 2]
    assert recent[0].category == FeedbackCategory.GENERAL
    assert recent[0].user_id is None
