#!/usr/bin/env python3
"""
Seed the database with a demo account and a sample diet plan.

The demo user is created only once; every run adds another copy of the
sample plan and makes it the active one.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.enums import ActivityLevel, Gender, Goal
from domain.mappers import PlanMapper, encode_list
from domain.models import DietPlan, SessionLocal, User, init_database
from repositories import DietPlanRepository, UserRepository
from services.security import hash_password

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("seed")

DEMO_EMAIL = "test@example.com"
DEMO_PASSWORD = "password123"

SAMPLE_MEALS = [
    {
        "day": "MONDAY",
        "mealType": "BREAKFAST",
        "name": "Oatmeal with Berries",
        "description": "Healthy oatmeal with fresh berries and nuts",
        "calories": 350,
        "protein": 12.0,
        "carbs": 55.0,
        "fat": 8.0,
        "fiber": 8.0,
        "ingredients": ["oats", "blueberries", "almonds", "honey"],
        "instructions": "Cook oats, add berries and nuts, drizzle with honey",
        "prepTime": 5,
        "cookTime": 10,
        "servings": 1,
    },
    {
        "day": "MONDAY",
        "mealType": "LUNCH",
        "name": "Grilled Chicken Salad",
        "description": "Fresh salad with grilled chicken breast",
        "calories": 450,
        "protein": 35.0,
        "carbs": 15.0,
        "fat": 25.0,
        "fiber": 6.0,
        "ingredients": ["chicken breast", "mixed greens", "tomatoes", "cucumber", "olive oil"],
        "instructions": "Grill chicken, mix with fresh vegetables and dressing",
        "prepTime": 15,
        "cookTime": 15,
        "servings": 1,
    },
]


def seed_user(users: UserRepository) -> User:
    user = users.get_by_email(DEMO_EMAIL)
    if user:
        logger.info(f"✓ Demo user already exists: {user.email} ({user.id})")
        return user

    user = users.create_user(
        User(
            email=DEMO_EMAIL,
            name="Test User",
            password=hash_password(DEMO_PASSWORD),
            age=25,
            weight=70.0,
            height=175.0,
            gender=Gender.MALE,
            nationality="US",
            goal=Goal.MAINTENANCE,
            activity_level=ActivityLevel.MODERATELY_ACTIVE,
            preferences=encode_list(["vegetarian", "low-carb"]),
            email_verified=True,
        )
    )
    logger.info(f"✓ Created demo user: {user.email} ({user.id})")
    return user


def seed_plan(plans: DietPlanRepository, user: User) -> DietPlan:
    plans.deactivate_all(user.id)
    plan = DietPlan(
        user_id=user.id,
        name="Weekly Balanced Diet",
        description="A balanced diet plan for maintenance",
        week_start=datetime(2024, 1, 1),
        week_end=datetime(2024, 1, 7),
        is_active=True,
        meals=[PlanMapper.meal_from_data(meal) for meal in SAMPLE_MEALS],
    )
    plans.db.add(plan)
    plans.db.commit()
    plans.db.refresh(plan)
    logger.info(f"✓ Created diet plan '{plan.name}' with {len(plan.meals)} meals ({plan.id})")
    return plan


def main() -> int:
    logger.info("Starting seed...")
    init_database()

    db = SessionLocal()
    try:
        user = seed_user(UserRepository(db))
        seed_plan(DietPlanRepository(db), user)
    except Exception as e:
        db.rollback()
        logger.exception(f"✗ Seed failed: {e}")
        return 1
    finally:
        db.close()

    logger.info(f"Seed complete. Sign in as {DEMO_EMAIL} / {DEMO_PASSWORD}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
