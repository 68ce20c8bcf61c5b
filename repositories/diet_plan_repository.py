"""
Diet plan and meal repositories
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from domain.enums import DayOfWeek
from domain.models import DietPlan, Meal
from repositories.base import BaseRepository


class DietPlanRepository(BaseRepository[DietPlan]):
    """Repository for diet plans"""

    def __init__(self, db: Session):
        super().__init__(db, DietPlan)

    def get_with_meals(self, plan_id: UUID) -> Optional[DietPlan]:
        return (
            self.db.query(DietPlan)
            .options(selectinload(DietPlan.meals), selectinload(DietPlan.user))
            .filter(DietPlan.id == plan_id)
            .first()
        )

    def get_owned(self, plan_id: UUID, user_id: UUID) -> Optional[DietPlan]:
        """Return the plan only when it belongs to ``user_id``"""
        plan = self.get_with_meals(plan_id)
        if plan is None or plan.user_id != user_id:
            return None
        return plan

    def list_for_user(self, user_id: UUID) -> List[DietPlan]:
        """All plans of a user, newest first"""
        return (
            self.db.query(DietPlan)
            .options(selectinload(DietPlan.meals))
            .filter(DietPlan.user_id == user_id)
            .order_by(DietPlan.created_at.desc())
            .all()
        )

    def get_active(self, user_id: UUID) -> Optional[DietPlan]:
        return (
            self.db.query(DietPlan)
            .options(selectinload(DietPlan.meals))
            .filter(DietPlan.user_id == user_id, DietPlan.is_active.is_(True))
            .order_by(DietPlan.created_at.desc())
            .first()
        )

    def deactivate_all(self, user_id: UUID) -> int:
        """Clear the active flag on every plan of a user (flush only)"""
        count = (
            self.db.query(DietPlan)
            .filter(DietPlan.user_id == user_id, DietPlan.is_active.is_(True))
            .update({DietPlan.is_active: False}, synchronize_session="fetch")
        )
        self.db.flush()
        return count


class MealRepository(BaseRepository[Meal]):
    """Repository for meals"""

    def __init__(self, db: Session):
        super().__init__(db, Meal)

    def get_with_plan(self, meal_id: UUID) -> Optional[Meal]:
        return (
            self.db.query(Meal)
            .options(selectinload(Meal.diet_plan))
            .filter(Meal.id == meal_id)
            .first()
        )

    def get_owned(self, meal_id: UUID, user_id: UUID) -> Optional[Meal]:
        """Return the meal only when its plan belongs to ``user_id``"""
        meal = self.get_with_plan(meal_id)
        if meal is None or meal.diet_plan.user_id != user_id:
            return None
        return meal

    def list_by_day(self, plan_id: UUID, day: DayOfWeek) -> List[Meal]:
        return (
            self.db.query(Meal)
            .filter(Meal.diet_plan_id == plan_id, Meal.day == day)
            .all()
        )
