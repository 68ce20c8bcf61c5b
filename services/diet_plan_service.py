"""
Diet plan business logic: generation, saving, activation, meal edits and
exports. Every operation is scoped to the calling user; plans and meals of
other users are reported exactly like missing ones.
"""

import base64
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.exceptions import DietPlannerError, ForbiddenError, NotFoundError, ServiceValidationError
from domain.enums import DayOfWeek, GENERATION_MEAL_ORDER, STORAGE_MEAL_ORDER
from domain.mappers import PlanMapper, UserMapper, encode_list, sort_meals
from domain.models import DietPlan, Meal, User
from domain.schemas.plan_schemas import DietPlanRequest, MealUpdate, SavePlanRequest
from repositories import DietPlanRepository, MealRepository, UserRepository
from services.ai_service import ai_service
from services.csv_service import generate_diet_plan_csv
from services.fallback_plans import create_fallback_diet_plan
from services.pdf_service import generate_diet_plan_pdf
from services.security import sanitize_input

logger = logging.getLogger("dietplanner.plans")

PLAN_ACCESS_DENIED = "Diet plan not found or access denied"
MEAL_ACCESS_DENIED = "Meal not found or access denied"
GENERATION_FAILED = "Failed to generate diet plan. Please try again."
SAVE_FAILED = "Failed to save diet plan. Please try again."
REGENERATION_FAILED = "Failed to regenerate meal. Please try again."
PDF_FAILED = "Failed to generate PDF. Please try again."
CSV_FAILED = "Failed to generate CSV. Please try again."
DEFAULT_SAVED_DESCRIPTION = "Personalized diet plan"
WEEK_LENGTH = timedelta(days=6)


def parse_uuid(value, message: str) -> UUID:
    """Parse an ID argument; malformed IDs are reported like unknown ones"""
    try:
        return value if isinstance(value, UUID) else UUID(str(value))
    except (TypeError, ValueError):
        raise ForbiddenError(message)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def week_bounds(week_start: datetime):
    """(start, end) of a plan week; the end is six days after the start"""
    start = _naive_utc(week_start)
    return start, start + WEEK_LENGTH


class GenerationResult:
    """Outcome of generate/save: a plan or a user-facing error"""

    def __init__(self, success: bool, diet_plan: Optional[DietPlan] = None, error: Optional[str] = None):
        self.success = success
        self.diet_plan = diet_plan
        self.error = error


class DietPlanService:
    """Business logic for diet plans"""

    # ------------------------------------------------------------ lookups

    @staticmethod
    def get_owned_plan(db: Session, user_id: UUID, plan_id) -> DietPlan:
        plan = DietPlanRepository(db).get_owned(parse_uuid(plan_id, PLAN_ACCESS_DENIED), user_id)
        if not plan:
            raise ForbiddenError(PLAN_ACCESS_DENIED)
        return plan

    @staticmethod
    def get_owned_meal(db: Session, user_id: UUID, meal_id) -> Meal:
        meal = MealRepository(db).get_owned(parse_uuid(meal_id, MEAL_ACCESS_DENIED), user_id)
        if not meal:
            raise ForbiddenError(MEAL_ACCESS_DENIED)
        return meal

    @staticmethod
    def list_plans(db: Session, user_id: UUID) -> List[DietPlan]:
        return DietPlanRepository(db).list_for_user(user_id)

    @staticmethod
    def get_active_plan(db: Session, user_id: UUID) -> Optional[DietPlan]:
        return DietPlanRepository(db).get_active(user_id)

    @staticmethod
    def get_meals_by_day(db: Session, user_id: UUID, plan_id, day: DayOfWeek) -> List[Meal]:
        plan = DietPlanService.get_owned_plan(db, user_id, plan_id)
        meals = MealRepository(db).list_by_day(plan.id, DayOfWeek(day))
        return sort_meals(meals, STORAGE_MEAL_ORDER)

    # ------------------------------------------------------------ creation

    @staticmethod
    def _create_active_plan(
        db: Session, user_id: UUID, name: str, description: Optional[str], week_start: datetime, meals
    ) -> DietPlan:
        start, end = week_bounds(week_start)
        plan = DietPlan(
            user_id=user_id,
            name=sanitize_input(name),
            description=description,
            week_start=start,
            week_end=end,
            is_active=True,
        )
        plan.meals = [PlanMapper.meal_from_data(meal) for meal in meals]
        db.add(plan)
        db.commit()
        db.refresh(plan)
        return plan

    @staticmethod
    async def generate_plan(db: Session, user_id: UUID, request: DietPlanRequest) -> GenerationResult:
        """
        Generate a week with the language model and store it as the active plan.

        Generation problems fall back to a fixed plan; persistence problems
        are returned as an unsuccessful result rather than raised.
        """
        try:
            user = UserRepository(db).get_by_id(user_id)
            if not user:
                raise NotFoundError("User not found")

            DietPlanRepository(db).deactivate_all(user_id)

            try:
                generated = await ai_service.generate_diet_plan(user, request)
            except Exception as e:
                logger.error(f"ai_generation_failed user_id={user_id} error={e}; using fallback plan")
                generated = create_fallback_diet_plan()

            plan = DietPlanService._create_active_plan(
                db,
                user_id,
                request.name,
                request.description or generated["description"],
                request.week_start,
                generated["meals"],
            )
            logger.info(f"plan_generated user_id={user_id} plan_id={plan.id} meals={len(plan.meals)}")
            return GenerationResult(True, plan)

        except Exception as e:
            db.rollback()
            logger.exception(f"plan_generation_error user_id={user_id} error={e}")
            return GenerationResult(False, error=GENERATION_FAILED)

    @staticmethod
    def save_plan(db: Session, user_id: UUID, request: SavePlanRequest) -> GenerationResult:
        """Store client-supplied meals (e.g. from the streaming generator) as the active plan"""
        try:
            DietPlanRepository(db).deactivate_all(user_id)
            plan = DietPlanService._create_active_plan(
                db,
                user_id,
                request.name,
                request.description or DEFAULT_SAVED_DESCRIPTION,
                request.week_start,
                request.meals,
            )
            logger.info(f"plan_saved user_id={user_id} plan_id={plan.id} meals={len(plan.meals)}")
            return GenerationResult(True, plan)
        except Exception as e:
            db.rollback()
            logger.exception(f"plan_save_error user_id={user_id} error={e}")
            return GenerationResult(False, error=SAVE_FAILED)

    # ------------------------------------------------------------ updates

    @staticmethod
    def update_plan(db: Session, user_id: UUID, plan_id, request: DietPlanRequest) -> DietPlan:
        plan = DietPlanService.get_owned_plan(db, user_id, plan_id)
        start, end = week_bounds(request.week_start)
        plan.name = sanitize_input(request.name)
        plan.description = request.description
        plan.week_start = start
        plan.week_end = end
        DietPlanRepository(db).update(plan)
        logger.info(f"plan_updated user_id={user_id} plan_id={plan.id}")
        return plan

    @staticmethod
    def delete_plan(db: Session, user_id: UUID, plan_id) -> bool:
        plan = DietPlanService.get_owned_plan(db, user_id, plan_id)
        DietPlanRepository(db).delete(plan.id)
        logger.info(f"plan_deleted user_id={user_id} plan_id={plan_id}")
        return True

    @staticmethod
    def set_active_plan(db: Session, user_id: UUID, plan_id) -> DietPlan:
        plan = DietPlanService.get_owned_plan(db, user_id, plan_id)
        repo = DietPlanRepository(db)
        repo.deactivate_all(user_id)
        plan.is_active = True
        repo.update(plan)
        logger.info(f"plan_activated user_id={user_id} plan_id={plan.id}")
        return plan

    @staticmethod
    def update_meal(db: Session, user_id: UUID, update: MealUpdate) -> Meal:
        """Overwrite a meal's content; ingredients default to an empty list"""
        meal = DietPlanService.get_owned_meal(db, user_id, update.id)
        fields = update.model_dump(exclude={"id", "ingredients"}, exclude_unset=True)
        for key, value in fields.items():
            if key == "name" and not value:
                raise ServiceValidationError("Meal name cannot be empty")
            setattr(meal, key, value)
        meal.ingredients = encode_list(update.ingredients or [])
        MealRepository(db).update(meal)
        logger.info(f"meal_updated user_id={user_id} meal_id={meal.id}")
        return meal

    @staticmethod
    async def regenerate_meal(
        db: Session, user_id: UUID, meal_id, custom_requirements: Optional[str] = None
    ) -> Meal:
        meal = DietPlanService.get_owned_meal(db, user_id, meal_id)
        user = UserRepository(db).get_by_id(user_id)
        try:
            generated = await ai_service.regenerate_meal(
                user, PlanMapper.meal_to_dict(meal), custom_requirements
            )
        except Exception as e:
            logger.error(f"meal_regeneration_failed user_id={user_id} meal_id={meal.id} error={e}")
            raise ServiceValidationError(REGENERATION_FAILED, code="REGENERATION_FAILED")

        PlanMapper.apply_generated(meal, generated)
        MealRepository(db).update(meal)
        logger.info(f"meal_regenerated user_id={user_id} meal_id={meal.id}")
        return meal

    # ------------------------------------------------------------ exports

    @staticmethod
    def _export_payload(plan: DietPlan, meal_order) -> dict:
        return {
            "name": plan.name,
            "description": plan.description,
            "week_start": plan.week_start,
            "week_end": plan.week_end,
            "user": UserMapper.to_export(plan.user),
            "meals": [PlanMapper.meal_to_dict(m) for m in sort_meals(plan.meals, meal_order)],
        }

    @staticmethod
    def export_pdf(db: Session, user_id: UUID, plan_id) -> str:
        """Base64-encoded PDF of an owned plan"""
        plan = DietPlanService.get_owned_plan(db, user_id, plan_id)
        try:
            pdf_bytes = generate_diet_plan_pdf(DietPlanService._export_payload(plan, STORAGE_MEAL_ORDER))
        except Exception as e:
            logger.exception(f"plan_export_error format=pdf plan_id={plan.id} error={e}")
            raise DietPlannerError(PDF_FAILED, code="EXPORT_FAILED")
        logger.info(f"plan_exported format=pdf plan_id={plan.id} bytes={len(pdf_bytes)}")
        return base64.b64encode(pdf_bytes).decode("ascii")

    @staticmethod
    def export_csv(db: Session, user_id: UUID, plan_id) -> str:
        plan = DietPlanService.get_owned_plan(db, user_id, plan_id)
        try:
            csv_text = generate_diet_plan_csv(DietPlanService._export_payload(plan, GENERATION_MEAL_ORDER))
        except Exception as e:
            logger.exception(f"plan_export_error format=csv plan_id={plan.id} error={e}")
            raise DietPlannerError(CSV_FAILED, code="EXPORT_FAILED")
        logger.info(f"plan_exported format=csv plan_id={plan.id}")
        return csv_text
