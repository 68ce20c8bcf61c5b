"""
Diet plan domain mappers.
Handles transformation between ORM models, camelCase meal JSON and export rows.
"""

import json
from typing import Iterable, List, Mapping, Optional, Sequence, Union
from uuid import UUID

from domain.enums import DayOfWeek, MealType, DAYS_OF_WEEK, STORAGE_MEAL_ORDER
from domain.models import Meal
from domain.schemas.plan_schemas import MealData


def decode_list(raw) -> List[str]:
    """Decode a JSON array column, tolerating NULL and already-decoded lists"""
    if raw is None or raw == "":
        return []
    if isinstance(raw, list):
        return raw
    return list(json.loads(raw))


def encode_list(values: Optional[Iterable[str]]) -> str:
    return json.dumps(list(values or []))


def _enum_value(value) -> str:
    return value.value if hasattr(value, "value") else str(value)


def sort_meals(meals: Sequence, meal_order: Sequence[MealType] = STORAGE_MEAL_ORDER) -> list:
    """Order meals by calendar day, then by the given meal-type order.

    Works on ORM meals (``day``/``meal_type``) and camelCase dicts
    (``day``/``mealType``).
    """
    day_rank = {day.value: i for i, day in enumerate(DAYS_OF_WEEK)}
    type_rank = {meal_type.value: i for i, meal_type in enumerate(meal_order)}

    def key(meal):
        if isinstance(meal, Mapping):
            day, meal_type = meal.get("day"), meal.get("mealType")
        else:
            day, meal_type = meal.day, meal.meal_type
        return (
            day_rank.get(_enum_value(day), len(day_rank)),
            type_rank.get(_enum_value(meal_type), len(type_rank)),
        )

    return sorted(meals, key=key)


class PlanMapper:
    """Mapper for plan and meal transformations."""

    @staticmethod
    def meal_to_dict(meal: Meal) -> dict:
        """
        Convert a Meal ORM model to the camelCase meal JSON shape used by
        generation events, evaluators and exports.
        """
        return {
            "id": str(meal.id) if meal.id else None,
            "day": _enum_value(meal.day),
            "mealType": _enum_value(meal.meal_type),
            "name": meal.name,
            "description": meal.description,
            "calories": meal.calories,
            "protein": meal.protein,
            "carbs": meal.carbs,
            "fat": meal.fat,
            "fiber": meal.fiber,
            "ingredients": decode_list(meal.ingredients),
            "instructions": meal.instructions,
            "prepTime": meal.prep_time,
            "cookTime": meal.cook_time,
            "servings": meal.servings,
        }

    @staticmethod
    def meal_from_data(data: Union[MealData, Mapping], diet_plan_id: UUID = None) -> Meal:
        """
        Build a Meal ORM instance from client input or generated meal JSON.

        Args:
            data: MealData or a camelCase/snake_case mapping
            diet_plan_id: owning plan, optional when the meal is appended to
                ``DietPlan.meals``

        Returns:
            Unsaved Meal instance
        """
        if not isinstance(data, MealData):
            data = MealData.model_validate(dict(data))
        return Meal(
            diet_plan_id=diet_plan_id,
            day=DayOfWeek(data.day),
            meal_type=MealType(data.meal_type),
            name=data.name,
            description=data.description,
            calories=data.calories if data.calories is None else round(data.calories),
            protein=data.protein,
            carbs=data.carbs,
            fat=data.fat,
            fiber=data.fiber,
            ingredients=encode_list(data.ingredients),
            instructions=data.instructions,
            prep_time=data.prep_time,
            cook_time=data.cook_time,
            servings=data.servings,
        )

    @staticmethod
    def apply_generated(meal: Meal, generated: Mapping) -> Meal:
        """Overwrite a meal's content with a formatted generated meal (slot unchanged)"""
        meal.name = generated["name"]
        meal.description = generated["description"]
        meal.calories = generated["calories"]
        meal.protein = generated["protein"]
        meal.carbs = generated["carbs"]
        meal.fat = generated["fat"]
        meal.fiber = generated["fiber"]
        meal.ingredients = encode_list(generated["ingredients"])
        meal.instructions = generated["instructions"]
        meal.prep_time = generated["prepTime"]
        meal.cook_time = generated["cookTime"]
        meal.servings = generated["servings"]
        return meal
