"""
Pydantic schemas for diet plans and meals.

Meals travel as camelCase JSON between the language model, the streaming
endpoint, the evaluators and the client, so every schema here accepts both the
camelCase alias and the snake_case field name.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.enums import DayOfWeek, MealType, MEALS_PER_WEEK


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Language model output
# ============================================================================


class GeneratedMeal(CamelModel):
    """A single meal as returned by the model, with accepted value ranges"""

    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=200)
    calories: float = Field(ge=50, le=2000)
    protein: float = Field(ge=0, le=200)
    carbs: float = Field(ge=0, le=300)
    fat: float = Field(ge=0, le=150)
    fiber: float = Field(ge=0, le=50)
    ingredients: List[str] = Field(min_length=1, max_length=15)
    instructions: str = Field(min_length=10, max_length=500)
    prep_time: float = Field(ge=0, le=120)
    cook_time: float = Field(ge=0, le=240)
    servings: float = Field(ge=1, le=8)

    def formatted(self) -> dict:
        """Round values the way they are stored and return camelCase JSON"""
        return {
            "name": self.name,
            "description": self.description,
            "calories": round(self.calories),
            "protein": round(self.protein, 1),
            "carbs": round(self.carbs, 1),
            "fat": round(self.fat, 1),
            "fiber": round(self.fiber, 1),
            "ingredients": list(self.ingredients),
            "instructions": self.instructions,
            "prepTime": round(self.prep_time),
            "cookTime": round(self.cook_time),
            "servings": round(self.servings),
        }


class GeneratedPlanMeal(GeneratedMeal):
    """A meal placed in a day/meal-type slot"""

    day: DayOfWeek
    meal_type: MealType

    def formatted(self) -> dict:
        return {
            "day": self.day.value,
            "mealType": self.meal_type.value,
            **super().formatted(),
        }


class GeneratedDietPlan(CamelModel):
    description: str = Field(min_length=10, max_length=200)
    meals: List[GeneratedPlanMeal] = Field(
        min_length=MEALS_PER_WEEK, max_length=MEALS_PER_WEEK
    )

    def formatted(self) -> dict:
        return {
            "description": self.description or "AI-generated personalized diet plan",
            "meals": [meal.formatted() for meal in self.meals],
        }


# ============================================================================
# Service inputs
# ============================================================================


class DietPlanRequest(CamelModel):
    """Parameters for generating a plan (GraphQL input and streaming body)"""

    name: str = Field(min_length=1)
    description: Optional[str] = None
    week_start: datetime
    preferences: List[str] = Field(default_factory=list)
    custom_requirements: Optional[str] = None


class StreamGenerationRequest(BaseModel):
    """Body of the streaming generation endpoint: {"input": {...}}"""

    input: DietPlanRequest


class MealData(CamelModel):
    """Meal supplied by the client when saving a plan"""

    day: DayOfWeek
    meal_type: MealType
    name: str
    description: Optional[str] = None
    calories: Optional[int] = None
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fat: Optional[float] = None
    fiber: Optional[float] = None
    ingredients: List[str] = Field(default_factory=list)
    instructions: Optional[str] = None
    prep_time: Optional[int] = None
    cook_time: Optional[int] = None
    servings: Optional[int] = None


class SavePlanRequest(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    week_start: datetime
    meals: List[MealData]


class MealUpdate(CamelModel):
    id: UUID
    name: Optional[str] = None
    description: Optional[str] = None
    calories: Optional[int] = None
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fat: Optional[float] = None
    fiber: Optional[float] = None
    ingredients: Optional[List[str]] = None
    instructions: Optional[str] = None
    prep_time: Optional[int] = None
    cook_time: Optional[int] = None
    servings: Optional[int] = None
