"""
GraphQL object, input and enum types.

Object types wrap the ORM instance they were built from so that nested
fields (a user's plans, a plan's meals) are only loaded when queried.
"""

import dataclasses
from datetime import datetime
from typing import List, Optional

import strawberry

from domain import enums
from domain.mappers import decode_list, sort_meals
from domain.models import DietPlan, Meal, User

Gender = strawberry.enum(enums.Gender)
Goal = strawberry.enum(enums.Goal)
ActivityLevel = strawberry.enum(enums.ActivityLevel)
DayOfWeek = strawberry.enum(enums.DayOfWeek)
MealType = strawberry.enum(enums.MealType)
FeedbackCategory = strawberry.enum(enums.FeedbackCategory)


# ============================================================================
# Object types
# ============================================================================


@strawberry.type(name="User")
class UserNode:
    model: strawberry.Private[User]
    id: strawberry.ID
    email: str
    name: str
    age: Optional[int]
    weight: Optional[float]
    height: Optional[float]
    gender: Optional[Gender]
    nationality: Optional[str]
    goal: Optional[Goal]
    activity_level: Optional[ActivityLevel]
    preferences: List[str]
    email_verified: bool
    created_at: datetime
    updated_at: datetime

    @strawberry.field
    def diet_plans(self) -> List["DietPlanNode"]:
        return [DietPlanNode.from_model(plan) for plan in self.model.diet_plans]

    @classmethod
    def from_model(cls, user: User) -> "UserNode":
        return cls(
            model=user,
            id=strawberry.ID(str(user.id)),
            email=user.email,
            name=user.name,
            age=user.age,
            weight=user.weight,
            height=user.height,
            gender=user.gender,
            nationality=user.nationality,
            goal=user.goal,
            activity_level=user.activity_level,
            preferences=decode_list(user.preferences),
            email_verified=bool(user.email_verified),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


@strawberry.type(name="DietPlan")
class DietPlanNode:
    model: strawberry.Private[DietPlan]
    id: strawberry.ID
    user_id: str
    name: str
    description: Optional[str]
    week_start: datetime
    week_end: datetime
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @strawberry.field
    def user(self) -> UserNode:
        return UserNode.from_model(self.model.user)

    @strawberry.field
    def meals(self) -> List["MealNode"]:
        return [MealNode.from_model(meal) for meal in sort_meals(self.model.meals)]

    @classmethod
    def from_model(cls, plan: DietPlan) -> "DietPlanNode":
        return cls(
            model=plan,
            id=strawberry.ID(str(plan.id)),
            user_id=str(plan.user_id),
            name=plan.name,
            description=plan.description,
            week_start=plan.week_start,
            week_end=plan.week_end,
            is_active=bool(plan.is_active),
            created_at=plan.created_at,
            updated_at=plan.updated_at,
        )


@strawberry.type(name="Meal")
class MealNode:
    model: strawberry.Private[Meal]
    id: strawberry.ID
    diet_plan_id: str
    day: DayOfWeek
    meal_type: MealType
    name: str
    description: Optional[str]
    calories: Optional[int]
    protein: Optional[float]
    carbs: Optional[float]
    fat: Optional[float]
    fiber: Optional[float]
    ingredients: List[str]
    instructions: Optional[str]
    prep_time: Optional[int]
    cook_time: Optional[int]
    servings: Optional[int]

    @strawberry.field
    def diet_plan(self) -> DietPlanNode:
        return DietPlanNode.from_model(self.model.diet_plan)

    @classmethod
    def from_model(cls, meal: Meal) -> "MealNode":
        return cls(
            model=meal,
            id=strawberry.ID(str(meal.id)),
            diet_plan_id=str(meal.diet_plan_id),
            day=meal.day,
            meal_type=meal.meal_type,
            name=meal.name,
            description=meal.description,
            calories=meal.calories,
            protein=meal.protein,
            carbs=meal.carbs,
            fat=meal.fat,
            fiber=meal.fiber,
            ingredients=decode_list(meal.ingredients),
            instructions=meal.instructions,
            prep_time=meal.prep_time,
            cook_time=meal.cook_time,
            servings=meal.servings,
        )


@strawberry.type
class AuthPayload:
    token: str
    user: UserNode


@strawberry.type
class DietPlanGenerationResult:
    success: bool
    diet_plan: Optional[DietPlanNode] = None
    error: Optional[str] = None


# ============================================================================
# Inputs
# ============================================================================
# Optional input fields default to UNSET so resolvers can tell an omitted
# field from an explicit null.


@strawberry.input
class UserRegistrationInput:
    email: str
    password: str
    name: str
    age: Optional[int] = strawberry.UNSET
    weight: Optional[float] = strawberry.UNSET
    height: Optional[float] = strawberry.UNSET
    gender: Optional[Gender] = strawberry.UNSET
    nationality: Optional[str] = strawberry.UNSET
    goal: Optional[Goal] = strawberry.UNSET
    activity_level: Optional[ActivityLevel] = strawberry.UNSET
    preferences: Optional[List[str]] = strawberry.UNSET


@strawberry.input
class UserUpdateInput:
    name: Optional[str] = strawberry.UNSET
    age: Optional[int] = strawberry.UNSET
    weight: Optional[float] = strawberry.UNSET
    height: Optional[float] = strawberry.UNSET
    gender: Optional[Gender] = strawberry.UNSET
    nationality: Optional[str] = strawberry.UNSET
    goal: Optional[Goal] = strawberry.UNSET
    activity_level: Optional[ActivityLevel] = strawberry.UNSET
    preferences: Optional[List[str]] = strawberry.UNSET


@strawberry.input
class DietPlanInput:
    name: str
    week_start: datetime
    description: Optional[str] = strawberry.UNSET
    preferences: Optional[List[str]] = strawberry.UNSET
    custom_requirements: Optional[str] = strawberry.UNSET


@strawberry.input
class MealInput:
    day: DayOfWeek
    meal_type: MealType
    name: str
    ingredients: List[str]
    description: Optional[str] = strawberry.UNSET
    calories: Optional[int] = strawberry.UNSET
    protein: Optional[float] = strawberry.UNSET
    carbs: Optional[float] = strawberry.UNSET
    fat: Optional[float] = strawberry.UNSET
    fiber: Optional[float] = strawberry.UNSET
    instructions: Optional[str] = strawberry.UNSET
    prep_time: Optional[int] = strawberry.UNSET
    cook_time: Optional[int] = strawberry.UNSET
    servings: Optional[int] = strawberry.UNSET


@strawberry.input
class SaveDietPlanInput:
    name: str
    week_start: datetime
    meals: List[MealInput]
    description: Optional[str] = strawberry.UNSET


@strawberry.input
class MealUpdateInput:
    id: strawberry.ID
    name: Optional[str] = strawberry.UNSET
    description: Optional[str] = strawberry.UNSET
    calories: Optional[int] = strawberry.UNSET
    protein: Optional[float] = strawberry.UNSET
    carbs: Optional[float] = strawberry.UNSET
    fat: Optional[float] = strawberry.UNSET
    fiber: Optional[float] = strawberry.UNSET
    ingredients: Optional[List[str]] = strawberry.UNSET
    instructions: Optional[str] = strawberry.UNSET
    prep_time: Optional[int] = strawberry.UNSET
    cook_time: Optional[int] = strawberry.UNSET
    servings: Optional[int] = strawberry.UNSET


@strawberry.input
class FeedbackInput:
    name: str
    email: str
    subject: str
    message: str
    category: FeedbackCategory = enums.FeedbackCategory.GENERAL


def provided_fields(value, drop_none: bool = False) -> dict:
    """Fields of an input object that the caller actually sent"""
    fields = {}
    for key, field_value in vars(value).items():
        if field_value is strawberry.UNSET or (drop_none and field_value is None):
            continue
        if isinstance(field_value, list):
            field_value = [
                provided_fields(item, drop_none) if dataclasses.is_dataclass(item) else item
                for item in field_value
            ]
        fields[key] = field_value
    return fields
