"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.plan_schemas import (
    GeneratedMeal,
    GeneratedPlanMeal,
    GeneratedDietPlan,
    DietPlanRequest,
    StreamGenerationRequest,
    MealData,
    SavePlanRequest,
    MealUpdate,
)
from domain.schemas.user_schemas import RegistrationData, ProfileUpdate
from domain.schemas.feedback_schemas import FeedbackCreate

__all__ = [
    # Generation schemas
    "GeneratedMeal",
    "GeneratedPlanMeal",
    "GeneratedDietPlan",
    # Plan schemas
    "DietPlanRequest",
    "StreamGenerationRequest",
    "MealData",
    "SavePlanRequest",
    "MealUpdate",
    # User schemas
    "RegistrationData",
    "ProfileUpdate",
    # Contact
    "FeedbackCreate",
]
