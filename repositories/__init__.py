"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.user_repository import UserRepository
from repositories.diet_plan_repository import DietPlanRepository, MealRepository
from repositories.feedback_repository import FeedbackRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "DietPlanRepository",
    "MealRepository",
    "FeedbackRepository",
]
