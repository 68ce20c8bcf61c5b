"""Services package - Business logic layer"""

from services.profile_service import ProfileService
from services.auth_service import AuthService
from services.diet_plan_service import DietPlanService
from services.feedback_service import FeedbackService
from services.ai_service import AIService, ai_service

# Note: csv_service, pdf_service, security and fallback_plans contain utility functions, not classes

__all__ = [
    "ProfileService",
    "AuthService",
    "DietPlanService",
    "FeedbackService",
    "AIService",
    "ai_service",
]
