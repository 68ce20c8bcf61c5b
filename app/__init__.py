"""
App package - settings and the error hierarchy shared by every layer.
"""

from app.config import settings
from app.exceptions import (
    DietPlannerError,
    ServiceValidationError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    RateLimitError,
)

__all__ = [
    "settings",
    "DietPlannerError",
    "ServiceValidationError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
]
