"""
Domain enums for the diet planner.
Member names and values are identical so the same token is used in the
database, the GraphQL schema and the JSON exchanged with the language model.
"""

import enum


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class Goal(str, enum.Enum):
    """Dietary goal types"""

    WEIGHT_LOSS = "WEIGHT_LOSS"
    WEIGHT_GAIN = "WEIGHT_GAIN"
    MUSCLE_GAIN = "MUSCLE_GAIN"
    MAINTENANCE = "MAINTENANCE"
    ATHLETIC_PERFORMANCE = "ATHLETIC_PERFORMANCE"


class ActivityLevel(str, enum.Enum):
    """Physical activity levels"""

    SEDENTARY = "SEDENTARY"
    LIGHTLY_ACTIVE = "LIGHTLY_ACTIVE"
    MODERATELY_ACTIVE = "MODERATELY_ACTIVE"
    VERY_ACTIVE = "VERY_ACTIVE"
    EXTREMELY_ACTIVE = "EXTREMELY_ACTIVE"


class DayOfWeek(str, enum.Enum):
    """Days in calendar order, Monday first"""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"


class MealType(str, enum.Enum):
    BREAKFAST = "BREAKFAST"
    LUNCH = "LUNCH"
    DINNER = "DINNER"
    SNACK = "SNACK"


class FeedbackCategory(str, enum.Enum):
    """Contact form categories"""

    GENERAL = "GENERAL"
    TECHNICAL = "TECHNICAL"
    FEEDBACK = "FEEDBACK"
    FEATURE_REQUEST = "FEATURE_REQUEST"
    BUG_REPORT = "BUG_REPORT"
    OTHER = "OTHER"


DAYS_OF_WEEK = list(DayOfWeek)

# Order used for generation prompts and CSV export
GENERATION_MEAL_ORDER = [
    MealType.BREAKFAST,
    MealType.LUNCH,
    MealType.SNACK,
    MealType.DINNER,
]

# Declaration order, used when listing a plan's meals and in the PDF
STORAGE_MEAL_ORDER = list(MealType)

MEALS_PER_DAY = len(MealType)
MEALS_PER_WEEK = len(DAYS_OF_WEEK) * MEALS_PER_DAY
