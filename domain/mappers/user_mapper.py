"""
User domain mappers.
Handles transformation between the User ORM model and the plain profile
dictionaries used in prompts and exports.
"""

from typing import Optional

from domain.models import User
from domain.mappers.plan_mapper import decode_list

NOT_SPECIFIED = "Not specified"


def _enum_value(value) -> Optional[str]:
    if value is None:
        return None
    return value.value if hasattr(value, "value") else str(value)


class UserMapper:
    """Mapper for user-related transformations."""

    @staticmethod
    def preferences(user: Optional[User]) -> list:
        if user is None:
            return []
        return decode_list(user.preferences)

    @staticmethod
    def to_prompt_profile(user: Optional[User], default_goal: str = "General health") -> dict:
        """
        Convert a user (or no user, for anonymous streaming) into prompt variables.

        Missing values are rendered as "Not specified" so the model never sees
        a bare ``None``.
        """
        if user is None:
            return {
                "age": NOT_SPECIFIED,
                "weight": NOT_SPECIFIED,
                "height": NOT_SPECIFIED,
                "gender": NOT_SPECIFIED,
                "nationality": NOT_SPECIFIED,
                "goal": default_goal,
                "activity_level": "Moderate",
                "user_preferences": "None",
            }
        return {
            "age": user.age or NOT_SPECIFIED,
            "weight": user.weight or NOT_SPECIFIED,
            "height": user.height or NOT_SPECIFIED,
            "gender": _enum_value(user.gender) or NOT_SPECIFIED,
            "nationality": user.nationality or NOT_SPECIFIED,
            "goal": _enum_value(user.goal) or default_goal,
            "activity_level": _enum_value(user.activity_level) or "Moderate",
            "user_preferences": ", ".join(UserMapper.preferences(user)) or "None",
        }

    @staticmethod
    def to_export(user: User) -> dict:
        """Owner details shown in PDF and CSV exports"""
        return {
            "name": user.name,
            "email": user.email,
            "age": user.age,
            "weight": user.weight,
            "height": user.height,
            "goal": _enum_value(user.goal),
        }
