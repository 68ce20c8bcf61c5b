"""
Domain mappers package.
Converts between ORM models and the JSON/DTO shapes used by services.
"""

from domain.mappers.plan_mapper import PlanMapper, decode_list, encode_list, sort_meals
from domain.mappers.user_mapper import UserMapper

__all__ = [
    "PlanMapper",
    "UserMapper",
    "decode_list",
    "encode_list",
    "sort_meals",
]
