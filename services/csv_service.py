"""
CSV export of a diet plan.

The output starts with a few free-text header lines describing the plan and
its owner, then a blank line, then one table row per meal.
"""

import csv
import io
from datetime import datetime
from typing import Optional

from domain.enums import DAYS_OF_WEEK, GENERATION_MEAL_ORDER

TABLE_HEADERS = [
    "Day",
    "Meal Type",
    "Meal Name",
    "Description",
    "Calories",
    "Protein (g)",
    "Carbs (g)",
    "Fat (g)",
    "Fiber (g)",
    "Prep Time (min)",
    "Cook Time (min)",
    "Servings",
    "Ingredients",
    "Instructions",
]

_DAY_INDEX = {day.value: i for i, day in enumerate(DAYS_OF_WEEK)}
_MEAL_TYPE_INDEX = {meal_type.value: i for i, meal_type in enumerate(GENERATION_MEAL_ORDER)}


def escape_csv(value: Optional[str]) -> str:
    """Quote a value containing a comma, quote or newline; quotes are doubled"""
    if not value:
        return ""
    if "," in value or "\n" in value or '"' in value:
        return '"' + value.replace('"', '""') + '"'
    return value


def format_number(value) -> str:
    """Render 25.0 as '25' and 12.5 as '12.5'; only missing values are blank"""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_short_date(value: datetime) -> str:
    """e.g. 'Jan 1, 2024'"""
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def _title(value: str) -> str:
    return value[:1] + value[1:].lower()


def _sort_key(meal: dict):
    return (
        _DAY_INDEX.get(meal.get("day"), len(_DAY_INDEX)),
        _MEAL_TYPE_INDEX.get(meal.get("mealType"), len(_MEAL_TYPE_INDEX)),
    )


def _header_lines(payload: dict) -> list:
    lines = [f"Diet Plan: {escape_csv(payload['name'])}"]
    if payload.get("description"):
        lines.append(f"Description: {escape_csv(payload['description'])}")
    lines.append(
        f"Week: {format_short_date(payload['week_start'])} - {format_short_date(payload['week_end'])}"
    )

    user = payload.get("user") or {}
    lines.append(f"User: {escape_csv(user.get('name'))} ({user.get('email', '')})")

    details = []
    if user.get("age"):
        details.append(f"Age: {format_number(user['age'])}")
    if user.get("weight"):
        details.append(f"Weight: {format_number(user['weight'])} kg")
    if user.get("height"):
        details.append(f"Height: {format_number(user['height'])} cm")
    if user.get("goal"):
        details.append(f"Goal: {user['goal']}")
    if details:
        lines.append(", ".join(details))

    lines.append("")
    return lines


def _meal_row(meal: dict) -> list:
    return [
        _title(meal["day"]),
        _title(meal["mealType"]),
        meal.get("name") or "",
        meal.get("description") or "",
        format_number(meal.get("calories")),
        format_number(meal.get("protein")),
        format_number(meal.get("carbs")),
        format_number(meal.get("fat")),
        format_number(meal.get("fiber")),
        format_number(meal.get("prepTime")),
        format_number(meal.get("cookTime")),
        format_number(meal.get("servings")),
        "; ".join(meal.get("ingredients") or []),
        meal.get("instructions") or "",
    ]


def generate_diet_plan_csv(payload: dict) -> str:
    """
    Build the CSV document for an exported plan.

    Args:
        payload: plan export dict with ``name``, ``description``,
            ``week_start``, ``week_end``, ``user`` and camelCase ``meals``

    Returns:
        CSV text, lines separated by ``\\n`` without a trailing newline
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(TABLE_HEADERS)
    for meal in sorted(payload.get("meals") or [], key=_sort_key):
        writer.writerow(_meal_row(meal))

    table = buffer.getvalue().rstrip("\n")
    return "\n".join(_header_lines(payload) + [table])
