"""
Deterministic evaluators for generated diet plans and regenerated meals.

Each evaluator takes plain JSON-like dicts (``outputs`` is
``{"description", "meals": [...]}`` for a plan, a single meal for
regeneration) and returns a LangSmith ``EvaluationResult``. Argument names
follow LangSmith's convention (``inputs``, ``outputs``, ``reference_outputs``)
so the functions can be passed straight to ``langsmith.evaluate``.
"""

from typing import List, Optional

from langsmith.evaluation import EvaluationResult

from domain.enums import DAYS_OF_WEEK, STORAGE_MEAL_ORDER

DAYS = [day.value for day in DAYS_OF_WEEK]
MEAL_TYPES = [meal_type.value for meal_type in STORAGE_MEAL_ORDER]

EXPECTED_MEAL_COUNT = 28
DEFAULT_MIN_CALORIES_PER_DAY = 1200
DEFAULT_MAX_CALORIES_PER_DAY = 2500
MIN_DAILY_PROTEIN = 50
MIN_UNIQUE_INGREDIENTS = 40
MIN_INSTRUCTION_LENGTH = 30
CALORIE_TOLERANCE = 50

VEGETARIAN_PREFERENCES = {"vegetarian", "vegan", "plant-based"}
MEAT_KEYWORDS = [
    "chicken",
    "beef",
    "pork",
    "lamb",
    "fish",
    "salmon",
    "tuna",
    "shrimp",
    "bacon",
    "turkey",
    "steak",
    "meat",
    "seafood",
]
REQUIRED_FIELDS = [
    "day",
    "mealType",
    "name",
    "description",
    "calories",
    "protein",
    "carbs",
    "fat",
    "ingredients",
    "instructions",
]


def _meals(outputs: Optional[dict]) -> list:
    return (outputs or {}).get("meals") or []


def _expected_behavior(reference_outputs: Optional[dict]) -> dict:
    return (reference_outputs or {}).get("expectedBehavior") or {}


def _num(value) -> str:
    return f"{value:g}"


def _day_total(meals: list, day: str, field: str) -> float:
    return sum(meal.get(field) or 0 for meal in meals if meal.get("day") == day)


def _truncated(issues: List[str], limit: int = 5) -> str:
    return "; ".join(issues[:limit]) + ("..." if len(issues) > limit else "")


# =============================================================================
# Structure
# =============================================================================


def evaluate_meal_count(outputs: dict) -> EvaluationResult:
    """Exactly 28 meals: seven days of four meals"""
    actual = len(_meals(outputs))
    return EvaluationResult(
        key="meal_count",
        score=1 if actual == EXPECTED_MEAL_COUNT else 0,
        comment=f"Expected {EXPECTED_MEAL_COUNT} meals, got {actual}",
    )


def evaluate_day_coverage(outputs: dict) -> EvaluationResult:
    covered = {meal.get("day") for meal in _meals(outputs)}
    missing = [day for day in DAYS if day not in covered]
    return EvaluationResult(
        key="day_coverage",
        score=(len(DAYS) - len(missing)) / len(DAYS),
        comment="All 7 days covered" if not missing else f"Missing days: {', '.join(missing)}",
    )


def evaluate_meal_type_coverage(outputs: dict) -> EvaluationResult:
    meals = _meals(outputs)
    covered = 0
    issues = []
    for day in DAYS:
        day_types = {meal.get("mealType") for meal in meals if meal.get("day") == day}
        for meal_type in MEAL_TYPES:
            if meal_type in day_types:
                covered += 1
            else:
                issues.append(f"{day}: missing {meal_type}")

    return EvaluationResult(
        key="meal_type_coverage",
        score=covered / (len(DAYS) * len(MEAL_TYPES)),
        comment="All meal types covered for all days" if not issues else f"Issues: {_truncated(issues)}",
    )


# =============================================================================
# Nutrition
# =============================================================================


def evaluate_daily_calories(outputs: dict, reference_outputs: Optional[dict] = None) -> EvaluationResult:
    expected = _expected_behavior(reference_outputs)
    low = expected.get("minCaloriesPerDay", DEFAULT_MIN_CALORIES_PER_DAY)
    high = expected.get("maxCaloriesPerDay", DEFAULT_MAX_CALORIES_PER_DAY)
    meals = _meals(outputs)

    in_range = 0
    details = []
    for day in DAYS:
        calories = _day_total(meals, day, "calories")
        if low <= calories <= high:
            in_range += 1
        else:
            details.append(f"{day}: {_num(calories)} cal (expected {low}-{high})")

    return EvaluationResult(
        key="daily_calories_in_range",
        score=in_range / len(DAYS),
        comment=(
            f"All days within {low}-{high} cal range"
            if not details
            else f"Out of range: {'; '.join(details)}"
        ),
    )


def evaluate_protein_adequacy(outputs: dict) -> EvaluationResult:
    meals = _meals(outputs)
    adequate = 0
    details = []
    for day in DAYS:
        protein = _day_total(meals, day, "protein")
        if protein >= MIN_DAILY_PROTEIN:
            adequate += 1
        else:
            details.append(f"{day}: {protein:.1f}g")

    return EvaluationResult(
        key="protein_adequacy",
        score=adequate / len(DAYS),
        comment=(
            f"All days have adequate protein (>={MIN_DAILY_PROTEIN}g)"
            if not details
            else f"Low protein days: {'; '.join(details)}"
        ),
    )


def evaluate_macro_balance(outputs: dict) -> EvaluationResult:
    """
    Share of energy from each macronutrient over the whole week, using
    4 kcal/g for protein and carbohydrate and 9 kcal/g for fat.

    Each macro in its target band scores 1, otherwise 0.5; the result is the
    average of the three.
    """
    meals = _meals(outputs)
    protein_kcal = sum(meal.get("protein") or 0 for meal in meals) * 4
    carbs_kcal = sum(meal.get("carbs") or 0 for meal in meals) * 4
    fat_kcal = sum(meal.get("fat") or 0 for meal in meals) * 9
    total = protein_kcal + carbs_kcal + fat_kcal

    if total == 0:
        return EvaluationResult(key="macro_balance", score=0, comment="No macronutrient data available")

    protein_pct = protein_kcal / total * 100
    carbs_pct = carbs_kcal / total * 100
    fat_pct = fat_kcal / total * 100

    protein_score = 1 if 10 <= protein_pct <= 35 else 0.5
    carbs_score = 1 if 35 <= carbs_pct <= 70 else 0.5
    fat_score = 1 if 15 <= fat_pct <= 40 else 0.5

    return EvaluationResult(
        key="macro_balance",
        score=(protein_score + carbs_score + fat_score) / 3,
        comment=f"Protein: {protein_pct:.1f}%, Carbs: {carbs_pct:.1f}%, Fat: {fat_pct:.1f}%",
    )


# =============================================================================
# Variety
# =============================================================================


def evaluate_meal_variety(outputs: dict) -> EvaluationResult:
    names = [(meal.get("name") or "").lower().strip() for meal in _meals(outputs)]
    counts = {}
    for name in names:
        counts[name] = counts.get(name, 0) + 1
    duplicates = [f'"{name}" ({count}x)' for name, count in counts.items() if count > 1]

    return EvaluationResult(
        key="meal_variety",
        score=len(counts) / max(len(names), 1),
        comment=(
            f"All {len(counts)} meals are unique"
            if not duplicates
            else f"Duplicates found: {', '.join(duplicates[:5])}"
        ),
    )


def evaluate_ingredient_diversity(outputs: dict) -> EvaluationResult:
    unique = set()
    for meal in _meals(outputs):
        ingredients = meal.get("ingredients")
        if isinstance(ingredients, list):
            unique.update(str(item).lower().strip() for item in ingredients)

    return EvaluationResult(
        key="ingredient_diversity",
        score=min(len(unique) / MIN_UNIQUE_INGREDIENTS, 1),
        comment=f"{len(unique)} unique ingredients used (target: {MIN_UNIQUE_INGREDIENTS}+)",
    )


# =============================================================================
# Preferences
# =============================================================================


def _meal_text(meal: dict, include_instructions: bool) -> str:
    parts = [meal.get("name") or "", meal.get("description") or ""]
    parts += [str(item) for item in meal.get("ingredients") or []]
    if include_instructions:
        parts.append(meal.get("instructions") or "")
    return " ".join(parts).lower()


def evaluate_preference_adherence(outputs: dict, reference_outputs: Optional[dict] = None) -> EvaluationResult:
    """One violation per (meal, avoided term) pair found anywhere in the meal's text"""
    should_avoid = _expected_behavior(reference_outputs).get("shouldAvoid") or []
    if not should_avoid:
        return EvaluationResult(key="preference_adherence", score=1, comment="No specific ingredients to avoid")

    meals = _meals(outputs)
    violations = []
    for meal in meals:
        text = _meal_text(meal, include_instructions=True)
        for avoid in should_avoid:
            if avoid.lower() in text:
                violations.append(f'{meal.get("name")}: contains "{avoid}"')

    score = 1 if not violations else max(0, 1 - len(violations) / len(meals))
    return EvaluationResult(
        key="preference_adherence",
        score=score,
        comment=(
            f"No violations found for: {', '.join(should_avoid)}"
            if not violations
            else f"Violations: {'; '.join(violations[:5])}"
        ),
    )


def evaluate_vegetarian_compliance(inputs: dict, outputs: dict) -> EvaluationResult:
    """Only applies when the user or the request asks for a meat-free plan"""
    inputs = inputs or {}
    preferences = list((inputs.get("user") or {}).get("preferences") or [])
    preferences += list((inputs.get("input") or {}).get("preferences") or [])
    if not any(p.lower() in VEGETARIAN_PREFERENCES for p in preferences):
        return EvaluationResult(key="vegetarian_compliance", score=1, comment="Not a vegetarian plan - skipped")

    meals = _meals(outputs)
    violations = []
    for meal in meals:
        text = _meal_text(meal, include_instructions=False)
        meat = next((keyword for keyword in MEAT_KEYWORDS if keyword in text), None)
        if meat:
            violations.append(f'{meal.get("name")}: contains "{meat}"')

    score = 1 if not violations else max(0, 1 - len(violations) / len(meals))
    return EvaluationResult(
        key="vegetarian_compliance",
        score=score,
        comment=(
            "All meals are vegetarian-compliant"
            if not violations
            else f"Non-vegetarian meals: {'; '.join(violations[:5])}"
        ),
    )


# =============================================================================
# Quality
# =============================================================================


def _is_filled(value) -> bool:
    return value is not None and value != "" and value != []


def evaluate_field_completeness(outputs: dict) -> EvaluationResult:
    meals = _meals(outputs)
    total = len(meals) * len(REQUIRED_FIELDS)
    filled = 0
    issues = []
    for meal in meals:
        for field in REQUIRED_FIELDS:
            if _is_filled(meal.get(field)):
                filled += 1
            else:
                issues.append(f"{meal.get('name') or 'Unknown'}: missing {field}")

    return EvaluationResult(
        key="field_completeness",
        score=filled / total if total else 0,
        comment="All required fields are populated" if not issues else f"Missing fields: {_truncated(issues)}",
    )


def evaluate_instruction_quality(outputs: dict) -> EvaluationResult:
    meals = _meals(outputs)
    adequate = 0
    short = []
    for meal in meals:
        length = len(meal.get("instructions") or "")
        if length >= MIN_INSTRUCTION_LENGTH:
            adequate += 1
        else:
            short.append(f"{meal.get('name')}: {length} chars")

    return EvaluationResult(
        key="instruction_quality",
        score=adequate / len(meals) if meals else 0,
        comment=(
            f"All instructions are detailed (>={MIN_INSTRUCTION_LENGTH} chars)"
            if not short
            else f"Short instructions: {'; '.join(short[:5])}"
        ),
    )


# =============================================================================
# Meal regeneration
# =============================================================================


def evaluate_meal_difference(inputs: dict, outputs: dict) -> EvaluationResult:
    original = ((inputs or {}).get("existingMeal") or {}).get("name") or ""
    original = original.lower().strip()
    new_name = (outputs or {}).get("name") or ""
    different = original != new_name.lower().strip()

    return EvaluationResult(
        key="meal_difference",
        score=1 if different else 0,
        comment=(
            f'Successfully generated different meal: "{new_name}"'
            if different
            else f'Generated same meal as original: "{original}"'
        ),
    )


def evaluate_calorie_consistency(
    inputs: dict, outputs: dict, reference_outputs: Optional[dict] = None
) -> EvaluationResult:
    """New calories must fall in the reference range, or within 50 kcal of the original"""
    original = ((inputs or {}).get("existingMeal") or {}).get("calories") or 0
    new_calories = (outputs or {}).get("calories") or 0
    calorie_range = _expected_behavior(reference_outputs).get("calorieRange") or {
        "min": original - CALORIE_TOLERANCE,
        "max": original + CALORIE_TOLERANCE,
    }
    low, high = calorie_range["min"], calorie_range["max"]
    in_range = low <= new_calories <= high

    return EvaluationResult(
        key="calorie_consistency",
        score=1 if in_range else 0,
        comment=f"New calories: {_num(new_calories)} (expected {low}-{high}, original: {_num(original)})",
    )


# =============================================================================
# Aggregates
# =============================================================================


DIET_PLAN_EVALUATORS = [
    evaluate_meal_count,
    evaluate_day_coverage,
    evaluate_meal_type_coverage,
    evaluate_daily_calories,
    evaluate_protein_adequacy,
    evaluate_macro_balance,
    evaluate_meal_variety,
    evaluate_ingredient_diversity,
    evaluate_preference_adherence,
    evaluate_vegetarian_compliance,
    evaluate_field_completeness,
    evaluate_instruction_quality,
]

MEAL_REGEN_EVALUATORS = [evaluate_meal_difference, evaluate_calorie_consistency]


def run_all_diet_plan_evaluators(
    inputs: dict, outputs: dict, reference_outputs: Optional[dict] = None
) -> List[EvaluationResult]:
    return [
        evaluate_meal_count(outputs),
        evaluate_day_coverage(outputs),
        evaluate_meal_type_coverage(outputs),
        evaluate_daily_calories(outputs, reference_outputs),
        evaluate_protein_adequacy(outputs),
        evaluate_macro_balance(outputs),
        evaluate_meal_variety(outputs),
        evaluate_ingredient_diversity(outputs),
        evaluate_preference_adherence(outputs, reference_outputs),
        evaluate_vegetarian_compliance(inputs, outputs),
        evaluate_field_completeness(outputs),
        evaluate_instruction_quality(outputs),
    ]


def run_all_meal_regen_evaluators(
    inputs: dict, outputs: dict, reference_outputs: Optional[dict] = None
) -> List[EvaluationResult]:
    return [
        evaluate_meal_difference(inputs, outputs),
        evaluate_calorie_consistency(inputs, outputs, reference_outputs),
    ]
