"""
Deterministic meals used when the language model is unavailable or returns
unusable output. All values are camelCase meal JSON, the same shape the
generator produces.
"""

import copy

from domain.enums import DAYS_OF_WEEK, GENERATION_MEAL_ORDER, DayOfWeek, MealType

# One generic meal per slot type, used for a single failed slot or day
SLOT_FALLBACK_MEALS = {
    MealType.BREAKFAST: {
        "name": "Healthy Breakfast Bowl",
        "description": "Nutritious breakfast option",
        "calories": 350,
        "protein": 15,
        "carbs": 45,
        "fat": 12,
        "fiber": 8,
        "ingredients": ["Oats", "Berries", "Nuts", "Yogurt"],
        "instructions": "Mix ingredients and enjoy",
        "prepTime": 10,
        "cookTime": 5,
        "servings": 1,
    },
    MealType.LUNCH: {
        "name": "Balanced Lunch",
        "description": "Well-rounded lunch meal",
        "calories": 450,
        "protein": 30,
        "carbs": 40,
        "fat": 18,
        "fiber": 6,
        "ingredients": ["Chicken", "Vegetables", "Rice", "Olive oil"],
        "instructions": "Prepare and cook ingredients",
        "prepTime": 15,
        "cookTime": 20,
        "servings": 1,
    },
    MealType.DINNER: {
        "name": "Wholesome Dinner",
        "description": "Satisfying dinner option",
        "calories": 500,
        "protein": 35,
        "carbs": 45,
        "fat": 20,
        "fiber": 7,
        "ingredients": ["Fish", "Vegetables", "Quinoa", "Spices"],
        "instructions": "Cook ingredients properly",
        "prepTime": 15,
        "cookTime": 25,
        "servings": 1,
    },
    MealType.SNACK: {
        "name": "Healthy Snack",
        "description": "Nutritious snack option",
        "calories": 180,
        "protein": 8,
        "carbs": 20,
        "fat": 9,
        "fiber": 4,
        "ingredients": ["Nuts", "Fruit", "Yogurt"],
        "instructions": "Combine and enjoy",
        "prepTime": 5,
        "cookTime": 0,
        "servings": 1,
    },
}

# Three options per slot type, rotated by day so a fallback week is not monotonous
ROTATING_OPTIONS = {
    MealType.BREAKFAST: [
        {"name": "Oatmeal with Berries", "calories": 350, "protein": 12, "carbs": 55, "fat": 8, "fiber": 8},
        {"name": "Greek Yogurt Parfait", "calories": 300, "protein": 20, "carbs": 35, "fat": 8, "fiber": 5},
        {"name": "Whole Grain Toast with Avocado", "calories": 320, "protein": 10, "carbs": 40, "fat": 15, "fiber": 10},
    ],
    MealType.LUNCH: [
        {"name": "Grilled Chicken Salad", "calories": 450, "protein": 35, "carbs": 15, "fat": 25, "fiber": 6},
        {"name": "Quinoa Bowl with Vegetables", "calories": 400, "protein": 15, "carbs": 60, "fat": 12, "fiber": 8},
        {"name": "Turkey and Hummus Wrap", "calories": 380, "protein": 25, "carbs": 45, "fat": 12, "fiber": 6},
    ],
    MealType.DINNER: [
        {"name": "Baked Salmon with Sweet Potato", "calories": 500, "protein": 35, "carbs": 40, "fat": 20, "fiber": 6},
        {"name": "Lean Beef Stir-fry", "calories": 480, "protein": 30, "carbs": 35, "fat": 22, "fiber": 5},
        {"name": "Grilled Chicken with Brown Rice", "calories": 450, "protein": 40, "carbs": 45, "fat": 12, "fiber": 4},
    ],
    MealType.SNACK: [
        {"name": "Apple with Almond Butter", "calories": 200, "protein": 6, "carbs": 25, "fat": 12, "fiber": 5},
        {"name": "Greek Yogurt with Nuts", "calories": 180, "protein": 15, "carbs": 12, "fat": 8, "fiber": 2},
        {"name": "Hummus with Vegetables", "calories": 150, "protein": 6, "carbs": 18, "fat": 8, "fiber": 4},
    ],
}

FALLBACK_PLAN_DESCRIPTION = "Balanced diet plan with healthy meal options"


def fallback_meal(day, meal_type) -> dict:
    """Generic meal for one slot"""
    day, meal_type = DayOfWeek(day), MealType(meal_type)
    return {
        "day": day.value,
        "mealType": meal_type.value,
        **copy.deepcopy(SLOT_FALLBACK_MEALS[meal_type]),
    }


def fallback_day(day) -> list:
    return [fallback_meal(day, meal_type) for meal_type in GENERATION_MEAL_ORDER]


def create_fallback_diet_plan() -> dict:
    """Complete 28-meal week built from the rotating options"""
    meals = []
    for day_index, day in enumerate(DAYS_OF_WEEK):
        for meal_type in GENERATION_MEAL_ORDER:
            options = ROTATING_OPTIONS[meal_type]
            option = options[day_index % len(options)]
            meals.append(
                {
                    "day": day.value,
                    "mealType": meal_type.value,
                    "name": option["name"],
                    "description": f"Healthy {meal_type.value.lower()} option",
                    "calories": option["calories"],
                    "protein": option["protein"],
                    "carbs": option["carbs"],
                    "fat": option["fat"],
                    "fiber": option["fiber"],
                    "ingredients": ["Main ingredient", "Supporting ingredients"],
                    "instructions": "Prepare according to standard cooking methods",
                    "prepTime": 10,
                    "cookTime": 15,
                    "servings": 1,
                }
            )
    return {"description": FALLBACK_PLAN_DESCRIPTION, "meals": meals}
