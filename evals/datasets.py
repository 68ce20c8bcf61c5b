"""
Evaluation cases for plan generation and meal regeneration, and the helper
that uploads them to LangSmith.

Profiles are deliberately free-form (lower-case genders, goals outside the
app's enum) to exercise how the prompts cope with unexpected values.
"""

import logging
from typing import List

from langsmith import Client
from langsmith.utils import LangSmithConflictError

from evals.config import DATASET_DIET_PLAN_GENERATION, DATASET_MEAL_REGENERATION

logger = logging.getLogger("dietplanner.evals")


DIET_PLAN_TEST_CASES: List[dict] = [
    {
        "id": "weight-loss-sedentary",
        "name": "Weight Loss - Sedentary Adult",
        "user": {
            "age": 35,
            "weight": 85,
            "height": 175,
            "gender": "male",
            "nationality": "American",
            "goal": "WEIGHT_LOSS",
            "activityLevel": "SEDENTARY",
            "preferences": ["low-carb"],
        },
        "input": {
            "name": "Weight Loss Plan",
            "preferences": ["high-protein", "low-sugar"],
            "customRequirements": "Focus on sustainable weight loss",
        },
        "expectedBehavior": {
            "minCaloriesPerDay": 1200,
            "maxCaloriesPerDay": 1800,
            "shouldRespectPreferences": ["low-carb", "high-protein"],
            "shouldAvoid": ["high-sugar", "fried foods"],
        },
    },
    {
        "id": "muscle-gain-active",
        "name": "Muscle Gain - Active Adult",
        "user": {
            "age": 28,
            "weight": 70,
            "height": 180,
            "gender": "male",
            "nationality": "Indian",
            "goal": "MUSCLE_GAIN",
            "activityLevel": "VERY_ACTIVE",
            "preferences": ["high-protein", "vegetarian"],
        },
        "input": {
            "name": "Muscle Building Plan",
            "preferences": ["high-calorie", "protein-rich"],
            "customRequirements": "Vegetarian meals with adequate protein for muscle building",
        },
        "expectedBehavior": {
            "minCaloriesPerDay": 2500,
            "maxCaloriesPerDay": 3500,
            "shouldRespectPreferences": ["vegetarian", "high-protein"],
            "shouldAvoid": ["meat", "fish", "chicken"],
        },
    },
    {
        "id": "maintenance-moderate",
        "name": "Maintenance - Moderate Activity",
        "user": {
            "age": 42,
            "weight": 68,
            "height": 165,
            "gender": "female",
            "nationality": "Japanese",
            "goal": "MAINTENANCE",
            "activityLevel": "MODERATE",
            "preferences": ["balanced", "asian-cuisine"],
        },
        "input": {
            "name": "Balanced Maintenance Plan",
            "preferences": ["traditional Japanese", "seasonal ingredients"],
            "customRequirements": "Include traditional Japanese dishes",
        },
        "expectedBehavior": {
            "minCaloriesPerDay": 1600,
            "maxCaloriesPerDay": 2200,
            "shouldRespectPreferences": ["asian-cuisine", "balanced"],
            "shouldAvoid": [],
        },
    },
    {
        "id": "diabetic-friendly",
        "name": "Diabetic Friendly - Low Glycemic",
        "user": {
            "age": 55,
            "weight": 78,
            "height": 170,
            "gender": "male",
            "nationality": "British",
            "goal": "HEALTH_IMPROVEMENT",
            "activityLevel": "LIGHT",
            "preferences": ["low-glycemic", "diabetic-friendly"],
        },
        "input": {
            "name": "Diabetic Friendly Plan",
            "preferences": ["low-sugar", "complex-carbs", "high-fiber"],
            "customRequirements": "All meals should be diabetic-friendly with low glycemic index",
        },
        "expectedBehavior": {
            "minCaloriesPerDay": 1500,
            "maxCaloriesPerDay": 2000,
            "shouldRespectPreferences": ["low-glycemic", "low-sugar", "high-fiber"],
            "shouldAvoid": ["white rice", "white bread", "sugary"],
        },
    },
    {
        "id": "vegan-athlete",
        "name": "Vegan Athlete",
        "user": {
            "age": 25,
            "weight": 65,
            "height": 172,
            "gender": "female",
            "nationality": "German",
            "goal": "ATHLETIC_PERFORMANCE",
            "activityLevel": "VERY_ACTIVE",
            "preferences": ["vegan", "whole-foods"],
        },
        "input": {
            "name": "Vegan Athletic Performance Plan",
            "preferences": ["plant-based protein", "energy-dense"],
            "customRequirements": "Strictly vegan with focus on athletic performance and recovery",
        },
        "expectedBehavior": {
            "minCaloriesPerDay": 2200,
            "maxCaloriesPerDay": 3000,
            "shouldRespectPreferences": ["vegan", "plant-based"],
            "shouldAvoid": ["meat", "dairy", "eggs", "honey"],
        },
    },
    {
        "id": "keto-weight-loss",
        "name": "Keto Diet for Weight Loss",
        "user": {
            "age": 38,
            "weight": 92,
            "height": 178,
            "gender": "male",
            "nationality": "Mexican",
            "goal": "WEIGHT_LOSS",
            "activityLevel": "MODERATE",
            "preferences": ["keto", "low-carb"],
        },
        "input": {
            "name": "Ketogenic Weight Loss Plan",
            "preferences": ["high-fat", "very-low-carb"],
            "customRequirements": "Strictly ketogenic with under 20g net carbs per day",
        },
        "expectedBehavior": {
            "minCaloriesPerDay": 1500,
            "maxCaloriesPerDay": 2200,
            "shouldRespectPreferences": ["keto", "low-carb", "high-fat"],
            "shouldAvoid": ["bread", "rice", "pasta", "sugar", "fruit"],
        },
    },
    {
        "id": "mediterranean-heart-health",
        "name": "Mediterranean Diet for Heart Health",
        "user": {
            "age": 60,
            "weight": 75,
            "height": 168,
            "gender": "female",
            "nationality": "Italian",
            "goal": "HEALTH_IMPROVEMENT",
            "activityLevel": "LIGHT",
            "preferences": ["mediterranean", "heart-healthy"],
        },
        "input": {
            "name": "Mediterranean Heart Health Plan",
            "preferences": ["olive oil", "fish", "whole grains"],
            "customRequirements": "Focus on heart-healthy Mediterranean cuisine",
        },
        "expectedBehavior": {
            "minCaloriesPerDay": 1400,
            "maxCaloriesPerDay": 1900,
            "shouldRespectPreferences": ["mediterranean", "heart-healthy"],
            "shouldAvoid": ["processed foods", "red meat"],
        },
    },
    {
        "id": "gluten-free-celiac",
        "name": "Gluten-Free for Celiac Disease",
        "user": {
            "age": 32,
            "weight": 62,
            "height": 160,
            "gender": "female",
            "nationality": "Australian",
            "goal": "MAINTENANCE",
            "activityLevel": "MODERATE",
            "preferences": ["gluten-free"],
        },
        "input": {
            "name": "Gluten-Free Maintenance Plan",
            "preferences": ["celiac-safe", "whole-foods"],
            "customRequirements": "Strictly gluten-free - no wheat, barley, rye, or cross-contamination",
        },
        "expectedBehavior": {
            "minCaloriesPerDay": 1600,
            "maxCaloriesPerDay": 2100,
            "shouldRespectPreferences": ["gluten-free"],
            "shouldAvoid": ["wheat", "barley", "rye", "bread", "pasta"],
        },
    },
]


MEAL_REGENERATION_TEST_CASES: List[dict] = [
    {
        "id": "regen-breakfast-variety",
        "name": "Regenerate Breakfast - Different Variety",
        "user": {
            "age": 30,
            "weight": 70,
            "height": 175,
            "gender": "male",
            "nationality": "American",
            "goal": "MAINTENANCE",
            "activityLevel": "MODERATE",
            "preferences": ["healthy"],
        },
        "existingMeal": {
            "name": "Oatmeal with Berries",
            "mealType": "BREAKFAST",
            "day": "MONDAY",
            "calories": 350,
            "description": "Classic oatmeal topped with fresh berries and honey",
        },
        "expectedBehavior": {
            "calorieRange": {"min": 300, "max": 400},
            "shouldBeDifferent": True,
        },
    },
    {
        "id": "regen-lunch-high-protein",
        "name": "Regenerate Lunch - High Protein Request",
        "user": {
            "age": 28,
            "weight": 80,
            "height": 182,
            "gender": "male",
            "nationality": "British",
            "goal": "MUSCLE_GAIN",
            "activityLevel": "VERY_ACTIVE",
            "preferences": ["high-protein"],
        },
        "existingMeal": {
            "name": "Grilled Chicken Salad",
            "mealType": "LUNCH",
            "day": "WEDNESDAY",
            "calories": 450,
            "description": "Fresh salad with grilled chicken breast",
        },
        "customRequirements": "Need more protein, at least 40g",
        "expectedBehavior": {
            "calorieRange": {"min": 400, "max": 500},
            "shouldBeDifferent": True,
        },
    },
    {
        "id": "regen-dinner-vegetarian",
        "name": "Regenerate Dinner - Vegetarian Alternative",
        "user": {
            "age": 35,
            "weight": 65,
            "height": 168,
            "gender": "female",
            "nationality": "Indian",
            "goal": "MAINTENANCE",
            "activityLevel": "MODERATE",
            "preferences": ["vegetarian"],
        },
        "existingMeal": {
            "name": "Grilled Salmon with Vegetables",
            "mealType": "DINNER",
            "day": "FRIDAY",
            "calories": 520,
            "description": "Pan-seared salmon with roasted vegetables",
        },
        "customRequirements": "Make it vegetarian",
        "expectedBehavior": {
            "calorieRange": {"min": 470, "max": 570},
            "shouldBeDifferent": True,
        },
    },
]


def get_diet_plan_test_cases() -> List[dict]:
    return DIET_PLAN_TEST_CASES


def get_meal_regeneration_test_cases() -> List[dict]:
    return MEAL_REGENERATION_TEST_CASES


def _create_dataset(client: Client, name: str, description: str, examples: List[tuple]) -> None:
    """Create a dataset and its examples; an existing dataset is left untouched"""
    try:
        dataset = client.create_dataset(name, description=description)
    except LangSmithConflictError:
        print(f"ℹ️  Dataset {name} already exists")
        try:
            existing = client.read_dataset(dataset_name=name)
            print(f"   Found existing dataset with ID: {existing.id}")
        except Exception as e:
            logger.warning(f"Could not read existing dataset {name}: {e}")
        return

    print(f"✅ Created dataset: {name} (ID: {dataset.id})")
    for inputs, outputs, metadata in examples:
        client.create_example(inputs=inputs, outputs=outputs, metadata=metadata, dataset_id=dataset.id)
    print(f"   Added {len(examples)} examples to {name}")


def create_datasets(client: Client) -> None:
    """Upload the plan generation and meal regeneration cases to LangSmith"""
    print("Creating/updating LangSmith datasets...\n")

    try:
        names = [dataset.name for dataset in client.list_datasets()]
        print(f"Found {len(names)} existing datasets: {', '.join(names) or 'none'}\n")
    except Exception as e:
        logger.warning(f"Could not list datasets: {e}")

    _create_dataset(
        client,
        DATASET_DIET_PLAN_GENERATION,
        "Test cases for diet plan generation with various user profiles and goals",
        [
            (
                {"user": case["user"], "input": case["input"]},
                {"expectedBehavior": case["expectedBehavior"]},
                {"testCaseId": case["id"], "testCaseName": case["name"]},
            )
            for case in DIET_PLAN_TEST_CASES
        ],
    )
    _create_dataset(
        client,
        DATASET_MEAL_REGENERATION,
        "Test cases for single meal regeneration scenarios",
        [
            (
                {
                    "user": case["user"],
                    "existingMeal": case["existingMeal"],
                    "customRequirements": case.get("customRequirements"),
                },
                {"expectedBehavior": case["expectedBehavior"]},
                {"testCaseId": case["id"], "testCaseName": case["name"]},
            )
            for case in MEAL_REGENERATION_TEST_CASES
        ],
    )
