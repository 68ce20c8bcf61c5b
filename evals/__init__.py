"""
Evaluation suite for generated diet plans and regenerated meals.
"""

from evals.config import DATASET_NAMES, LANGSMITH_PROJECT, get_langsmith_client, setup_langsmith_env
from evals.datasets import (
    DIET_PLAN_TEST_CASES,
    MEAL_REGENERATION_TEST_CASES,
    create_datasets,
    get_diet_plan_test_cases,
    get_meal_regeneration_test_cases,
)
from evals.evaluators import (
    DIET_PLAN_EVALUATORS,
    MEAL_REGEN_EVALUATORS,
    run_all_diet_plan_evaluators,
    run_all_meal_regen_evaluators,
)

__all__ = [
    # Config
    "DATASET_NAMES",
    "LANGSMITH_PROJECT",
    "get_langsmith_client",
    "setup_langsmith_env",
    # Datasets
    "DIET_PLAN_TEST_CASES",
    "MEAL_REGENERATION_TEST_CASES",
    "create_datasets",
    "get_diet_plan_test_cases",
    "get_meal_regeneration_test_cases",
    # Evaluators
    "DIET_PLAN_EVALUATORS",
    "MEAL_REGEN_EVALUATORS",
    "run_all_diet_plan_evaluators",
    "run_all_meal_regen_evaluators",
]
