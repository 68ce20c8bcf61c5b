"""
Evaluation runner.

Usage:
    python -m evals.run_evals <command> [--limit=N] [--mock]

Commands ``quick`` and ``local`` score test cases in-process and need no
LangSmith account; the others read or write LangSmith datasets.
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import List, Optional

from langsmith import Client, evaluate

from app.config import settings
from domain.enums import DAYS_OF_WEEK, GENERATION_MEAL_ORDER
from domain.mappers import encode_list
from domain.models import User
from domain.schemas import DietPlanRequest
from evals.config import DATASET_NAMES, get_langsmith_client, setup_langsmith_env
from evals.datasets import create_datasets, get_diet_plan_test_cases, get_meal_regeneration_test_cases
from evals.evaluators import (
    DIET_PLAN_EVALUATORS,
    MEAL_REGEN_EVALUATORS,
    run_all_diet_plan_evaluators,
    run_all_meal_regen_evaluators,
)
from services.ai_service import ai_service

logger = logging.getLogger("dietplanner.evals")

COMMANDS = ["setup", "diet-plan", "meal-regen", "all", "quick", "local", "help"]
LOCAL_COMMANDS = {"quick", "local", "help"}
LOCAL_CASE_LIMIT = 2

USAGE = """
Usage: python -m evals.run_evals [command] [options]

Commands:
  setup       Create/update datasets in LangSmith
  diet-plan   Run diet plan generation evaluation
  meal-regen  Run meal regeneration evaluation
  all         Run all evaluations
  quick       Quick single test case (no LangSmith needed)
  local       Run test cases locally (no LangSmith needed)
  help        Show this help message

Options:
  --limit=N   Limit to N test cases (saves tokens for debugging)
  --mock      Use mock data instead of calling OpenAI (free, for debugging)

Environment Variables Required:
  LANGSMITH_API_KEY   Your LangSmith API key (for setup, diet-plan, meal-regen, all)
  OPENAI_API_KEY      Your OpenAI API key (unless --mock is given)

Examples:
  python -m evals.run_evals setup                      # First time setup
  python -m evals.run_evals diet-plan                  # Run all 8 diet plan evals
  python -m evals.run_evals diet-plan --limit=1        # Run only 1 test case
  python -m evals.run_evals diet-plan --mock           # Test LangSmith integration (no OpenAI cost)
  python -m evals.run_evals quick                      # Quick local test
  python -m evals.run_evals local --mock               # Local test without any API calls
"""


# =============================================================================
# Targets
# =============================================================================

_use_mock = False


def set_mock_mode(enabled: bool) -> None:
    global _use_mock
    _use_mock = enabled


def build_mock_diet_plan() -> dict:
    """Fixed 28-meal plan used instead of the language model in mock mode"""
    meals = []
    for i in range(len(DAYS_OF_WEEK) * len(GENERATION_MEAL_ORDER)):
        meals.append(
            {
                "day": DAYS_OF_WEEK[i // len(GENERATION_MEAL_ORDER)].value,
                "mealType": GENERATION_MEAL_ORDER[i % len(GENERATION_MEAL_ORDER)].value,
                "name": f"Test Meal {i + 1}",
                "description": "A healthy test meal",
                "calories": 400 + i * 10,
                "protein": 25,
                "carbs": 45,
                "fat": 15,
                "fiber": 8,
                "ingredients": ["ingredient1", "ingredient2", "ingredient3"],
                "instructions": "Mix all ingredients and cook for 20 minutes until done.",
                "prepTime": 10,
                "cookTime": 20,
                "servings": 2,
            }
        )
    return {"description": "Mock diet plan for testing", "meals": meals}


def profile_user(profile: dict) -> User:
    """
    Transient user built from a test-case profile; it is never added to a
    session, so free-form values (``"male"``, goals outside the enum) reach
    the prompt unchanged.
    """
    return User(
        name="Evaluation User",
        email="eval@example.com",
        age=profile.get("age"),
        weight=profile.get("weight"),
        height=profile.get("height"),
        gender=profile.get("gender"),
        nationality=profile.get("nationality"),
        goal=profile.get("goal"),
        activity_level=profile.get("activityLevel"),
        preferences=encode_list(profile.get("preferences")),
    )


def generate_diet_plan_target(inputs: dict) -> dict:
    if _use_mock:
        print("  🧪 Using mock data (no OpenAI call)")
        return build_mock_diet_plan()

    plan_input = inputs.get("input") or {}
    request = DietPlanRequest.model_validate(
        {
            "name": plan_input.get("name") or "Evaluation Plan",
            "weekStart": plan_input.get("weekStart") or datetime.now(timezone.utc),
            "preferences": plan_input.get("preferences") or [],
            "customRequirements": plan_input.get("customRequirements"),
        }
    )
    return asyncio.run(ai_service.generate_diet_plan(profile_user(inputs.get("user") or {}), request))


def regenerate_meal_target(inputs: dict) -> dict:
    if _use_mock:
        print("  🧪 Using mock data (no OpenAI call)")
        return build_mock_diet_plan()["meals"][0]

    return asyncio.run(
        ai_service.regenerate_meal(
            profile_user(inputs.get("user") or {}),
            inputs.get("existingMeal") or {},
            inputs.get("customRequirements"),
        )
    )


# =============================================================================
# Reporting
# =============================================================================


def _score(result) -> float:
    try:
        return float(result.score or 0)
    except (TypeError, ValueError):
        return 0.0


def status_marker(score: float, allow_partial: bool = True) -> str:
    if score == 1:
        return "✅"
    if allow_partial and score >= 0.7:
        return "⚠️"
    return "❌"


def average_score(results: list) -> float:
    if not results:
        return 0.0
    return sum(_score(result) for result in results) / len(results)


def _print_results(results: list, allow_partial: bool = True) -> None:
    print("\nResults:")
    for result in results:
        score = _score(result)
        print(f"  {status_marker(score, allow_partial)} {result.key}: {score * 100:.0f}% - {result.comment}")


# =============================================================================
# Evaluations
# =============================================================================


def _banner(title: str) -> None:
    print("\n========================================")
    print(title)
    print("========================================\n")


def run_diet_plan_evaluation(
    client: Optional[Client],
    test_cases: Optional[List[dict]] = None,
    dataset_name: str = DATASET_NAMES["DIET_PLAN_GENERATION"],
    experiment_prefix: str = "diet-plan-eval",
    max_concurrency: int = 1,
) -> None:
    """Score the given cases locally, or the whole LangSmith dataset when no cases are given"""
    _banner("DIET PLAN GENERATION EVALUATION")

    if test_cases is not None:
        print(f"Running on {len(test_cases)} test cases...")
        for case in test_cases:
            print(f"\n--- Test Case: {case['name']} ---")
            user = case["user"]
            print(f"User: {user.get('gender')}, {user.get('age')}yo, Goal: {user.get('goal')}")
            try:
                output = generate_diet_plan_target({"user": user, "input": case["input"]})
                results = run_all_diet_plan_evaluators(
                    {"user": user, "input": case["input"]},
                    output,
                    {"expectedBehavior": case["expectedBehavior"]},
                )
                _print_results(results)
                print(f"\n  Overall Score: {average_score(results) * 100:.1f}%")
            except Exception as e:
                logger.exception(f"Diet plan evaluation failed for {case['id']}")
                print(f"  ❌ Error: {e}")
        return

    print(f"Using dataset: {dataset_name}")
    print(f"Experiment prefix: {experiment_prefix}")
    evaluate(
        generate_diet_plan_target,
        data=dataset_name,
        evaluators=DIET_PLAN_EVALUATORS,
        experiment_prefix=experiment_prefix,
        max_concurrency=max_concurrency,
        client=client,
    )
    print("\nEvaluation complete!")
    print("View results at: https://smith.langchain.com")


def run_meal_regeneration_evaluation(
    client: Optional[Client],
    test_cases: Optional[List[dict]] = None,
    dataset_name: str = DATASET_NAMES["MEAL_REGENERATION"],
    experiment_prefix: str = "meal-regen-eval",
    max_concurrency: int = 1,
) -> None:
    _banner("MEAL REGENERATION EVALUATION")

    if test_cases is not None:
        print(f"Running on {len(test_cases)} test cases...")
        for case in test_cases:
            print(f"\n--- Test Case: {case['name']} ---")
            existing = case["existingMeal"]
            print(f"Original meal: {existing['name']} ({existing['calories']} cal)")
            try:
                output = regenerate_meal_target(case)
                results = run_all_meal_regen_evaluators(
                    case, output, {"expectedBehavior": case["expectedBehavior"]}
                )
                print(f"New meal: {output.get('name')} ({output.get('calories')} cal)")
                _print_results(results, allow_partial=False)
            except Exception as e:
                logger.exception(f"Meal regeneration evaluation failed for {case['id']}")
                print(f"  ❌ Error: {e}")
        return

    print(f"Using dataset: {dataset_name}")
    print(f"Experiment prefix: {experiment_prefix}")
    evaluate(
        regenerate_meal_target,
        data=dataset_name,
        evaluators=MEAL_REGEN_EVALUATORS,
        experiment_prefix=experiment_prefix,
        max_concurrency=max_concurrency,
        client=client,
    )
    print("\nEvaluation complete!")


def run_quick_eval() -> None:
    """First diet plan case, scored locally"""
    _banner("QUICK EVALUATION (Single Test Case)")

    case = get_diet_plan_test_cases()[0]
    print(f"Test Case: {case['name']}")
    try:
        output = generate_diet_plan_target({"user": case["user"], "input": case["input"]})
        print(f"\nGenerated {len(output.get('meals') or [])} meals")

        results = run_all_diet_plan_evaluators(
            {"user": case["user"], "input": case["input"]},
            output,
            {"expectedBehavior": case["expectedBehavior"]},
        )
        print("\n--- Evaluation Results ---")
        passed = 0
        for result in results:
            score = _score(result)
            if score == 1:
                passed += 1
            print(f"{status_marker(score)} {result.key}: {score * 100:.0f}%")
            print(f"   {result.comment}")

        print("\n--- Summary ---")
        print(f"Passed: {passed}/{len(results)}")
        print(f"Overall Score: {average_score(results) * 100:.1f}%")
    except Exception:
        logger.exception("Quick eval failed")


# =============================================================================
# Entry point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m evals.run_evals",
        description="Diet Planner LangSmith evaluation suite",
        add_help=False,
    )
    parser.add_argument("command", nargs="?", default="help", choices=COMMANDS)
    parser.add_argument("--limit", type=int, default=None, help="Limit to N test cases")
    parser.add_argument("--mock", action="store_true", help="Use mock data instead of calling OpenAI")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=settings.log_level, format=settings.log_format)
    args = build_parser().parse_args(argv)
    print("\n🧪 Diet Planner LangSmith Evaluation Suite\n")

    setup_langsmith_env()

    client = None
    if args.command not in LOCAL_COMMANDS:
        try:
            client = get_langsmith_client()
            print("✅ Connected to LangSmith\n")
        except Exception as e:
            print(f"❌ Failed to connect to LangSmith: {e}")
            print("\nTip: For local testing without LangSmith, use: python -m evals.run_evals quick")
            return 1

    if args.limit:
        print(f"⚡ Running with limit: {args.limit} test case(s)")
    if args.mock:
        set_mock_mode(True)
        print("🧪 Mock mode: Using fake data (no OpenAI API calls)")
    print("")

    if args.command == "setup":
        create_datasets(client)
        print("\n✅ Datasets created successfully!")
        print("View at: https://smith.langchain.com/datasets")
    elif args.command == "diet-plan":
        if args.limit:
            run_diet_plan_evaluation(client, test_cases=get_diet_plan_test_cases()[: args.limit])
        else:
            run_diet_plan_evaluation(client)
    elif args.command == "meal-regen":
        if args.limit:
            run_meal_regeneration_evaluation(client, test_cases=get_meal_regeneration_test_cases()[: args.limit])
        else:
            run_meal_regeneration_evaluation(client)
    elif args.command == "all":
        run_diet_plan_evaluation(client)
        run_meal_regeneration_evaluation(client)
    elif args.command == "quick":
        run_quick_eval()
    elif args.command == "local":
        print("Running local evaluation (no LangSmith required)...\n")
        limit = args.limit or LOCAL_CASE_LIMIT
        run_diet_plan_evaluation(None, test_cases=get_diet_plan_test_cases()[:limit])
        run_meal_regeneration_evaluation(None, test_cases=get_meal_regeneration_test_cases()[:limit])
    else:
        print(USAGE)
    return 0


if __name__ == "__main__":
    sys.exit(main())
