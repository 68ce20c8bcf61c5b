"""
Tests for the evaluation suite.

Covers:
- Deterministic plan and meal evaluators
- Mock plan used by the runner
- Runner helpers and the offline CLI commands
"""

import pytest

from evals import run_evals
from evals.datasets import get_diet_plan_test_cases, get_meal_regeneration_test_cases
from evals.evaluators import (
    evaluate_calorie_consistency,
    evaluate_daily_calories,
    evaluate_day_coverage,
    evaluate_field_completeness,
    evaluate_ingredient_diversity,
    evaluate_macro_balance,
    evaluate_meal_count,
    evaluate_meal_difference,
    evaluate_meal_type_coverage,
    evaluate_meal_variety,
    evaluate_preference_adherence,
    evaluate_protein_adequacy,
    evaluate_vegetarian_compliance,
    run_all_diet_plan_evaluators,
    run_all_meal_regen_evaluators,
)


@pytest.fixture
def mock_plan():
    return run_evals.build_mock_diet_plan()


@pytest.fixture(autouse=True)
def reset_mock_mode():
    yield
    run_evals.set_mock_mode(False)


# =============================================================================
# STRUCTURE
# =============================================================================


def test_mock_plan_has_complete_structure(mock_plan):
    assert len(mock_plan["meals"]) == 28
    assert evaluate_meal_count(mock_plan).score == 1
    assert evaluate_day_coverage(mock_plan).score == 1
    assert evaluate_meal_type_coverage(mock_plan).score == 1
    assert evaluate_field_completeness(mock_plan).score == 1


def test_missing_day_and_meal_types_lower_scores(mock_plan):
    plan = {"meals": [meal for meal in mock_plan["meals"] if meal["day"] != "SUNDAY"]}

    count = evaluate_meal_count(plan)
    assert count.score == 0
    assert count.comment == "Expected 28 meals, got 24"

    coverage = evaluate_day_coverage(plan)
    assert coverage.score == pytest.approx(6 / 7)
    assert coverage.comment == "Missing days: SUNDAY"

    assert evaluate_meal_type_coverage(plan).score == pytest.approx(24 / 28)


def test_empty_output_scores_zero():
    assert evaluate_meal_count({}).score == 0
    assert evaluate_field_completeness({"meals": []}).score == 0
    assert evaluate_macro_balance({"meals": []}).comment == "No macronutrient data available"


# =============================================================================
# NUTRITION AND VARIETY
# =============================================================================


def test_daily_calories_uses_expected_range(mock_plan):
    # Monday totals 1660 kcal, Sunday 2620 kcal
    result = evaluate_daily_calories(mock_plan, {"expectedBehavior": {"minCaloriesPerDay": 1600, "maxCaloriesPerDay": 3000}})
    assert result.score == 1

    narrow = evaluate_daily_calories(mock_plan, {"expectedBehavior": {"minCaloriesPerDay": 1600, "maxCaloriesPerDay": 1700}})
    assert narrow.score == pytest.approx(1 / 7)
    assert "SUNDAY: 2620 cal" in narrow.comment


def test_protein_and_variety(mock_plan):
    assert evaluate_protein_adequacy(mock_plan).score == 1
    assert evaluate_meal_variety(mock_plan).comment == "All 28 meals are unique"

    diversity = evaluate_ingredient_diversity(mock_plan)
    assert diversity.score == pytest.approx(3 / 40)


def test_repeated_meals_reduce_variety():
    plan = {"meals": [{"name": "Oatmeal"}, {"name": "oatmeal "}, {"name": "Salad"}, {"name": "Soup"}]}
    result = evaluate_meal_variety(plan)

    assert result.score == pytest.approx(3 / 4)
    assert '"oatmeal" (2x)' in result.comment


# =============================================================================
# PREFERENCES
# =============================================================================


def test_preference_adherence_counts_violations():
    plan = {
        "meals": [
            {"name": "Toast", "ingredients": ["white bread"], "instructions": "Toast it."},
            {"name": "Salad", "ingredients": ["lettuce"], "instructions": "Serve with a sugary dressing."},
            {"name": "Soup", "ingredients": ["lentils"], "instructions": "Simmer."},
            {"name": "Stew", "ingredients": ["beans"], "instructions": "Simmer."},
        ]
    }
    result = evaluate_preference_adherence(plan, {"expectedBehavior": {"shouldAvoid": ["white bread", "sugary"]}})

    assert result.score == pytest.approx(0.5)
    assert 'Toast: contains "white bread"' in result.comment


def test_preference_adherence_without_restrictions(mock_plan):
    result = evaluate_preference_adherence(mock_plan, {"expectedBehavior": {"shouldAvoid": []}})
    assert result.score == 1


def test_vegetarian_compliance_skipped_for_omnivores():
    result = evaluate_vegetarian_compliance(
        {"user": {"preferences": ["low-carb"]}, "input": {"preferences": ["high-protein"]}},
        {"meals": [{"name": "Steak and Eggs"}]},
    )
    assert result.score == 1
    assert result.comment == "Not a vegetarian plan - skipped"


def test_vegetarian_compliance_flags_meat():
    outputs = {
        "meals": [
            {"name": "Grilled Chicken Bowl", "ingredients": ["rice"]},
            {"name": "Veggie Curry", "ingredients": ["chickpeas"]},
        ]
    }
    result = evaluate_vegetarian_compliance({"input": {"preferences": ["Vegetarian"]}}, outputs)

    assert result.score == pytest.approx(0.5)
    assert 'Grilled Chicken Bowl: contains "chicken"' in result.comment


# =============================================================================
# MEAL REGENERATION
# =============================================================================


def test_meal_difference():
    inputs = {"existingMeal": {"name": "Oatmeal with Berries", "calories": 350}}

    assert evaluate_meal_difference(inputs, {"name": "Greek Yogurt Parfait"}).score == 1
    same = evaluate_meal_difference(inputs, {"name": " oatmeal with berries"})
    assert same.score == 0
    assert same.comment == 'Generated same meal as original: "oatmeal with berries"'


def test_calorie_consistency_defaults_to_tolerance_around_original():
    inputs = {"existingMeal": {"name": "Oatmeal", "calories": 350}}

    result = evaluate_calorie_consistency(inputs, {"calories": 380})
    assert result.score == 1
    assert result.comment == "New calories: 380 (expected 300-400, original: 350)"

    assert evaluate_calorie_consistency(inputs, {"calories": 420}).score == 0


def test_calorie_consistency_prefers_reference_range():
    inputs = {"existingMeal": {"name": "Salmon", "calories": 520}}
    reference = {"expectedBehavior": {"calorieRange": {"min": 470, "max": 570}}}

    assert evaluate_calorie_consistency(inputs, {"calories": 560}, reference).score == 1


def test_run_all_evaluators(mock_plan):
    case = get_diet_plan_test_cases()[0]
    results = run_all_diet_plan_evaluators(
        {"user": case["user"], "input": case["input"]}, mock_plan, {"expectedBehavior": case["expectedBehavior"]}
    )
    assert len(results) == 12
    assert len({result.key for result in results}) == 12

    regen_case = get_meal_regeneration_test_cases()[0]
    regen = run_all_meal_regen_evaluators(regen_case, {"name": "Chia Pudding", "calories": 330})
    assert [result.key for result in regen] == ["meal_difference", "calorie_consistency"]
    assert all(result.score == 1 for result in regen)


# =============================================================================
# RUNNER
# =============================================================================


def test_datasets_have_expected_shape():
    plan_cases = get_diet_plan_test_cases()
    regen_cases = get_meal_regeneration_test_cases()

    assert len(plan_cases) == 8
    assert len(regen_cases) == 3
    assert len({case["id"] for case in plan_cases}) == 8
    assert all("minCaloriesPerDay" in case["expectedBehavior"] for case in plan_cases)


@pytest.mark.parametrize(
    "score, allow_partial, expected",
    [(1, True, "✅"), (0.8, True, "⚠️"), (0.8, False, "❌"), (0.5, True, "❌")],
)
def test_status_marker(score, allow_partial, expected):
    assert run_evals.status_marker(score, allow_partial) == expected


def test_average_score(mock_plan):
    assert run_evals.average_score([]) == 0.0
    results = [evaluate_meal_count(mock_plan), evaluate_meal_count({})]
    assert run_evals.average_score(results) == 0.5


def test_mock_targets_skip_the_model():
    run_evals.set_mock_mode(True)

    plan = run_evals.generate_diet_plan_target({"user": {}, "input": {}})
    assert plan["description"] == "Mock diet plan for testing"
    assert run_evals.regenerate_meal_target({})["name"] == "Test Meal 1"


def test_profile_user_keeps_free_form_values():
    user = run_evals.profile_user(get_diet_plan_test_cases()[1]["user"])

    assert user.gender == "male"
    assert user.activity_level == "VERY_ACTIVE"
    assert user.age == 28


def test_parser_rejects_unknown_command():
    with pytest.raises(SystemExit):
        run_evals.build_parser().parse_args(["deploy"])


def test_main_help_and_local_mock(monkeypatch, capsys):
    monkeypatch.setattr(run_evals, "setup_langsmith_env", lambda: None)

    assert run_evals.main(["help"]) == 0
    assert "Commands:" in capsys.readouterr().out

    assert run_evals.main(["local", "--mock", "--limit", "1"]) == 0
    out = capsys.readouterr().out
    assert "Weight Loss - Sedentary Adult" in out
    assert "Regenerate Breakfast - Different Variety" in out


def test_main_requires_langsmith_for_remote_commands(monkeypatch):
    monkeypatch.setattr(run_evals, "setup_langsmith_env", lambda: None)

    def no_client():
        raise RuntimeError("LANGSMITH_API_KEY is required")

    monkeypatch.setattr(run_evals, "get_langsmith_client", no_client)
    assert run_evals.main(["diet-plan"]) == 1
