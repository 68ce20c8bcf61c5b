"""
Tests for LangChain-backed generation using LangChain's fake chat model.

No network access is needed: ``FakeListChatModel`` replays canned responses
(and streams them character by character).
"""

import asyncio
import json
from datetime import datetime

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from app.config import settings
from domain.enums import DayOfWeek, Goal, MealType
from domain.mappers import encode_list
from domain.models import User
from domain.schemas import DietPlanRequest
from services.ai_service import (
    CHUNKED_PLAN_DESCRIPTION,
    AIGenerationError,
    AIService,
    parse_json_array,
    parse_json_object,
)
from services.fallback_plans import FALLBACK_PLAN_DESCRIPTION, create_fallback_diet_plan, fallback_day, fallback_meal

REQUEST = DietPlanRequest(name="Test Week", week_start=datetime(2024, 1, 1), preferences=["high-fiber"])


def make_profile_user() -> User:
    return User(
        name="Sarah Martinez",
        email="sarah@example.com",
        age=34,
        weight=64.0,
        height=168.0,
        goal=Goal.WEIGHT_LOSS,
        preferences=encode_list(["mediterranean"]),
    )


def day_meals_json(prefix: str) -> str:
    meals = []
    for meal_type, calories in (("BREAKFAST", 350), ("LUNCH", 500), ("DINNER", 550), ("SNACK", 200)):
        meals.append(
            {
                "mealType": meal_type,
                "name": f"{prefix} {meal_type.title()}",
                "description": "Fresh and simple",
                "calories": calories,
                "protein": 25,
                "carbs": 40,
                "fat": 12.34,
                "fiber": 6,
                "ingredients": ["beans", "rice"],
                "instructions": "Combine everything and simmer gently.",
                "prepTime": 10,
                "cookTime": 15.4,
                "servings": 1,
            }
        )
    return json.dumps(meals)


def run(coro):
    return asyncio.run(coro)


# =============================================================================
# OUTPUT PARSING
# =============================================================================


def test_parse_json_object_unwraps_fence():
    content = 'Here you go:\n```json\n{"name": "Soup"}\n```'
    assert parse_json_object(content) == {"name": "Soup"}


def test_parse_json_object_repairs_truncated_meals():
    content = '{"description": "Week plan", "meals": [{"name": "Soup"}'
    assert parse_json_object(content, repair_truncated=True) == {
        "description": "Week plan",
        "meals": [{"name": "Soup"}],
    }


def test_parse_json_object_rejects_garbage():
    with pytest.raises(AIGenerationError):
        parse_json_object("I cannot help with that")


def test_parse_json_array_unwraps_fence():
    assert parse_json_array('```\n[{"a": 1}]\n```') == [{"a": 1}]


# =============================================================================
# WHOLE-PLAN GENERATION
# =============================================================================


def test_generate_diet_plan_returns_formatted_meals():
    plan = create_fallback_diet_plan()
    plan["description"] = "A colourful Mediterranean week"
    service = AIService(llm=FakeListChatModel(responses=[json.dumps(plan)]))

    result = run(service.generate_diet_plan(make_profile_user(), REQUEST))

    assert result["description"] == "A colourful Mediterranean week"
    assert len(result["meals"]) == 28
    first = result["meals"][0]
    assert (first["day"], first["mealType"]) == ("MONDAY", "BREAKFAST")
    assert first["name"] == "Oatmeal with Berries"
    assert set(first) == {
        "day", "mealType", "name", "description", "calories", "protein", "carbs",
        "fat", "fiber", "ingredients", "instructions", "prepTime", "cookTime", "servings",
    }


@pytest.mark.parametrize(
    "response",
    [
        "not json at all",
        json.dumps({"description": "Too short a week", "meals": create_fallback_diet_plan()["meals"][:3]}),
    ],
)
def test_generate_diet_plan_falls_back_on_unusable_output(response):
    service = AIService(llm=FakeListChatModel(responses=[response]))

    result = run(service.generate_diet_plan(make_profile_user(), REQUEST))

    assert result == create_fallback_diet_plan()
    assert result["description"] == FALLBACK_PLAN_DESCRIPTION


# =============================================================================
# CHUNKED GENERATION AFTER A TIMEOUT
# =============================================================================

SLOT_MEAL_JSON = json.dumps(
    {
        "name": "Lentil Bowl",
        "description": "Warm lentils with roasted vegetables",
        "calories": 450.4,
        "protein": 22,
        "carbs": 55,
        "fat": 12,
        "fiber": 14,
        "ingredients": ["lentils", "carrots", "spinach"],
        "instructions": "Simmer the lentils and toss with the vegetables.",
        "prepTime": 10,
        "cookTime": 25,
        "servings": 2,
    }
)


class SlowFirstCallModel(FakeListChatModel):
    """Fake model whose first ``slow_calls`` requests hang until cancelled"""

    slow_calls: int = 1
    slow_sleep: float = 5.0

    async def ainvoke(self, input, config=None, **kwargs):
        if self.slow_calls > 0:
            self.slow_calls -= 1
            await asyncio.sleep(self.slow_sleep)
        return await super().ainvoke(input, config, **kwargs)


@pytest.fixture
def fast_timeouts(monkeypatch):
    monkeypatch.setattr(settings, "plan_generation_timeout_sec", 0.01)
    monkeypatch.setattr(settings, "meal_generation_timeout_sec", 5.0)
    monkeypatch.setattr(settings, "chunk_delay_sec", 0)


def test_generate_diet_plan_switches_to_chunks_on_timeout(fast_timeouts):
    service = AIService(llm=SlowFirstCallModel(responses=[SLOT_MEAL_JSON]))

    result = run(service.generate_diet_plan(make_profile_user(), REQUEST))

    assert result["description"] == CHUNKED_PLAN_DESCRIPTION
    assert len(result["meals"]) == 28
    slots = [(meal["day"], meal["mealType"]) for meal in result["meals"]]
    assert slots[:4] == [
        ("MONDAY", "BREAKFAST"),
        ("MONDAY", "LUNCH"),
        ("MONDAY", "SNACK"),
        ("MONDAY", "DINNER"),
    ]
    assert slots[-1] == ("SUNDAY", "DINNER")
    assert len(set(slots)) == 28

    first = result["meals"][0]
    assert first["name"] == "Lentil Bowl"
    assert first["calories"] == 450
    assert first["servings"] == 2


def test_chunked_generation_uses_fallback_for_unusable_slot(fast_timeouts):
    responses = ["not json at all"] + [SLOT_MEAL_JSON] * 27
    service = AIService(llm=SlowFirstCallModel(responses=responses))

    result = run(service.generate_diet_plan(make_profile_user(), REQUEST))

    assert result["description"] == CHUNKED_PLAN_DESCRIPTION
    assert len(result["meals"]) == 28
    assert result["meals"][0] == fallback_meal(DayOfWeek.MONDAY, MealType.BREAKFAST)
    assert all(meal["name"] == "Lentil Bowl" for meal in result["meals"][1:])


def test_chunked_generation_uses_fallback_for_slow_slot(fast_timeouts, monkeypatch):
    monkeypatch.setattr(settings, "meal_generation_timeout_sec", 0.5)
    # The whole-plan request and the first slot both time out
    service = AIService(llm=SlowFirstCallModel(responses=[SLOT_MEAL_JSON], slow_calls=2))

    result = run(service.generate_diet_plan(make_profile_user(), REQUEST))

    assert result["meals"][0] == fallback_meal(DayOfWeek.MONDAY, MealType.BREAKFAST)
    assert result["meals"][1]["name"] == "Lentil Bowl"


# =============================================================================
# STREAMING
# =============================================================================


def _collect(service: AIService, user=None) -> list:
    async def collect():
        return [event async for event in service.stream_diet_plan(user, REQUEST)]

    return run(collect())


def test_stream_diet_plan_yields_day_events():
    responses = [day_meals_json(f"Day{i}") for i in range(1, 8)]
    service = AIService(llm=FakeListChatModel(responses=responses))

    events = _collect(service, make_profile_user())
    types = [event["type"] for event in events if event["type"] != "meal_streaming"]

    assert types[0] == "start"
    assert events[0]["data"] == {"totalDays": 7}
    assert types.count("progress") == 7
    assert types.count("day_complete") == 7
    assert types[-1] == "plan_complete"

    day_complete = [event["data"] for event in events if event["type"] == "day_complete"]
    assert day_complete[0]["day"] == "MONDAY"
    assert day_complete[0]["meals"][0]["name"] == "Day1 Breakfast"
    assert day_complete[0]["meals"][0]["fat"] == 12.3
    assert day_complete[0]["meals"][0]["cookTime"] == 15
    assert day_complete[6]["day"] == "SUNDAY"

    final = events[-1]["data"]
    assert final["totalMeals"] == 28
    assert len(final["meals"]) == 28
    assert final["description"].startswith("Personalized 7-day diet plan")


def test_stream_diet_plan_uses_fallback_day_for_bad_output():
    responses = [day_meals_json("Day1"), "oops, no json"] + [day_meals_json(f"Day{i}") for i in range(3, 8)]
    service = AIService(llm=FakeListChatModel(responses=responses))

    events = _collect(service)
    day_complete = [event["data"] for event in events if event["type"] == "day_complete"]

    tuesday = day_complete[1]
    assert tuesday["day"] == "TUESDAY"
    assert [meal["name"] for meal in tuesday["meals"]] == [
        "Healthy Breakfast Bowl",
        "Balanced Lunch",
        "Healthy Snack",
        "Wholesome Dinner",
    ]
    assert events[-1]["type"] == "plan_complete"
    assert events[-1]["data"]["totalMeals"] == 28


def _streaming_events(events: list, day: str) -> list:
    return [
        event["data"]
        for event in events
        if event["type"] == "meal_streaming" and event["data"]["day"] == day
    ]


def test_stream_diet_plan_reports_progress_every_hundred_chars():
    # 200 streamed characters that do not parse as a day of meals
    response = "not a meal list".ljust(200)
    service = AIService(llm=FakeListChatModel(responses=[response]))

    events = _collect(service)

    assert _streaming_events(events, "MONDAY") == [
        {"day": "MONDAY", "progress": 100, "message": "Generating meals for MONDAY..."},
        {"day": "MONDAY", "progress": 200, "message": "Generating meals for MONDAY..."},
    ]
    assert len([event for event in events if event["type"] == "meal_streaming"]) == 14
    day_complete = [event["data"] for event in events if event["type"] == "day_complete"]
    assert day_complete[0]["meals"] == fallback_day(DayOfWeek.MONDAY)


def test_stream_diet_plan_progress_for_parsed_day():
    meals_json = day_meals_json("Padded")
    length = (len(meals_json) // 100 + 1) * 100
    service = AIService(llm=FakeListChatModel(responses=[meals_json.ljust(length)]))

    events = _collect(service)

    progress = [data["progress"] for data in _streaming_events(events, "SUNDAY")]
    assert progress == list(range(100, length + 1, 100))
    day_complete = [event["data"] for event in events if event["type"] == "day_complete"]
    assert day_complete[6]["meals"][0]["name"] == "Padded Breakfast"


# =============================================================================
# SINGLE MEAL
# =============================================================================

EXISTING_MEAL = {
    "day": "MONDAY",
    "mealType": "BREAKFAST",
    "name": "Oatmeal with Berries",
    "calories": 350,
    "description": "Classic oatmeal",
}


def test_regenerate_meal_returns_formatted_meal():
    generated = {
        "name": "Chia Pudding",
        "description": "Chia seeds soaked overnight in almond milk",
        "calories": 340.6,
        "protein": 11,
        "carbs": 30,
        "fat": 16,
        "fiber": 12,
        "ingredients": ["chia seeds", "almond milk", "mango"],
        "instructions": "Mix chia with milk and refrigerate overnight.",
        "prepTime": 5,
        "cookTime": 0,
        "servings": 1,
    }
    service = AIService(llm=FakeListChatModel(responses=[f"```json\n{json.dumps(generated)}\n```"]))

    result = run(service.regenerate_meal(make_profile_user(), EXISTING_MEAL, "Make it vegan"))

    assert result["name"] == "Chia Pudding"
    assert result["calories"] == 341
    assert "day" not in result


def test_regenerate_meal_raises_on_invalid_meal():
    # Calories outside the accepted range
    invalid = json.dumps({"name": "Feast", "description": "Too much", "calories": 5000})
    service = AIService(llm=FakeListChatModel(responses=[invalid]))

    with pytest.raises(AIGenerationError):
        run(service.regenerate_meal(make_profile_user(), EXISTING_MEAL))


def test_free_text_helpers_return_model_text():
    service = AIService(llm=FakeListChatModel(responses=["Balanced overall."]))
    assert run(service.analyze_nutritional_balance([{"name": "Soup"}])) == "Balanced overall."
