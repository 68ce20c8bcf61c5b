"""
Diet plan generation with LangChain chat models.

Three generation paths share the same prompt variables and output format:

- ``generate_diet_plan``: one request for all 28 meals, falling back to
  per-meal chunked generation on timeout and to a fixed plan on any other
  failure.
- ``stream_diet_plan``: one request per day, yielding progress events for the
  Server-Sent-Events endpoint.
- ``regenerate_meal``: one replacement meal for an existing slot.
"""

import asyncio
import json
import logging
import re
from typing import AsyncIterator, List, Optional, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import PromptTemplate
from langchain_openai import ChatOpenAI
from pydantic import ValidationError

from app.config import settings
from domain.enums import DAYS_OF_WEEK, GENERATION_MEAL_ORDER, MEALS_PER_DAY, MEALS_PER_WEEK
from domain.mappers import UserMapper
from domain.models import User
from domain.schemas.plan_schemas import (
    DietPlanRequest,
    GeneratedDietPlan,
    GeneratedMeal,
    GeneratedPlanMeal,
)
from services.fallback_plans import create_fallback_diet_plan, fallback_day, fallback_meal

logger = logging.getLogger("dietplanner.ai")

STREAM_PLAN_DESCRIPTION = (
    f"Personalized {len(DAYS_OF_WEEK)}-day diet plan tailored to your goals and preferences"
)
CHUNKED_PLAN_DESCRIPTION = "Personalized 7-day diet plan tailored to your goals"
STREAM_PROGRESS_EVERY = 100
CHUNK_SIZE_DAYS = 2


class AIGenerationError(Exception):
    """The model output could not be obtained, parsed or validated"""


# ============================================================================
# Prompts
# ============================================================================

FULL_PLAN_PROMPT = PromptTemplate.from_template(
    """Create a 7-day diet plan with exactly 28 meals (4 meals per day: BREAKFAST, LUNCH, SNACK, DINNER).

User: Age {age}, Weight {weight}kg, Height {height}cm, Gender {gender}, Nationality {nationality}
Goal: {goal}, Activity: {activity_level}
Preferences: {user_preferences}, {input_preferences}
Requirements: {custom_requirements}

Requirements:
1. Exactly 28 meals: 7 days x 4 meals (BREAKFAST, LUNCH, SNACK, DINNER)
2. CRITICAL: Each day must have DIFFERENT meals - NO DUPLICATES across days
3. Create VARIETY: different ingredients, cooking methods and flavors for each day
4. Consider the user profile and preferences
5. Realistic, culturally appropriate meals
6. Proper nutritional values

Days: MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY
Meal types: BREAKFAST, LUNCH, SNACK, DINNER

CRITICAL: Respond with ONLY valid JSON. No markdown, no explanations.

{{
  "description": "Brief plan description (10-200 chars)",
  "meals": [
    {{
      "day": "MONDAY",
      "mealType": "BREAKFAST",
      "name": "Meal name",
      "description": "Brief description",
      "calories": 400,
      "protein": 25,
      "carbs": 45,
      "fat": 15,
      "fiber": 8,
      "ingredients": ["ingredient1", "ingredient2"],
      "instructions": "Cooking steps",
      "prepTime": 15,
      "cookTime": 30,
      "servings": 2
    }}
  ]
}}
"""
)

SINGLE_SLOT_PROMPT = PromptTemplate.from_template(
    """Create a {meal_type} meal for {day}.

User: Age {age}, Weight {weight}kg, Height {height}cm, {gender}, {nationality}
Goal: {goal}, Activity: {activity_level}
Preferences: {user_preferences}

CRITICAL: Respond with ONLY valid JSON:
{{
  "name": "Meal name",
  "description": "Brief description",
  "calories": 400,
  "protein": 25,
  "carbs": 45,
  "fat": 15,
  "fiber": 8,
  "ingredients": ["ingredient1", "ingredient2"],
  "instructions": "Steps",
  "prepTime": 15,
  "cookTime": 30,
  "servings": 2
}}
"""
)

DAY_PROMPT = PromptTemplate.from_template(
    """Create 4 meals for {day}: BREAKFAST, LUNCH, SNACK, and DINNER.

User: Age {age}, {weight}kg, {height}cm, {gender}, {nationality}
Goal: {goal}, Activity: {activity_level}
Preferences: {user_preferences}, {input_preferences}
Requirements: {custom_requirements}
{previous_meals_context}

Day {day_number} of 7. Create varied, realistic meals.

JSON format (no markdown):
[
  {{"mealType":"BREAKFAST","name":"...","description":"...","calories":400,"protein":25,"carbs":45,"fat":15,"fiber":8,"ingredients":["..."],"instructions":"...","prepTime":10,"cookTime":15,"servings":1}},
  {{"mealType":"LUNCH","name":"...","description":"...","calories":500,"protein":35,"carbs":50,"fat":20,"fiber":10,"ingredients":["..."],"instructions":"...","prepTime":15,"cookTime":20,"servings":1}},
  {{"mealType":"DINNER","name":"...","description":"...","calories":550,"protein":40,"carbs":45,"fat":22,"fiber":8,"ingredients":["..."],"instructions":"...","prepTime":20,"cookTime":30,"servings":1}},
  {{"mealType":"SNACK","name":"...","description":"...","calories":200,"protein":10,"carbs":20,"fat":10,"fiber":5,"ingredients":["..."],"instructions":"...","prepTime":5,"cookTime":0,"servings":1}}
]
"""
)

REGENERATE_PROMPT = PromptTemplate.from_template(
    """You are an expert nutritionist. Generate a single replacement meal that maintains similar nutritional value but is completely different from the existing meal.

User Profile:
- Age: {age} years
- Weight: {weight} kg
- Height: {height} cm
- Gender: {gender}
- Nationality: {nationality}
- Goal: {goal}
- Activity Level: {activity_level}
- Dietary Preferences: {user_preferences}

Current Meal to Replace:
- Name: {existing_name}
- Type: {existing_meal_type}
- Day: {existing_day}
- Calories: {existing_calories}
- Description: {existing_description}

Custom Requirements: {custom_requirements}

Requirements:
1. Create a completely different meal appropriate for {existing_meal_type} on {existing_day}
2. Maintain a similar calorie range (+/-50 calories from {existing_calories})
3. Consider the user's dietary preferences and restrictions
4. Ensure nutritional balance appropriate for the meal type
5. Follow any custom requirements provided
6. Make it culturally appropriate based on the user's nationality
7. Provide detailed ingredients and clear cooking instructions

Respond with valid JSON only, no additional text or formatting, using the keys
name, description, calories, protein, carbs, fat, fiber, ingredients,
instructions, prepTime, cookTime, servings.
"""
)

ANALYSIS_PROMPT = PromptTemplate.from_template(
    """Analyze the nutritional balance of this meal plan and provide recommendations for improvement:

Meals: {meals_data}

Provide a brief analysis of:
1. Overall calorie distribution
2. Macronutrient balance (protein, carbs, fat)
3. Micronutrient coverage
4. Suggestions for improvement

Keep the response concise and actionable.
"""
)

SUGGESTION_PROMPT = PromptTemplate.from_template(
    """Suggest 3 creative and nutritious {meal_type} meals using these available ingredients:

Available ingredients: {ingredients}

For each meal, provide:
- Name
- Brief description
- Estimated prep time
- Key nutritional benefits

Make the suggestions practical and delicious.
"""
)


# ============================================================================
# Output parsing
# ============================================================================

_FENCED_OBJECT_RE = re.compile(r"```(?:json)?\s*(\{[\s\S]*\})\s*```")
_FENCED_ARRAY_RE = re.compile(r"```(?:json)?\s*(\[[\s\S]*\])\s*```")


def parse_json_object(content: str, repair_truncated: bool = False):
    """
    Parse a JSON object from model output, unwrapping a ```json fence if present.

    With ``repair_truncated`` a response cut off inside the meals array is
    closed by appending ``]`` and the missing ``}`` characters.
    """
    match = _FENCED_OBJECT_RE.search(content)
    json_string = match.group(1) if match else content

    if repair_truncated and not json_string.strip().endswith("}"):
        missing = json_string.count("{") - json_string.count("}")
        if missing > 0:
            json_string += "]" + "}" * missing

    try:
        return json.loads(json_string)
    except json.JSONDecodeError as e:
        raise AIGenerationError(f"Failed to parse AI response as JSON: {e}") from e


def parse_json_array(content: str):
    match = _FENCED_ARRAY_RE.search(content)
    json_string = match.group(1) if match else content.strip()
    try:
        return json.loads(json_string)
    except json.JSONDecodeError as e:
        raise AIGenerationError(f"Failed to parse AI response as JSON: {e}") from e


def _is_timeout(exc: BaseException) -> bool:
    if isinstance(exc, asyncio.TimeoutError):
        return True
    message = str(exc).lower()
    return "timeout" in message or "timed out" in message


def build_chat_model() -> BaseChatModel:
    """Create the configured OpenAI chat model"""
    if not settings.openai_api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable is not set")
    return ChatOpenAI(
        model=settings.openai_model,
        temperature=settings.openai_temperature,
        max_tokens=settings.openai_max_tokens,
        timeout=settings.openai_timeout_sec,
        max_retries=settings.openai_max_retries,
        streaming=True,
        api_key=settings.openai_api_key,
    )


# ============================================================================
# Service
# ============================================================================


class AIService:
    """LangChain-backed meal generation"""

    def __init__(self, llm: Optional[BaseChatModel] = None):
        self._llm = llm

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = build_chat_model()
            logger.info("Chat model initialised: %s", settings.openai_model)
        return self._llm

    def _chain(self, prompt: PromptTemplate):
        return prompt | self.llm | StrOutputParser()

    @staticmethod
    def _profile_vars(user: Optional[User], default_goal: str = "General health") -> dict:
        return UserMapper.to_prompt_profile(user, default_goal=default_goal)

    # ------------------------------------------------------------ whole plan

    async def generate_diet_plan(self, user: User, request: DietPlanRequest) -> dict:
        """
        Generate a full week in a single request.

        Returns:
            {"description": str, "meals": [28 camelCase meals]}; never raises,
            a timeout switches to chunked generation and any other failure
            returns the fallback plan.
        """
        variables = {
            **self._profile_vars(user, default_goal="General health and wellness"),
            "input_preferences": ", ".join(request.preferences) or "None",
            "custom_requirements": request.custom_requirements or "None",
        }
        try:
            logger.info("Generating complete diet plan")
            loop = asyncio.get_running_loop()
            started = loop.time()
            content = await asyncio.wait_for(
                self._chain(FULL_PLAN_PROMPT).ainvoke(variables),
                timeout=settings.plan_generation_timeout_sec,
            )
            logger.info("Received plan response in %.2fs", loop.time() - started)

            result = parse_json_object(content, repair_truncated=True)
            meals = result.get("meals") if isinstance(result, dict) else None
            if not meals or len(meals) < MEALS_PER_WEEK:
                raise AIGenerationError(
                    f"Incomplete meal plan: only {len(meals or [])} out of {MEALS_PER_WEEK} required meals"
                )
            return GeneratedDietPlan.model_validate(result).formatted()

        except Exception as e:
            if _is_timeout(e):
                logger.warning("Plan generation timed out; switching to chunked generation")
                try:
                    return await self._generate_in_chunks(user)
                except Exception:
                    logger.exception("Chunked generation failed")
            else:
                logger.error("Plan generation failed, using fallback plan: %s", e)

        return create_fallback_diet_plan()

    async def _generate_in_chunks(self, user: User) -> dict:
        """One request per meal, two days at a time, with per-meal fallbacks"""
        chain = self._chain(SINGLE_SLOT_PROMPT)
        profile = self._profile_vars(user)
        meals: List[dict] = []

        for start in range(0, len(DAYS_OF_WEEK), CHUNK_SIZE_DAYS):
            chunk_days = DAYS_OF_WEEK[start:start + CHUNK_SIZE_DAYS]
            logger.info("Processing days %d-%d", start + 1, start + len(chunk_days))

            for day in chunk_days:
                for meal_type in GENERATION_MEAL_ORDER:
                    try:
                        content = await asyncio.wait_for(
                            chain.ainvoke({**profile, "day": day.value, "meal_type": meal_type.value}),
                            timeout=settings.meal_generation_timeout_sec,
                        )
                        generated = GeneratedMeal.model_validate(parse_json_object(content))
                        meals.append({"day": day.value, "mealType": meal_type.value, **generated.formatted()})
                    except Exception as e:
                        logger.warning("Error generating %s for %s, using fallback: %s", meal_type.value, day.value, e)
                        meals.append(fallback_meal(day, meal_type))

            if start + CHUNK_SIZE_DAYS < len(DAYS_OF_WEEK):
                await asyncio.sleep(settings.chunk_delay_sec)

        return {"description": CHUNKED_PLAN_DESCRIPTION, "meals": meals}

    # ------------------------------------------------------------ streaming

    async def stream_diet_plan(
        self, user: Optional[User], request: DietPlanRequest
    ) -> AsyncIterator[dict]:
        """
        Generate the week day by day, yielding ``{"type", "data"}`` events:
        start, progress, meal_streaming, day_complete, plan_complete, or error.

        A day whose output cannot be used is replaced by fallback meals; only
        failures outside the per-day work produce an ``error`` event.
        """
        total_days = len(DAYS_OF_WEEK)
        all_meals: List[dict] = []
        try:
            chain = self._chain(DAY_PROMPT)
            base_vars = {
                **self._profile_vars(user),
                "input_preferences": ", ".join(request.preferences) or "None",
                "custom_requirements": request.custom_requirements or "None",
            }

            yield {"type": "start", "data": {"totalDays": total_days}}

            for day_index, day in enumerate(DAYS_OF_WEEK):
                message = f"Generating meals for {day.value}..."
                yield {
                    "type": "progress",
                    "data": {"day": day.value, "dayIndex": day_index, "totalDays": total_days, "message": message},
                }

                previous = ""
                if all_meals:
                    previous = "\nAvoid duplicating: " + ", ".join(m["name"] for m in all_meals[-MEALS_PER_DAY:])

                try:
                    streamed = ""
                    async for chunk in chain.astream(
                        {**base_vars, "day": day.value, "day_number": day_index + 1, "previous_meals_context": previous}
                    ):
                        if not chunk:
                            continue
                        streamed += chunk
                        if len(streamed) % STREAM_PROGRESS_EVERY == 0:
                            yield {
                                "type": "meal_streaming",
                                "data": {"day": day.value, "progress": len(streamed), "message": message},
                            }

                    day_meals = self._parse_day(day.value, streamed)
                except Exception as e:
                    logger.error("Error generating meals for %s, using fallback day: %s", day.value, e)
                    day_meals = fallback_day(day)

                all_meals.extend(day_meals)
                yield {
                    "type": "day_complete",
                    "data": {"day": day.value, "dayIndex": day_index, "meals": day_meals, "totalDays": total_days},
                }

            yield {
                "type": "plan_complete",
                "data": {"description": STREAM_PLAN_DESCRIPTION, "meals": all_meals, "totalMeals": len(all_meals)},
            }
            logger.info("Streaming generation complete meals=%d", len(all_meals))

        except Exception as e:
            logger.exception("Streaming generation error")
            yield {"type": "error", "data": {"error": str(e) or "Unknown error"}}

    @staticmethod
    def _parse_day(day: str, content: str) -> List[dict]:
        meals = parse_json_array(content)
        if not isinstance(meals, list) or len(meals) != MEALS_PER_DAY:
            count = len(meals) if isinstance(meals, list) else 0
            raise AIGenerationError(f"Expected {MEALS_PER_DAY} meals, got {count}")
        return [
            GeneratedPlanMeal.model_validate({**meal, "day": day}).formatted()
            for meal in meals
        ]

    # ------------------------------------------------------------ single meal

    async def regenerate_meal(
        self, user: User, existing_meal: dict, custom_requirements: Optional[str] = None
    ) -> dict:
        """
        Produce a replacement for one meal slot.

        Args:
            existing_meal: camelCase meal JSON of the meal being replaced

        Returns:
            Formatted camelCase meal without day/mealType

        Raises:
            AIGenerationError: when the model output is missing or invalid
        """
        variables = {
            **self._profile_vars(user),
            "existing_name": existing_meal.get("name"),
            "existing_meal_type": existing_meal.get("mealType"),
            "existing_day": existing_meal.get("day"),
            "existing_calories": existing_meal.get("calories"),
            "existing_description": existing_meal.get("description") or "",
            "custom_requirements": custom_requirements or "Generate a similar but different meal with variety",
        }
        try:
            streamed = ""
            async for chunk in self._chain(REGENERATE_PROMPT).astream(variables):
                streamed += chunk
            generated = GeneratedMeal.model_validate(parse_json_object(streamed))
        except (AIGenerationError, ValidationError) as e:
            logger.error("Meal regeneration failed: %s", e)
            raise AIGenerationError(f"Failed to regenerate meal: {e}") from e
        except Exception as e:
            logger.exception("Meal regeneration failed")
            raise AIGenerationError(f"Failed to regenerate meal: {e}") from e

        logger.info("Regenerated meal %r -> %r", existing_meal.get("name"), generated.name)
        return generated.formatted()

    # ------------------------------------------------------------ free text helpers

    async def analyze_nutritional_balance(self, meals: Sequence[dict]) -> str:
        try:
            # Only the first five meals go into the prompt
            content = await self._chain(ANALYSIS_PROMPT).ainvoke(
                {"meals_data": json.dumps(list(meals)[:5])}
            )
            return content or "Analysis unavailable"
        except Exception as e:
            logger.error("Nutritional analysis error: %s", e)
            return "Nutritional analysis temporarily unavailable."

    async def suggest_meals_from_ingredients(
        self, ingredients: Sequence[str], meal_type: str = "DINNER"
    ) -> str:
        try:
            content = await self._chain(SUGGESTION_PROMPT).ainvoke(
                {"meal_type": meal_type, "ingredients": ", ".join(ingredients)}
            )
            return content or "Suggestions unavailable"
        except Exception as e:
            logger.error("Meal suggestion error: %s", e)
            return "Meal suggestions temporarily unavailable."


ai_service = AIService()
