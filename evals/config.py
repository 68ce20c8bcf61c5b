"""
LangSmith settings for the evaluation suite.
"""

import logging
import os

from langsmith import Client

from app.config import settings

logger = logging.getLogger("dietplanner.evals")

LANGSMITH_PROJECT = settings.langsmith_project

DATASET_DIET_PLAN_GENERATION = "diet-plan-generation"
DATASET_MEAL_REGENERATION = "meal-regeneration"
DATASET_USER_PREFERENCES = "user-preference-adherence"

DATASET_NAMES = {
    "DIET_PLAN_GENERATION": DATASET_DIET_PLAN_GENERATION,
    "MEAL_REGENERATION": DATASET_MEAL_REGENERATION,
    "USER_PREFERENCES": DATASET_USER_PREFERENCES,
}


def get_langsmith_client() -> Client:
    """LangSmith client built from settings; the API key is mandatory"""
    if not settings.langsmith_api_key:
        raise RuntimeError(
            "LANGSMITH_API_KEY is required. Get your key from https://smith.langchain.com/settings"
        )
    return Client(api_key=settings.langsmith_api_key, api_url=settings.langsmith_endpoint)


def setup_langsmith_env() -> None:
    """Turn on LangChain tracing so every model call lands in the eval project"""
    os.environ["LANGCHAIN_TRACING_V2"] = "true"
    os.environ["LANGSMITH_TRACING"] = "true"
    os.environ["LANGCHAIN_PROJECT"] = LANGSMITH_PROJECT
    if settings.langsmith_api_key:
        os.environ.setdefault("LANGSMITH_API_KEY", settings.langsmith_api_key)
    logger.info(f"LangSmith tracing enabled for project: {LANGSMITH_PROJECT}")
