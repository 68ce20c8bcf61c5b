"""
Diet Planner FastAPI Application
Main entry point: GraphQL API, streaming generation endpoint and health check
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import anyio
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.graphql import graphql_router
from api.middleware import (
    RequestLoggingMiddleware,
    general_exception_handler,
    http_exception_handler,
    service_exception_handler,
    validation_exception_handler,
)
from api.routes import health, stream
from app.config import settings
from app.exceptions import DietPlannerError
from domain.models import init_database

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)
_logger = logging.getLogger("dietplanner.main")

DEFAULT_JWT_SECRET = "change-me-in-production"


def _report_integrations() -> None:
    """Log which optional integrations are configured for this process"""
    if settings.openai_api_key:
        _logger.info(f"Plan generation uses OpenAI model {settings.openai_model}")
    else:
        _logger.warning("OPENAI_API_KEY not set; generated plans will use the built-in fallback menu")

    if settings.is_production() and not settings.smtp_user:
        _logger.warning(f"SMTP_USER not set; emails go to {settings.smtp_host} without authentication")

    if settings.is_production() and settings.jwt_secret == DEFAULT_JWT_SECRET:
        _logger.error("JWT_SECRET is the default value; set a real secret before serving traffic")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup creates the database schema, retrying while the database comes up.
    """
    _logger.info(f"Starting Diet Planner in {settings.environment.value} mode")

    last_exc: Optional[Exception] = None
    for attempt in range(1, settings.db_init_attempts + 1):
        try:
            # init_database blocks; keep it off the event loop
            await anyio.to_thread.run_sync(init_database)
            _logger.info("Database initialization succeeded")
            break
        except Exception as exc:
            last_exc = exc
            _logger.warning(
                "Database init attempt %d/%d failed: %s",
                attempt,
                settings.db_init_attempts,
                exc,
            )
            if attempt == settings.db_init_attempts:
                _logger.error("Giving up on database after %d attempts: %s", attempt, last_exc)
                raise
            await anyio.sleep(settings.db_init_delay_sec)

    _report_integrations()
    _logger.info(f"Server ready at http://{settings.host}:{settings.port}/graphql")
    try:
        yield
    finally:
        _logger.info("Shutting down Diet Planner")


def _docs_url(path: str) -> Optional[str]:
    return None if settings.is_production() else f"{settings.api_prefix}{path}"


app = FastAPI(
    title=settings.api_title,
    version=settings.app_version,
    description=settings.api_description,
    lifespan=lifespan,
    debug=settings.debug,
    openapi_url=_docs_url("/openapi.json"),
    docs_url=_docs_url("/docs"),
    redoc_url=_docs_url("/redoc"),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)
app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(DietPlannerError, service_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(graphql_router, prefix="/graphql")
app.include_router(stream.router, prefix=settings.api_prefix)
app.include_router(health.router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
