"""
Consolidated middleware for the Diet Planner API
"""

import time
import logging
from datetime import datetime, timezone
from uuid import uuid4

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.exceptions import DietPlannerError

logger = logging.getLogger("dietplanner.middleware")


def error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    """Uniform error envelope used by every REST handler"""
    error = {"code": code, "message": message}
    if details:
        error["details"] = jsonable_encoder(details)
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        },
    )


# ============================================================================
# Request Logging Middleware
# ============================================================================


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all HTTP requests and responses"""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id

        logger.info(
            f"request_started id={request_id} method={request.method} url={request.url} "
            f"client={request.client.host if request.client else None}"
        )

        start_time = time.time()

        try:
            response: Response = await call_next(request)
            process_time = time.time() - start_time

            logger.info(
                f"request_completed id={request_id} method={request.method} url={request.url} "
                f"status={response.status_code} duration={process_time:.4f}s"
            )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{process_time:.4f}"

            return response

        except Exception as exc:
            process_time = time.time() - start_time
            logger.error(
                f"request_failed id={request_id} method={request.method} url={request.url} "
                f"error={exc} duration={process_time:.4f}s",
                exc_info=True,
            )
            raise


# ============================================================================
# Error Handlers
# ============================================================================


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors"""
    logger.warning(f"Validation error on {request.url}: {exc.errors()}")

    return error_response(
        status.HTTP_422_UNPROCESSABLE_CONTENT,
        "VALIDATION_ERROR",
        "Request validation failed",
        exc.errors(),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions"""
    logger.warning(f"HTTP {exc.status_code} on {request.url}: {exc.detail}")

    return error_response(exc.status_code, f"HTTP_{exc.status_code}", exc.detail)


async def service_exception_handler(request: Request, exc: DietPlannerError):
    """Handle application errors raised by the service layer"""
    logger.warning(f"{exc.code} on {request.url}: {exc.message}")

    return error_response(exc.http_status, exc.code, exc.message, exc.details)


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.exception(f"Unexpected error on {request.url}: {str(exc)}")

    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred",
    )
