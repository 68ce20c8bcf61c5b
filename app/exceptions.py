from typing import Any, Mapping, Optional


class DietPlannerError(Exception):
    """Base class for errors raised by the service layer.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: machine-readable error code, also used as the GraphQL extensions code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Internal error"
    default_code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(DietPlannerError):
    """Raised when input data is invalid or a precondition for a service call is not met."""

    http_status = 400
    default_message = "Invalid input"
    default_code = "BAD_USER_INPUT"


class UnauthorizedError(DietPlannerError):
    """Raised when the caller is not authenticated or presented bad credentials."""

    http_status = 401
    default_message = "Not authenticated"
    default_code = "UNAUTHENTICATED"


class ForbiddenError(DietPlannerError):
    """Raised when a resource exists but belongs to another user (or does not exist;
    the two cases are reported identically)."""

    http_status = 403
    default_message = "Access denied"
    default_code = "FORBIDDEN"


class NotFoundError(DietPlannerError):
    """Raised when a requested resource was not found."""

    http_status = 404
    default_message = "Not found"
    default_code = "NOT_FOUND"


class ConflictError(DietPlannerError):
    """Raised when a resource conflict occurs (e.g., duplicate entry)."""

    http_status = 409
    default_message = "Conflict"
    default_code = "CONFLICT"


class RateLimitError(DietPlannerError):
    """Raised when a caller exceeds an attempt budget."""

    http_status = 429
    default_message = "Too many requests"
    default_code = "RATE_LIMITED"
