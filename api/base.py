"""API error body format and error codes."""

from typing import Any

from pydantic import BaseModel, Field
from starlette.responses import JSONResponse


class APIError(BaseModel):
    """
    Error body returned by every endpoint on failure.

    `message` is meant for display next to the form or table that made the
    request; `error` is the machine-readable code.
    """

    message: str = Field(..., description="Human-readable error message")
    error: str = Field(..., description="Machine-readable error code")


def error_response(code: str, message: str) -> APIError:
    """Create an error body."""
    return APIError(message=message, error=code)


def error_json(status_code: int, code: str, message: str, headers: dict | None = None) -> JSONResponse:
    """Create a JSONResponse carrying an error body."""
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message).model_dump(mode="json"),
        headers=headers,
    )


def message_response(message: str, **extra: Any) -> dict[str, Any]:
    """Body for operations that only report what happened (delete, logout)."""
    return {"message": message, **extra}


class ErrorCodes:
    """Standard error codes for consistent error handling."""

    # Authentication
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Resource Errors
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    INVALID_REFERENCE = "INVALID_REFERENCE"
    HAS_DEPENDENCIES = "HAS_DEPENDENCIES"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"

    # Infrastructure
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
