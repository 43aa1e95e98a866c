"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from api.base import error_json, ErrorCodes
from clients.identity_client import IdentityProviderError
from core.exceptions import (
    ResourceNotFoundError,
    ResourceConflictError,
    InvalidReferenceError,
    ResourceInUseError,
)

logger = logging.getLogger(__name__)


def describe_validation_errors(errors: list[dict]) -> str:
    """Turn pydantic error dicts into one sentence for the UI."""
    missing = []
    problems = []

    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc)

        if err.get("type") == "missing":
            missing.append(field)
        elif err.get("type") == "json_invalid":
            problems.append("Request body is not valid JSON")
        else:
            message = err.get("msg", "Invalid value")
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            problems.append(f"{field}: {message}" if field else message)

    parts = []
    if missing:
        parts.append(f"Missing required fields: {', '.join(missing)}")
    parts.extend(problems)
    return "; ".join(parts) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(ResourceNotFoundError)
    async def not_found_handler(request: Request, exc: ResourceNotFoundError):
        return error_json(404, ErrorCodes.NOT_FOUND, str(exc))

    @app.exception_handler(ResourceConflictError)
    async def conflict_handler(request: Request, exc: ResourceConflictError):
        return error_json(409, ErrorCodes.ALREADY_EXISTS, str(exc))

    @app.exception_handler(InvalidReferenceError)
    async def invalid_reference_handler(request: Request, exc: InvalidReferenceError):
        return error_json(400, ErrorCodes.INVALID_REFERENCE, str(exc))

    @app.exception_handler(ResourceInUseError)
    async def in_use_handler(request: Request, exc: ResourceInUseError):
        return error_json(409, ErrorCodes.HAS_DEPENDENCIES, str(exc))

    @app.exception_handler(IdentityProviderError)
    async def identity_unavailable_handler(request: Request, exc: IdentityProviderError):
        logger.error(f"Identity provider unavailable: {exc}")
        return error_json(
            503,
            ErrorCodes.SERVICE_UNAVAILABLE,
            "Authentication service is unavailable. Please try again.",
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        message = str(exc)
        if "not found" in message.lower():
            return error_json(404, ErrorCodes.NOT_FOUND, message)
        return error_json(400, ErrorCodes.INVALID_REQUEST, message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return error_json(400, ErrorCodes.VALIDATION_ERROR, describe_validation_errors(exc.errors()))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return error_json(500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
