"""API modules for HTTP interface."""

from api.base import (
    APIError,
    error_response,
    error_json,
    message_response,
    ErrorCodes,
)
