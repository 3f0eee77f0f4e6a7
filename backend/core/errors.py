"""Structured API errors and their JSON rendering."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again."
INVALID_JSON_MESSAGE = "Invalid JSON in request body"

# Type errors on these request fields surface with a field-specific code.
FIELD_TYPE_ERROR_CODES: Mapping[str, str] = {
    "email": "INVALID_EMAIL_FORMAT",
    "password": "INVALID_PASSWORD_TYPE",
    "newPassword": "INVALID_PASSWORD_TYPE",
    "title": "INVALID_TITLE_TYPE",
    "description": "INVALID_DESCRIPTION_TYPE",
    "totalSteps": "INVALID_TOTAL_STEPS",
    "completedSteps": "INVALID_COMPLETED_STEPS",
    "color": "INVALID_COLOR_TYPE",
}

_STATUS_CODES: Mapping[int, str] = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_409_CONFLICT: "CONFLICT",
    status.HTTP_429_TOO_MANY_REQUESTS: "RATE_LIMIT_EXCEEDED",
}


class ApiError(HTTPException):
    """HTTP error carrying a stable, client-facing error code."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            status_code=status_code,
            detail=message,
            headers=dict(headers) if headers else None,
        )
        self.code = code
        self.message = message


def error_body(message: str, code: str) -> dict[str, str]:
    return {"error": message, "code": code}


def error_response(
    status_code: int,
    message: str,
    code: str,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        error_body(message, code),
        status_code=status_code,
        headers=dict(headers) if headers else None,
    )


async def _handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.status_code, exc.message, exc.code, exc.headers)


async def _handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    code = _STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(exc.status_code, message, code, exc.headers)


def validation_error_code(errors: Sequence[Mapping[str, Any]]) -> tuple[str, str]:
    """Collapse pydantic error entries into one client-facing code and message."""
    if any(error.get("type") == "json_invalid" for error in errors):
        return "INVALID_JSON", INVALID_JSON_MESSAGE

    for error in errors:
        location = error.get("loc") or ()
        field = location[-1] if location else None
        if isinstance(field, str) and field in FIELD_TYPE_ERROR_CODES:
            return FIELD_TYPE_ERROR_CODES[field], f"Invalid value for '{field}'"
    return "INVALID_REQUEST", "Invalid request format"


def invalid_body_error(errors: Sequence[Mapping[str, Any]]) -> ApiError:
    code, message = validation_error_code(errors)
    return ApiError(status.HTTP_400_BAD_REQUEST, code, message)


def invalid_json_error() -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, "INVALID_JSON", INVALID_JSON_MESSAGE)


async def _handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    code, message = validation_error_code(exc.errors())
    return error_response(status.HTTP_400_BAD_REQUEST, message, code)


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        INTERNAL_ERROR_MESSAGE,
        "INTERNAL_ERROR",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _handle_api_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)


__all__ = [
    "ApiError",
    "FIELD_TYPE_ERROR_CODES",
    "error_body",
    "error_response",
    "invalid_body_error",
    "invalid_json_error",
    "register_exception_handlers",
    "validation_error_code",
]
