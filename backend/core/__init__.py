"""Core configuration, security and error primitives."""

from .config import Settings, settings
from .errors import (
    ApiError,
    error_body,
    error_response,
    invalid_body_error,
    invalid_json_error,
    register_exception_handlers,
)
from .security import (
    create_csrf_token,
    create_session_token,
    decode_session_token,
    hash_password,
    needs_rehash,
    verify_csrf_token,
    verify_password,
)

__all__ = [
    "Settings",
    "settings",
    "ApiError",
    "error_body",
    "error_response",
    "invalid_body_error",
    "invalid_json_error",
    "register_exception_handlers",
    "create_csrf_token",
    "create_session_token",
    "decode_session_token",
    "hash_password",
    "needs_rehash",
    "verify_csrf_token",
    "verify_password",
]
