"""Authentication domain services."""

from .cookies import (
    COOKIE_SAMESITE,
    CSRF_COOKIE,
    CSRF_HEADER,
    SESSION_COOKIE,
    clear_auth_cookies,
    cookie_secure,
    read_csrf_header,
    read_session_cookie,
    set_auth_cookies,
)
from .identity_resolution import (
    MAX_PASSWORD_LENGTH,
    MIN_PASSWORD_LENGTH,
    hash_password_async,
    normalize_email,
    require_credentials,
    resolve_login_user,
    validate_email,
    validate_password_strength,
)

__all__ = [
    "COOKIE_SAMESITE",
    "CSRF_COOKIE",
    "CSRF_HEADER",
    "SESSION_COOKIE",
    "clear_auth_cookies",
    "cookie_secure",
    "read_csrf_header",
    "read_session_cookie",
    "set_auth_cookies",
    "MAX_PASSWORD_LENGTH",
    "MIN_PASSWORD_LENGTH",
    "hash_password_async",
    "normalize_email",
    "require_credentials",
    "resolve_login_user",
    "validate_email",
    "validate_password_strength",
]
