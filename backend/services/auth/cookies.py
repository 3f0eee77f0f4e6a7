"""HTTP cookie helpers for session and anti-forgery token transport."""

from __future__ import annotations

from datetime import timedelta
from typing import Literal

from fastapi import Request, Response

from core import settings

SESSION_COOKIE = "session_token"
CSRF_COOKIE = "progressify-csrf"
CSRF_HEADER = "x-csrf-token"
COOKIE_PATH = "/"
COOKIE_SAMESITE: Literal["lax", "strict", "none"] = "strict"


def cookie_secure() -> bool:
    return not settings.is_insecure_env and not settings.allow_insecure_http_cookies


def _session_token_ttl() -> timedelta:
    return timedelta(minutes=settings.session_token_expire_minutes)


def _csrf_token_ttl() -> timedelta:
    return timedelta(minutes=settings.csrf_token_expire_minutes)


def set_auth_cookies(response: Response, session_token: str, csrf_token: str) -> None:
    secure = cookie_secure()
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session_token,
        httponly=True,
        secure=secure,
        samesite=COOKIE_SAMESITE,
        max_age=int(_session_token_ttl().total_seconds()),
        path=COOKIE_PATH,
    )
    # Readable by client scripts so they can echo it in the CSRF header.
    response.set_cookie(
        key=CSRF_COOKIE,
        value=csrf_token,
        httponly=False,
        secure=secure,
        samesite=COOKIE_SAMESITE,
        max_age=int(_csrf_token_ttl().total_seconds()),
        path=COOKIE_PATH,
    )


def clear_auth_cookies(response: Response) -> None:
    secure = cookie_secure()
    response.delete_cookie(
        key=SESSION_COOKIE,
        path=COOKIE_PATH,
        secure=secure,
        httponly=True,
        samesite=COOKIE_SAMESITE,
    )
    response.delete_cookie(
        key=CSRF_COOKIE,
        path=COOKIE_PATH,
        secure=secure,
        samesite=COOKIE_SAMESITE,
    )


def read_session_cookie(request: Request) -> str | None:
    token = request.cookies.get(SESSION_COOKIE)
    return token or None


def read_csrf_header(request: Request) -> str | None:
    token = request.headers.get(CSRF_HEADER)
    if token is None:
        return None
    token = token.strip()
    return token or None
