"""Request-scoped dependencies: repositories and the session/CSRF gate.

Routes chain these explicitly. Read-only handlers depend on
``get_current_user``; state-changing handlers depend on
``get_csrf_verified_user``, which itself resolves the session first and then
checks the anti-forgery header.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Request, status

from core import ApiError, decode_session_token, verify_csrf_token
from models import User
from services.auth import read_csrf_header, read_session_cookie
from services.repositories import GoalRepository, UserRepository

logger = logging.getLogger(__name__)

CSRF_PROTECTED_METHODS = frozenset({"POST", "PUT", "DELETE", "PATCH"})


def get_user_repository(request: Request) -> UserRepository:
    return request.app.state.users


def get_goal_repository(request: Request) -> GoalRepository:
    return request.app.state.goals


def requires_csrf_protection(method: str) -> bool:
    return method.upper() in CSRF_PROTECTED_METHODS


async def get_current_user(
    request: Request,
    users: UserRepository = Depends(get_user_repository),
) -> User:
    """Resolve the session cookie to a stored user or reject with 401."""
    token = read_session_cookie(request)
    if token is None:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "UNAUTHORIZED",
            "Authentication required",
        )

    try:
        payload = decode_session_token(token)
    except ValueError as exc:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "INVALID_SESSION",
            "Session is invalid or has expired",
        ) from exc

    user = await users.get_by_id(payload["sub"])
    if user is None:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "USER_NOT_FOUND",
            "User not found",
        )

    request.state.user = user
    return user


async def get_csrf_verified_user(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> User:
    """Require a valid anti-forgery header bound to the session user.

    Safe methods pass straight through so the dependency can be shared by
    routers that mix reads and writes.
    """
    if not requires_csrf_protection(request.method):
        return current_user

    token = read_csrf_header(request)
    if token is None:
        logger.warning(
            "CSRF token missing on %s %s for user %s",
            request.method,
            request.url.path,
            current_user.id,
        )
        raise ApiError(
            status.HTTP_403_FORBIDDEN,
            "CSRF_MISSING",
            "CSRF token is missing from request",
        )

    if not verify_csrf_token(token, current_user.id):
        logger.warning(
            "CSRF token rejected on %s %s for user %s",
            request.method,
            request.url.path,
            current_user.id,
        )
        raise ApiError(
            status.HTTP_403_FORBIDDEN,
            "CSRF_INVALID",
            "CSRF token validation failed",
        )

    return current_user


CurrentUser = Annotated[User, Depends(get_current_user)]
CsrfVerifiedUser = Annotated[User, Depends(get_csrf_verified_user)]
Users = Annotated[UserRepository, Depends(get_user_repository)]
Goals = Annotated[GoalRepository, Depends(get_goal_repository)]
