"""Authentication endpoints."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field, StrictStr

from api.deps import Users
from api.schemas import CamelModel
from core import ApiError, create_csrf_token, create_session_token
from models import User
from services.auth import (
    clear_auth_cookies,
    hash_password_async,
    require_credentials,
    resolve_login_user,
    set_auth_cookies,
    validate_email,
    validate_password_strength,
)
from services.repositories import DuplicateEmailError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

PASSWORD_RESET_MESSAGE = (
    "If an account exists for this email, its password has been reset"
)


class CredentialsRequest(BaseModel):
    email: StrictStr | None = None
    password: StrictStr | None = None


class ResetPasswordRequest(BaseModel):
    email: StrictStr | None = None
    new_password: StrictStr | None = Field(default=None, alias="newPassword")


class UserResponse(CamelModel):
    id: str
    email: str
    created_at: datetime


class AuthResponse(CamelModel):
    user: UserResponse
    csrf_token: str


class MessageResponse(BaseModel):
    message: str


def _issue_session(response: Response, user: User) -> AuthResponse:
    session_token = create_session_token(user.id)
    csrf_token = create_csrf_token(user.id)
    set_auth_cookies(response, session_token, csrf_token)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        csrf_token=csrf_token,
    )


def _user_exists() -> ApiError:
    return ApiError(
        status.HTTP_409_CONFLICT,
        "USER_EXISTS",
        "An account with this email address already exists",
    )


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=AuthResponse)
async def register(
    payload: CredentialsRequest,
    response: Response,
    users: Users,
) -> AuthResponse:
    email, password = require_credentials(payload.email, payload.password)
    normalized_email = validate_email(email)
    validate_password_strength(password)

    if await users.get_by_email(normalized_email) is not None:
        raise _user_exists()

    try:
        user = await users.create(
            email=normalized_email,
            password_hash=await hash_password_async(password),
        )
    except DuplicateEmailError as exc:
        raise _user_exists() from exc

    logger.info("Registered user %s", user.id)
    return _issue_session(response, user)


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: CredentialsRequest,
    response: Response,
    users: Users,
) -> AuthResponse:
    email, password = require_credentials(payload.email, payload.password)
    normalized_email = validate_email(email)

    user = await resolve_login_user(users, email=normalized_email, password=password)
    if user is None:
        logger.info("Failed login attempt")
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "INVALID_CREDENTIALS",
            "Invalid email or password",
        )

    logger.info("User %s logged in", user.id)
    return _issue_session(response, user)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    clear_auth_cookies(response)
    return MessageResponse(message="Logged out")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    users: Users,
) -> MessageResponse:
    if not payload.email or not payload.new_password:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "MISSING_CREDENTIALS",
            "Email and new password are required",
        )
    normalized_email = validate_email(payload.email)
    validate_password_strength(payload.new_password)

    # Hash before the lookup so both outcomes cost the same.
    password_hash = await hash_password_async(payload.new_password)
    user = await users.get_by_email(normalized_email)
    if user is not None:
        await users.update_password(user.id, password_hash)
        logger.info("Password reset for user %s", user.id)
    else:
        logger.info("Password reset requested for unknown email")

    return MessageResponse(message=PASSWORD_RESET_MESSAGE)
