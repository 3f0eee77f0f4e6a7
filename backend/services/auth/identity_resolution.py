"""Credential normalization, validation and login-user resolution."""

from __future__ import annotations

import asyncio
import re

from fastapi import status

from core import ApiError, hash_password, needs_rehash, verify_password
from models import User
from services.repositories import UserRepository

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128
_LETTER_PATTERN = re.compile(r"[A-Za-z]")
_DIGIT_PATTERN = re.compile(r"\d")


def normalize_email(value: str) -> str:
    return value.strip().lower()


def _bad_request(code: str, message: str) -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, code, message)


def require_credentials(email: str | None, password: str | None) -> tuple[str, str]:
    if not email or not password:
        raise _bad_request("MISSING_CREDENTIALS", "Email and password are required")
    return email, password


def validate_email(email: str) -> str:
    """Return the normalized email or raise INVALID_EMAIL_FORMAT."""
    normalized = normalize_email(email)
    if not EMAIL_PATTERN.fullmatch(normalized):
        raise _bad_request("INVALID_EMAIL_FORMAT", "Please enter a valid email address")
    return normalized


def validate_password_strength(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise _bad_request(
            "PASSWORD_TOO_SHORT",
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
        )
    if len(password) > MAX_PASSWORD_LENGTH:
        raise _bad_request(
            "PASSWORD_TOO_LONG",
            f"Password cannot exceed {MAX_PASSWORD_LENGTH} characters",
        )
    if not _LETTER_PATTERN.search(password) or not _DIGIT_PATTERN.search(password):
        raise _bad_request(
            "PASSWORD_TOO_WEAK",
            "Password must contain at least one letter and one number",
        )


async def hash_password_async(password: str) -> str:
    return await asyncio.to_thread(hash_password, password)


async def resolve_login_user(
    users: UserRepository,
    *,
    email: str,
    password: str,
) -> User | None:
    """Return the user owning ``email`` when ``password`` matches, else None.

    A successful login with a hash produced under older parameters is
    transparently rehashed.
    """
    user = await users.get_by_email(normalize_email(email))
    if user is None:
        return None

    if not await asyncio.to_thread(verify_password, password, user.password_hash):
        return None

    if needs_rehash(user.password_hash):
        await users.update_password(user.id, await hash_password_async(password))
    return user
