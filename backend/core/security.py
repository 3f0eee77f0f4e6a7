"""Password hashing and signed token helpers."""

from __future__ import annotations

import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from .config import settings

SESSION_TOKEN_TYPE = "session"
CSRF_TOKEN_TYPE = "csrf"
CSRF_NONCE_BYTES = 24

_password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def needs_rehash(password_hash: str) -> bool:
    try:
        return _password_hasher.check_needs_rehash(password_hash)
    except InvalidHashError:
        return True


def _encode(
    claims: dict[str, Any],
    *,
    secret: str,
    expires_delta: timedelta,
) -> str:
    issued_at = datetime.now(timezone.utc)
    payload = {
        **claims,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(payload, secret, algorithm=settings.jwt_algorithm)


def _decode(token: str, *, secret: str, expected_type: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.PyJWTError as exc:
        raise ValueError("Invalid token") from exc

    if payload.get("type") != expected_type:
        raise ValueError("Unexpected token type")
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise ValueError("Token subject missing")
    return payload


def create_session_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    ttl = expires_delta or timedelta(minutes=settings.session_token_expire_minutes)
    return _encode(
        {"sub": user_id, "type": SESSION_TOKEN_TYPE},
        secret=settings.jwt_secret,
        expires_delta=ttl,
    )


def decode_session_token(token: str) -> dict[str, Any]:
    """Decode a session token, raising ValueError when it is unusable."""
    return _decode(token, secret=settings.jwt_secret, expected_type=SESSION_TOKEN_TYPE)


def generate_csrf_nonce() -> str:
    return secrets.token_urlsafe(CSRF_NONCE_BYTES)


def create_csrf_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    ttl = expires_delta or timedelta(minutes=settings.csrf_token_expire_minutes)
    return _encode(
        {"sub": user_id, "type": CSRF_TOKEN_TYPE, "nonce": generate_csrf_nonce()},
        secret=settings.csrf_secret,
        expires_delta=ttl,
    )


def verify_csrf_token(token: str, user_id: str) -> bool:
    """Return True when the anti-forgery token is valid and bound to ``user_id``."""
    try:
        payload = _decode(token, secret=settings.csrf_secret, expected_type=CSRF_TOKEN_TYPE)
    except ValueError:
        return False

    nonce = payload.get("nonce")
    if not isinstance(nonce, str) or not nonce:
        return False
    return hmac.compare_digest(payload["sub"].encode("utf-8"), user_id.encode("utf-8"))
