"""Tests for password hashing and the signed token helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from core import (
    create_csrf_token,
    create_session_token,
    decode_session_token,
    hash_password,
    needs_rehash,
    verify_csrf_token,
    verify_password,
)
from core.config import settings


def test_hash_password_round_trip() -> None:
    hashed = hash_password("Sup3rSecret1")

    assert hashed != "Sup3rSecret1"
    assert verify_password("Sup3rSecret1", hashed)
    assert not verify_password("wrong-password1", hashed)
    assert not needs_rehash(hashed)


def test_verify_password_rejects_malformed_hash() -> None:
    assert not verify_password("Sup3rSecret1", "not-a-hash")
    assert needs_rehash("not-a-hash")


def test_session_token_carries_subject_and_absolute_expiry() -> None:
    token = create_session_token("user-1")
    payload = decode_session_token(token)

    assert payload["sub"] == "user-1"
    assert payload["type"] == "session"
    lifetime = payload["exp"] - payload["iat"]
    assert lifetime == settings.session_token_expire_minutes * 60


def test_expired_session_token_is_rejected() -> None:
    token = create_session_token("user-1", expires_delta=timedelta(seconds=-1))

    with pytest.raises(ValueError):
        decode_session_token(token)


def test_session_token_signed_with_other_secret_is_rejected() -> None:
    now = datetime.now(timezone.utc)
    forged = jwt.encode(
        {"sub": "user-1", "type": "session", "iat": now, "exp": now + timedelta(hours=1)},
        "an-attacker-chosen-signing-secret-value",
        algorithm="HS256",
    )

    with pytest.raises(ValueError):
        decode_session_token(forged)


def test_csrf_token_cannot_be_used_as_session_token() -> None:
    csrf_token = create_csrf_token("user-1")

    with pytest.raises(ValueError):
        decode_session_token(csrf_token)


def test_session_token_cannot_be_used_as_csrf_token() -> None:
    session_token = create_session_token("user-1")

    assert not verify_csrf_token(session_token, "user-1")


def test_csrf_token_is_bound_to_user() -> None:
    token = create_csrf_token("user-1")

    assert verify_csrf_token(token, "user-1")
    assert not verify_csrf_token(token, "user-2")


def test_csrf_tokens_carry_fresh_nonces() -> None:
    first = jwt.decode(create_csrf_token("user-1"), options={"verify_signature": False})
    second = jwt.decode(create_csrf_token("user-1"), options={"verify_signature": False})

    assert first["nonce"]
    assert first["nonce"] != second["nonce"]


def test_expired_csrf_token_is_rejected() -> None:
    token = create_csrf_token("user-1", expires_delta=timedelta(seconds=-1))

    assert not verify_csrf_token(token, "user-1")


def test_csrf_token_without_nonce_is_rejected() -> None:
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "user-1", "type": "csrf", "iat": now, "exp": now + timedelta(hours=1)},
        settings.csrf_secret,
        algorithm=settings.jwt_algorithm,
    )

    assert not verify_csrf_token(token, "user-1")


def test_csrf_token_signed_with_session_secret_is_rejected() -> None:
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {
            "sub": "user-1",
            "type": "csrf",
            "nonce": "abc",
            "iat": now,
            "exp": now + timedelta(hours=1),
        },
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )

    assert not verify_csrf_token(token, "user-1")


def test_garbage_csrf_token_is_rejected() -> None:
    assert not verify_csrf_token("not.a.token", "user-1")
