"""Storage interfaces used by the API layer."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from models import Goal, User


class DuplicateEmailError(Exception):
    """Raised when a user with the same normalized email already exists."""

    def __init__(self, email: str) -> None:
        super().__init__(f"User with email {email!r} already exists")
        self.email = email


@runtime_checkable
class UserRepository(Protocol):
    async def get_by_email(self, email: str) -> User | None: ...

    async def get_by_id(self, user_id: str) -> User | None: ...

    async def create(self, *, email: str, password_hash: str) -> User: ...

    async def update_password(self, user_id: str, password_hash: str) -> bool: ...


@runtime_checkable
class GoalRepository(Protocol):
    async def list_for_user(self, user_id: str) -> Sequence[Goal]: ...

    async def get(self, goal_id: str) -> Goal | None: ...

    async def create(self, goal: Goal) -> Goal: ...

    async def update(self, goal_id: str, changes: Mapping[str, Any]) -> Goal | None: ...

    async def delete(self, goal_id: str) -> bool: ...
