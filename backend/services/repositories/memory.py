"""Dict-backed repositories; state lives only as long as the process."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from models import Goal, User

from .base import DuplicateEmailError


class InMemoryUserRepository:
    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._ids_by_email: dict[str, str] = {}

    async def get_by_email(self, email: str) -> User | None:
        user_id = self._ids_by_email.get(email)
        return self._users.get(user_id) if user_id is not None else None

    async def get_by_id(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    async def create(self, *, email: str, password_hash: str) -> User:
        if email in self._ids_by_email:
            raise DuplicateEmailError(email)
        user = User(email=email, password_hash=password_hash)
        self._users[user.id] = user
        self._ids_by_email[email] = user.id
        return user

    async def update_password(self, user_id: str, password_hash: str) -> bool:
        user = self._users.get(user_id)
        if user is None:
            return False
        user.password_hash = password_hash
        return True


class InMemoryGoalRepository:
    def __init__(self) -> None:
        self._goals: dict[str, Goal] = {}

    async def list_for_user(self, user_id: str) -> Sequence[Goal]:
        return [goal for goal in self._goals.values() if goal.user_id == user_id]

    async def get(self, goal_id: str) -> Goal | None:
        return self._goals.get(goal_id)

    async def create(self, goal: Goal) -> Goal:
        if goal.id in self._goals:
            raise ValueError(f"Goal {goal.id!r} already exists")
        self._goals[goal.id] = goal
        return goal

    async def update(self, goal_id: str, changes: Mapping[str, Any]) -> Goal | None:
        goal = self._goals.get(goal_id)
        if goal is None:
            return None
        for field, value in changes.items():
            setattr(goal, field, value)
        return goal

    async def delete(self, goal_id: str) -> bool:
        return self._goals.pop(goal_id, None) is not None
