"""SQLAlchemy-backed repositories over the SQLModel tables."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, cast

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql import ColumnElement

from db.errors import is_unique_violation
from models import Goal, User

from .base import DuplicateEmailError


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _asc(column: Any) -> Any:
    return cast(Any, column).asc()


class SqlUserRepository:
    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    async def get_by_email(self, email: str) -> User | None:
        async with self._session_maker() as session:
            result = await session.execute(select(User).where(_eq(User.email, email)).limit(1))
            return result.scalar_one_or_none()

    async def get_by_id(self, user_id: str) -> User | None:
        async with self._session_maker() as session:
            return await session.get(User, user_id)

    async def create(self, *, email: str, password_hash: str) -> User:
        user = User(email=email, password_hash=password_hash)
        async with self._session_maker() as session:
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                if is_unique_violation(exc):
                    raise DuplicateEmailError(email) from exc
                raise
        return user

    async def update_password(self, user_id: str, password_hash: str) -> bool:
        async with self._session_maker() as session:
            user = await session.get(User, user_id)
            if user is None:
                return False
            user.password_hash = password_hash
            await session.commit()
            return True


class SqlGoalRepository:
    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    async def list_for_user(self, user_id: str) -> Sequence[Goal]:
        async with self._session_maker() as session:
            result = await session.execute(
                select(Goal)
                .where(_eq(Goal.user_id, user_id))
                .order_by(_asc(Goal.created_at), _asc(Goal.id))
            )
            return result.scalars().all()

    async def get(self, goal_id: str) -> Goal | None:
        async with self._session_maker() as session:
            return await session.get(Goal, goal_id)

    async def create(self, goal: Goal) -> Goal:
        async with self._session_maker() as session:
            session.add(goal)
            await session.commit()
        return goal

    async def update(self, goal_id: str, changes: Mapping[str, Any]) -> Goal | None:
        async with self._session_maker() as session:
            goal = await session.get(Goal, goal_id)
            if goal is None:
                return None
            for field, value in changes.items():
                setattr(goal, field, value)
            await session.commit()
            return goal

    async def delete(self, goal_id: str) -> bool:
        async with self._session_maker() as session:
            goal = await session.get(Goal, goal_id)
            if goal is None:
                return False
            await session.delete(goal)
            await session.commit()
            return True
