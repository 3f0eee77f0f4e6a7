"""SQL-backed repositories against a throwaway SQLite database."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app import create_app
from conftest import build_credentials, csrf_headers, register
from db import create_engine_for_url, create_session_maker, create_tables
from models import Goal
from services.repositories import (
    DuplicateEmailError,
    InMemoryGoalRepository,
    InMemoryUserRepository,
    SqlGoalRepository,
    SqlUserRepository,
)


@pytest_asyncio.fixture()
async def session_maker(tmp_path: Path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_tables(engine)
    try:
        yield create_session_maker(engine)
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_sql_user_repository_round_trip(session_maker):
    users = SqlUserRepository(session_maker)

    created = await users.create(email="sql@example.com", password_hash="hash-1")
    by_email = await users.get_by_email("sql@example.com")
    by_id = await users.get_by_id(created.id)

    assert by_email is not None and by_email.id == created.id
    assert by_id is not None and by_id.email == "sql@example.com"
    assert await users.get_by_email("other@example.com") is None
    assert await users.get_by_id("missing") is None


@pytest.mark.asyncio
async def test_sql_user_repository_rejects_duplicate_email(session_maker):
    users = SqlUserRepository(session_maker)
    await users.create(email="dup@example.com", password_hash="hash-1")

    with pytest.raises(DuplicateEmailError):
        await users.create(email="dup@example.com", password_hash="hash-2")


@pytest.mark.asyncio
async def test_sql_user_repository_updates_password(session_maker):
    users = SqlUserRepository(session_maker)
    user = await users.create(email="reset@example.com", password_hash="old")

    assert await users.update_password(user.id, "new")
    assert not await users.update_password("missing", "new")
    refreshed = await users.get_by_id(user.id)
    assert refreshed is not None and refreshed.password_hash == "new"


@pytest.mark.asyncio
async def test_sql_goal_repository_crud(session_maker):
    users = SqlUserRepository(session_maker)
    goals = SqlGoalRepository(session_maker)
    owner = await users.create(email="owner@example.com", password_hash="hash")
    other = await users.create(email="other@example.com", password_hash="hash")

    first = await goals.create(Goal(user_id=owner.id, title="First", total_steps=5))
    second = await goals.create(Goal(user_id=owner.id, title="Second", total_steps=3))
    await goals.create(Goal(user_id=other.id, title="Elsewhere", total_steps=1))

    listed = await goals.list_for_user(owner.id)
    assert {goal.id for goal in listed} == {first.id, second.id}

    updated = await goals.update(first.id, {"completed_steps": 4, "title": "Renamed"})
    assert updated is not None
    assert updated.completed_steps == 4
    fetched = await goals.get(first.id)
    assert fetched is not None and fetched.title == "Renamed"

    assert await goals.update("missing", {"title": "x"}) is None
    assert await goals.delete(second.id)
    assert not await goals.delete(second.id)
    assert await goals.get(second.id) is None


@pytest.mark.asyncio
async def test_memory_repositories_mirror_sql_behaviour():
    users = InMemoryUserRepository()
    goals = InMemoryGoalRepository()
    user = await users.create(email="mem@example.com", password_hash="hash")

    with pytest.raises(DuplicateEmailError):
        await users.create(email="mem@example.com", password_hash="hash")

    goal = await goals.create(Goal(user_id=user.id, title="Mem", total_steps=2))
    with pytest.raises(ValueError):
        await goals.create(goal)

    assert await goals.update(goal.id, {"completed_steps": 2}) is goal
    assert goal.completed_steps == 2
    assert await goals.delete(goal.id)
    assert await goals.list_for_user(user.id) == []


@pytest.mark.asyncio
async def test_api_runs_on_sql_repositories(session_maker):
    app = create_app(
        users=SqlUserRepository(session_maker),
        goals=SqlGoalRepository(session_maker),
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        credentials = build_credentials()
        await register(client, credentials)

        duplicate = await client.post("/api/auth/register", json=credentials)
        assert duplicate.status_code == 409

        created = await client.post(
            "/api/goals",
            json={"title": "Persisted", "totalSteps": 4},
            headers=csrf_headers(client),
        )
        assert created.status_code == 201
        goal_id = created.json()["id"]

        updated = await client.put(
            f"/api/goals/{goal_id}",
            json={"completedSteps": 4},
            headers=csrf_headers(client),
        )
        assert updated.status_code == 200
        assert updated.json()["completedSteps"] == 4

        listed = await client.get("/api/goals")
        assert [goal["id"] for goal in listed.json()] == [goal_id]
