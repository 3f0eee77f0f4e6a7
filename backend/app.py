"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.v1 import api_router
from core import register_exception_handlers, settings
from db import create_engine_for_url, create_session_maker, create_tables
from services import RateLimitMiddleware, SecurityHeadersMiddleware, get_rate_limiters
from services.demo_data import seed_demo_data
from services.repositories import (
    GoalRepository,
    InMemoryGoalRepository,
    InMemoryUserRepository,
    SqlGoalRepository,
    SqlUserRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


def _configure_storage(
    app: FastAPI,
    users: UserRepository | None,
    goals: GoalRepository | None,
) -> None:
    app.state.engine = None
    if users is not None and goals is not None:
        app.state.users = users
        app.state.goals = goals
        return

    if settings.database_url:
        engine = create_engine_for_url(settings.database_url)
        session_maker = create_session_maker(engine)
        app.state.engine = engine
        app.state.users = SqlUserRepository(session_maker)
        app.state.goals = SqlGoalRepository(session_maker)
        return

    app.state.users = InMemoryUserRepository()
    app.state.goals = InMemoryGoalRepository()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    engine = app.state.engine
    if engine is not None:
        await create_tables(engine)
    if settings.seed_demo_data and settings.app_env != "test":
        await seed_demo_data(app.state.users, app.state.goals)
    try:
        yield
    finally:
        if engine is not None:
            await engine.dispose()


def create_app(
    *,
    users: UserRepository | None = None,
    goals: GoalRepository | None = None,
) -> FastAPI:
    """Build the API; pass both repositories to override the configured storage."""
    application = FastAPI(title=settings.app_name, lifespan=lifespan)
    _configure_storage(application, users, goals)
    register_exception_handlers(application)

    application.add_middleware(RateLimitMiddleware, limiters_factory=get_rate_limiters)
    # Added last so it wraps rate-limit rejections as well.
    application.add_middleware(SecurityHeadersMiddleware)

    application.include_router(api_router)
    logger.debug("Application created for environment %s", settings.app_env)
    return application
