"""Demo account seeded on startup outside the test environment."""

from __future__ import annotations

import logging

from models import Goal
from services.auth import hash_password_async
from services.repositories import GoalRepository, UserRepository

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "password"
DEMO_GOALS = (
    {
        "title": "Read 30 Books This Year",
        "description": "Complete 30 books to expand knowledge",
        "total_steps": 30,
        "completed_steps": 8,
        "color": "#3B82F6",
    },
    {
        "title": "Daily Exercise",
        "description": "100 days of consistent exercise",
        "total_steps": 100,
        "completed_steps": 23,
        "color": "#10B981",
    },
)


async def seed_demo_data(users: UserRepository, goals: GoalRepository) -> None:
    if await users.get_by_email(DEMO_EMAIL) is not None:
        return

    user = await users.create(
        email=DEMO_EMAIL,
        password_hash=await hash_password_async(DEMO_PASSWORD),
    )
    for goal_fields in DEMO_GOALS:
        await goals.create(Goal(user_id=user.id, **goal_fields))
    logger.info("Seeded demo account %s with %d goals", DEMO_EMAIL, len(DEMO_GOALS))
