"""SQLModel models package."""

from .goal import DEFAULT_GOAL_COLOR, MAX_TOTAL_STEPS, MIN_TOTAL_STEPS, Goal
from .user import User

__all__ = [
    "User",
    "Goal",
    "DEFAULT_GOAL_COLOR",
    "MIN_TOTAL_STEPS",
    "MAX_TOTAL_STEPS",
]
