"""Repository interfaces and their in-memory and SQL implementations."""

from .base import DuplicateEmailError, GoalRepository, UserRepository
from .memory import InMemoryGoalRepository, InMemoryUserRepository
from .sql import SqlGoalRepository, SqlUserRepository

__all__ = [
    "DuplicateEmailError",
    "UserRepository",
    "GoalRepository",
    "InMemoryUserRepository",
    "InMemoryGoalRepository",
    "SqlUserRepository",
    "SqlGoalRepository",
]
