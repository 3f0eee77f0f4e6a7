"""Database helpers."""

from .errors import is_unique_violation
from .session import create_engine_for_url, create_session_maker, create_tables

__all__ = [
    "create_engine_for_url",
    "create_session_maker",
    "create_tables",
    "is_unique_violation",
]
