"""Goal domain model."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlmodel import Field, SQLModel

DEFAULT_GOAL_COLOR = "#3B82F6"
MIN_TOTAL_STEPS = 1
MAX_TOTAL_STEPS = 365


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Goal(SQLModel, table=True):
    """A user-owned progress record measured in discrete steps."""

    __tablename__ = "goals"
    __table_args__ = (
        CheckConstraint(
            "completed_steps >= 0 AND completed_steps <= total_steps",
            name="ck_goals_completed_within_total",
        ),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), sa_column=Column(String(36), primary_key=True))
    user_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    title: str = Field(sa_column=Column(String(100), nullable=False))
    description: str = Field(default="", sa_column=Column(Text, nullable=False))
    total_steps: int = Field(sa_column=Column(Integer, nullable=False))
    completed_steps: int = Field(default=0, sa_column=Column(Integer, nullable=False))
    color: str = Field(
        default=DEFAULT_GOAL_COLOR, sa_column=Column(String(7), nullable=False)
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
