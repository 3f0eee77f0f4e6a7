"""Goal field validation and step-count invariants."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from fastapi import status

from core import ApiError
from models import DEFAULT_GOAL_COLOR, MAX_TOTAL_STEPS, MIN_TOTAL_STEPS, Goal

MAX_GOAL_TITLE_LENGTH = 100
MAX_GOAL_DESCRIPTION_LENGTH = 500
HEX_COLOR_PATTERN = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")


def _invalid(code: str, message: str) -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, code, message)


def _is_whole_number(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def clamp_completed_steps(completed_steps: int, total_steps: int) -> int:
    return max(0, min(completed_steps, total_steps))


def normalize_title(value: Any) -> str:
    if not isinstance(value, str):
        raise _invalid("INVALID_TITLE_TYPE", "Goal title must be a string")
    title = value.strip()
    if not title:
        raise _invalid("EMPTY_TITLE", "Goal title cannot be empty")
    if len(title) > MAX_GOAL_TITLE_LENGTH:
        raise _invalid(
            "TITLE_TOO_LONG",
            f"Goal title cannot exceed {MAX_GOAL_TITLE_LENGTH} characters",
        )
    return title


def normalize_description(value: Any) -> str:
    if not isinstance(value, str):
        raise _invalid("INVALID_DESCRIPTION_TYPE", "Goal description must be a string")
    description = value.strip()
    if len(description) > MAX_GOAL_DESCRIPTION_LENGTH:
        raise _invalid(
            "DESCRIPTION_TOO_LONG",
            f"Goal description cannot exceed {MAX_GOAL_DESCRIPTION_LENGTH} characters",
        )
    return description


def validate_total_steps(value: Any) -> int:
    if not _is_whole_number(value):
        raise _invalid("INVALID_TOTAL_STEPS", "Total steps must be a whole number")
    if value < MIN_TOTAL_STEPS or value > MAX_TOTAL_STEPS:
        raise _invalid(
            "TOTAL_STEPS_OUT_OF_RANGE",
            f"Total steps must be between {MIN_TOTAL_STEPS} and {MAX_TOTAL_STEPS}",
        )
    return value


def validate_completed_steps(value: Any, total_steps: int) -> int:
    if not _is_whole_number(value):
        raise _invalid("INVALID_COMPLETED_STEPS", "Completed steps must be a whole number")
    if value < 0:
        raise _invalid("NEGATIVE_COMPLETED_STEPS", "Completed steps cannot be negative")
    if value > total_steps:
        raise _invalid(
            "COMPLETED_EXCEEDS_TOTAL",
            f"Completed steps cannot exceed total steps ({total_steps})",
        )
    return value


def validate_color(value: Any) -> str:
    if not isinstance(value, str):
        raise _invalid("INVALID_COLOR_TYPE", "Goal color must be a string")
    if not HEX_COLOR_PATTERN.fullmatch(value):
        raise _invalid(
            "INVALID_COLOR_FORMAT",
            "Goal color must be a valid hex color (e.g., #3B82F6)",
        )
    return value


def build_new_goal(user_id: str, fields: Mapping[str, Any]) -> Goal:
    """Validate creation fields (camelCase keys) and build an unsaved goal."""
    if fields.get("title") is None or fields.get("totalSteps") is None:
        raise _invalid("MISSING_FIELDS", "Title and total steps are required")

    total_steps = validate_total_steps(fields["totalSteps"])
    description = fields.get("description")
    color = fields.get("color")
    return Goal(
        user_id=user_id,
        title=normalize_title(fields["title"]),
        description=normalize_description(description) if description is not None else "",
        total_steps=total_steps,
        completed_steps=0,
        color=validate_color(color) if color is not None else DEFAULT_GOAL_COLOR,
    )


def build_goal_changes(goal: Goal, updates: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a partial update and return the model attributes to change.

    Only keys present in ``updates`` are considered. Completed steps are
    checked against the total in effect after the update; lowering the total
    below the current completion clamps the completion down.
    """
    changes: dict[str, Any] = {}

    if "title" in updates:
        changes["title"] = normalize_title(updates["title"])
    if "description" in updates:
        changes["description"] = normalize_description(updates["description"])

    total_steps = goal.total_steps
    if "totalSteps" in updates:
        total_steps = validate_total_steps(updates["totalSteps"])
        changes["total_steps"] = total_steps

    if "completedSteps" in updates:
        changes["completed_steps"] = validate_completed_steps(
            updates["completedSteps"], total_steps
        )
    elif goal.completed_steps > total_steps:
        changes["completed_steps"] = clamp_completed_steps(goal.completed_steps, total_steps)

    if "color" in updates:
        changes["color"] = validate_color(updates["color"])

    if not changes:
        raise _invalid("NO_UPDATES", "No valid updates provided")
    return changes


__all__ = [
    "HEX_COLOR_PATTERN",
    "MAX_GOAL_DESCRIPTION_LENGTH",
    "MAX_GOAL_TITLE_LENGTH",
    "build_goal_changes",
    "build_new_goal",
    "clamp_completed_steps",
    "normalize_description",
    "normalize_title",
    "validate_color",
    "validate_completed_steps",
    "validate_total_steps",
]
