"""Unit tests for goal field validation and step bookkeeping."""

from __future__ import annotations

import pytest

from core import ApiError
from models import DEFAULT_GOAL_COLOR, Goal
from services.goals import (
    build_goal_changes,
    build_new_goal,
    clamp_completed_steps,
    validate_color,
    validate_completed_steps,
    validate_total_steps,
)


def _goal(total_steps: int = 10, completed_steps: int = 0) -> Goal:
    return Goal(
        user_id="user-1",
        title="Existing",
        total_steps=total_steps,
        completed_steps=completed_steps,
    )


def _error_code(callable_, *args) -> str:
    with pytest.raises(ApiError) as exc_info:
        callable_(*args)
    assert exc_info.value.status_code == 400
    return exc_info.value.code


@pytest.mark.parametrize(
    ("completed", "total", "expected"),
    [(5, 10, 5), (12, 10, 10), (-3, 10, 0), (0, 1, 0)],
)
def test_clamp_completed_steps(completed: int, total: int, expected: int) -> None:
    assert clamp_completed_steps(completed, total) == expected


def test_total_steps_rejects_booleans() -> None:
    assert _error_code(validate_total_steps, True) == "INVALID_TOTAL_STEPS"


def test_completed_steps_may_equal_total() -> None:
    assert validate_completed_steps(10, 10) == 10
    assert _error_code(validate_completed_steps, 11, 10) == "COMPLETED_EXCEEDS_TOTAL"


@pytest.mark.parametrize("color", ["#fff", "#FFFFFF", "#3b82f6"])
def test_valid_colors(color: str) -> None:
    assert validate_color(color) == color


@pytest.mark.parametrize("color", ["fff", "#ffff", "#3b82f6 ", "#3b82fg"])
def test_invalid_colors(color: str) -> None:
    assert _error_code(validate_color, color) == "INVALID_COLOR_FORMAT"


def test_build_new_goal_starts_with_no_progress() -> None:
    goal = build_new_goal("user-1", {"title": " Walk ", "totalSteps": 3})

    assert goal.user_id == "user-1"
    assert goal.title == "Walk"
    assert goal.description == ""
    assert goal.completed_steps == 0
    assert goal.color == DEFAULT_GOAL_COLOR
    assert goal.id


def test_build_new_goal_treats_null_fields_as_missing() -> None:
    assert _error_code(build_new_goal, "user-1", {"title": None, "totalSteps": 3}) == (
        "MISSING_FIELDS"
    )


def test_changes_use_model_attribute_names() -> None:
    changes = build_goal_changes(
        _goal(),
        {"totalSteps": 12, "completedSteps": 2, "description": " notes "},
    )

    assert changes == {"total_steps": 12, "completed_steps": 2, "description": "notes"}


def test_raising_total_keeps_completion() -> None:
    changes = build_goal_changes(_goal(total_steps=10, completed_steps=7), {"totalSteps": 20})

    assert changes == {"total_steps": 20}


def test_lowering_total_clamps_completion() -> None:
    changes = build_goal_changes(_goal(total_steps=10, completed_steps=7), {"totalSteps": 4})

    assert changes == {"total_steps": 4, "completed_steps": 4}


def test_completion_validated_against_current_total() -> None:
    code = _error_code(build_goal_changes, _goal(total_steps=10), {"completedSteps": 11})

    assert code == "COMPLETED_EXCEEDS_TOTAL"


def test_empty_update_is_rejected() -> None:
    assert _error_code(build_goal_changes, _goal(), {}) == "NO_UPDATES"
