"""Goal CRUD endpoints scoped to the signed-in user."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Request, status
from pydantic import StrictInt, StrictStr

from api.deps import CsrfVerifiedUser, CurrentUser, Goals
from api.schemas import CamelModel, parse_json_body
from core import ApiError
from models import Goal, User
from services.goals import build_goal_changes, build_new_goal

router = APIRouter(prefix="/goals", tags=["goals"])


class GoalFieldsRequest(CamelModel):
    title: StrictStr | None = None
    description: StrictStr | None = None
    total_steps: StrictInt | None = None
    completed_steps: StrictInt | None = None
    color: StrictStr | None = None

    def provided_fields(self) -> dict[str, object]:
        """Fields present in the request body, keyed by their wire names."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class GoalResponse(CamelModel):
    id: str
    user_id: str
    title: str
    description: str
    total_steps: int
    completed_steps: int
    color: str
    created_at: datetime


class GoalDeletedResponse(CamelModel):
    message: str
    deleted_goal_id: str


async def _get_owned_goal(goals: Goals, goal_id: str, user: User, action: str) -> Goal:
    goal = await goals.get(goal_id)
    if goal is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, "GOAL_NOT_FOUND", "Goal not found")
    if goal.user_id != user.id:
        raise ApiError(
            status.HTTP_403_FORBIDDEN,
            "ACCESS_DENIED",
            f"Access denied. You can only {action} your own goals.",
        )
    return goal


@router.api_route("", methods=["GET", "HEAD"], response_model=list[GoalResponse])
async def list_goals(current_user: CurrentUser, goals: Goals) -> list[GoalResponse]:
    owned = await goals.list_for_user(current_user.id)
    return [GoalResponse.model_validate(goal) for goal in owned]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=GoalResponse)
async def create_goal(
    request: Request,
    current_user: CsrfVerifiedUser,
    goals: Goals,
) -> GoalResponse:
    payload = await parse_json_body(request, GoalFieldsRequest)
    goal = build_new_goal(current_user.id, payload.provided_fields())
    created = await goals.create(goal)
    return GoalResponse.model_validate(created)


@router.api_route("/{goal_id}", methods=["GET", "HEAD"], response_model=GoalResponse)
async def get_goal(goal_id: str, current_user: CurrentUser, goals: Goals) -> GoalResponse:
    goal = await _get_owned_goal(goals, goal_id, current_user, "view")
    return GoalResponse.model_validate(goal)


@router.put("/{goal_id}", response_model=GoalResponse)
async def update_goal(
    goal_id: str,
    request: Request,
    current_user: CsrfVerifiedUser,
    goals: Goals,
) -> GoalResponse:
    goal = await _get_owned_goal(goals, goal_id, current_user, "update")
    payload = await parse_json_body(request, GoalFieldsRequest)
    changes = build_goal_changes(goal, payload.provided_fields())

    updated = await goals.update(goal_id, changes)
    if updated is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, "GOAL_NOT_FOUND", "Goal not found")
    return GoalResponse.model_validate(updated)


@router.delete("/{goal_id}", response_model=GoalDeletedResponse)
async def delete_goal(
    goal_id: str,
    current_user: CsrfVerifiedUser,
    goals: Goals,
) -> GoalDeletedResponse:
    await _get_owned_goal(goals, goal_id, current_user, "delete")
    if not await goals.delete(goal_id):
        raise ApiError(status.HTTP_404_NOT_FOUND, "GOAL_NOT_FOUND", "Goal not found")
    return GoalDeletedResponse(
        message="Goal deleted successfully",
        deleted_goal_id=goal_id,
    )
