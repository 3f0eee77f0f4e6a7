"""Shared request/response model configuration."""

from __future__ import annotations

from typing import TypeVar

from fastapi import Request
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from core import invalid_body_error, invalid_json_error

ModelT = TypeVar("ModelT", bound=BaseModel)


class CamelModel(BaseModel):
    """Model serialized with camelCase keys on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


async def parse_json_body(request: Request, model: type[ModelT]) -> ModelT:
    """Decode and validate the request body inside a handler.

    Gated routes call this once the session, anti-forgery and ownership checks
    have passed.
    """
    try:
        payload = await request.json()
    except ValueError as exc:
        raise invalid_json_error() from exc

    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise invalid_body_error(exc.errors()) from exc
