"""Shared Pydantic schema base with camelCase aliases."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from crm_api.core.clock import ensure_utc, utcnow


class CamelModel(BaseModel):
    """All API schemas inherit from this to auto-generate camelCase aliases."""

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
        "from_attributes": True,
    }


class HealthResponse(BaseModel):
    """Health-check response returned by /health."""
    status: str = "ok"
    app: str
    env: str


class CountResponse(CamelModel):
    count: int


def not_in_future(value: datetime | None, field_name: str) -> datetime | None:
    """Normalise to UTC and reject dates after now (shared field validator body)."""
    if value is None:
        return value
    value = ensure_utc(value)
    if value > utcnow():
        raise ValueError(f"{field_name} cannot be in the future")
    return value
