"""Item Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - title: 1-200 chars, stripped, non-empty
    - position is an int or one of "append" | "up" | "down"; bounds are the ordering
      mode's business (sparse clamps, dense checks)
    - ItemUpdate distinguishes "section omitted" from "section: null" via model_fields_set

Design Decisions:
    - Literal type for sentinels over str enum: Pydantic handles validation natively
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rankline.core.domain_types import Move, RequestedPosition


PositionField = int | Literal["append", "up", "down"] | None


def to_requested_position(value: PositionField) -> RequestedPosition:
    if isinstance(value, str):
        return Move(value)
    return value


class ItemCreate(BaseModel):
    """Item creation — list scope plus optional target position."""
    title: str = Field(min_length=1, max_length=200)
    list_id: str = Field(min_length=1, max_length=64)
    section: int | None = None
    position: PositionField = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty or whitespace")
        return v


class ItemUpdate(BaseModel):
    """Partial item update — any subset of fields, plus an optional reposition."""
    title: str | None = Field(None, min_length=1, max_length=200)
    list_id: str | None = Field(None, min_length=1, max_length=64)
    section: int | None = None
    position: PositionField = None

    def changes(self) -> dict:
        data = self.model_dump(exclude_unset=True, exclude={"position"})
        return {k: v for k, v in data.items() if v is not None or k == "section"}


class ItemResponse(BaseModel):
    """Item response — public-facing item data including its rank."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    list_id: str
    section: int | None
    title: str
    rank: int | None
    created_at: datetime


class ScopeItemsResponse(BaseModel):
    """Items of one scope in ascending rank order."""
    list_id: str
    section: int | None
    items: list[ItemResponse]
