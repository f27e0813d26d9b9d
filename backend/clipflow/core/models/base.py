from __future__ import annotations

from datetime import UTC, datetime
from typing import Self

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(UTC)


class AppBaseModel(PydanticBaseModel):
    """Base model for workspace models and API payloads."""

    model_config = ConfigDict(
        from_attributes=True,
        extra="forbid",
        populate_by_name=True,
    )

    def snapshot(self) -> Self:
        """Detached deep copy, safe to keep while the original is mutated."""
        return self.model_copy(deep=True)


class TimestampedModel(AppBaseModel):
    """Model with creation and last-edit timestamps (UTC)."""

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = None

    def touch(self) -> None:
        self.updated_at = utcnow()
