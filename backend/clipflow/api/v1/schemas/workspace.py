from __future__ import annotations

from pydantic import Field, field_validator

from clipflow.core.models.base import AppBaseModel
from clipflow.core.models.filter import FilterMode  # noqa: TCH001


class FilterToggle(AppBaseModel):
    tag_id: str = Field(description="Tag id to (de)select, or 'All' to clear")


class FilterModeUpdate(AppBaseModel):
    mode: FilterMode

    @field_validator("mode", mode="before")
    @classmethod
    def upper_mode(cls, v: object) -> object:
        return v.strip().upper() if isinstance(v, str) else v


class FilterStateRead(AppBaseModel):
    active_filters: list[str]
    mode: FilterMode
    effective_filters: list[str] = Field(description="Selection after dropping redundant ancestors")


class UndoStatus(AppBaseModel):
    available: bool
    kind: str | None = None


class UndoResult(AppBaseModel):
    kind: str
