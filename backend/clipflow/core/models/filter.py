from __future__ import annotations

from enum import Enum

from pydantic import Field, field_validator

from .base import AppBaseModel


class FilterMode(str, Enum):
    """How multiple selected tags combine."""

    OR = "OR"
    AND = "AND"


class FilterState(AppBaseModel):
    """Current tag selection of a workspace."""

    active_filters: list[str] = Field(default_factory=list, description="Selected tag ids, in selection order")
    mode: FilterMode = Field(default=FilterMode.OR)

    @field_validator("active_filters")
    @classmethod
    def as_ordered_set(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))
