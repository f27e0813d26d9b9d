from __future__ import annotations

from datetime import datetime  # noqa: TCH003

from pydantic import Field, field_validator

from clipflow.config import settings
from clipflow.core.models.base import AppBaseModel
from clipflow.core.models.filter import FilterMode  # noqa: TCH001
from clipflow.utils.validation import normalize_tag_refs


class NoteCreate(AppBaseModel):
    content: str = Field(max_length=settings.note_content_max_length, description="Note content")
    tag_refs: list[str] = Field(default_factory=list, description="Ids of tags to attach")

    @field_validator("tag_refs")
    @classmethod
    def validate_tag_refs(cls, v: list[str]) -> list[str]:
        return normalize_tag_refs(v)


class NoteUpdate(AppBaseModel):
    content: str | None = Field(default=None, max_length=settings.note_content_max_length)
    tag_refs: list[str] | None = None

    @field_validator("tag_refs")
    @classmethod
    def validate_tag_refs(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return normalize_tag_refs(v)


class NoteRead(AppBaseModel):
    id: str
    content: str
    tag_refs: list[str]
    date: str | None
    expanded: bool
    created_at: datetime
    updated_at: datetime | None


class NoteFilterRequest(AppBaseModel):
    active_filters: list[str] | None = Field(
        default=None, description="Selected tag ids; omitted to use the workspace selection"
    )
    mode: FilterMode | None = Field(default=None, description="OR / AND; omitted to use the workspace mode")
