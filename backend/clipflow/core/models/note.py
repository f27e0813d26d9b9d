from __future__ import annotations

from uuid import uuid4

from pydantic import Field, field_validator

from .base import TimestampedModel


class Note(TimestampedModel):
    """Note domain model.

    ``tag_refs`` holds tag ids only; name paths from older data are resolved
    by the repository before a note is built.
    """

    id: str = Field(default_factory=lambda: uuid4().hex, description="Unique note identifier")
    content: str = Field(default="", description="Note content")
    tag_refs: list[str] = Field(default_factory=list, description="Ids of the tags attached to the note")

    # Display-only fields carried through persistence
    date: str | None = Field(default=None, description="Display timestamp")
    expanded: bool = Field(default=False, description="Whether the note is shown expanded")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> object:
        """Older documents use integer ids."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("tag_refs")
    @classmethod
    def dedupe_refs(cls, v: list[str]) -> list[str]:
        deduped: list[str] = []
        for ref in v:
            if ref and ref not in deduped:
                deduped.append(ref)
        return deduped
