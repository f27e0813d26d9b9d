from __future__ import annotations

from pydantic import Field

from clipflow.core.models.base import AppBaseModel


class TagCreate(AppBaseModel):
    name: str = Field(description="Tag name; surrounding whitespace is trimmed")
    parent_id: str | None = Field(default=None, description="Parent tag id, omitted for a top-level tag")


class TagRename(AppBaseModel):
    name: str


class TagMove(AppBaseModel):
    parent_id: str | None = Field(default=None, description="Level to reorder, omitted for top-level tags")
    from_index: int
    to_index: int


class TagRead(AppBaseModel):
    id: str
    name: str
    parent_id: str | None
    children: list[str] = Field(description="Child ids in display order")
    path: list[str]
    full_name: str


class TagClosure(AppBaseModel):
    tag_id: str
    ids: list[str]


class TagDeleteResult(AppBaseModel):
    tag_id: str
    removed_ids: list[str] = Field(default_factory=list)
