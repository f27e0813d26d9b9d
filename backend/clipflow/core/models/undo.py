from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import Field

from .base import AppBaseModel
from .note import Note  # noqa: TCH001
from .tag import TagNode  # noqa: TCH001


class DeleteTagSnapshot(AppBaseModel):
    """Everything needed to put a deleted subtree back."""

    kind: Literal["delete_tag"] = "delete_tag"
    tag_id: str
    parent_id: str | None = None
    position: int = Field(ge=0)
    nodes: list[TagNode] = Field(description="Deep copies of every node in the subtree, root first")


class RenameTagSnapshot(AppBaseModel):
    kind: Literal["rename_tag"] = "rename_tag"
    tag_id: str
    old_name: str
    new_name: str


class DeleteNoteSnapshot(AppBaseModel):
    kind: Literal["delete_note"] = "delete_note"
    note: Note
    index: int = Field(ge=0)


UndoAction = Annotated[
    Union[DeleteTagSnapshot, RenameTagSnapshot, DeleteNoteSnapshot],
    Field(discriminator="kind"),
]
