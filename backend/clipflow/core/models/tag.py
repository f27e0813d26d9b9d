from __future__ import annotations

import secrets
import time
from typing import TYPE_CHECKING

from pydantic import Field, field_validator

from .base import AppBaseModel

if TYPE_CHECKING:
    from collections.abc import Container

TAG_ID_PREFIX = "tag_"


def generate_tag_id(taken: Container[str] | None = None) -> str:
    """Return a fresh ``tag_<epoch-ms>_<hex>`` id not present in ``taken``."""
    while True:
        tag_id = f"{TAG_ID_PREFIX}{time.time_ns() // 1_000_000}_{secrets.token_hex(8)}"
        if taken is None or tag_id not in taken:
            return tag_id


def looks_like_tag_id(value: str) -> bool:
    return value.startswith(TAG_ID_PREFIX) and "/" not in value


class TagNode(AppBaseModel):
    """A single category in the tag taxonomy.

    Children are referenced by id; the nodes themselves live in the
    workspace's ``TagIndex``. ``order`` is ``None`` for nodes loaded from
    data that predates ordering and is filled in on first access.
    """

    id: str = Field(description="Globally unique tag identifier")
    name: str = Field(min_length=1, description="Display label")
    parent_id: str | None = Field(default=None, description="Parent tag id, None for top level")
    children: list[str] = Field(default_factory=list, description="Child tag ids")
    order: list[str] | None = Field(default=None, description="Display order of child ids")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Tag name must not be empty")
        return stripped
