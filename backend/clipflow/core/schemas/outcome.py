from __future__ import annotations

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import Field

from clipflow.core.models.base import AppBaseModel

T = TypeVar("T")


class ErrorCode(str, Enum):
    """Expected, recoverable failures of workspace operations."""

    DUPLICATE_NAME = "duplicate_name"
    PARENT_NOT_FOUND = "parent_not_found"
    EMPTY_NAME = "empty_name"
    TAG_NOT_FOUND = "tag_not_found"
    NOTE_NOT_FOUND = "note_not_found"
    EMPTY_CONTENT = "empty_content"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    NOTHING_TO_UNDO = "nothing_to_undo"
    UNDO_TARGET_INVALID = "undo_target_invalid"


class Outcome(AppBaseModel, Generic[T]):
    """Result of an operation that can fail in an expected way.

    Exactly one of ``value``/``error`` is meaningful. ``warning`` carries a
    non-fatal problem, e.g. the change was applied but could not be saved.
    """

    value: T | None = None
    error: ErrorCode | None = None
    message: str | None = None
    warning: str | None = Field(default=None, description="Non-fatal problem raised after the change was applied")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> Outcome[Any]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorCode, message: str | None = None) -> Outcome[Any]:
        return cls(error=error, message=message)
