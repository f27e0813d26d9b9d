from __future__ import annotations

from abc import ABC, abstractmethod


class StorageError(RuntimeError):
    """Raised by blob stores when a document cannot be read or written."""


class BlobStore(ABC):
    """Synchronous key -> text document store.

    Implementations back the workspace documents. ``get`` returns ``None`` only
    for a missing key; any backend failure raises ``StorageError``.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:  # pragma: no cover - interface only
        """Return the stored document for ``key`` or None if missing."""

    @abstractmethod
    def put(self, key: str, value: str) -> None:  # pragma: no cover
        """Store ``value`` under ``key``, replacing any previous document."""
