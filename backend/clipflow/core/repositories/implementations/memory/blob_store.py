from __future__ import annotations

from clipflow.core.repositories.blob_store import BlobStore, StorageError


class InMemoryBlobStore(BlobStore):
    """Process-local store, mainly for tests and throwaway workspaces.

    ``max_bytes`` emulates a storage quota: writes that would push the total
    size past it fail with ``StorageError``.
    """

    def __init__(self, initial: dict[str, str] | None = None, *, max_bytes: int | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self.max_bytes = max_bytes

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        if self.max_bytes is not None:
            others = sum(len(v.encode()) for k, v in self._data.items() if k != key)
            if others + len(value.encode()) > self.max_bytes:
                raise StorageError(f"Storage quota exceeded writing {key}")
        self._data[key] = value

    def keys(self) -> list[str]:
        return list(self._data)
