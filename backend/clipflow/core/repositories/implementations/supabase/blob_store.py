from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from clipflow.core.repositories.blob_store import BlobStore, StorageError

if TYPE_CHECKING:
    from supabase import Client


class SupabaseBlobStore(BlobStore):
    """Supabase implementation of the BlobStore.

    Assumes a table (``workspace_blobs`` by default) with a unique text
    ``key`` column and a text ``value`` column.
    """

    def __init__(self, client: Client, table_name: str = "workspace_blobs") -> None:
        self._client: Client = client
        self._table = table_name

    def get(self, key: str) -> str | None:
        try:
            resp = (
                self._client.table(self._table)
                .select("value")
                .eq("key", key)
                .limit(1)
                .execute()
            )
        except Exception as err:
            raise StorageError(f"Failed to read {key} from Supabase: {err}") from err
        rows: list[dict[str, Any]] = resp.data or []
        if not rows:
            return None
        value = rows[0].get("value")
        if value is None or isinstance(value, str):
            return value
        # json/jsonb columns come back already decoded
        return json.dumps(value, ensure_ascii=False)

    def put(self, key: str, value: str) -> None:
        try:
            (
                self._client.table(self._table)
                .upsert({"key": key, "value": value}, on_conflict="key")
                .execute()
            )
        except Exception as err:
            raise StorageError(f"Failed to write {key} to Supabase: {err}") from err

