from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from pydantic import ConfigDict, Field

from clipflow.core.models.base import AppBaseModel
from clipflow.core.models.note import Note  # noqa: TCH001
from clipflow.core.repositories.blob_store import StorageError
from clipflow.core.taxonomy.migration import dump_notes, dump_tag_tree, load_notes, load_tag_tree
from clipflow.core.taxonomy.tree import TagTree  # noqa: TCH001
from clipflow.utils.logging import get_logger

if TYPE_CHECKING:
    from clipflow.core.repositories.blob_store import BlobStore

logger = get_logger(__name__)

CATEGORIES_KEY_PREFIX = "clipflow_categories_"
NOTES_KEY_PREFIX = "clipflow_notes_"


def categories_key(workspace_id: str) -> str:
    return f"{CATEGORIES_KEY_PREFIX}{workspace_id}"


def notes_key(workspace_id: str) -> str:
    return f"{NOTES_KEY_PREFIX}{workspace_id}"


class LoadedWorkspace(AppBaseModel):
    """Result of reading both documents of a workspace.

    - read_error: set when the store could not be read; the tree and notes are
      then placeholders and must never be written over the stored documents
    - needs_save: the stored documents differ from their canonical form
      (legacy shape, repaired entries, first use) and can safely be rewritten
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    tree: TagTree
    notes: list[Note] = Field(default_factory=list)
    read_error: str | None = None
    needs_save: bool = False


class _Document:
    def __init__(self, raw: Any = None, *, read_error: str | None = None, parsed: bool = True) -> None:
        self.raw = raw
        self.read_error = read_error
        self.parsed = parsed


class WorkspaceRepository:
    """Reads and writes the two documents of a workspace.

    Loading never raises: unreadable or unexpected data degrades to an empty
    tree or an empty note list, and a failed read is reported on the result.
    Saving propagates ``StorageError`` so the caller can decide how to report
    it.
    """

    def __init__(self, store: BlobStore) -> None:
        self._store = store

    def _read_json(self, key: str) -> _Document:
        try:
            raw = self._store.get(key)
        except StorageError as err:
            logger.error("Failed to read %s: %s", key, err)
            return _Document(read_error=str(err))
        if raw is None:
            return _Document()
        try:
            return _Document(json.loads(raw))
        except (TypeError, ValueError, RecursionError) as err:
            logger.warning("Ignoring malformed document %s: %s", key, err)
            return _Document(parsed=False)

    def load(self, workspace_id: str) -> LoadedWorkspace:
        """Load (and migrate) the tag tree first, then notes against it."""
        tags_doc = self._read_json(categories_key(workspace_id))
        notes_doc = self._read_json(notes_key(workspace_id))
        tree = load_tag_tree(tags_doc.raw)
        notes = load_notes(notes_doc.raw, tree)

        read_error = tags_doc.read_error or notes_doc.read_error
        needs_save = False
        if read_error is None and tags_doc.parsed and notes_doc.parsed:
            needs_save = tags_doc.raw != dump_tag_tree(tree) or notes_doc.raw != dump_notes(notes)

        logger.info(
            "Loaded workspace %s",
            workspace_id,
            extra={"tags": len(tree), "notes": len(notes), "read_failed": read_error is not None},
        )
        return LoadedWorkspace(tree=tree, notes=notes, read_error=read_error, needs_save=needs_save)

    def save_tags(self, workspace_id: str, tree: TagTree) -> None:
        self._store.put(categories_key(workspace_id), json.dumps(dump_tag_tree(tree), ensure_ascii=False))

    def save_notes(self, workspace_id: str, notes: list[Note]) -> None:
        self._store.put(notes_key(workspace_id), json.dumps(dump_notes(notes), ensure_ascii=False))

    def save(self, workspace_id: str, tree: TagTree, notes: list[Note]) -> None:
        self.save_tags(workspace_id, tree)
        self.save_notes(workspace_id, notes)
