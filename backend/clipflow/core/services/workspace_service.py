from __future__ import annotations

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING

from clipflow.core.models.filter import FilterMode, FilterState
from clipflow.core.models.note import Note
from clipflow.core.models.undo import DeleteNoteSnapshot
from clipflow.core.repositories.blob_store import StorageError
from clipflow.core.schemas.outcome import ErrorCode, Outcome
from clipflow.core.taxonomy.filtering import filter_notes
from clipflow.core.taxonomy.tree import TagTree
from clipflow.core.taxonomy.undo import MutationLog
from clipflow.utils.logging import get_logger
from clipflow.utils.validation import normalize_tag_refs

if TYPE_CHECKING:
    from collections.abc import Sequence

    from clipflow.core.models.tag import TagNode
    from clipflow.core.models.undo import DeleteTagSnapshot, RenameTagSnapshot
    from clipflow.core.repositories.workspace_repository import WorkspaceRepository

logger = get_logger(__name__)

ALL_FILTER = "All"


def _display_time() -> str:
    return datetime.now().strftime("%H:%M")


class Workspace:
    """All taxonomy and note state of one workspace.

    Every write goes through this object: it mutates the in-memory model,
    records destructive edits in the single-slot undo log and then saves both
    documents. A failed save is logged and returned as ``Outcome.warning``;
    the in-memory state stays authoritative until the next successful save.
    """

    def __init__(
        self,
        workspace_id: str,
        repository: WorkspaceRepository,
        *,
        tree: TagTree | None = None,
        notes: list[Note] | None = None,
        mode: FilterMode = FilterMode.OR,
    ) -> None:
        self.workspace_id = workspace_id
        self._repo = repository
        self._tree = tree if tree is not None else TagTree()
        self._notes: list[Note] = notes if notes is not None else []
        self._filters = FilterState(mode=mode)
        self._log = MutationLog()
        self.last_persist_error: str | None = None
        self.load_error: str | None = None

    @classmethod
    def open(
        cls,
        workspace_id: str,
        repository: WorkspaceRepository,
        *,
        mode: FilterMode = FilterMode.OR,
    ) -> Workspace:
        """Load a workspace and write migrated documents back once.

        When the store could not be read the workspace starts empty and
        never saves, so the stored documents are left untouched.
        """
        loaded = repository.load(workspace_id)
        workspace = cls(workspace_id, repository, tree=loaded.tree, notes=loaded.notes, mode=mode)
        workspace.load_error = loaded.read_error
        if loaded.needs_save:
            workspace._persist()
        return workspace

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------
    @property
    def tree(self) -> TagTree:
        return self._tree

    @property
    def filters(self) -> FilterState:
        return self._filters.snapshot()

    @property
    def undo_log(self) -> MutationLog:
        return self._log

    def _persist(self) -> str | None:
        if self.load_error is not None:
            return f"Changes are kept in memory only; the stored workspace could not be read: {self.load_error}"
        try:
            self._repo.save(self.workspace_id, self._tree, self._notes)
        except StorageError as err:
            self.last_persist_error = str(err)
            logger.warning("Failed to save workspace %s: %s", self.workspace_id, err)
            return f"Changes are kept in memory but could not be saved: {err}"
        self.last_persist_error = None
        return None

    def _saved(self, outcome: Outcome) -> Outcome:
        if outcome.ok:
            outcome.warning = self._persist()
        return outcome

    # ------------------------------------------------------------------
    # Tag reads
    # ------------------------------------------------------------------
    def list_root_tags(self) -> list[TagNode]:
        return self._tree.list_roots()

    def get_children(self, tag_id: str | None = None) -> list[TagNode]:
        return self._tree.get_children(tag_id)

    def get_tag(self, tag_id: str) -> TagNode | None:
        return self._tree.get_node(tag_id)

    def get_path(self, tag_id: str) -> list[str] | None:
        return self._tree.get_path(tag_id)

    def get_full_name(self, tag_id: str) -> str:
        return self._tree.get_full_name(tag_id)

    def descendant_closure(self, tag_id: str) -> set[str]:
        return self._tree.descendant_closure(tag_id)

    def find_tags(self, query: str | None) -> list[TagNode]:
        return [self._tree.get_node(tag_id) for tag_id in self._tree.find_ids_by_name(query)]

    # ------------------------------------------------------------------
    # Tag writes
    # ------------------------------------------------------------------
    def create_tag(self, name: str | None, parent_id: str | None = None) -> Outcome[str]:
        return self._saved(self._tree.create(name, parent_id))

    def rename_tag(self, tag_id: str, new_name: str | None) -> Outcome[RenameTagSnapshot]:
        outcome = self._tree.rename(tag_id, new_name)
        if outcome.ok:
            self._log.record(outcome.value)
        return self._saved(outcome)

    def delete_tag(self, tag_id: str) -> Outcome[DeleteTagSnapshot]:
        """Delete a tag with its subtree and every reference to it.

        Unknown ids are a successful no-op with an empty value.
        """
        snapshot = self._tree.delete(tag_id)
        if snapshot is None:
            return Outcome.success(None)

        removed = {node.id for node in snapshot.nodes}
        stripped = 0
        for note in self._notes:
            kept = [ref for ref in note.tag_refs if ref not in removed]
            if len(kept) != len(note.tag_refs):
                stripped += 1
                note.tag_refs = kept
        self._filters.active_filters = [i for i in self._filters.active_filters if i not in removed]
        self._log.record(snapshot)

        logger.info(
            "Deleted tag %s",
            tag_id,
            extra={"workspace": self.workspace_id, "removed_tags": len(removed), "notes_touched": stripped},
        )
        return self._saved(Outcome.success(snapshot))

    def move_tag(self, parent_id: str | None, from_index: int, to_index: int) -> Outcome[bool]:
        return self._saved(self._tree.move(parent_id, from_index, to_index))

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------
    def list_notes(self) -> list[Note]:
        return list(self._notes)

    def get_note(self, note_id: str) -> Note | None:
        return next((note for note in self._notes if note.id == note_id), None)

    def _known_refs(self, tag_refs: Sequence[str] | None) -> list[str]:
        return [ref for ref in normalize_tag_refs(list(tag_refs or [])) if ref in self._tree]

    def add_note(self, content: str | None, tag_refs: Sequence[str] | None = None) -> Outcome[Note]:
        if content is None or not content.strip():
            return Outcome.failure(ErrorCode.EMPTY_CONTENT, "Note content must not be empty")
        note = Note(content=content.strip(), tag_refs=self._known_refs(tag_refs), date=_display_time())
        self._notes.append(note)
        return self._saved(Outcome.success(note))

    def update_note(
        self,
        note_id: str,
        *,
        content: str | None = None,
        tag_refs: Sequence[str] | None = None,
    ) -> Outcome[Note]:
        """Replace content and/or tags of a note; omitted fields are kept."""
        note = self.get_note(note_id)
        if note is None:
            return Outcome.failure(ErrorCode.NOTE_NOT_FOUND, f"Note not found: {note_id}")
        if content is not None and not content.strip():
            return Outcome.failure(ErrorCode.EMPTY_CONTENT, "Note content must not be empty")

        if content is not None:
            note.content = content.strip()
        if tag_refs is not None:
            note.tag_refs = self._known_refs(tag_refs)
        note.date = _display_time()
        note.expanded = False
        note.touch()
        return self._saved(Outcome.success(note))

    def toggle_note_expanded(self, note_id: str) -> Outcome[Note]:
        note = self.get_note(note_id)
        if note is None:
            return Outcome.failure(ErrorCode.NOTE_NOT_FOUND, f"Note not found: {note_id}")
        note.expanded = not note.expanded
        return self._saved(Outcome.success(note))

    def delete_note(self, note_id: str) -> Outcome[DeleteNoteSnapshot]:
        index = next((i for i, note in enumerate(self._notes) if note.id == note_id), -1)
        if index < 0:
            return Outcome.failure(ErrorCode.NOTE_NOT_FOUND, f"Note not found: {note_id}")
        note = self._notes.pop(index)
        snapshot = DeleteNoteSnapshot(note=note.snapshot(), index=index)
        self._log.record(snapshot)
        return self._saved(Outcome.success(snapshot))

    # ------------------------------------------------------------------
    # Undo
    # ------------------------------------------------------------------
    def undo(self) -> Outcome[str]:
        """Reverse the most recent destructive edit.

        A restored tag comes back without the note links stripped when it
        was deleted.
        """
        return self._saved(self._log.undo(self._tree, self._notes))

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------
    def filtered_notes(
        self,
        active_filters: Sequence[str] | None = None,
        mode: FilterMode | None = None,
    ) -> list[Note]:
        """Visible notes; arguments default to the workspace filter state."""
        if active_filters is None:
            active_filters = self._filters.active_filters
        return filter_notes(self._tree, self._notes, active_filters, mode or self._filters.mode)

    def toggle_filter(self, tag_id: str) -> FilterState:
        """Select or deselect ``tag_id``; ``All`` clears the selection."""
        if tag_id == ALL_FILTER:
            self._filters.active_filters = []
        elif tag_id in self._filters.active_filters:
            self._filters.active_filters = [i for i in self._filters.active_filters if i != tag_id]
        elif tag_id in self._tree:
            self._filters.active_filters = [*self._filters.active_filters, tag_id]
        return self.filters

    def set_filter_mode(self, mode: FilterMode | str) -> FilterState:
        """Switch between OR and AND; plain strings are matched case-insensitively."""
        if isinstance(mode, str) and not isinstance(mode, FilterMode):
            mode = mode.strip().upper()
        self._filters.mode = FilterMode(mode)
        return self.filters

    def clear_filters(self) -> FilterState:
        self._filters.active_filters = []
        return self.filters

    def active_children(self, tag_id: str) -> list[str]:
        """Selected ids strictly below ``tag_id``."""
        return [i for i in self._filters.active_filters if self._tree.is_ancestor(tag_id, i)]

    def has_active_child(self, tag_id: str) -> bool:
        return bool(self.active_children(tag_id))


class WorkspaceRegistry:
    """Opens workspaces on first use and keeps them for the process lifetime.

    A workspace whose documents could not be read is not kept, so the next
    access reads the store again.
    """

    def __init__(self, repository: WorkspaceRepository, *, mode: FilterMode = FilterMode.OR) -> None:
        self._repo = repository
        self._mode = mode
        self._workspaces: dict[str, Workspace] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, workspace_id: str) -> Workspace:
        workspace = self._workspaces.get(workspace_id)
        if workspace is None:
            workspace = Workspace.open(workspace_id, self._repo, mode=self._mode)
            if workspace.load_error is None:
                self._workspaces[workspace_id] = workspace
        return workspace

    def lock(self, workspace_id: str) -> asyncio.Lock:
        """Lock serialising the requests of one workspace."""
        return self._locks.setdefault(workspace_id, asyncio.Lock())

    def __contains__(self, workspace_id: object) -> bool:
        return workspace_id in self._workspaces

    def __len__(self) -> int:
        return len(self._workspaces)
