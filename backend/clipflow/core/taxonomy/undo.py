from __future__ import annotations

from typing import TYPE_CHECKING

from clipflow.core.models.undo import DeleteNoteSnapshot, DeleteTagSnapshot, RenameTagSnapshot
from clipflow.core.schemas.outcome import ErrorCode, Outcome
from clipflow.utils.logging import get_logger

if TYPE_CHECKING:
    from clipflow.core.models.note import Note
    from clipflow.core.models.undo import UndoAction
    from clipflow.core.taxonomy.tree import TagTree

logger = get_logger(__name__)


class MutationLog:
    """Single-slot undo for destructive edits.

    Recording a new action discards whatever was recoverable before. The slot
    is cleared only when a reversal succeeds.
    """

    def __init__(self) -> None:
        self._last: UndoAction | None = None

    @property
    def has_undo(self) -> bool:
        return self._last is not None

    def peek(self) -> UndoAction | None:
        return self._last

    def record(self, action: UndoAction) -> None:
        self._last = action

    def clear(self) -> None:
        self._last = None

    def undo(self, tree: TagTree, notes: list[Note]) -> Outcome[str]:
        """Reverse the recorded action against ``tree``/``notes``.

        Returns the kind of the reversed action on success.
        """
        action = self._last
        if action is None:
            return Outcome.failure(ErrorCode.NOTHING_TO_UNDO, "Nothing to undo")

        if isinstance(action, DeleteTagSnapshot):
            outcome = tree.restore(action)
        elif isinstance(action, RenameTagSnapshot):
            outcome = self._undo_rename(tree, action)
        elif isinstance(action, DeleteNoteSnapshot):
            outcome = self._undo_delete_note(notes, action)
        else:  # pragma: no cover - exhaustive over UndoAction
            return Outcome.failure(ErrorCode.UNDO_TARGET_INVALID, f"Unknown action {action!r}")

        if not outcome.ok:
            logger.info("Undo of %s rejected: %s", action.kind, outcome.message)
            return outcome

        self._last = None
        return Outcome.success(action.kind)

    @staticmethod
    def _undo_rename(tree: TagTree, action: RenameTagSnapshot) -> Outcome[str]:
        node = tree.get_node(action.tag_id)
        if node is None:
            return Outcome.failure(ErrorCode.UNDO_TARGET_INVALID, f"Tag {action.tag_id} no longer exists")
        outcome = tree.rename(action.tag_id, action.old_name)
        if not outcome.ok:
            return Outcome.failure(ErrorCode.UNDO_TARGET_INVALID, outcome.message)
        return Outcome.success(action.tag_id)

    @staticmethod
    def _undo_delete_note(notes: list[Note], action: DeleteNoteSnapshot) -> Outcome[str]:
        restored = action.note.snapshot()
        if any(note.id == restored.id for note in notes):
            return Outcome.failure(ErrorCode.UNDO_TARGET_INVALID, f"Note {restored.id} already exists")
        if 0 <= action.index <= len(notes):
            notes.insert(action.index, restored)
        else:
            notes.append(restored)
        return Outcome.success(restored.id)
