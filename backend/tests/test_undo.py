"""Tests for the single-slot undo log and the cascading deletes it reverses."""

from __future__ import annotations

from clipflow.core.models.note import Note
from clipflow.core.models.undo import DeleteNoteSnapshot
from clipflow.core.schemas.outcome import ErrorCode
from clipflow.core.taxonomy.tree import TagTree
from clipflow.core.taxonomy.undo import MutationLog


def _tree_shape(ws, tag_ids):
    return {
        tag_id: (ws.get_path(tag_id), [child.id for child in ws.get_children(tag_id)])
        for tag_id in tag_ids
    }


def test_delete_cascades_into_notes_and_filters(scene, check_tree) -> None:
    ws = scene.ws
    terrace = ws.create_tag("Terrace", scene.cafe).value
    deep = ws.add_note("outside", [terrace, scene.school]).value
    ws.toggle_filter(scene.cafe)
    ws.toggle_filter(terrace)
    closure = ws.descendant_closure(scene.cafe)

    outcome = ws.delete_tag(scene.cafe)

    assert outcome.ok
    assert closure == {scene.cafe, terrace}
    for tag_id in closure:
        assert tag_id not in ws.tree
        assert tag_id not in ws.filters.active_filters
        for note in ws.list_notes():
            assert tag_id not in note.tag_refs
    assert scene.i1.tag_refs == []
    assert deep.tag_refs == [scene.school]
    check_tree(ws.tree)


def test_undo_delete_restores_tree_only(scene, check_tree) -> None:
    ws = scene.ws

    ws.delete_tag(scene.cafe)
    assert scene.i1.tag_refs == []

    outcome = ws.undo()

    assert outcome.ok
    assert outcome.value == "delete_tag"
    assert [child.id for child in ws.get_children(scene.scene)] == [scene.cafe, scene.school]
    assert ws.get_full_name(scene.cafe) == "Scene / Cafe"
    # Links stripped by the cascade stay stripped
    assert scene.i1.tag_refs == []
    assert not ws.undo_log.has_undo
    check_tree(ws.tree)


def test_undo_delete_round_trip_preserves_paths_and_children(scene, check_tree) -> None:
    ws = scene.ws
    terrace = ws.create_tag("Terrace", scene.cafe).value
    ws.create_tag("Table", terrace)
    ws.create_tag("Counter", scene.cafe)
    closure = ws.descendant_closure(scene.scene)
    before = _tree_shape(ws, closure)
    roots_before = [node.id for node in ws.list_root_tags()]

    ws.delete_tag(scene.scene)
    assert ws.tree.index.keys().isdisjoint(closure)
    assert ws.undo().ok

    assert _tree_shape(ws, closure) == before
    assert [node.id for node in ws.list_root_tags()] == roots_before
    check_tree(ws.tree)


def test_undo_delete_puts_tag_back_in_the_middle(workspace) -> None:
    ids = [workspace.create_tag(name).value for name in ("A", "B", "C")]

    workspace.delete_tag(ids[1])
    assert [n.name for n in workspace.list_root_tags()] == ["A", "C"]
    workspace.undo()

    assert [n.id for n in workspace.list_root_tags()] == ids


def test_undo_delete_appends_when_position_no_longer_exists(workspace) -> None:
    ids = [workspace.create_tag(name).value for name in ("A", "B", "C")]

    workspace.delete_tag(ids[2])
    snapshot = workspace.undo_log.peek()
    workspace.tree.delete(ids[0])
    workspace.tree.delete(ids[1])

    assert snapshot.position == 2
    assert workspace.undo().ok
    assert [n.id for n in workspace.list_root_tags()] == [ids[2]]


def test_undo_delete_fails_when_parent_is_gone(scene) -> None:
    ws = scene.ws
    ws.delete_tag(scene.cafe)
    snapshot = ws.undo_log.peek()
    # Remove the parent without touching the undo slot
    ws.tree.delete(scene.scene)

    outcome = ws.undo()

    assert outcome.error == ErrorCode.UNDO_TARGET_INVALID
    assert ws.undo_log.peek() is snapshot
    assert scene.cafe not in ws.tree


def test_undo_delete_fails_when_name_was_reused(scene) -> None:
    ws = scene.ws
    ws.delete_tag(scene.cafe)
    ws.tree.create("Cafe", scene.scene)

    outcome = ws.undo()

    assert outcome.error == ErrorCode.UNDO_TARGET_INVALID
    assert [n.name for n in ws.get_children(scene.scene)] == ["School", "Cafe"]


def test_rename_then_duplicate_rename(scene) -> None:
    ws = scene.ws

    assert ws.rename_tag(scene.cafe, "Coffee House").ok
    outcome = ws.rename_tag(scene.cafe, "School")

    assert outcome.error == ErrorCode.DUPLICATE_NAME
    assert ws.get_tag(scene.cafe).name == "Coffee House"


def test_undo_rename(scene) -> None:
    ws = scene.ws
    ws.rename_tag(scene.cafe, "Coffee House")

    outcome = ws.undo()

    assert outcome.ok
    assert outcome.value == "rename_tag"
    assert ws.get_tag(scene.cafe).name == "Cafe"


def test_failed_rename_does_not_replace_undo_slot(scene) -> None:
    ws = scene.ws
    ws.delete_tag(scene.school)

    ws.rename_tag(scene.cafe, "")

    assert ws.undo_log.peek().kind == "delete_tag"


def test_undo_rename_fails_when_tag_deleted(scene) -> None:
    ws = scene.ws
    ws.rename_tag(scene.cafe, "Coffee House")
    ws.tree.delete(scene.cafe)

    assert ws.undo().error == ErrorCode.UNDO_TARGET_INVALID


def test_only_latest_action_is_recoverable(scene) -> None:
    ws = scene.ws
    ws.rename_tag(scene.cafe, "Coffee House")
    ws.delete_note(scene.i2.id)

    assert ws.undo().value == "delete_note"
    assert ws.undo().error == ErrorCode.NOTHING_TO_UNDO
    assert ws.get_tag(scene.cafe).name == "Coffee House"


def test_undo_delete_note_restores_position(scene) -> None:
    ws = scene.ws
    third = ws.add_note("third").value

    ws.delete_note(scene.i2.id)
    assert [n.id for n in ws.list_notes()] == [scene.i1.id, third.id]
    assert ws.undo().ok

    assert [n.id for n in ws.list_notes()] == [scene.i1.id, scene.i2.id, third.id]
    assert ws.get_note(scene.i2.id).content == "Homework"


def test_undo_delete_note_appends_when_index_out_of_range() -> None:
    log = MutationLog()
    note = Note(content="gone")
    log.record(DeleteNoteSnapshot(note=note, index=5))
    notes: list[Note] = []

    assert log.undo(TagTree(), notes).ok
    assert [n.id for n in notes] == [note.id]
    assert notes[0] is not note


def test_undo_with_empty_slot(workspace) -> None:
    outcome = workspace.undo()

    assert outcome.error == ErrorCode.NOTHING_TO_UNDO


def test_delete_note_unknown(workspace) -> None:
    assert workspace.delete_note("missing").error == ErrorCode.NOTE_NOT_FOUND
    assert not workspace.undo_log.has_undo
