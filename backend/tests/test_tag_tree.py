"""Tests for the tag tree, its index and sibling ordering."""

from __future__ import annotations

from clipflow.core.models.tag import TagNode
from clipflow.core.schemas.outcome import ErrorCode
from clipflow.core.taxonomy.index import TagIndex
from clipflow.core.taxonomy.tree import TagTree


def _build() -> tuple[TagTree, dict[str, str]]:
    tree = TagTree()
    ids = {}
    ids["time"] = tree.create("Time").value
    ids["morning"] = tree.create("Morning", ids["time"]).value
    ids["evening"] = tree.create("Evening", ids["time"]).value
    ids["scene"] = tree.create("Scene").value
    ids["cafe"] = tree.create("Cafe", ids["scene"]).value
    ids["terrace"] = tree.create("Terrace", ids["cafe"]).value
    return tree, ids


def test_create_returns_unique_ids(check_tree) -> None:
    tree, ids = _build()

    assert len(set(ids.values())) == len(ids)
    assert all(tag_id.startswith("tag_") for tag_id in ids.values())
    assert [node.name for node in tree.list_roots()] == ["Time", "Scene"]
    assert tree.get_node(ids["terrace"]).parent_id == ids["cafe"]
    check_tree(tree)


def test_create_rejects_bad_input() -> None:
    tree, ids = _build()

    assert tree.create("   ").error == ErrorCode.EMPTY_NAME
    assert tree.create(None).error == ErrorCode.EMPTY_NAME
    assert tree.create("Cafe", "tag_missing").error == ErrorCode.PARENT_NOT_FOUND
    assert tree.create("Morning", ids["time"]).error == ErrorCode.DUPLICATE_NAME
    # Names are trimmed before comparison
    assert tree.create("  Scene ").error == ErrorCode.DUPLICATE_NAME
    assert len(tree) == 6


def test_same_name_allowed_under_different_parents() -> None:
    tree, ids = _build()

    outcome = tree.create("Morning", ids["scene"])

    assert outcome.ok
    assert tree.get_full_name(outcome.value) == "Scene / Morning"


def test_paths_and_full_names() -> None:
    tree, ids = _build()

    assert tree.get_path(ids["terrace"]) == ["Scene", "Cafe", "Terrace"]
    assert tree.get_path(ids["time"]) == ["Time"]
    assert tree.get_path("tag_unknown") is None
    assert tree.get_full_name(ids["terrace"]) == "Scene / Cafe / Terrace"
    assert tree.get_full_name("tag_unknown") == ""


def test_descendant_closure() -> None:
    tree, ids = _build()

    assert tree.descendant_closure(ids["scene"]) == {ids["scene"], ids["cafe"], ids["terrace"]}
    assert tree.descendant_closure(ids["morning"]) == {ids["morning"]}
    assert tree.descendant_closure("tag_unknown") == {"tag_unknown"}


def test_is_ancestor_is_strict() -> None:
    tree, ids = _build()

    assert tree.is_ancestor(ids["scene"], ids["terrace"])
    assert tree.is_ancestor(ids["cafe"], ids["terrace"])
    assert not tree.is_ancestor(ids["terrace"], ids["terrace"])
    assert not tree.is_ancestor(ids["time"], ids["terrace"])


def test_no_node_is_its_own_ancestor() -> None:
    tree, _ = _build()

    for tag_id in tree.index:
        assert not tree.is_ancestor(tag_id, tag_id)
        path = tree.get_path(tag_id)
        assert len(path) <= len(tree)


def test_rename_in_place() -> None:
    tree, ids = _build()
    node = tree.get_node(ids["cafe"])

    outcome = tree.rename(ids["cafe"], " Coffee House ")

    assert outcome.ok
    assert outcome.value.old_name == "Cafe"
    assert node.name == "Coffee House"
    assert tree.index.get(ids["cafe"]) is node


def test_rename_failures_leave_name_untouched() -> None:
    tree, ids = _build()

    assert tree.rename(ids["morning"], "Evening").error == ErrorCode.DUPLICATE_NAME
    assert tree.rename(ids["morning"], "").error == ErrorCode.EMPTY_NAME
    assert tree.rename("tag_unknown", "X").error == ErrorCode.TAG_NOT_FOUND
    assert tree.get_node(ids["morning"]).name == "Morning"
    # Renaming to the current name is allowed
    assert tree.rename(ids["morning"], "Morning").ok


def test_delete_removes_subtree_from_index(check_tree) -> None:
    tree, ids = _build()

    snapshot = tree.delete(ids["scene"])

    assert snapshot is not None
    assert snapshot.parent_id is None
    assert snapshot.position == 1
    assert [node.id for node in snapshot.nodes] == [ids["scene"], ids["cafe"], ids["terrace"]]
    for key in ("scene", "cafe", "terrace"):
        assert ids[key] not in tree
    assert [node.name for node in tree.list_roots()] == ["Time"]
    check_tree(tree)


def test_delete_unknown_is_noop() -> None:
    tree, _ = _build()

    assert tree.delete("tag_unknown") is None
    assert len(tree) == 6


def test_snapshot_is_a_deep_copy() -> None:
    tree, ids = _build()
    node = tree.get_node(ids["cafe"])

    snapshot = tree.delete(ids["cafe"])
    node.name = "mutated"

    assert snapshot.nodes[0].name == "Cafe"


def test_find_ids_by_name() -> None:
    tree, ids = _build()

    assert set(tree.find_ids_by_name("e")) == {ids["time"], ids["evening"], ids["scene"], ids["cafe"], ids["terrace"]}
    assert tree.find_ids_by_name("CAFE") == [ids["cafe"]]
    assert len(tree.find_ids_by_name("  ")) == 6


def test_index_matches_fresh_rebuild_after_mixed_operations(check_tree) -> None:
    tree, ids = _build()

    tree.create("Night", ids["time"])
    tree.delete(ids["cafe"])
    tree.rename(ids["evening"], "Dusk")
    extra = tree.create("Park", ids["scene"]).value
    tree.create("Bench", extra)
    tree.delete(ids["morning"])
    tree.move(ids["time"], 0, 1)

    nodes = {node.id: node for node in tree.index.values()}
    rebuilt = TagIndex.rebuild(tree.roots, nodes)
    assert rebuilt.keys() == tree.index.keys()
    check_tree(tree)


def test_rebuild_discards_orphans() -> None:
    root = TagNode(id="tag_1_a", name="Root", children=["tag_2_b", "tag_9_missing"])
    child = TagNode(id="tag_2_b", name="Child", parent_id="tag_1_a")
    orphan = TagNode(id="tag_3_c", name="Orphan")

    index = TagIndex.rebuild(["tag_1_a"], {n.id: n for n in (root, child, orphan)})

    assert index.keys() == {"tag_1_a", "tag_2_b"}


def test_move_reorders_siblings() -> None:
    tree, ids = _build()
    third = tree.create("Night", ids["time"]).value

    assert tree.move(ids["time"], 2, 0).ok
    assert [n.id for n in tree.get_children(ids["time"])] == [third, ids["morning"], ids["evening"]]

    assert tree.move(None, 1, 0).ok
    assert [n.name for n in tree.list_roots()] == ["Scene", "Time"]


def test_move_rejects_bad_indices_without_mutating() -> None:
    tree, ids = _build()
    before = tree.ordering.order_of(ids["time"])

    for from_index, to_index in [(0, 0), (-1, 0), (0, 2), (5, 1)]:
        outcome = tree.move(ids["time"], from_index, to_index)
        assert outcome.error == ErrorCode.INDEX_OUT_OF_RANGE

    assert tree.move("tag_unknown", 0, 1).error == ErrorCode.TAG_NOT_FOUND
    assert tree.ordering.order_of(ids["time"]) == before


def test_move_does_not_change_structure() -> None:
    tree, ids = _build()
    children_before = list(tree.get_node(ids["time"]).children)

    tree.move(ids["time"], 0, 1)

    assert tree.get_node(ids["time"]).children == children_before


def test_legacy_order_is_synthesised_on_first_access(check_tree) -> None:
    parent = TagNode(id="tag_1_p", name="Parent", children=["tag_2_x", "tag_3_y"], order=None)
    x = TagNode(id="tag_2_x", name="X", parent_id="tag_1_p")
    y = TagNode(id="tag_3_y", name="Y", parent_id="tag_1_p")
    tree = TagTree.from_nodes(["tag_1_p"], {n.id: n for n in (parent, x, y)})

    assert parent.order is None
    assert [n.name for n in tree.get_children("tag_1_p")] == ["X", "Y"]
    assert parent.order == ["tag_2_x", "tag_3_y"]

    # New children are appended after the synthesised order
    z = tree.create("Z", "tag_1_p").value
    assert tree.ordering.order_of("tag_1_p") == ["tag_2_x", "tag_3_y", z]
    check_tree(tree)
