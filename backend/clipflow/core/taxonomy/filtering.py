from __future__ import annotations

from typing import TYPE_CHECKING

from clipflow.core.models.filter import FilterMode

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from clipflow.core.models.note import Note
    from clipflow.core.taxonomy.tree import TagTree


def eliminate_redundant(tree: TagTree, active_filters: Iterable[str]) -> list[str]:
    """Drop every selected tag that is a strict ancestor of another selected tag.

    Selecting a descendant already narrows the scope below its ancestor, so the
    ancestor carries no extra constraint in either mode. Repeated ids collapse
    to their first occurrence.
    """
    selected = list(dict.fromkeys(active_filters))
    return [
        tag_id
        for tag_id in selected
        if not any(other != tag_id and tree.is_ancestor(tag_id, other) for other in selected)
    ]


def expand_filters(tree: TagTree, active_filters: Iterable[str]) -> list[set[str]]:
    """One descendant closure per surviving selected tag."""
    return [tree.descendant_closure(tag_id) for tag_id in eliminate_redundant(tree, active_filters)]


def matches(tag_refs: Sequence[str], groups: Sequence[set[str]], mode: FilterMode) -> bool:
    if not groups:
        return True
    if not tag_refs:
        return False
    if mode == FilterMode.AND:
        return all(any(ref in group for ref in tag_refs) for group in groups)
    union = set().union(*groups)
    return any(ref in union for ref in tag_refs)


def filter_notes(
    tree: TagTree,
    notes: Sequence[Note],
    active_filters: Sequence[str],
    mode: FilterMode = FilterMode.OR,
) -> list[Note]:
    """Notes visible under ``active_filters`` combined with ``mode``.

    OR keeps a note when any of its tags falls inside any expanded selection.
    AND requires a hit in every expanded selection. Note order is preserved.
    """
    if not active_filters:
        return list(notes)
    groups = expand_filters(tree, active_filters)
    return [note for note in notes if matches(note.tag_refs, groups, mode)]
