"""Normalisation of persisted tag and note documents.

Tag documents have been stored in three shapes over time:

* a flat list of names (entries may also be ``{"name", "subOptions"}``),
* a mapping of name -> list of sub-names (or nested name mappings),
* the canonical id-keyed tree ``{id: {id, name, parentId, children, order}}``.

Everything here is tolerant: bad entries are skipped, never raised.
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from pydantic import ValidationError

from clipflow.core.models.note import Note
from clipflow.core.models.tag import TagNode, generate_tag_id, looks_like_tag_id
from clipflow.core.taxonomy.ordering import OrderTracker
from clipflow.core.taxonomy.tree import TagTree
from clipflow.utils.logging import get_logger

logger = get_logger(__name__)

NAME_PATH_SEPARATOR = "/"


def _is_canonical(raw: dict[str, Any]) -> bool:
    return any(isinstance(entry, dict) and entry.get("id") for entry in raw.values())


def _clean_name(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _name_tree(value: Any) -> dict[str, Any]:
    """Coerce a legacy value into a ``{name: subtree}`` mapping."""
    if isinstance(value, dict):
        return value
    if isinstance(value, list):
        tree: dict[str, Any] = {}
        for item in value:
            if isinstance(item, str):
                tree.setdefault(item, {})
            elif isinstance(item, dict) and isinstance(item.get("name"), str):
                tree.setdefault(item["name"], item.get("subOptions") or {})
        return tree
    return {}


def _build_from_names(
    names: dict[str, Any], parent_id: str | None, nodes: dict[str, TagNode]
) -> list[str]:
    ids: list[str] = []
    seen: set[str] = set()
    for raw_name, subtree in names.items():
        name = _clean_name(raw_name)
        if name is None or name in seen:
            continue
        seen.add(name)
        node = TagNode(id=generate_tag_id(nodes), name=name, parent_id=parent_id)
        nodes[node.id] = node
        node.children = _build_from_names(_name_tree(subtree), node.id, nodes)
        ids.append(node.id)
    return ids


def _build_from_canonical(
    entries: dict[str, Any], parent_id: str | None, nodes: dict[str, TagNode]
) -> list[str]:
    ids: list[str] = []
    seen: set[str] = set()
    for key, entry in entries.items():
        if not isinstance(entry, dict):
            continue
        tag_id = entry.get("id") or key
        name = _clean_name(entry.get("name"))
        if not isinstance(tag_id, str) or not tag_id or name is None:
            logger.warning("Skipping malformed tag entry %r", key)
            continue
        if tag_id in nodes:
            logger.warning("Skipping duplicate tag id %s", tag_id)
            continue
        if name in seen:
            logger.warning("Skipping tag %s: sibling name '%s' already used", tag_id, name)
            continue
        seen.add(name)

        node = TagNode(id=tag_id, name=name, parent_id=parent_id)
        nodes[tag_id] = node
        children = entry.get("children")
        node.children = _build_from_canonical(children, tag_id, nodes) if isinstance(children, dict) else []
        stored_order = entry.get("order")
        if isinstance(stored_order, list):
            stored_order = [i for i in stored_order if isinstance(i, str)]
        else:
            stored_order = None
        node.order = OrderTracker.repaired(stored_order, node.children)
        ids.append(tag_id)
    return ids


def load_tag_tree(raw: Any) -> TagTree:
    """Build a ``TagTree`` from any known tag document shape."""
    nodes: dict[str, TagNode] = {}
    try:
        if isinstance(raw, list):
            roots = _build_from_names(_name_tree(raw), None, nodes)
        elif isinstance(raw, dict):
            if _is_canonical(raw):
                roots = _build_from_canonical(raw, None, nodes)
            else:
                roots = _build_from_names(raw, None, nodes)
        else:
            if raw is not None:
                logger.warning("Unrecognised tag document of type %s, starting empty", type(raw).__name__)
            roots = []
    except RecursionError:
        logger.warning("Tag document is nested too deeply, starting empty")
        return TagTree()
    return TagTree.from_nodes(roots, nodes)


def _dump_node(tree: TagTree, node: TagNode) -> dict[str, Any]:
    return {
        "id": node.id,
        "name": node.name,
        "parentId": node.parent_id,
        "children": {child_id: _dump_node(tree, tree.get_node(child_id)) for child_id in node.children},
        "order": tree.ordering.order_of(node.id),
    }


def dump_tag_tree(tree: TagTree) -> dict[str, Any]:
    """Canonical id-keyed document; top-level keys follow display order."""
    return {node.id: _dump_node(tree, node) for node in tree.list_roots()}


def resolve_tag_path(tree: TagTree, path: str) -> str | None:
    """Walk ``"Parent/Child"`` down the tree by name and return the tag id."""
    tag_id: str | None = None
    for part in path.split(NAME_PATH_SEPARATOR):
        name = part.strip()
        found = next((node for node in tree.get_children(tag_id) if node.name == name), None)
        if found is None:
            return None
        tag_id = found.id
    return tag_id


def migrate_tag_refs(tree: TagTree, refs: Any) -> list[str]:
    """Turn stored references (ids or name paths) into live tag ids."""
    if not isinstance(refs, list):
        return []
    resolved: list[str] = []
    for ref in refs:
        if not isinstance(ref, str) or not ref.strip():
            continue
        tag_id = ref if looks_like_tag_id(ref) else resolve_tag_path(tree, ref)
        if tag_id is None or tag_id not in tree:
            logger.debug("Dropping unresolvable tag reference %r", ref)
            continue
        if tag_id not in resolved:
            resolved.append(tag_id)
    return resolved


def load_notes(raw: Any, tree: TagTree) -> list[Note]:
    """Build notes from a stored list, resolving legacy tag references."""
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning("Unrecognised notes document of type %s, starting empty", type(raw).__name__)
        return []

    notes: list[Note] = []
    seen_ids: set[str] = set()
    for position, entry in enumerate(raw):
        if not isinstance(entry, dict):
            logger.warning("Skipping invalid note at index %d", position)
            continue

        refs = entry.get("categories", entry.get("tag_refs"))
        if not isinstance(refs, list):
            legacy = entry.get("category")
            refs = [legacy] if legacy else []

        note_id = entry.get("id")
        if note_id in (None, "") or isinstance(note_id, bool) or str(note_id) in seen_ids:
            note_id = uuid4().hex
        content = entry.get("content")

        fields: dict[str, Any] = {
            "id": str(note_id),
            "content": content if isinstance(content, str) else "",
            "tag_refs": migrate_tag_refs(tree, refs),
        }
        optional = {k: entry[k] for k in ("date", "expanded", "created_at", "updated_at") if entry.get(k) is not None}
        try:
            note = Note(**fields, **optional)
        except ValidationError:
            logger.warning("Dropping malformed display fields of note %s", fields["id"])
            note = Note(**fields)
        seen_ids.add(note.id)
        notes.append(note)
    return notes


def dump_notes(notes: list[Note]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for note in notes:
        row = note.model_dump(mode="json")
        row["categories"] = row.pop("tag_refs")
        rows.append(row)
    return rows
