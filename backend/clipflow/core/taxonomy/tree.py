from __future__ import annotations

from typing import TYPE_CHECKING

from clipflow.core.models.tag import TagNode, generate_tag_id
from clipflow.core.models.undo import DeleteTagSnapshot, RenameTagSnapshot
from clipflow.core.schemas.outcome import ErrorCode, Outcome
from clipflow.core.taxonomy.index import TagIndex
from clipflow.core.taxonomy.ordering import OrderTracker
from clipflow.utils.logging import get_logger
from clipflow.utils.validation import validate_tag_name

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

logger = get_logger(__name__)

PATH_SEPARATOR = " / "


class TagTree:
    """Hierarchical tag taxonomy of a single workspace.

    Nodes are stored once, in the ``TagIndex``; parent/child links are ids.
    ``roots`` holds the top-level ids in structural (creation) order while
    the ``OrderTracker`` holds display order for every level.
    """

    def __init__(
        self,
        *,
        index: TagIndex | None = None,
        roots: list[str] | None = None,
        root_order: list[str] | None = None,
    ) -> None:
        self._index = index if index is not None else TagIndex()
        self._roots: list[str] = roots if roots is not None else []
        self._order = OrderTracker(self._index, self._roots, root_order)

    @classmethod
    def from_nodes(
        cls,
        roots: Iterable[str],
        nodes: Mapping[str, TagNode],
        root_order: list[str] | None = None,
    ) -> TagTree:
        """Build a tree from loaded nodes with a full index walk."""
        roots = [tag_id for tag_id in roots if tag_id in nodes]
        index = TagIndex.rebuild(roots, nodes)
        return cls(index=index, roots=roots, root_order=OrderTracker.repaired(root_order, roots))

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def index(self) -> TagIndex:
        return self._index

    @property
    def ordering(self) -> OrderTracker:
        return self._order

    @property
    def roots(self) -> list[str]:
        return list(self._roots)

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, tag_id: object) -> bool:
        return tag_id in self._index

    def get_node(self, tag_id: str | None) -> TagNode | None:
        return self._index.get(tag_id)

    def get_children(self, parent_id: str | None = None) -> list[TagNode]:
        """Children of ``parent_id`` (top-level tags for ``None``) in display order."""
        if parent_id is not None and parent_id not in self._index:
            return []
        return [self._index.get(tag_id) for tag_id in self._order.order_of(parent_id) if tag_id in self._index]

    def list_roots(self) -> list[TagNode]:
        return self.get_children(None)

    def get_path(self, tag_id: str | None) -> list[str] | None:
        """Names from the top-level ancestor down to ``tag_id``."""
        node = self._index.get(tag_id)
        if node is None:
            return None
        path: list[str] = []
        while node is not None:
            path.append(node.name)
            node = self._index.get(node.parent_id)
        path.reverse()
        return path

    def get_full_name(self, tag_id: str | None) -> str:
        path = self.get_path(tag_id)
        return PATH_SEPARATOR.join(path) if path else ""

    def subtree_ids(self, tag_id: str) -> list[str]:
        """Ids of ``tag_id`` and all its descendants, parents before children."""
        node = self._index.get(tag_id)
        if node is None:
            return []
        ids = [tag_id]
        for child_id in node.children:
            ids.extend(self.subtree_ids(child_id))
        return ids

    def descendant_closure(self, tag_id: str) -> set[str]:
        """``{tag_id}`` plus every transitive child.

        An id that is not in the tree still yields ``{tag_id}`` so that
        callers filtering on stale ids degrade to an exact match.
        """
        return {tag_id, *self.subtree_ids(tag_id)}

    def is_ancestor(self, ancestor_id: str, tag_id: str) -> bool:
        """True when ``ancestor_id`` is a strict ancestor of ``tag_id``."""
        node = self._index.get(tag_id)
        while node is not None and node.parent_id is not None:
            if node.parent_id == ancestor_id:
                return True
            node = self._index.get(node.parent_id)
        return False

    def find_ids_by_name(self, query: str | None) -> list[str]:
        """Case-insensitive substring search over tag names."""
        if not query or not query.strip():
            return list(self._index)
        needle = query.strip().lower()
        return [node.id for node in self._index.values() if needle in node.name.lower()]

    def reachable_ids(self) -> set[str]:
        """Ids found by a fresh walk from the roots, independent of the incremental index."""
        nodes = {node.id: node for node in self._index.values()}
        return TagIndex.rebuild(self._roots, nodes).keys()

    def _sibling_ids(self, parent_id: str | None) -> list[str]:
        if parent_id is None:
            return self._roots
        parent = self._index.get(parent_id)
        return parent.children if parent is not None else []

    def _name_taken(self, parent_id: str | None, name: str, *, exclude: str | None = None) -> bool:
        for sibling_id in self._sibling_ids(parent_id):
            sibling = self._index.get(sibling_id)
            if sibling is not None and sibling_id != exclude and sibling.name == name:
                return True
        return False

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def create(self, name: str | None, parent_id: str | None = None) -> Outcome[str]:
        """Create a tag under ``parent_id`` (or at the top level) and return its id."""
        valid, error = validate_tag_name(name)
        if not valid:
            return Outcome.failure(ErrorCode.EMPTY_NAME, error)
        name = name.strip()

        if parent_id is not None and parent_id not in self._index:
            return Outcome.failure(ErrorCode.PARENT_NOT_FOUND, f"Parent tag not found: {parent_id}")
        if self._name_taken(parent_id, name):
            return Outcome.failure(ErrorCode.DUPLICATE_NAME, f"A sibling named '{name}' already exists")

        node = TagNode(id=generate_tag_id(self._index), name=name, parent_id=parent_id, order=[])
        self._index.insert(node)
        self._sibling_ids(parent_id).append(node.id)
        self._order.append(parent_id, node.id)
        logger.debug("Created tag %s (%s) under %s", node.id, name, parent_id or "<root>")
        return Outcome.success(node.id)

    def rename(self, tag_id: str, new_name: str | None) -> Outcome[RenameTagSnapshot]:
        node = self._index.get(tag_id)
        if node is None:
            return Outcome.failure(ErrorCode.TAG_NOT_FOUND, f"Tag not found: {tag_id}")
        valid, error = validate_tag_name(new_name)
        if not valid:
            return Outcome.failure(ErrorCode.EMPTY_NAME, error)
        new_name = new_name.strip()
        if self._name_taken(node.parent_id, new_name, exclude=tag_id):
            return Outcome.failure(ErrorCode.DUPLICATE_NAME, f"A sibling named '{new_name}' already exists")

        snapshot = RenameTagSnapshot(tag_id=tag_id, old_name=node.name, new_name=new_name)
        node.name = new_name
        return Outcome.success(snapshot)

    def delete(self, tag_id: str) -> DeleteTagSnapshot | None:
        """Remove ``tag_id`` with its whole subtree; ``None`` when the id is unknown."""
        node = self._index.get(tag_id)
        if node is None:
            return None

        subtree = self.subtree_ids(tag_id)
        copies = [self._index.get(i).snapshot() for i in subtree]

        parent_id = node.parent_id
        position = self._order.remove(parent_id, tag_id)
        if position < 0:
            position = len(self._order.order_of(parent_id))
        siblings = self._sibling_ids(parent_id)
        if tag_id in siblings:
            siblings.remove(tag_id)
        self._index.remove_many(subtree)

        logger.debug("Deleted tag %s and %d descendant(s)", tag_id, len(subtree) - 1)
        return DeleteTagSnapshot(tag_id=tag_id, parent_id=parent_id, position=position, nodes=copies)

    def restore(self, snapshot: DeleteTagSnapshot) -> Outcome[str]:
        """Reattach a subtree captured by ``delete``."""
        if not snapshot.nodes or snapshot.nodes[0].id != snapshot.tag_id:
            return Outcome.failure(ErrorCode.UNDO_TARGET_INVALID, "Snapshot does not contain the deleted tag")
        if snapshot.parent_id is not None and snapshot.parent_id not in self._index:
            return Outcome.failure(
                ErrorCode.UNDO_TARGET_INVALID,
                f"Parent tag {snapshot.parent_id} no longer exists",
            )
        if any(node.id in self._index for node in snapshot.nodes):
            return Outcome.failure(ErrorCode.UNDO_TARGET_INVALID, "Part of the deleted subtree exists again")
        root_name = snapshot.nodes[0].name
        if self._name_taken(snapshot.parent_id, root_name):
            return Outcome.failure(
                ErrorCode.UNDO_TARGET_INVALID,
                f"A sibling named '{root_name}' was created since the deletion",
            )

        copies = [node.snapshot() for node in snapshot.nodes]
        copies[0].parent_id = snapshot.parent_id
        self._index.insert_many(copies)
        self._sibling_ids(snapshot.parent_id).append(snapshot.tag_id)
        self._order.insert_at(snapshot.parent_id, snapshot.tag_id, snapshot.position)
        logger.debug("Restored tag %s with %d descendant(s)", snapshot.tag_id, len(copies) - 1)
        return Outcome.success(snapshot.tag_id)

    def move(self, parent_id: str | None, from_index: int, to_index: int) -> Outcome[bool]:
        return self._order.move(parent_id, from_index, to_index)
