from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

    from clipflow.core.models.tag import TagNode


class TagIndex:
    """Flat id -> node arena backing the tag tree.

    The index owns the ``TagNode`` objects; the tree structure is expressed
    through the ``parent_id``/``children`` ids stored on them. Lookups through
    the index and through the tree therefore always see the same object.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, TagNode] = {}

    def __contains__(self, tag_id: object) -> bool:
        return tag_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def get(self, tag_id: str | None) -> TagNode | None:
        if not tag_id:
            return None
        return self._nodes.get(tag_id)

    def keys(self) -> set[str]:
        return set(self._nodes)

    def values(self) -> list[TagNode]:
        return list(self._nodes.values())

    def insert(self, node: TagNode) -> None:
        if node.id in self._nodes:
            raise KeyError(f"Tag id already indexed: {node.id}")
        self._nodes[node.id] = node

    def insert_many(self, nodes: Iterable[TagNode]) -> None:
        for node in nodes:
            self.insert(node)

    def remove_many(self, tag_ids: Iterable[str]) -> list[TagNode]:
        """Drop ids from the index and return the removed nodes."""
        removed: list[TagNode] = []
        for tag_id in tag_ids:
            node = self._nodes.pop(tag_id, None)
            if node is not None:
                removed.append(node)
        return removed

    @classmethod
    def rebuild(cls, roots: Iterable[str], nodes: Mapping[str, TagNode]) -> TagIndex:
        """Build an index by walking the tree from ``roots`` over ``nodes``.

        Only ids reachable from the roots are kept, which also discards
        orphans and dangling child references in ``nodes``.
        """
        index = cls()
        stack = [tag_id for tag_id in reversed(list(roots))]
        while stack:
            tag_id = stack.pop()
            node = nodes.get(tag_id)
            if node is None or tag_id in index:
                continue
            index._nodes[tag_id] = node
            stack.extend(reversed(node.children))
        return index
