from __future__ import annotations

from typing import TYPE_CHECKING

from clipflow.core.schemas.outcome import ErrorCode, Outcome
from clipflow.utils.logging import get_logger

if TYPE_CHECKING:
    from clipflow.core.taxonomy.index import TagIndex

logger = get_logger(__name__)


class OrderTracker:
    """Per-parent display order of tag ids.

    Order lists are kept apart from the structural ``children`` lists so that
    reordering never touches ownership. ``None`` as ``parent_id`` addresses
    the top level. A missing list (older data) is synthesised once from the
    structural order the first time it is read.
    """

    def __init__(self, index: TagIndex, roots: list[str], root_order: list[str] | None = None) -> None:
        self._index = index
        self._roots = roots
        self._root_order = root_order

    def _list_for(self, parent_id: str | None) -> list[str] | None:
        if parent_id is None:
            if self._root_order is None:
                self._root_order = list(self._roots)
            return self._root_order
        node = self._index.get(parent_id)
        if node is None:
            return None
        if node.order is None:
            node.order = list(node.children)
        return node.order

    def order_of(self, parent_id: str | None) -> list[str]:
        """Return a copy of the display order, empty for an unknown parent."""
        order = self._list_for(parent_id)
        return list(order) if order is not None else []

    def position_of(self, parent_id: str | None, tag_id: str) -> int:
        order = self._list_for(parent_id) or []
        return order.index(tag_id) if tag_id in order else -1

    def append(self, parent_id: str | None, tag_id: str) -> None:
        order = self._list_for(parent_id)
        if order is not None and tag_id not in order:
            order.append(tag_id)

    def insert_at(self, parent_id: str | None, tag_id: str, position: int) -> int:
        """Insert ``tag_id`` at ``position`` (appending when out of range) and return where it landed."""
        order = self._list_for(parent_id)
        if order is None:
            return -1
        if tag_id in order:
            return order.index(tag_id)
        if 0 <= position <= len(order):
            order.insert(position, tag_id)
            return position
        order.append(tag_id)
        return len(order) - 1

    def remove(self, parent_id: str | None, tag_id: str) -> int:
        """Remove ``tag_id`` from its parent's order and return its former position, or -1."""
        order = self._list_for(parent_id)
        if not order or tag_id not in order:
            return -1
        position = order.index(tag_id)
        del order[position]
        return position

    def move(self, parent_id: str | None, from_index: int, to_index: int) -> Outcome[bool]:
        """Splice the entry at ``from_index`` into ``to_index``."""
        order = self._list_for(parent_id)
        if order is None:
            return Outcome.failure(ErrorCode.TAG_NOT_FOUND, f"Unknown parent tag: {parent_id}")

        size = len(order)
        if not (0 <= from_index < size) or not (0 <= to_index < size) or from_index == to_index:
            return Outcome.failure(
                ErrorCode.INDEX_OUT_OF_RANGE,
                f"Cannot move from {from_index} to {to_index} in a list of {size}",
            )

        tag_id = order.pop(from_index)
        order.insert(to_index, tag_id)
        logger.debug("Moved tag %s under %s from %d to %d", tag_id, parent_id or "<root>", from_index, to_index)
        return Outcome.success(True)

    @staticmethod
    def repaired(order: list[str] | None, children: list[str]) -> list[str] | None:
        """Turn a stored order into a permutation of ``children``.

        Unknown and repeated ids are dropped, missing children are appended.
        An empty or missing stored order is left for lazy synthesis.
        """
        if not order:
            return None
        child_set = set(children)
        fixed = [tag_id for tag_id in dict.fromkeys(order) if tag_id in child_set]
        fixed.extend(tag_id for tag_id in children if tag_id not in fixed)
        return fixed
