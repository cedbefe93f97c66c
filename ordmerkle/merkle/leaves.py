"""
Leaf Store

Append-only ordered sequence of tree items and their leaf digests.

Rules:
1. Leaf digest: H(H(serialize_item(item))), regardless of the adapter
2. Indices are dense, 0-based, and follow append order
3. Leaves are never updated or removed
"""
from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Iterable, Iterator

from ordmerkle.crypto.hashing import HashAdapter
from ordmerkle.schemas.canonical import serialize_item
from ordmerkle.schemas.errors import IndexOutOfRangeError, ItemNotFoundError


@dataclass(frozen=True)
class LeafNode:
    """
    A single leaf of the tree.

    Attributes:
        index: 0-based append position
        item: Copy of the inserted item
        digest: Double-hashed serialization of the item
    """
    index: int
    item: Any
    digest: bytes


class LeafStore:
    """Append-only store of LeafNode objects."""

    def __init__(self, adapter: HashAdapter) -> None:
        self._adapter = adapter
        self._leaves: list[LeafNode] = []

    def _make_leaf(self, index: int, item: Any) -> LeafNode:
        if isinstance(item, memoryview):
            item = item.tobytes()
        # Serialize first so an unserializable item never reaches the store
        data = serialize_item(item)
        return LeafNode(
            index=index,
            item=copy.deepcopy(item),
            digest=self._adapter.leaf_digest(data),
        )

    def append(self, item: Any) -> int:
        """Append an item and return its index."""
        leaf = self._make_leaf(len(self._leaves), item)
        self._leaves.append(leaf)
        return leaf.index

    def extend(self, items: Iterable[Any]) -> range:
        """
        Append many items and return the range of indices they received.

        All items are serialized before any is stored, so a failing item
        leaves the store unchanged.
        """
        start = len(self._leaves)
        new_leaves = [
            self._make_leaf(start + offset, item)
            for offset, item in enumerate(items)
        ]
        self._leaves.extend(new_leaves)
        return range(start, len(self._leaves))

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self._leaves):
            raise IndexOutOfRangeError(index, len(self._leaves))

    def leaf(self, index: int) -> LeafNode:
        self._check_index(index)
        return self._leaves[index]

    def get(self, index: int) -> Any:
        """Return the stored item at index."""
        return self.leaf(index).item

    def digest(self, index: int) -> bytes:
        """Return the leaf digest at index."""
        return self.leaf(index).digest

    def index_of(self, item: Any) -> int:
        """
        Return the index of the first leaf whose item equals `item`.

        Raises:
            ItemNotFoundError: If no stored item is equal
        """
        for leaf in self._leaves:
            if leaf.item == item:
                return leaf.index
        raise ItemNotFoundError(
            f"Item not found among {len(self._leaves)} leaves",
            details={"item": repr(item)[:200]},
        )

    def length(self) -> int:
        return len(self._leaves)

    def __len__(self) -> int:
        return len(self._leaves)

    def __iter__(self) -> Iterator[LeafNode]:
        return iter(self._leaves)


__all__ = [
    "LeafNode",
    "LeafStore",
]
