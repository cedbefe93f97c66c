"""
Final Node Cache

Holds complete, immutable subtrees of a single tree for reuse.

A final node spans [start, start + 2^k) where start is a multiple of 2^k.
Appends only ever extend the right edge of the tree, so once all leaves of
such a span exist its digest never changes again. The cache stores each
final node once and hands out the same object for every later tree version.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FinalNode:
    """
    An immutable complete subtree.

    Attributes:
        start: Index of the first leaf covered
        size: Number of leaves covered (a power of two)
        digest: Subtree digest
    """
    start: int
    size: int
    digest: bytes

    def __post_init__(self) -> None:
        """Validate span alignment."""
        if self.size < 1 or self.size & (self.size - 1):
            raise ValueError(f"Final node size must be a power of two, got {self.size}")
        if self.start < 0 or self.start % self.size:
            raise ValueError(
                f"Final node start {self.start} is not aligned to size {self.size}"
            )

    @property
    def end(self) -> int:
        return self.start + self.size


class FinalNodeCache:
    """
    Per-tree store of FinalNode objects keyed by (start, size).

    First writer wins: adding a node for a span that is already cached
    returns the cached object.
    """

    def __init__(self) -> None:
        self._nodes: dict[tuple[int, int], FinalNode] = {}
        self.hits = 0
        self.misses = 0

    def get(self, start: int, size: int) -> Optional[FinalNode]:
        node = self._nodes.get((start, size))
        if node is None:
            self.misses += 1
        else:
            self.hits += 1
        return node

    def add(self, node: FinalNode) -> FinalNode:
        """
        Store a final node and return the cached instance for its span.

        Raises:
            ValueError: If the span is cached with a different digest
        """
        key = (node.start, node.size)
        existing = self._nodes.get(key)
        if existing is not None:
            if existing.digest != node.digest:
                raise ValueError(
                    f"Final node [{node.start}, {node.end}) already cached "
                    f"with a different digest"
                )
            return existing

        self._nodes[key] = node
        logger.debug("Final node [%d, %d) cached", node.start, node.end)
        return node

    def spans(self) -> list[tuple[int, int]]:
        """Return cached (start, size) spans in leaf order."""
        return sorted(self._nodes)

    def clear(self) -> None:
        self._nodes.clear()
        self.hits = 0
        self.misses = 0

    def __contains__(self, span: object) -> bool:
        return span in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[FinalNode]:
        return iter(self._nodes[key] for key in sorted(self._nodes))


__all__ = [
    "FinalNode",
    "FinalNodeCache",
]
