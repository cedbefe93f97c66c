"""
Merkle Tree Construction

Incremental, order-preserving Merkle tree construction with final-node reuse.

This module provides:
- Shape helpers (split_point, is_power_of_two, tree_height)
- build_root: cache-free reference root computation
- TreeBuilder: maintains the root across appends, reusing final subtrees

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing: leaf = H(H(serialize_item(item)))
2. Parent hashing: parent = H(left + right), never double-hashed
3. Shape: for n > 1 leaves split at k, the largest power of two < n:
   MTH(D[0:n]) = H(MTH(D[0:k]) + MTH(D[k:n]))   (RFC 6962 style)
4. Empty tree: no root (EmptyTreeError)
5. Single leaf: root = leaf digest

Reuse Notes:
- The left span of every split has power-of-two size and is complete, so it
  is final and gets cached the first time it is computed
- Appends only change the right spine; an append costs O(log n) internal
  hashes no matter how many leaves exist
- Caching never changes the root: build_root() over the same leaf digests
  always agrees with TreeBuilder
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence

from ordmerkle.crypto.hashing import HashAdapter
from ordmerkle.merkle.final_nodes import FinalNode, FinalNodeCache
from ordmerkle.merkle.leaves import LeafStore
from ordmerkle.schemas.errors import EmptyTreeError, IndexOutOfRangeError

logger = logging.getLogger(__name__)


def is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


def split_point(n: int) -> int:
    """
    Return the largest power of two strictly less than n.

    Example:
        >>> [split_point(n) for n in (2, 3, 4, 5, 7, 8, 9)]
        [1, 2, 2, 4, 4, 4, 8]
    """
    if n < 2:
        raise ValueError(f"Cannot split a span of {n} leaves")
    return 1 << ((n - 1).bit_length() - 1)


def tree_height(num_leaves: int) -> int:
    """
    Number of internal levels above the leaves: ceil(log2(n)).

    A single leaf (or empty tree) has height 0, two leaves height 1,
    seven leaves height 3.
    """
    if num_leaves <= 1:
        return 0
    return (num_leaves - 1).bit_length()


def build_root(leaf_digests: Sequence[bytes], adapter: HashAdapter) -> bytes:
    """
    Compute the root from leaf digests without any caching.

    This is the from-scratch reference the incremental builder must match.

    Raises:
        EmptyTreeError: If leaf_digests is empty
    """
    if len(leaf_digests) == 0:
        raise EmptyTreeError()

    if len(leaf_digests) == 1:
        return leaf_digests[0]

    k = split_point(len(leaf_digests))
    return adapter.digest_concat(
        build_root(leaf_digests[:k], adapter),
        build_root(leaf_digests[k:], adapter),
    )


class TreeBuilder:
    """
    Maintains the root digest of a LeafStore.

    Final (complete, aligned power-of-two) subtrees are stored in a
    FinalNodeCache and reused across all later versions of the tree.
    Non-final nodes computed for the current version (the right spine) are
    memoized until the next append.

    Attributes:
        adapter: Hash adapter used for every digest
        leaves: Append-only leaf store
        cache: Final nodes of this tree
        internal_hash_count: Internal-node hashes computed so far
    """

    def __init__(
        self,
        adapter: HashAdapter,
        leaves: Optional[LeafStore] = None,
        cache: Optional[FinalNodeCache] = None,
    ) -> None:
        self.adapter = adapter
        self.leaves = leaves if leaves is not None else LeafStore(adapter)
        self.cache = cache if cache is not None else FinalNodeCache()
        self.internal_hash_count = 0
        self._spine: dict[tuple[int, int], bytes] = {}
        self._root: Optional[bytes] = None
        self._root_size = 0

    def append(self, item: Any) -> bytes:
        """Append one item and return the new root digest."""
        self.leaves.append(item)
        return self._build()

    def extend(self, items: Iterable[Any]) -> range:
        """
        Append many items, then build once over the final leaf count.

        Returns:
            Range of indices assigned to the new items
        """
        added = self.leaves.extend(items)
        if len(added):
            self._build()
        return added

    def root_digest(self) -> bytes:
        """
        Return the root digest of the current leaves.

        Raises:
            EmptyTreeError: If there are no leaves
        """
        if len(self.leaves) == 0:
            raise EmptyTreeError()
        if self._root is None or self._root_size != len(self.leaves):
            self._build()
        return self._root

    def node_digest(self, start: int, size: int) -> bytes:
        """
        Return the digest of the subtree over leaves [start, start + size).

        Intended for spans that are nodes of the current shape; those are
        always served from the final node cache, the current spine memo, or
        the leaf store.

        Raises:
            IndexOutOfRangeError: If the span reaches past the last leaf
        """
        n = len(self.leaves)
        if size < 1 or start < 0 or start + size > n:
            raise IndexOutOfRangeError(start + max(size, 1) - 1, n)
        return self._subtree(start, size)

    def rebuild(self) -> Optional[bytes]:
        """Drop every cached node and recompute the root from scratch."""
        self.cache.clear()
        self._spine = {}
        self._root = None
        self._root_size = 0
        if len(self.leaves) == 0:
            return None
        logger.debug("Rebuilding tree over %d leaves from scratch", len(self.leaves))
        return self._build()

    def _build(self) -> bytes:
        n = len(self.leaves)
        before = self.internal_hash_count
        self._spine = {}
        self._root = self._subtree(0, n)
        self._root_size = n
        logger.debug(
            "Root over %d leaves: %d internal hashes, %d final nodes cached",
            n, self.internal_hash_count - before, len(self.cache),
        )
        return self._root

    def _subtree(self, start: int, size: int) -> bytes:
        if size == 1:
            return self.leaves.digest(start)

        final = is_power_of_two(size) and start % size == 0
        if final:
            node = self.cache.get(start, size)
            if node is not None:
                return node.digest
        else:
            memo = self._spine.get((start, size))
            if memo is not None:
                return memo

        k = split_point(size)
        left = self._subtree(start, k)
        right = self._subtree(start + k, size - k)
        digest = self.adapter.digest_concat(left, right)
        self.internal_hash_count += 1

        if final:
            return self.cache.add(FinalNode(start=start, size=size, digest=digest)).digest
        self._spine[(start, size)] = digest
        return digest


__all__ = [
    "is_power_of_two",
    "split_point",
    "tree_height",
    "build_root",
    "TreeBuilder",
]
