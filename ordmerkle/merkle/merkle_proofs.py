"""
Merkle Proofs

Inclusion proof generation and verification matching the tree shape.

This module provides:
- Side / ProofStep / Proof / NodeProof: proof data types
- shape_path: sibling spans from a node up to the root of an n-leaf tree
- ProofGenerator: proofs for leaves and subtrees of a live tree
- verify_inclusion / verify_node_inclusion: stateless verification
- ProofVerifier: verification bound to a hash adapter

Verification rules:
1. Start from H(H(serialize_item(item))) (or a subtree digest)
2. For each (sibling, side) leaf-to-root:
   - LEFT:  current = H(sibling + current)
   - RIGHT: current = H(current + sibling)
3. The path must match the shape of a tree with leaf_count leaves; a proof
   made against a smaller tree does not verify against a grown one
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple, Optional, Sequence

from ordmerkle.crypto.hashing import HashAdapter, HasherFactory
from ordmerkle.merkle.merkle_tree import TreeBuilder, split_point
from ordmerkle.schemas.canonical import serialize_item
from ordmerkle.schemas.errors import (
    CanonicalizationException,
    EmptyTreeError,
    IndexOutOfRangeError,
)

logger = logging.getLogger(__name__)


class Side(str, Enum):
    """Which side the sibling digest combines on."""
    LEFT = "left"
    RIGHT = "right"


class ProofStep(NamedTuple):
    """One sibling on the path from a node to the root."""
    sibling: bytes
    side: Side


@dataclass(frozen=True)
class Proof:
    """
    An inclusion proof for a single leaf.

    Attributes:
        leaf_index: 0-based index of the proven leaf
        leaf_item: Copy of the proven item
        leaf_count: Number of leaves in the tree the proof was made against
        path: Sibling steps ordered leaf-to-root
    """
    leaf_index: int
    leaf_item: Any
    leaf_count: int
    path: tuple[ProofStep, ...]

    def __post_init__(self) -> None:
        """Validate proof structure."""
        if self.leaf_index < 0:
            raise ValueError(f"Leaf index must be non-negative, got {self.leaf_index}")
        object.__setattr__(self, "path", _coerce_path(self.path))


@dataclass(frozen=True)
class NodeProof:
    """
    An inclusion proof for an internal node (a whole subtree).

    Attributes:
        start: Index of the first leaf under the node
        size: Number of leaves under the node
        node_digest: Digest of the node
        leaf_count: Number of leaves in the tree the proof was made against
        path: Sibling steps ordered node-to-root
    """
    start: int
    size: int
    node_digest: bytes
    leaf_count: int
    path: tuple[ProofStep, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", _coerce_path(self.path))


def _coerce_path(path: Sequence[Any]) -> tuple[ProofStep, ...]:
    return tuple(ProofStep(bytes(sibling), Side(side)) for sibling, side in path)


def shape_path(
    leaf_count: int,
    start: int,
    size: int = 1,
) -> Optional[list[tuple[int, int, Side]]]:
    """
    Sibling spans for the node [start, start + size) of an n-leaf tree.

    Returns:
        List of (sibling_start, sibling_size, side) ordered node-to-root,
        or None if the span is not a node of that tree's shape.

    Example:
        >>> shape_path(7, 6)
        [(4, 2, <Side.LEFT: 'left'>), (0, 4, <Side.LEFT: 'left'>)]
    """
    if leaf_count < 1 or size < 1 or start < 0 or start + size > leaf_count:
        return None

    steps: list[tuple[int, int, Side]] = []
    lo, hi = 0, leaf_count
    while (lo, hi - lo) != (start, size):
        n = hi - lo
        if n <= size:
            return None
        mid = lo + split_point(n)
        if start + size <= mid:
            steps.append((mid, hi - mid, Side.RIGHT))
            hi = mid
        elif start >= mid:
            steps.append((lo, mid - lo, Side.LEFT))
            lo = mid
        else:
            # Span straddles a split boundary
            return None

    steps.reverse()
    return steps


class ProofGenerator:
    """Builds proofs against the current state of a TreeBuilder."""

    def __init__(self, builder: TreeBuilder) -> None:
        self._builder = builder

    def _check_not_empty(self) -> int:
        n = len(self._builder.leaves)
        if n == 0:
            raise EmptyTreeError("Cannot generate a proof for an empty tree")
        return n

    def path(self, index: int) -> tuple[ProofStep, ...]:
        """
        Sibling path for the leaf at index, ordered leaf-to-root.

        Raises:
            EmptyTreeError: If the tree has no leaves
            IndexOutOfRangeError: If index is outside [0, leaf_count)
        """
        n = self._check_not_empty()
        if index < 0 or index >= n:
            raise IndexOutOfRangeError(index, n)
        return self._node_path(n, index, 1)

    def _node_path(self, n: int, start: int, size: int) -> tuple[ProofStep, ...]:
        # Make sure the spine memo belongs to the current leaf count
        self._builder.root_digest()
        return tuple(
            ProofStep(self._builder.node_digest(s, sz), side)
            for s, sz, side in shape_path(n, start, size)
        )

    def proof_for_index(self, index: int) -> Proof:
        path = self.path(index)
        return Proof(
            leaf_index=index,
            leaf_item=copy.deepcopy(self._builder.leaves.get(index)),
            leaf_count=len(self._builder.leaves),
            path=path,
        )

    def proof_for_item(self, item: Any) -> Proof:
        """
        Proof for the first leaf (in index order) whose item equals `item`.

        Raises:
            EmptyTreeError: If the tree has no leaves
            ItemNotFoundError: If no leaf holds an equal item
        """
        self._check_not_empty()
        return self.proof_for_index(self._builder.leaves.index_of(item))

    def locate_node(self, digest: bytes, size: int) -> Optional[int]:
        """
        Find the first node of the current shape with `size` leaves and the
        given digest. Returns its start index, or None.
        """
        n = len(self._builder.leaves)
        if n == 0 or size < 1:
            return None
        self._builder.root_digest()

        stack = [(0, n)]
        while stack:
            lo, m = stack.pop()
            if m < size:
                continue
            if m == size:
                if self._builder.node_digest(lo, m) == digest:
                    return lo
                continue
            k = split_point(m)
            stack.append((lo + k, m - k))
            stack.append((lo, k))
        return None

    def proof_for_node(self, start: int, size: int) -> NodeProof:
        """
        Proof that the node [start, start + size) belongs to the tree.

        Raises:
            EmptyTreeError: If the tree has no leaves
            IndexOutOfRangeError: If the span is not a node of the current shape
        """
        n = self._check_not_empty()
        if shape_path(n, start, size) is None:
            raise IndexOutOfRangeError(start, n)
        return NodeProof(
            start=start,
            size=size,
            node_digest=self._builder.node_digest(start, size),
            leaf_count=n,
            path=self._node_path(n, start, size),
        )


def _fold(
    adapter: HashAdapter,
    current: bytes,
    path: Sequence[Any],
    expected: Optional[list[tuple[int, int, Side]]],
) -> Optional[bytes]:
    if expected is None or len(path) != len(expected):
        return None

    for step, (_, _, expected_side) in zip(path, expected):
        if not isinstance(step, (tuple, list)) or len(step) != 2:
            return None
        sibling, side = step
        if not isinstance(sibling, (bytes, bytearray)):
            return None
        if side not in (Side.LEFT, Side.RIGHT) or Side(side) is not expected_side:
            return None
        if expected_side is Side.LEFT:
            current = adapter.digest_concat(sibling, current)
        else:
            current = adapter.digest_concat(current, sibling)
    return current


def verify_inclusion(
    item: Any,
    index: int,
    leaf_count: int,
    path: Sequence[Any],
    expected_root: bytes,
    adapter: HashAdapter,
) -> bool:
    """
    Verify that `item` is leaf `index` of a leaf_count-leaf tree with root
    expected_root.

    Args:
        item: The claimed item (serialized and double-hashed)
        index: Claimed 0-based leaf index
        leaf_count: Number of leaves when the proof was generated
        path: (sibling, side) pairs ordered leaf-to-root
        expected_root: Claimed root digest
        adapter: Hash adapter the tree was built with

    Returns:
        True if the recomputed root equals expected_root, False otherwise
    """
    try:
        current = adapter.leaf_digest(serialize_item(item))
    except CanonicalizationException as e:
        logger.debug("Item cannot be serialized for verification: %s", e)
        return False

    root = _fold(adapter, current, path, shape_path(leaf_count, index))
    return root is not None and root == expected_root


def verify_node_inclusion(
    node_digest: bytes,
    start: int,
    size: int,
    leaf_count: int,
    path: Sequence[Any],
    expected_root: bytes,
    adapter: HashAdapter,
) -> bool:
    """Verify that a subtree digest is the node [start, start + size)."""
    root = _fold(adapter, node_digest, path, shape_path(leaf_count, start, size))
    return root is not None and root == expected_root


class ProofVerifier:
    """
    Verifies proofs independently of any tree.

    Example:
        >>> verifier = ProofVerifier(hashlib.sha256)
        >>> verifier.verify_proof(tree.proof_for_index(3), tree.root_digest())
        True
    """

    def __init__(self, adapter: HashAdapter | HasherFactory | str) -> None:
        self.adapter = HashAdapter.coerce(adapter)

    def verify(
        self,
        item: Any,
        index: int,
        leaf_count: int,
        path: Sequence[Any],
        expected_root: bytes,
    ) -> bool:
        return verify_inclusion(item, index, leaf_count, path, expected_root, self.adapter)

    def verify_proof(self, proof: Proof, expected_root: bytes) -> bool:
        return self.verify(
            proof.leaf_item,
            proof.leaf_index,
            proof.leaf_count,
            proof.path,
            expected_root,
        )

    def verify_node(
        self,
        node_digest: bytes,
        start: int,
        size: int,
        leaf_count: int,
        path: Sequence[Any],
        expected_root: bytes,
    ) -> bool:
        return verify_node_inclusion(
            node_digest, start, size, leaf_count, path, expected_root, self.adapter
        )

    def verify_node_proof(self, proof: NodeProof, expected_root: bytes) -> bool:
        return self.verify_node(
            proof.node_digest,
            proof.start,
            proof.size,
            proof.leaf_count,
            proof.path,
            expected_root,
        )


__all__ = [
    "Side",
    "ProofStep",
    "Proof",
    "NodeProof",
    "shape_path",
    "ProofGenerator",
    "verify_inclusion",
    "verify_node_inclusion",
    "ProofVerifier",
]
