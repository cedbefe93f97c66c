"""
Merkle Tree

Public facade combining the leaf store, tree builder, and proof machinery.

Usage:
    from ordmerkle import MerkleTree

    tree = MerkleTree()                    # sha256 by default
    tree.bulk_insert(["a", "b", "c"])
    index = tree.insert("d")

    root = tree.root_digest()
    proof = tree.proof_for_item("c")
    assert tree.verify("c", proof.leaf_index, proof.leaf_count, proof, root)

Thread safety: a tree has a single writer. Proof queries may run
concurrently with each other but not with an insert, which can promote
nodes into the final node cache.
"""
from __future__ import annotations

import hashlib
import logging
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Sequence, Union

from ordmerkle.crypto.hashing import HashAdapter, HasherFactory, to_hex
from ordmerkle.merkle.final_nodes import FinalNodeCache
from ordmerkle.merkle.merkle_proofs import (
    NodeProof,
    Proof,
    ProofGenerator,
    ProofVerifier,
)
from ordmerkle.merkle.merkle_tree import TreeBuilder, split_point, tree_height
from ordmerkle.schemas.errors import SubtreeNotFoundError

if TYPE_CHECKING:
    from ordmerkle.config.runtime import RuntimeConfig

logger = logging.getLogger(__name__)


class MerkleTree:
    """
    Append-only, order-preserving Merkle tree over arbitrary items.

    Args:
        hasher: HashAdapter, hasher factory (e.g. hashlib.sha256), or
            algorithm name. Defaults to SHA-256.
    """

    def __init__(
        self,
        hasher: Union[HashAdapter, HasherFactory, str] = hashlib.sha256,
    ) -> None:
        self._adapter = HashAdapter.coerce(hasher)
        self._builder = TreeBuilder(self._adapter)
        self._prover = ProofGenerator(self._builder)
        self._verifier = ProofVerifier(self._adapter)

    @classmethod
    def from_config(cls, config: "RuntimeConfig | None" = None) -> "MerkleTree":
        """Create a tree using the configured hash algorithm."""
        from ordmerkle.config.runtime import get_default_config

        config = config or get_default_config()
        return cls(config.hash_algorithm)

    @property
    def adapter(self) -> HashAdapter:
        return self._adapter

    @property
    def builder(self) -> TreeBuilder:
        return self._builder

    @property
    def cache(self) -> FinalNodeCache:
        return self._builder.cache

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def insert(self, item: Any) -> int:
        """Append an item and return its leaf index."""
        index = len(self._builder.leaves)
        self._builder.append(item)
        return index

    def bulk_insert(self, items: Iterable[Any]) -> range:
        """
        Append items in order, building the tree once at the end.

        Produces the same root as inserting the items one by one.

        Returns:
            Range of leaf indices assigned to the items
        """
        added = self._builder.extend(items)
        logger.debug("Bulk inserted %d items (total %d)", len(added), len(self))
        return added

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def root_digest(self) -> bytes:
        """
        Raises:
            EmptyTreeError: If the tree has no leaves
        """
        return self._builder.root_digest()

    @property
    def leaf_count(self) -> int:
        return len(self._builder.leaves)

    @property
    def height(self) -> int:
        return tree_height(self.leaf_count)

    def get(self, index: int) -> Any:
        """Return the item stored at index."""
        return self._builder.leaves.get(index)

    def __len__(self) -> int:
        return self.leaf_count

    def __iter__(self) -> Iterator[Any]:
        return (leaf.item for leaf in self._builder.leaves)

    def __contains__(self, item: object) -> bool:
        return any(leaf.item == item for leaf in self._builder.leaves)

    # ------------------------------------------------------------------
    # Proofs
    # ------------------------------------------------------------------

    def proof_for_index(self, index: int) -> Proof:
        return self._prover.proof_for_index(index)

    def proof_for_item(self, item: Any) -> Proof:
        return self._prover.proof_for_item(item)

    def proof_for_tree(self, other: "MerkleTree") -> NodeProof:
        """
        Prove that another tree's root is a node of this tree.

        Raises:
            EmptyTreeError: If either tree is empty
            SubtreeNotFoundError: If no node of this tree matches
        """
        target = other.root_digest()
        start = self._prover.locate_node(target, len(other))
        if start is None:
            raise SubtreeNotFoundError(
                f"No node over {len(other)} leaves matches the given tree root",
                details={"root": to_hex(target), "size": len(other)},
            )
        return self._prover.proof_for_node(start, len(other))

    def verify(
        self,
        item: Any,
        index: int,
        leaf_count: int,
        proof: Union[Proof, Sequence[Any]],
        root_digest: bytes,
    ) -> bool:
        """
        Verify an item against a root using this tree's hash adapter.

        `proof` may be a Proof or a bare sequence of (sibling, side) steps.
        """
        path = proof.path if isinstance(proof, Proof) else proof
        return self._verifier.verify(item, index, leaf_count, path, root_digest)

    def verify_node(self, proof: NodeProof, root_digest: bytes) -> bool:
        return self._verifier.verify_node_proof(proof, root_digest)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def render(self, digest_chars: int = 8) -> str:
        """
        Draw the current shape, one node per line.

        Example (3 leaves):
            [0, 3) 0x5e1f0c2a
            ├── [0, 2) 0x8d3b11f0 final
            │   ├── #0 0x0a1b2c3d
            │   └── #1 0x4e5f6a7b
            └── #2 0x9c8d7e6f
        """
        n = self.leaf_count
        if n == 0:
            return "(empty tree)"

        self.root_digest()
        lines: list[str] = []

        def walk(start: int, size: int, prefix: str, connector: str, child_prefix: str) -> None:
            digest = to_hex(self._builder.node_digest(start, size))[: 2 + digest_chars]
            if size == 1:
                label = f"#{start} {digest}"
            else:
                label = f"[{start}, {start + size}) {digest}"
                if (start, size) in self.cache:
                    label += " final"
            lines.append(prefix + connector + label)
            if size > 1:
                k = split_point(size)
                walk(start, k, child_prefix, "├── ", child_prefix + "│   ")
                walk(start + k, size - k, child_prefix, "└── ", child_prefix + "    ")

        walk(0, n, "", "", "")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"MerkleTree(leaves={self.leaf_count}, hash={self._adapter.name!r})"


__all__ = [
    "MerkleTree",
]
