"""
Order-preserving Merkle tree with final-node reuse.

This package provides:
- LeafStore / LeafNode: append-only leaves
- FinalNodeCache / FinalNode: reusable complete subtrees
- TreeBuilder: incremental root maintenance
- ProofGenerator / ProofVerifier: inclusion proofs
- MerkleTree: public facade

Usage:
    from ordmerkle.merkle import MerkleTree

    tree = MerkleTree()
    tree.bulk_insert(range(7))
    proof = tree.proof_for_index(6)
    assert tree.verify(6, 6, len(tree), proof, tree.root_digest())
"""
from .leaves import LeafNode, LeafStore
from .final_nodes import FinalNode, FinalNodeCache
from .merkle_tree import (
    is_power_of_two,
    split_point,
    tree_height,
    build_root,
    TreeBuilder,
)
from .merkle_proofs import (
    Side,
    ProofStep,
    Proof,
    NodeProof,
    shape_path,
    ProofGenerator,
    ProofVerifier,
    verify_inclusion,
    verify_node_inclusion,
)
from .tree import MerkleTree


__all__ = [
    # Leaves & final nodes
    "LeafNode",
    "LeafStore",
    "FinalNode",
    "FinalNodeCache",
    # Construction
    "is_power_of_two",
    "split_point",
    "tree_height",
    "build_root",
    "TreeBuilder",
    # Proofs
    "Side",
    "ProofStep",
    "Proof",
    "NodeProof",
    "shape_path",
    "ProofGenerator",
    "ProofVerifier",
    "verify_inclusion",
    "verify_node_inclusion",
    # Facade
    "MerkleTree",
]
