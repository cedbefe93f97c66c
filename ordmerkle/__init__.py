"""
ordmerkle - order-preserving Merkle trees with pluggable hashing.

Usage:
    import hashlib
    from ordmerkle import MerkleTree, ProofVerifier

    tree = MerkleTree(hashlib.blake2b)
    tree.bulk_insert(["alpha", "beta", "gamma"])
    root = tree.root_digest()

    proof = tree.proof_for_item("beta")
    ProofVerifier(hashlib.blake2b).verify_proof(proof, root)
"""
from ordmerkle.crypto import HashAdapter, IntegerHasher, MerkleHasher, HasherFactory
from ordmerkle.merkle import (
    MerkleTree,
    Proof,
    NodeProof,
    ProofStep,
    Side,
    ProofVerifier,
    verify_inclusion,
)
from ordmerkle.schemas import (
    MerkleException,
    EmptyTreeError,
    ItemNotFoundError,
    SubtreeNotFoundError,
    IndexOutOfRangeError,
    HashAdapterConfigError,
    CanonicalizationException,
    serialize_item,
)
from ordmerkle.schemas.proof import ProofDocument

__version__ = "0.1.0"

__all__ = [
    "HashAdapter",
    "IntegerHasher",
    "MerkleHasher",
    "HasherFactory",
    "MerkleTree",
    "Proof",
    "NodeProof",
    "ProofStep",
    "Side",
    "ProofVerifier",
    "verify_inclusion",
    "ProofDocument",
    "MerkleException",
    "EmptyTreeError",
    "ItemNotFoundError",
    "SubtreeNotFoundError",
    "IndexOutOfRangeError",
    "HashAdapterConfigError",
    "CanonicalizationException",
    "serialize_item",
]
