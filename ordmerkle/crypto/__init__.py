"""
Hashing capability.

Wraps user-chosen hash functions for the Merkle tree.
"""
from .hashing import (
    MerkleHasher,
    HasherFactory,
    IntegerHasher,
    HashAdapter,
    to_hex,
    from_hex,
)

__all__ = [
    "MerkleHasher",
    "HasherFactory",
    "IntegerHasher",
    "HashAdapter",
    "to_hex",
    "from_hex",
]
