"""
Schemas, serialization, and errors.

ProofDocument lives in ordmerkle.schemas.proof and is imported from there
directly, since it depends on the merkle package.
"""
from .errors import (
    ErrorCodes,
    MerkleError,
    MerkleException,
    EmptyTreeError,
    ItemNotFoundError,
    SubtreeNotFoundError,
    IndexOutOfRangeError,
    HashAdapterConfigError,
    CanonicalizationException,
    ProofFormatException,
    ConfigurationException,
)
from .canonical import (
    to_json_value,
    canonical_json,
    serialize_item,
)

__all__ = [
    # Errors
    "ErrorCodes",
    "MerkleError",
    "MerkleException",
    "EmptyTreeError",
    "ItemNotFoundError",
    "SubtreeNotFoundError",
    "IndexOutOfRangeError",
    "HashAdapterConfigError",
    "CanonicalizationException",
    "ProofFormatException",
    "ConfigurationException",
    # Serialization
    "to_json_value",
    "canonical_json",
    "serialize_item",
]
