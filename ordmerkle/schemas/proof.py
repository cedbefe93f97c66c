"""
Proof Documents

JSON wire form of an inclusion proof, for handing proofs to an independent
verifier (another process, another machine, the CLI).

Digests are 0x-prefixed hex strings. The item is carried so that its leaf
bytes can be rebuilt exactly:
- "text": str items, hashed as UTF-8
- "hex": bytes-like and __bytes__ items, as the hex of their leaf bytes
- "json": everything else, as its reduced canonical JSON value
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ordmerkle.crypto.hashing import HashAdapter, from_hex, to_hex
from ordmerkle.merkle.merkle_proofs import Proof, ProofStep, Side, verify_inclusion
from ordmerkle.schemas.canonical import canonical_json, serialize_item, to_json_value
from ordmerkle.schemas.errors import CanonicalizationException, ProofFormatException

PROOF_SCHEME = "ordmerkle-inclusion-v1"


def _check_hex(value: str) -> str:
    # from_hex raises ValueError, which pydantic reports as a validation error
    from_hex(value)
    return value


class ProofStepModel(BaseModel):
    """A single (sibling, side) step."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    sibling: str = Field(..., description="Sibling digest as 0x-prefixed hex")
    side: Side = Field(..., description="Side the sibling combines on")

    @field_validator("sibling")
    @classmethod
    def validate_sibling(cls, value: str) -> str:
        return _check_hex(value)


class ProofDocument(BaseModel):
    """
    Serializable inclusion proof.

    Example:
        >>> doc = ProofDocument.from_proof(proof, root, "sha256")
        >>> ProofDocument.from_json(doc.to_json()).verify()
        True
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    scheme: Literal["ordmerkle-inclusion-v1"] = Field(default=PROOF_SCHEME)
    hash_algorithm: str = Field(..., description="Hash algorithm name, e.g. sha256")
    leaf_index: int = Field(..., ge=0)
    leaf_count: int = Field(..., ge=1)
    item: Any = Field(default=None, description="The proven item")
    item_encoding: Literal["text", "json", "hex"] = Field(default="json")
    path: list[ProofStepModel] = Field(default_factory=list)
    root: str = Field(..., description="Root digest as 0x-prefixed hex")

    @field_validator("root")
    @classmethod
    def validate_root(cls, value: str) -> str:
        return _check_hex(value)

    @classmethod
    def from_proof(cls, proof: Proof, root: bytes, hash_algorithm: str) -> "ProofDocument":
        item = proof.leaf_item
        if isinstance(item, str):
            stored, encoding = item, "text"
        elif isinstance(item, (bytes, bytearray, memoryview)) or hasattr(type(item), "__bytes__"):
            stored, encoding = to_hex(serialize_item(item)), "hex"
        else:
            # Reduced form, so datetimes and enums keep their leaf encoding
            stored, encoding = to_json_value(item), "json"
        return cls(
            hash_algorithm=hash_algorithm,
            leaf_index=proof.leaf_index,
            leaf_count=proof.leaf_count,
            item=stored,
            item_encoding=encoding,
            path=[ProofStepModel(sibling=to_hex(s.sibling), side=s.side) for s in proof.path],
            root=to_hex(root),
        )

    def decoded_item(self) -> Any:
        """
        The item as carried: bytes for "hex", str for "text", and the
        reduced JSON value for "json".

        Raises:
            ProofFormatException: If the item does not match its encoding
        """
        if self.item_encoding == "hex":
            if not isinstance(self.item, str):
                raise ProofFormatException("Hex-encoded item must be a string")
            try:
                return from_hex(self.item)
            except ValueError as e:
                raise ProofFormatException(f"Invalid hex item: {e}") from e
        if self.item_encoding == "text" and not isinstance(self.item, str):
            raise ProofFormatException("Text item must be a string")
        return self.item

    def leaf_bytes(self) -> bytes:
        """
        Exact bytes the leaf digest was computed from.

        Raises:
            ProofFormatException: If the item cannot be re-encoded
        """
        item = self.decoded_item()
        if self.item_encoding == "hex":
            return item
        if self.item_encoding == "text":
            return item.encode("utf-8")
        try:
            return canonical_json(item).encode("utf-8")
        except CanonicalizationException as e:
            raise ProofFormatException(f"JSON item cannot be canonicalized: {e}") from e

    def to_proof(self) -> Proof:
        """
        Rebuild the in-memory proof.

        The leaf item is the decoded item when it serializes back to the leaf
        bytes, otherwise the leaf bytes themselves (e.g. a datetime item,
        which travels as its timestamp string).
        """
        item = self.decoded_item()
        data = self.leaf_bytes()
        if serialize_item(item) != data:
            item = data
        return Proof(
            leaf_index=self.leaf_index,
            leaf_item=item,
            leaf_count=self.leaf_count,
            path=tuple(ProofStep(from_hex(s.sibling), s.side) for s in self.path),
        )

    def root_bytes(self) -> bytes:
        return from_hex(self.root)

    def verify(
        self,
        adapter: Optional[HashAdapter] = None,
        expected_root: Optional[bytes] = None,
    ) -> bool:
        """
        Verify the document.

        Args:
            adapter: Adapter to use; resolved from hash_algorithm when omitted
            expected_root: Trusted root to check against instead of the
                document's own root field
        """
        adapter = adapter or HashAdapter.from_name(self.hash_algorithm)
        proof = self.to_proof()
        return verify_inclusion(
            proof.leaf_item,
            proof.leaf_index,
            proof.leaf_count,
            proof.path,
            expected_root if expected_root is not None else self.root_bytes(),
            adapter,
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return self.model_dump_json(indent=indent)

    @classmethod
    def from_json(cls, data: str | bytes) -> "ProofDocument":
        """
        Parse a proof document.

        Raises:
            ProofFormatException: If the JSON is malformed or fails validation
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise ProofFormatException(
                f"Invalid proof document: {e.error_count()} validation error(s)",
                details={"errors": [err["msg"] for err in e.errors()]},
            ) from e


__all__ = [
    "PROOF_SCHEME",
    "ProofStepModel",
    "ProofDocument",
]
