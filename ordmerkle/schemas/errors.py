"""
Error Taxonomy

Standard errors for the Merkle tree library.
Defines both Pydantic models for structured error reporting
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the library."""

    # Tree state errors
    EMPTY_TREE = "EMPTY_TREE"
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    SUBTREE_NOT_FOUND = "SUBTREE_NOT_FOUND"
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"

    # Hashing & serialization errors
    HASH_ADAPTER_MISCONFIGURED = "HASH_ADAPTER_MISCONFIGURED"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"

    # Proof & configuration errors
    PROOF_FORMAT_INVALID = "PROOF_FORMAT_INVALID"
    CONFIG_INVALID = "CONFIG_INVALID"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class MerkleError(BaseModel):
    """
    Error model for structured error reporting.

    Used by the CLI's JSON output and by callers that want to pass errors
    around without raising.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.EMPTY_TREE],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )

    def to_exception(self) -> "MerkleException":
        """Convert this error model to a raised exception."""
        return MerkleException(
            code=self.code,
            message=self.message,
            details=self.details,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class MerkleException(Exception):
    """
    Base exception for all library errors.

    Carries structured error information and can be converted
    to/from MerkleError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "MERKLE_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_error_model(self) -> MerkleError:
        """Convert this exception to a MerkleError model."""
        return MerkleError(
            code=self.code,
            message=self.message,
            details=self.details,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class EmptyTreeError(MerkleException, LookupError):
    """Raised when a root or proof is requested from a tree with no leaves."""

    def __init__(self, message: str = "Tree has no leaves") -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.EMPTY_TREE,
        )


class ItemNotFoundError(MerkleException, LookupError):
    """Raised when a proof-by-item query matches no leaf."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: str = ErrorCodes.ITEM_NOT_FOUND,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            details=details,
        )


class SubtreeNotFoundError(ItemNotFoundError):
    """Raised when another tree's root is not a node of this tree."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            details=details,
            code=ErrorCodes.SUBTREE_NOT_FOUND,
        )


class IndexOutOfRangeError(MerkleException, IndexError):
    """Raised when a leaf index is outside the current leaf count."""

    def __init__(self, index: int, leaf_count: int) -> None:
        super().__init__(
            message=f"Leaf index {index} out of range for {leaf_count} leaves",
            code=ErrorCodes.INDEX_OUT_OF_RANGE,
            details={"index": index, "leaf_count": leaf_count},
        )
        self.index = index
        self.leaf_count = leaf_count


class HashAdapterConfigError(MerkleException, ValueError):
    """
    Raised when a hash adapter is misconfigured at construction time.

    This is a programming error, not a recoverable runtime condition.
    """

    def __init__(
        self,
        message: str,
        algorithm: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if algorithm:
            details["algorithm"] = algorithm
        super().__init__(
            message=message,
            code=ErrorCodes.HASH_ADAPTER_MISCONFIGURED,
            details=details,
        )


class CanonicalizationException(MerkleException):
    """Exception raised when an item cannot be serialized to bytes."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
        )


class ProofFormatException(MerkleException):
    """Exception raised when a proof document cannot be parsed."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.PROOF_FORMAT_INVALID,
            details=details,
        )


class ConfigurationException(MerkleException):
    """Exception raised when configuration values are invalid."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=ErrorCodes.CONFIG_INVALID,
            details=full_details,
        )
