"""
Hash Adapter

Wraps a user-chosen hash function as a narrow capability for the Merkle tree.

This module provides:
- MerkleHasher: protocol for a streaming hasher (update/digest)
- HasherFactory: callable producing a fresh hasher per logical value
- IntegerHasher: adapts fixed-width integer hash functions to MerkleHasher
- HashAdapter: digest/concat/leaf hashing over an injected factory
- Hex encoding/decoding with 0x prefix

Determinism Notes:
- Every digest() call builds a fresh hasher, so no state leaks between values
- Integer hash results are widened with an explicit big-endian encoding
"""
from __future__ import annotations

import functools
import hashlib
import zlib
from typing import Callable, Protocol, Union, runtime_checkable

from ordmerkle.schemas.errors import HashAdapterConfigError


@runtime_checkable
class MerkleHasher(Protocol):
    """Streaming hasher exposing the full-width digest as bytes."""

    def update(self, data: bytes) -> None: ...

    def digest(self) -> bytes: ...


HasherFactory = Callable[[], MerkleHasher]


class IntegerHasher:
    """
    MerkleHasher over a function that returns a fixed-width integer.

    Checksums such as zlib.crc32 only expose an integer. The integer is
    encoded big-endian into exactly `width` bytes.

    Example:
        >>> h = IntegerHasher(zlib.crc32, 4)
        >>> h.update(b"hello")
        >>> h.digest().hex()
        '3610a686'
    """

    def __init__(self, func: Callable[[bytes], int], width: int) -> None:
        self._func = func
        self._width = width
        self._buffer = bytearray()

    def update(self, data: bytes) -> None:
        self._buffer.extend(data)

    def digest(self) -> bytes:
        value = self._func(bytes(self._buffer)) & ((1 << (8 * self._width)) - 1)
        return value.to_bytes(self._width, "big")

    @classmethod
    def factory(cls, func: Callable[[bytes], int], width: int) -> HasherFactory:
        """Return a factory building a fresh IntegerHasher per call."""
        return functools.partial(cls, func, width)


# Integer checksums available by name, with their output width in bytes
_INTEGER_ALGORITHMS: dict[str, tuple[Callable[[bytes], int], int]] = {
    "crc32": (zlib.crc32, 4),
    "adler32": (zlib.adler32, 4),
}


class HashAdapter:
    """
    Hashing capability injected into a Merkle tree.

    Rules:
    1. digest(data) = H(data), computed with a fresh hasher
    2. digest_concat(left, right) = H(left || right)
    3. leaf_digest(data) = H(H(data))

    The factory is exercised once at construction. A factory that cannot be
    called, does not return bytes, or yields an empty digest is a
    programming error and raises HashAdapterConfigError immediately.
    """

    def __init__(self, factory: HasherFactory, name: str | None = None) -> None:
        self._factory = factory
        self.name = name or getattr(factory, "__name__", None) or repr(factory)
        self.digest_size = self._measure_digest_size()

    def _measure_digest_size(self) -> int:
        try:
            hasher = self._factory()
            hasher.update(b"")
            sample = hasher.digest()
        except Exception as e:
            raise HashAdapterConfigError(
                f"Hash factory {self.name!r} could not produce a digest: {e}",
                algorithm=self.name,
            ) from e

        if not isinstance(sample, (bytes, bytearray)):
            raise HashAdapterConfigError(
                f"Hash factory {self.name!r} returned {type(sample).__name__}, expected bytes",
                algorithm=self.name,
            )
        if len(sample) == 0:
            raise HashAdapterConfigError(
                f"Hash factory {self.name!r} produces zero-length digests",
                algorithm=self.name,
            )
        return len(sample)

    def digest(self, data: bytes) -> bytes:
        """Compute H(data) with a fresh hasher."""
        hasher = self._factory()
        hasher.update(data)
        return bytes(hasher.digest())

    def digest_concat(self, left: bytes, right: bytes) -> bytes:
        """
        Compute H(left || right).

        This is the internal-node rule of the tree. Internal nodes are
        hashed once, never double-hashed.
        """
        hasher = self._factory()
        hasher.update(left)
        hasher.update(right)
        return bytes(hasher.digest())

    def leaf_digest(self, data: bytes) -> bytes:
        """Compute the double hash H(H(data)) used for every leaf."""
        return self.digest(self.digest(data))

    @classmethod
    def from_name(cls, name: str) -> "HashAdapter":
        """
        Build an adapter for a named algorithm.

        Accepts hashlib algorithm names (sha256, sha512, blake2b, sha3_256,
        ...) and the integer checksums crc32 and adler32.

        Raises:
            HashAdapterConfigError: Unknown or variable-length algorithm
        """
        key = name.lower().replace("-", "_")

        if key in _INTEGER_ALGORITHMS:
            func, width = _INTEGER_ALGORITHMS[key]
            return cls(IntegerHasher.factory(func, width), name=key)

        if key.startswith("shake_"):
            raise HashAdapterConfigError(
                f"Variable-length algorithm {name!r} is not supported",
                algorithm=name,
            )
        if key not in hashlib.algorithms_available:
            raise HashAdapterConfigError(
                f"Unknown hash algorithm: {name!r}",
                algorithm=name,
            )
        return cls(functools.partial(hashlib.new, key), name=key)

    @classmethod
    def coerce(cls, spec: Union["HashAdapter", HasherFactory, str]) -> "HashAdapter":
        """Accept an adapter, a hasher factory, or an algorithm name."""
        if isinstance(spec, HashAdapter):
            return spec
        if isinstance(spec, str):
            return cls.from_name(spec)
        if callable(spec):
            name = getattr(spec, "__name__", None)
            if name and name.startswith("openssl_"):
                # hashlib.sha256.__name__ == "openssl_sha256"
                name = name[len("openssl_"):]
            return cls(spec, name=name)
        raise HashAdapterConfigError(
            f"Cannot build a hash adapter from {type(spec).__name__}",
        )

    def __repr__(self) -> str:
        return f"HashAdapter(name={self.name!r}, digest_size={self.digest_size})"


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


__all__ = [
    "MerkleHasher",
    "HasherFactory",
    "IntegerHasher",
    "HashAdapter",
    "to_hex",
    "from_hex",
]
