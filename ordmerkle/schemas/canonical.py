"""
Item Serialization

Turns tree items into the bytes that get double-hashed into leaves.

CRITICAL: serialize_item must be a pure function of the item's value.
Any drift (key order, float formatting, timezone) changes leaf digests and
invalidates every root and proof built on them.

Rules:
1. bytes / bytearray / memoryview: used as is
2. str: UTF-8 encoded
3. objects implementing __bytes__: bytes(item)
4. everything else: canonical JSON, UTF-8 encoded
   - object keys sorted, no whitespace
   - object keys must be strings
   - None-valued object entries dropped, so {"a": None} and {} collide
   - datetimes as UTC ISO-8601 with a Z suffix
   - enums by value, nested bytes as lowercase hex
   - NaN / Infinity rejected
"""

import dataclasses
import json
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .errors import CanonicalizationException

JSON_SEPARATORS = (",", ":")


def utc_timestamp(moment: datetime) -> str:
    """
    Render a datetime as UTC ISO-8601 with a Z suffix.

    Naive datetimes are taken to be UTC already.

    Example:
        >>> utc_timestamp(datetime(2026, 1, 27, 21, 35))
        '2026-01-27T21:35:00Z'
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def to_json_value(value: Any, path: str = "$") -> Any:
    """
    Reduce a value to plain JSON types with a single, stable representation.

    Args:
        value: Item (or part of an item) to reduce
        path: Location inside the item, used in error details

    Raises:
        CanonicalizationException: For non-finite floats, sets, and any
            type without a stable encoding
    """
    # bool is an int subclass, so it is covered here too
    if value is None or isinstance(value, (str, int)):
        return value

    if isinstance(value, float):
        if not math.isfinite(value):
            raise CanonicalizationException(
                f"Non-finite float at {path}: {value}",
                details={"path": path, "value": repr(value)},
            )
        return value

    if isinstance(value, Enum):
        return to_json_value(value.value, path)

    if isinstance(value, datetime):
        return utc_timestamp(value)

    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()

    if isinstance(value, BaseModel):
        return to_json_value(value.model_dump(mode="json", exclude_none=True), path)

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_json_value(dataclasses.asdict(value), path)

    if isinstance(value, dict):
        reduced = {}
        for key, member in value.items():
            if not isinstance(key, str):
                raise CanonicalizationException(
                    f"Object keys must be strings, got {type(key).__name__} at {path}",
                    details={"path": path, "key": repr(key)},
                )
            if member is not None:
                reduced[key] = to_json_value(member, f"{path}.{key}")
        return reduced

    if isinstance(value, (list, tuple)):
        return [to_json_value(member, f"{path}[{i}]") for i, member in enumerate(value)]

    raise CanonicalizationException(
        f"No canonical encoding for {type(value).__name__} at {path}",
        details={"path": path, "type": type(value).__name__},
    )


def canonical_json(value: Any) -> str:
    """
    Canonical JSON text for a value.

    Example:
        >>> canonical_json({"b": 2, "a": [1, None]})
        '{"a":[1,null],"b":2}'
    """
    reduced = to_json_value(value)
    try:
        return json.dumps(
            reduced,
            sort_keys=True,
            separators=JSON_SEPARATORS,
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise CanonicalizationException(
            f"Canonical JSON encoding failed: {e}",
            details={"type": type(value).__name__},
        ) from e


def serialize_item(item: Any) -> bytes:
    """
    Serialize a tree item to the bytes hashed into its leaf.

    Note: b"a" and "a" serialize identically, and so do {"a": None} and {}.
    Items that must stay distinguishable should be wrapped (e.g. in a dict)
    or carry an explicit non-None marker.

    Raises:
        CanonicalizationException: If the item has no deterministic encoding.
    """
    if isinstance(item, (bytes, bytearray, memoryview)):
        return bytes(item)
    if isinstance(item, str):
        return item.encode("utf-8")
    if hasattr(type(item), "__bytes__"):
        return bytes(item)
    return canonical_json(item).encode("utf-8")


__all__ = [
    "JSON_SEPARATORS",
    "utc_timestamp",
    "to_json_value",
    "canonical_json",
    "serialize_item",
]
