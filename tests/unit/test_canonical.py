"""
Item Serialization Unit Tests
Tests for ordmerkle/schemas/canonical.py
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

import pytest
from pydantic import BaseModel

from ordmerkle.schemas.canonical import canonical_json, serialize_item
from ordmerkle.schemas.errors import CanonicalizationException


class Color(Enum):
    RED = "red"


@dataclass
class Point:
    x: int
    y: int


class Record(BaseModel):
    name: str
    note: str | None = None


class Packet:
    def __bytes__(self) -> bytes:
        return b"\x00packet"


class TestSerializeItem:
    """Tests for serialize_item."""

    def test_bytes_pass_through(self):
        assert serialize_item(b"\x00\x01") == b"\x00\x01"
        assert serialize_item(bytearray(b"ab")) == b"ab"
        assert serialize_item(memoryview(b"cd")) == b"cd"

    def test_str_is_utf8(self):
        assert serialize_item("héllo") == "héllo".encode("utf-8")

    def test_str_and_bytes_collide(self):
        """A str and its UTF-8 bytes serialize identically."""
        assert serialize_item("a") == serialize_item(b"a")

    def test_dunder_bytes(self):
        assert serialize_item(Packet()) == b"\x00packet"

    def test_int(self):
        assert serialize_item(5) == b"5"

    def test_bool_and_none(self):
        assert serialize_item(True) == b"true"
        assert serialize_item(None) == b"null"

    def test_dict_keys_sorted_compact(self):
        assert serialize_item({"b": 1, "a": [1, "x"]}) == b'{"a":[1,"x"],"b":1}'

    def test_dict_order_irrelevant(self):
        assert serialize_item({"a": 1, "b": 2}) == serialize_item({"b": 2, "a": 1})

    def test_tuple_like_list(self):
        assert serialize_item((1, 2)) == serialize_item([1, 2])

    def test_dataclass(self):
        assert serialize_item(Point(1, 2)) == b'{"x":1,"y":2}'

    def test_pydantic_model_drops_none(self):
        assert serialize_item(Record(name="r")) == b'{"name":"r"}'

    def test_enum_uses_value(self):
        assert serialize_item([Color.RED]) == b'["red"]'

    def test_nested_bytes_as_hex(self):
        assert serialize_item({"k": b"\xff"}) == b'{"k":"ff"}'

    def test_non_ascii_kept(self):
        assert serialize_item({"k": "ü"}) == '{"k":"ü"}'.encode("utf-8")


class TestDatetimes:
    """Datetimes are normalized to UTC with a Z suffix."""

    def test_naive_treated_as_utc(self):
        assert canonical_json(datetime(2026, 1, 27, 21, 35)) == '"2026-01-27T21:35:00Z"'

    def test_aware_converted(self):
        dt = datetime(2026, 1, 27, 23, 35, tzinfo=timezone(timedelta(hours=2)))
        assert canonical_json(dt) == '"2026-01-27T21:35:00Z"'

    def test_microseconds_kept(self):
        dt = datetime(2026, 1, 27, 21, 35, 0, 123, tzinfo=timezone.utc)
        assert canonical_json(dt) == '"2026-01-27T21:35:00.000123Z"'


class TestRejectedValues:
    """Values without a deterministic encoding raise."""

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), [float("-inf")]])
    def test_non_finite_floats(self, value):
        with pytest.raises(CanonicalizationException, match="Non-finite"):
            serialize_item(value)

    def test_sets(self):
        with pytest.raises(CanonicalizationException, match="set"):
            serialize_item({1, 2})

    def test_arbitrary_object(self):
        with pytest.raises(CanonicalizationException) as exc_info:
            serialize_item({"k": object()})
        assert exc_info.value.details["path"] == "$.k"

    def test_non_string_keys(self):
        """{1: "x"} would otherwise collide with {"1": "x"}."""
        with pytest.raises(CanonicalizationException, match="keys must be strings") as exc_info:
            serialize_item({1: "x"})
        assert exc_info.value.details["key"] == "1"

    def test_nested_non_string_keys(self):
        with pytest.raises(CanonicalizationException) as exc_info:
            serialize_item({"outer": {(1, 2): "x"}})
        assert exc_info.value.details["path"] == "$.outer"


class TestDocumentedCollisions:
    """Collisions that are part of the encoding and stay stable."""

    def test_none_members_dropped(self):
        assert serialize_item({"a": None}) == serialize_item({}) == b"{}"

    def test_none_in_lists_kept(self):
        assert serialize_item([None]) == b"[null]"
