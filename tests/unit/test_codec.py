"""
Unit tests for JSON document encoding.
"""

import json
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from bson import ObjectId
from bson.decimal128 import Decimal128

from docsnap import codec

HEX = "65a1b2c3d4e5f60718293a4b"


class TestToJsonable:
    """Tests for to_jsonable()."""

    def test_primitives_unchanged(self):
        assert codec.to_jsonable({"a": 1, "b": "x", "c": None, "d": True, "e": 1.5}) == {
            "a": 1,
            "b": "x",
            "c": None,
            "d": True,
            "e": 1.5,
        }

    def test_object_id_becomes_hex(self):
        assert codec.to_jsonable({"_id": ObjectId(HEX)}) == {"_id": HEX}

    def test_datetime_becomes_iso(self):
        value = datetime(2024, 1, 5, 12, 30, tzinfo=timezone.utc)
        assert codec.to_jsonable(value) == "2024-01-05T12:30:00+00:00"

    def test_nested_structures(self):
        doc = {"items": [{"ref": ObjectId(HEX)}], "tags": ("a", "b")}
        assert codec.to_jsonable(doc) == {"items": [{"ref": HEX}], "tags": ["a", "b"]}

    def test_bytes_become_base64(self):
        assert codec.to_jsonable(b"\x00\x01") == "AAE="

    def test_decimal_and_uuid_become_strings(self):
        uid = uuid.UUID("12345678-1234-5678-1234-567812345678")
        assert codec.to_jsonable(Decimal128("1.10")) == "1.10"
        assert codec.to_jsonable(Decimal("2.5")) == "2.5"
        assert codec.to_jsonable(uid) == str(uid)


class TestDumpsLoads:
    """Tests for dumps() and loads()."""

    def test_dumps_is_indented_json_array(self):
        content = codec.dumps([{"_id": ObjectId(HEX), "title": "héllo"}])
        assert content.startswith(b"[\n")
        assert json.loads(content) == [{"_id": HEX, "title": "héllo"}]

    def test_loads(self):
        assert codec.loads(b'[{"a": 1}]') == [{"a": 1}]

    def test_loads_rejects_garbage(self):
        with pytest.raises(ValueError):
            codec.loads(b"[{not json")

    def test_loads_rejects_bad_utf8(self):
        with pytest.raises(ValueError):
            codec.loads(b"\xff\xfe")
