"""
Unit tests for identifier conversion.

Tests cover:
- Serialization of native identifiers
- Rehydration of serialized identifiers
- Rejection of malformed identifier strings
"""

import pytest
from bson import ObjectId

from docsnap.errors import InvalidIdentifierError
from docsnap.identifiers import (
    NativeId,
    SerializedId,
    identifier_of,
    parse_identifier,
    to_native,
    to_serialized,
)

HEX = "65a1b2c3d4e5f60718293a4b"


class TestIdentifierVariants:
    """Tests for NativeId and SerializedId."""

    def test_serialize(self):
        native = NativeId(ObjectId(HEX))
        assert native.serialize() == SerializedId(HEX)

    def test_rehydrate(self):
        assert SerializedId(HEX).rehydrate() == NativeId(ObjectId(HEX))

    @pytest.mark.parametrize("text", ["", "abc", "zz" * 12, HEX + "00"])
    def test_rehydrate_rejects_malformed(self, text):
        """Anything that is not 24 hex characters is rejected."""
        with pytest.raises(InvalidIdentifierError):
            SerializedId(text).rehydrate()

    def test_rehydrate_rejects_non_string(self):
        with pytest.raises(InvalidIdentifierError):
            SerializedId(12345).rehydrate()

    def test_rehydrate_reports_position(self):
        """The owning document position is carried in the error."""
        with pytest.raises(InvalidIdentifierError) as exc_info:
            SerializedId("bad").rehydrate(position=3)
        assert exc_info.value.position == 3
        assert exc_info.value.details["position"] == 3
        assert "#3" in exc_info.value.message


class TestHelpers:
    """Tests for module-level conversion helpers."""

    def test_identifier_of(self):
        oid = ObjectId(HEX)
        assert identifier_of(oid) == NativeId(oid)
        assert identifier_of(HEX) == SerializedId(HEX)

    def test_to_native_accepts_both_variants(self):
        oid = ObjectId(HEX)
        assert to_native(NativeId(oid)) == oid
        assert to_native(SerializedId(HEX)) == oid

    def test_to_serialized_accepts_both_variants(self):
        assert to_serialized(NativeId(ObjectId(HEX))) == HEX
        assert to_serialized(SerializedId(HEX)) == HEX

    def test_parse_identifier(self):
        assert parse_identifier(HEX) == ObjectId(HEX)

    def test_parse_identifier_invalid(self):
        with pytest.raises(InvalidIdentifierError):
            parse_identifier("not-an-id")
