"""
Document identifiers.

An identifier lives in two shapes: the store-native ObjectId used for
driver operations, and the 24 hex character string written into snapshot
files and URLs. Moving from string to ObjectId is the only fallible step
and it is always explicit.

Invariants:
    - NativeId.serialize() never fails
    - SerializedId.rehydrate() either returns an ObjectId or raises
      InvalidIdentifierError; there is no silent fallback
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from bson import ObjectId
from bson.errors import InvalidId

from .errors import InvalidIdentifierError

ID_FIELD = "_id"


@dataclass(frozen=True)
class NativeId:
    """Identifier in the store's native type."""

    value: ObjectId

    def serialize(self) -> SerializedId:
        return SerializedId(str(self.value))


@dataclass(frozen=True)
class SerializedId:
    """Identifier as stored in snapshot files and URLs."""

    text: str

    def rehydrate(self, position: int | None = None) -> NativeId:
        """Convert back to the native identifier type.

        Args:
            position: Index of the owning document, for error reporting

        Raises:
            InvalidIdentifierError: If text is not a valid ObjectId string
        """
        if not isinstance(self.text, str):
            raise InvalidIdentifierError(self.text, position)
        try:
            return NativeId(ObjectId(self.text))
        except (InvalidId, TypeError):
            raise InvalidIdentifierError(self.text, position) from None


Identifier = Union[NativeId, SerializedId]


def identifier_of(value: Any) -> Identifier:
    """Wrap a raw _id value in the matching identifier variant."""
    if isinstance(value, ObjectId):
        return NativeId(value)
    return SerializedId(value)


def to_native(identifier: Identifier, position: int | None = None) -> ObjectId:
    """Return the ObjectId for either identifier variant."""
    if isinstance(identifier, NativeId):
        return identifier.value
    return identifier.rehydrate(position).value


def to_serialized(identifier: Identifier) -> str:
    """Return the string form for either identifier variant."""
    if isinstance(identifier, NativeId):
        return identifier.serialize().text
    return identifier.text


def parse_identifier(text: str) -> ObjectId:
    """Parse an externally supplied identifier string."""
    return SerializedId(text).rehydrate().value
