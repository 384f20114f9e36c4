"""
JSON encoding of store documents.

Documents coming out of the driver carry BSON types that the json module
cannot encode. Identifiers become their 24 hex character string, datetimes
become ISO-8601 strings, anything else unknown falls back to str().
"""

from __future__ import annotations

import base64
import json
import uuid
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from bson import ObjectId
from bson.decimal128 import Decimal128


def to_jsonable(value: Any) -> Any:
    """Recursively convert a document (or any value in it) to JSON types."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, Sequence):
        return [to_jsonable(item) for item in value]
    if isinstance(value, (Decimal128, Decimal, uuid.UUID)):
        return str(value)
    return str(value)


def dumps(documents: Sequence[Mapping[str, Any]]) -> bytes:
    """Encode a document sequence as an indented JSON array."""
    return json.dumps(to_jsonable(list(documents)), indent=2, ensure_ascii=False).encode("utf-8")


def loads(content: bytes) -> Any:
    """Decode snapshot bytes; raises ValueError on malformed input."""
    return json.loads(content.decode("utf-8"))
