"""
Core value types for docsnap.

Namespace addresses one (database, collection) pair and owns the naming
rules for its snapshot directory and files. ProjectionMode selects which
fields a collection read returns.

Invariants:
    - Namespace components are non-empty and contain no path separators
    - Directory name is "{database}-{collection}"
    - Snapshot file name is "{database}-{collection}-{YYYY-MM-DD}.json"

How to change safely:
    - Existing snapshot trees depend on these names; never change the format
      without a migration for directories already on disk
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from .errors import InvalidNamespaceError

SNAPSHOT_SUFFIX = ".json"
DATE_FORMAT = "%Y-%m-%d"

_FORBIDDEN_CHARS = ("/", "\\", "\x00")
_DATE_PATTERN = re.compile(r"(\d{4}-\d{2}-\d{2})\.json$")


@dataclass(frozen=True)
class Namespace:
    """A (database, collection) pair.

    Attributes:
        database: Database name
        collection: Collection name
    """

    database: str
    collection: str

    def __post_init__(self) -> None:
        for label, value in (("database", self.database), ("collection", self.collection)):
            if not isinstance(value, str) or not value:
                raise InvalidNamespaceError(
                    f"{label} name must be a non-empty string",
                    database=str(self.database),
                    collection=str(self.collection),
                )
            if any(ch in value for ch in _FORBIDDEN_CHARS) or value in (".", ".."):
                raise InvalidNamespaceError(
                    f"{label} name {value!r} is not filesystem safe",
                    database=self.database,
                    collection=self.collection,
                )

    @property
    def dir_name(self) -> str:
        """Directory holding this namespace's snapshots."""
        return f"{self.database}-{self.collection}"

    def snapshot_filename(self, snapshot_date: date) -> str:
        """File name of the snapshot taken on snapshot_date."""
        return f"{self.dir_name}-{snapshot_date.strftime(DATE_FORMAT)}{SNAPSHOT_SUFFIX}"

    def is_snapshot_filename(self, filename: str) -> bool:
        """Whether filename follows this namespace's snapshot naming."""
        prefix = f"{self.dir_name}-"
        if not filename.startswith(prefix):
            return False
        return _DATE_PATTERN.fullmatch(filename[len(prefix):]) is not None

    def snapshot_date(self, filename: str) -> date | None:
        """Parse the capture date out of a snapshot file name."""
        if not self.is_snapshot_filename(filename):
            return None
        match = _DATE_PATTERN.fullmatch(filename[len(self.dir_name) + 1:])
        try:
            return datetime.strptime(match.group(1), DATE_FORMAT).date()
        except ValueError:
            return None

    def __str__(self) -> str:
        return f"{self.database}.{self.collection}"


class ProjectionMode(Enum):
    """Field projection applied when listing a collection."""

    FULL = "full"
    SUMMARY = "summary"

    @classmethod
    def _missing_(cls, value: object) -> ProjectionMode | None:
        # "complete" is the mode name older listing links used
        if isinstance(value, str):
            lowered = value.lower()
            if lowered == "complete":
                return cls.FULL
            for member in cls:
                if member.value == lowered:
                    return member
        return None


SUMMARY_FIELDS = ("creation_date", "title")
ITEM_REFERENCE_FIELD = "item"
