"""
Backup CLI tool for docsnap.

Runs the same operations as the HTTP API against the configured source
store, without starting a server. Useful from cron.

Usage:
    docsnap-backup list-databases
    docsnap-backup list-collections <db>
    docsnap-backup create <db> <col>

Snapshots of collections whose _id values are not ObjectIds can be
written but not restored.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from ..config import Settings
from ..errors import DocSnapError
from ..logging_config import setup_logging
from ..service import BackupService

logger = logging.getLogger(__name__)


async def _run(args: argparse.Namespace, service: BackupService) -> list[str]:
    """Run one command and return the lines to print."""
    await service.start()
    try:
        if args.command == "list-databases":
            return await service.list_databases()

        if args.command == "list-collections":
            lines = []
            for entry in await service.list_collections(args.database):
                suffix = f" ({len(entry.snapshots)} backups)" if entry.has_snapshots else ""
                lines.append(f"{entry.name}{suffix}")
            return lines

        info = await service.create_backup(args.database, args.collection)
        return [
            "Backup successfully created",
            f"  File: {info.path}",
            f"  Documents: {info.document_count}",
            f"  Size: {info.size_bytes} bytes",
        ]
    finally:
        await service.stop()


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for backup tool."""
    parser = argparse.ArgumentParser(description="docsnap backup tool")
    parser.add_argument("--backups-dir", help="Snapshot root directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list-databases", help="List databases on the source store")

    list_cols = subparsers.add_parser("list-collections", help="List collections of a database")
    list_cols.add_argument("database")

    create = subparsers.add_parser(
        "create",
        help="Snapshot a collection",
        description=(
            "Snapshot a collection to today's backup file. Only collections keyed "
            "by ObjectId can be restored; other _id types are written but rejected on restore."
        ),
    )
    create.add_argument("database")
    create.add_argument("collection")

    args = parser.parse_args(argv)

    overrides = {"log_level": "DEBUG" if args.verbose else "WARNING", "log_format": "text"}
    if args.backups_dir:
        overrides["backups_dir"] = args.backups_dir
    settings = Settings(**overrides)
    setup_logging(settings)

    try:
        lines = asyncio.run(_run(args, BackupService.from_settings(settings)))
    except DocSnapError as e:
        print(f"Backup failed: {e.message}", file=sys.stderr)
        sys.exit(1)

    for line in lines:
        print(line)
    sys.exit(0)


if __name__ == "__main__":
    main()
