"""
API routes for docsnap.

Route paths are kept stable so existing bookmarks and scripts keep
working. All routes are GET; every response carries links to the next
useful action.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from ..codec import to_jsonable
from ..config import redact_uri
from ..service import BackupService
from ..types import ITEM_REFERENCE_FIELD, Namespace, ProjectionMode
from .links import LinkPresenter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["docsnap"])


# --- Response Models ---


class _LinkModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RootResponse(_LinkModel):
    """Service entry point."""

    mongodb_uri: str
    list_databases: str = Field(..., alias="list-databases")


class DatabaseEntry(_LinkModel):
    """One database with its collection listing link."""

    database: str
    list_collections: str = Field(..., alias="list-collections")


class DatabasesResponse(BaseModel):
    databases: list[DatabaseEntry]


class BackupFile(BaseModel):
    """One snapshot file of a collection."""

    file: str
    download: str
    restore: str


class CollectionEntryResponse(_LinkModel):
    """One collection with its snapshots and actions."""

    collection: str
    backups: list[BackupFile]
    list_full_items: str = Field(..., alias="list-full-items")
    list_summary_items: str = Field(..., alias="list-summary-items")
    create_backup: str = Field(..., alias="create-backup")
    restore_backup: str = Field(..., alias="restore-backup")


class CollectionsResponse(BaseModel):
    collections: list[CollectionEntryResponse]


class ItemsResponse(BaseModel):
    """Whole-collection read."""

    total: int
    items: list[dict[str, Any]]


class BackupCreatedResponse(_LinkModel):
    """Result of create-backup."""

    status: str
    file: str
    document_count: int
    download: str
    list_collections: str = Field(..., alias="list-collections")


class RestoreResponse(BaseModel):
    """Result of restore-backup."""

    status: str
    inserted_count: int
    message: str


# --- Dependencies ---


def get_service(request: Request) -> BackupService:
    """Get backup service from app state."""
    return request.app.state.service


def get_presenter(request: Request) -> LinkPresenter:
    """Get link presenter from app state."""
    return request.app.state.presenter


# --- Routes ---


@router.get("/", response_model=RootResponse)
async def root(
    service: BackupService = Depends(get_service),
    presenter: LinkPresenter = Depends(get_presenter),
):
    """Entry point with the source URI (credentials redacted)."""
    return {"mongodb_uri": redact_uri(service.settings.mongodb_uri), **presenter.root_links()}


@router.get("/list-databases", response_model=DatabasesResponse)
async def list_databases(
    service: BackupService = Depends(get_service),
    presenter: LinkPresenter = Depends(get_presenter),
):
    """List databases, administrative ones excluded."""
    databases = await service.list_databases()
    return {
        "databases": [
            {"database": name, **presenter.database_links(name)} for name in databases
        ]
    }


@router.get("/list-collections/db/{db}", response_model=CollectionsResponse)
async def list_collections(
    db: str,
    service: BackupService = Depends(get_service),
    presenter: LinkPresenter = Depends(get_presenter),
):
    """List collections of a database with their existing backups."""
    entries = await service.list_collections(db)
    return {"collections": [presenter.collection_entry(entry) for entry in entries]}


@router.get("/read-item/db/{db}/col/{col}/id/{item_id}")
async def read_item(
    db: str,
    col: str,
    item_id: str,
    service: BackupService = Depends(get_service),
) -> dict[str, Any]:
    """Read one document by identifier."""
    document = await service.read_item(db, col, item_id)
    return to_jsonable(document)


@router.get("/read-col/db/{db}/col/{col}/itemsmode/{itemsmode}", response_model=ItemsResponse)
async def read_collection(
    db: str,
    col: str,
    itemsmode: str,
    service: BackupService = Depends(get_service),
    presenter: LinkPresenter = Depends(get_presenter),
):
    """
    Read a whole collection, newest first.

    `summary` returns creation_date, title and a link to the full item;
    `full` returns every field.
    """
    try:
        mode = ProjectionMode(itemsmode)
    except ValueError:
        raise HTTPException(
            status_code=422,
            detail=f"Unknown items mode '{itemsmode}'. Use 'full' or 'summary'.",
        )

    items = await service.read_collection(db, col, mode)
    if mode is ProjectionMode.SUMMARY:
        namespace = Namespace(db, col)
        items = [
            {**item, ITEM_REFERENCE_FIELD: presenter.item_url(namespace, item[ITEM_REFERENCE_FIELD])}
            for item in items
        ]
    return {"total": len(items), "items": to_jsonable(items)}


@router.get("/create-backup/db/{db}/col/{col}", response_model=BackupCreatedResponse)
async def create_backup(
    db: str,
    col: str,
    service: BackupService = Depends(get_service),
    presenter: LinkPresenter = Depends(get_presenter),
):
    """
    Snapshot a collection to today's backup file.

    Only collections keyed by ObjectId can be restored later; documents
    with string, integer or compound _id values are written but the
    restore step rejects them.
    """
    info = await service.create_backup(db, col)
    return {
        "status": "Backup successfully created",
        "file": info.filename,
        "document_count": info.document_count,
        "download": presenter.download_url(info.namespace, info.filename),
        **presenter.database_links(db),
    }


@router.get(
    "/upload-to-local-mongodb/db/{db}/col/{col}/file/{file}",
    response_model=RestoreResponse,
)
async def restore_backup(
    db: str,
    col: str,
    file: str,
    service: BackupService = Depends(get_service),
):
    """
    Replay a backup file into the restore target store.

    Indexes are not recreated; create them on the target afterwards.
    """
    result = await service.restore_backup(db, col, file)
    return {
        "status": "Restore completed",
        "inserted_count": result.inserted_count,
        "message": result.message,
    }
