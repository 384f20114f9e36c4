"""
Item reader: single-document and whole-collection reads.

find_many() returns the entire collection, newest first (sorted by _id
descending, relying on ObjectIds increasing with creation time). There is
no pagination; the full result is held in memory, so collection size is
bounded by the worker's memory budget.
"""

from __future__ import annotations

import logging

from .errors import NotFoundError
from .identifiers import ID_FIELD, identifier_of, parse_identifier, to_serialized
from .store import DESCENDING, Document, DocumentStore
from .types import ITEM_REFERENCE_FIELD, SUMMARY_FIELDS, Namespace, ProjectionMode

logger = logging.getLogger(__name__)

NEWEST_FIRST = [(ID_FIELD, DESCENDING)]


class ItemReader:
    """Reads documents from one store.

    In summary mode the "item" reference is the serialized identifier;
    transports turn it into whatever address they expose.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def find_one(self, namespace: Namespace, identifier: str) -> Document:
        """Fetch one document by its identifier string.

        Raises:
            InvalidIdentifierError: If identifier is not a valid ObjectId string
            NotFoundError: If no document has this identifier
            ConnectivityError: If the store is unreachable
        """
        object_id = parse_identifier(identifier)
        document = await self.store.find_one(namespace, {ID_FIELD: object_id})
        if document is None:
            raise NotFoundError(str(namespace), identifier)
        return document

    async def find_many(
        self,
        namespace: Namespace,
        mode: ProjectionMode = ProjectionMode.FULL,
    ) -> list[Document]:
        """Fetch every document in namespace, newest first.

        Args:
            namespace: Collection to read
            mode: FULL returns documents untouched, SUMMARY returns only
                creation_date, title and the item reference

        Raises:
            ConnectivityError: If the store is unreachable
        """
        if mode is ProjectionMode.SUMMARY:
            projection = {field: 1 for field in SUMMARY_FIELDS}
            documents = await self.store.find(namespace, projection=projection, sort=NEWEST_FIRST)
            documents = [_summarize(doc) for doc in documents]
        else:
            documents = await self.store.find(namespace, sort=NEWEST_FIRST)

        logger.debug(
            "Read collection",
            extra={"namespace": str(namespace), "mode": mode.value, "count": len(documents)},
        )
        return documents


def _summarize(document: Document) -> Document:
    summary = {field: document[field] for field in SUMMARY_FIELDS if field in document}
    summary[ITEM_REFERENCE_FIELD] = str(to_serialized(identifier_of(document[ID_FIELD])))
    return summary
