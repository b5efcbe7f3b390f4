"""
SQLAlchemy-backed document store.

Documents live in a single ``documents`` table keyed by ``(collection, id)``.
Partial updates are applied as a compare-and-swap on the ``version`` column,
so a merge never overwrites a write that landed between its read and its
update. Listing filters and orders in Python: the service only uses a handful
of fixed access patterns over small collections.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from hostel_portal.config.logging import get_logger
from hostel_portal.core.constants import META_CREATED_AT, META_ID, META_UPDATED_AT, META_VERSION
from hostel_portal.core.exceptions import (
    DocumentNotFoundError,
    DuplicateEntryError,
    OptimisticLockError,
    StoreError,
)
from hostel_portal.models.document import DocumentRecord
from hostel_portal.repositories.base.document_store import (
    Document,
    DocumentStore,
    ListQuery,
    new_document_id,
    strip_metadata,
)
from hostel_portal.utils.datetime_utils import ensure_utc

logger = get_logger(__name__)

# Attempts at the compare-and-swap before giving up on an unconditional merge.
_MERGE_ATTEMPTS = 5


def _to_document(record: DocumentRecord) -> Document:
    document = dict(record.data or {})
    document[META_ID] = record.id
    document[META_VERSION] = record.version
    document[META_CREATED_AT] = ensure_utc(record.created_at).isoformat()
    document[META_UPDATED_AT] = ensure_utc(record.updated_at).isoformat()
    return document


class SqlAlchemyDocumentStore(DocumentStore):
    """Document store over any SQLAlchemy-supported database."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _load(self, session: Session, collection: str, document_id: str) -> DocumentRecord:
        record = session.get(DocumentRecord, (collection, document_id))
        if record is None:
            raise DocumentNotFoundError(collection, document_id)
        return record

    def get(self, collection: str, document_id: str) -> Document:
        try:
            with self._session_factory() as session:
                return _to_document(self._load(session, collection, document_id))
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to get document: {e}", operation="get", collection=collection) from e

    def list(self, collection: str, query: Optional[ListQuery] = None) -> List[Document]:
        query = query or ListQuery()
        try:
            with self._session_factory() as session:
                records = session.scalars(
                    select(DocumentRecord).where(DocumentRecord.collection == collection)
                ).all()
                return query.apply([_to_document(record) for record in records])
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list documents: {e}", operation="list", collection=collection) from e

    def create(
        self,
        collection: str,
        document_id: Optional[str],
        fields: Dict[str, Any],
    ) -> Document:
        document_id = document_id or new_document_id()
        try:
            with self._session_factory.begin() as session:
                record = DocumentRecord(
                    collection=collection,
                    id=document_id,
                    data=strip_metadata(fields),
                    version=1,
                )
                session.add(record)
                session.flush()
                return _to_document(record)
        except IntegrityError as e:
            raise DuplicateEntryError(
                f"Document {document_id} already exists",
                field=META_ID,
                value=document_id,
                collection=collection,
            ) from e
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to create document: {e}", operation="create", collection=collection) from e

    def update(
        self,
        collection: str,
        document_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Document:
        changes = strip_metadata(fields)
        try:
            for _ in range(_MERGE_ATTEMPTS):
                with self._session_factory.begin() as session:
                    record = self._load(session, collection, document_id)
                    read_version = record.version
                    if expected_version is not None and read_version != expected_version:
                        raise OptimisticLockError(collection, document_id, expected_version, read_version)

                    merged = dict(record.data or {})
                    merged.update(changes)
                    result = session.execute(
                        update(DocumentRecord)
                        .where(
                            DocumentRecord.collection == collection,
                            DocumentRecord.id == document_id,
                            DocumentRecord.version == read_version,
                        )
                        .values(
                            data=merged,
                            version=read_version + 1,
                            updated_at=datetime.now(timezone.utc),
                        )
                        .execution_options(synchronize_session=False)
                    )
                    if result.rowcount == 1:
                        session.expire(record)
                        return _to_document(self._load(session, collection, document_id))

                if expected_version is not None:
                    raise OptimisticLockError(collection, document_id, expected_version)
                logger.debug(
                    "Concurrent write detected, retrying merge",
                    extra={"collection": collection, "document_id": document_id},
                )
            raise StoreError(
                f"Could not apply update to {collection}/{document_id}",
                operation="update",
                collection=collection,
            )
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to update document: {e}", operation="update", collection=collection) from e

    def delete(self, collection: str, document_id: str) -> None:
        try:
            with self._session_factory.begin() as session:
                session.delete(self._load(session, collection, document_id))
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to delete document: {e}", operation="delete", collection=collection) from e
