"""
In-process document store.

Backs the ``memory`` store backend and the test-suite. Documents are deep
copied on the way in and out so callers never share mutable state with the
store, which keeps read-modify-write races observable exactly as they would
be against a remote store.
"""

import copy
import threading
from typing import Any, Dict, List, Optional

from hostel_portal.config.logging import get_logger
from hostel_portal.core.constants import META_CREATED_AT, META_ID, META_UPDATED_AT, META_VERSION
from hostel_portal.core.exceptions import DocumentNotFoundError, DuplicateEntryError, OptimisticLockError
from hostel_portal.repositories.base.document_store import (
    Document,
    DocumentStore,
    ListQuery,
    new_document_id,
    strip_metadata,
)
from hostel_portal.utils.datetime_utils import to_iso, utcnow

logger = get_logger(__name__)


class InMemoryDocumentStore(DocumentStore):
    """Thread-safe dictionary of collections."""

    def __init__(self):
        self._lock = threading.Lock()
        self._collections: Dict[str, Dict[str, Document]] = {}

    def _collection(self, name: str) -> Dict[str, Document]:
        return self._collections.setdefault(name, {})

    def get(self, collection: str, document_id: str) -> Document:
        with self._lock:
            document = self._collection(collection).get(document_id)
            if document is None:
                raise DocumentNotFoundError(collection, document_id)
            return copy.deepcopy(document)

    def list(self, collection: str, query: Optional[ListQuery] = None) -> List[Document]:
        query = query or ListQuery()
        with self._lock:
            documents = list(self._collection(collection).values())
            return copy.deepcopy(query.apply(documents))

    def create(
        self,
        collection: str,
        document_id: Optional[str],
        fields: Dict[str, Any],
    ) -> Document:
        document_id = document_id or new_document_id()
        now = to_iso(utcnow())
        with self._lock:
            documents = self._collection(collection)
            if document_id in documents:
                raise DuplicateEntryError(
                    f"Document {document_id} already exists",
                    field=META_ID,
                    value=document_id,
                    collection=collection,
                )
            document = copy.deepcopy(strip_metadata(fields))
            document.update({
                META_ID: document_id,
                META_VERSION: 1,
                META_CREATED_AT: now,
                META_UPDATED_AT: now,
            })
            documents[document_id] = document
            logger.debug("Created document", extra={"collection": collection, "document_id": document_id})
            return copy.deepcopy(document)

    def update(
        self,
        collection: str,
        document_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Document:
        with self._lock:
            documents = self._collection(collection)
            document = documents.get(document_id)
            if document is None:
                raise DocumentNotFoundError(collection, document_id)
            if expected_version is not None and document[META_VERSION] != expected_version:
                raise OptimisticLockError(collection, document_id, expected_version, document[META_VERSION])
            document.update(copy.deepcopy(strip_metadata(fields)))
            document[META_VERSION] += 1
            document[META_UPDATED_AT] = to_iso(utcnow())
            return copy.deepcopy(document)

    def delete(self, collection: str, document_id: str) -> None:
        with self._lock:
            documents = self._collection(collection)
            if document_id not in documents:
                raise DocumentNotFoundError(collection, document_id)
            del documents[document_id]
