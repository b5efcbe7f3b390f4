"""
Document store abstraction.

The portal persists everything as schemaless documents grouped in named
collections. Each single-document operation is atomic; there is no
multi-document transaction. Every stored document carries metadata keys:

- ``$id``: the document id, unique within its collection
- ``$version``: a counter incremented on every write
- ``$createdAt`` / ``$updatedAt``: ISO-8601 UTC timestamps

``update`` accepts an ``expected_version``; when supplied and the stored
version differs, the write is rejected with ``OptimisticLockError``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from uuid import uuid4

from hostel_portal.core.constants import META_KEYS

Document = Dict[str, Any]


@dataclass
class ListQuery:
    """Fixed access pattern supported by ``DocumentStore.list``."""

    filters: Dict[str, Any] = field(default_factory=dict)
    order_by: Optional[str] = None
    descending: bool = False
    limit: Optional[int] = None
    offset: int = 0

    def matches(self, document: Document) -> bool:
        return all(document.get(key) == value for key, value in self.filters.items())

    def apply(self, documents: List[Document]) -> List[Document]:
        """Filter, order and paginate an in-memory sequence of documents."""
        selected = [doc for doc in documents if self.matches(doc)]
        if self.order_by:
            key = self.order_by
            # Documents missing the order field sort first ascending.
            selected.sort(
                key=lambda doc: (doc.get(key) is not None, doc.get(key) if doc.get(key) is not None else ""),
                reverse=self.descending,
            )
        end = None if self.limit is None else self.offset + self.limit
        return selected[self.offset:end]


def new_document_id() -> str:
    return uuid4().hex


def strip_metadata(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if key not in META_KEYS}


class DocumentStore(ABC):
    """Abstract document CRUD used by every repository."""

    @abstractmethod
    def get(self, collection: str, document_id: str) -> Document:
        """Return the document or raise ``DocumentNotFoundError``."""

    @abstractmethod
    def list(self, collection: str, query: Optional[ListQuery] = None) -> List[Document]:
        """Return the documents of a collection matching ``query``."""

    @abstractmethod
    def create(
        self,
        collection: str,
        document_id: Optional[str],
        fields: Dict[str, Any],
    ) -> Document:
        """Create a document; ``document_id=None`` generates a unique id."""

    @abstractmethod
    def update(
        self,
        collection: str,
        document_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Document:
        """Merge ``fields`` into an existing document."""

    @abstractmethod
    def delete(self, collection: str, document_id: str) -> None:
        """Delete a document or raise ``DocumentNotFoundError``."""
