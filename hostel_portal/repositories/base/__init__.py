"""
Document store adapters and the typed repository base.
"""

from hostel_portal.repositories.base.document_store import Document, DocumentStore, ListQuery
from hostel_portal.repositories.base.memory_store import InMemoryDocumentStore
from hostel_portal.repositories.base.sqlalchemy_store import SqlAlchemyDocumentStore
from hostel_portal.repositories.base.base_repository import DocumentRepository

__all__ = [
    "Document",
    "DocumentStore",
    "ListQuery",
    "InMemoryDocumentStore",
    "SqlAlchemyDocumentStore",
    "DocumentRepository",
]
