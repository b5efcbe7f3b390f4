"""
Base repository mapping one document collection to a pydantic schema.

Two families of reads are offered:

- ``get`` / ``list`` raise on failure and are used by write paths, which must
  not mistake a store outage for an empty result.
- ``find_by_id`` / ``find_all`` log failures and return ``None`` / ``[]``;
  they back the read-only queries, whose callers cannot distinguish "empty"
  from "store unavailable".

Writes always log and re-raise.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError

from hostel_portal.config.logging import get_logger
from hostel_portal.core.constants import META_ID, META_VERSION
from hostel_portal.core.exceptions import (
    BaseAppException,
    DocumentNotFoundError,
    OptimisticLockError,
    ValidationError,
)
from hostel_portal.repositories.base.document_store import Document, DocumentStore, ListQuery, strip_metadata
from hostel_portal.schemas.common.base import BaseSchema

logger = get_logger(__name__)

SchemaType = TypeVar("SchemaType", bound=BaseSchema)


class DocumentRepository(Generic[SchemaType]):
    """Typed CRUD over a single collection."""

    collection: str
    schema: Type[SchemaType]

    def __init__(self, store: DocumentStore):
        self.store = store

    # ==================== Mapping ====================

    def _prepare(self, document: Document) -> Dict[str, Any]:
        """Hook turning stored fields into schema input."""
        data = strip_metadata(document)
        data["id"] = document[META_ID]
        return data

    def from_document(self, document: Document) -> SchemaType:
        try:
            entity = self.schema.model_validate(self._prepare(document))
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {self.collection} document {document.get(META_ID)}",
                field_errors={".".join(map(str, err["loc"])): [err["msg"]] for err in e.errors()},
            ) from e
        if "version" in self.schema.model_fields:
            entity.version = document.get(META_VERSION)
        return entity

    def to_fields(self, entity: SchemaType) -> Dict[str, Any]:
        fields = entity.to_document()
        fields.pop("id", None)
        return fields

    # ==================== Strict Reads ====================

    def get(self, document_id: str) -> SchemaType:
        """Fetch by id; raises ``DocumentNotFoundError`` or ``StoreError``."""
        return self.from_document(self.store.get(self.collection, document_id))

    def list(self, query: Optional[ListQuery] = None) -> List[SchemaType]:
        return [self.from_document(doc) for doc in self.store.list(self.collection, query)]

    # ==================== Tolerant Reads ====================

    def find_by_id(self, document_id: str) -> Optional[SchemaType]:
        try:
            return self.get(document_id)
        except DocumentNotFoundError:
            return None
        except BaseAppException as e:
            logger.error(
                f"Error fetching {self.collection} document: {e}",
                exc_info=True,
                extra={"collection": self.collection, "document_id": document_id},
            )
            return None

    def find_all(self, query: Optional[ListQuery] = None) -> List[SchemaType]:
        try:
            documents = self.store.list(self.collection, query)
        except BaseAppException as e:
            logger.error(
                f"Error listing {self.collection}: {e}",
                exc_info=True,
                extra={"collection": self.collection},
            )
            return []

        entities = []
        for document in documents:
            try:
                entities.append(self.from_document(document))
            except ValidationError as e:
                logger.error(
                    f"Skipping invalid {self.collection} document: {e}",
                    extra={"collection": self.collection, "document_id": document.get(META_ID)},
                )
        return entities

    def find_one(self, query: ListQuery) -> Optional[SchemaType]:
        query.limit = 1
        found = self.find_all(query)
        return found[0] if found else None

    # ==================== Writes ====================

    def create_fields(self, fields: Dict[str, Any], document_id: Optional[str] = None) -> Document:
        try:
            document = self.store.create(self.collection, document_id, fields)
        except BaseAppException as e:
            logger.error(f"Error creating {self.collection} document: {e}", exc_info=True)
            raise
        logger.debug(f"Created {self.collection} document", extra={"document_id": document[META_ID]})
        return document

    def update_fields(
        self,
        document_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Document:
        try:
            return self.store.update(self.collection, document_id, fields, expected_version=expected_version)
        except OptimisticLockError as e:
            logger.warning(f"Stale write to {self.collection} document: {e}", extra={"document_id": document_id})
            raise
        except BaseAppException as e:
            logger.error(
                f"Error updating {self.collection} document: {e}",
                exc_info=True,
                extra={"document_id": document_id},
            )
            raise

    def delete(self, document_id: str) -> None:
        try:
            self.store.delete(self.collection, document_id)
        except BaseAppException as e:
            logger.error(
                f"Error deleting {self.collection} document: {e}",
                exc_info=True,
                extra={"document_id": document_id},
            )
            raise
