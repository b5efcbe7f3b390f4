"""
Singleton settings documents.

Both live in the ``settings`` collection under fixed ids and are fetched by
id rather than queried. They are handled as raw field maps: the resolver
fills in missing fields itself.
"""

from typing import Any, Dict, Optional

from hostel_portal.config.logging import get_logger
from hostel_portal.core.constants import (
    APPLICATION_SETTINGS_DOCUMENT_ID,
    COLLECTION_SETTINGS,
    HOSTEL_SETTINGS_DOCUMENT_ID,
)
from hostel_portal.core.exceptions import BaseAppException, DocumentNotFoundError
from hostel_portal.repositories.base.document_store import DocumentStore, strip_metadata

logger = get_logger(__name__)


class SettingsDocumentRepository:
    """Fetch and upsert one well-known settings document."""

    collection = COLLECTION_SETTINGS
    document_id: str

    def __init__(self, store: DocumentStore):
        self.store = store

    def fetch(self) -> Optional[Dict[str, Any]]:
        """Stored fields, or ``None`` when the document does not exist. Raises on store failure."""
        try:
            return strip_metadata(self.store.get(self.collection, self.document_id))
        except DocumentNotFoundError:
            return None

    def upsert(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Update the document if it exists, otherwise create it."""
        try:
            try:
                document = self.store.update(self.collection, self.document_id, fields)
            except DocumentNotFoundError:
                document = self.store.create(self.collection, self.document_id, fields)
        except BaseAppException as e:
            logger.error(
                f"Error saving settings document: {e}",
                exc_info=True,
                extra={"document_id": self.document_id},
            )
            raise
        return strip_metadata(document)


class HostelSettingsRepository(SettingsDocumentRepository):
    document_id = HOSTEL_SETTINGS_DOCUMENT_ID


class ApplicationSettingsRepository(SettingsDocumentRepository):
    document_id = APPLICATION_SETTINGS_DOCUMENT_ID
