"""
Hostel repository.

A hostel is one document whose ``floors``, ``features`` and ``images``
fields are stored as JSON text. Loading parses them back into the typed
tree; a ``floors`` value that cannot be parsed or validated is read as an
empty tree rather than failing the load.
"""

import json
from typing import Any, Dict, Iterable, List, Optional

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from hostel_portal.config.logging import get_logger
from hostel_portal.core.constants import COLLECTION_HOSTELS, HOSTEL_LIST_LIMIT, META_ID
from hostel_portal.repositories.base.base_repository import DocumentRepository
from hostel_portal.repositories.base.document_store import Document, ListQuery
from hostel_portal.schemas.hostel import Floor, Hostel

logger = get_logger(__name__)

_floors_adapter = TypeAdapter(List[Floor])

# Fields stored as JSON text rather than native document values.
TEXT_ENCODED_FIELDS = ("floors", "features", "images")

# Python attribute -> stored field name, for partial saves.
STORED_FIELDS = {
    "name": "name",
    "description": "description",
    "total_capacity": "totalCapacity",
    "current_occupancy": "currentOccupancy",
    "gender": "gender",
    "floors": "floors",
    "is_active": "isActive",
    "price_per_semester": "pricePerSemester",
    "features": "features",
    "images": "images",
}

TREE_FIELDS = ("floors", "total_capacity", "current_occupancy")


def _decode_list(raw: Any, field: str, hostel_id: str) -> List[Any]:
    if raw is None or raw == "":
        return []
    if isinstance(raw, list):
        return raw
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.error(f"Unparseable {field} on hostel {hostel_id}; reading as empty", extra={"hostel_id": hostel_id})
        return []
    if not isinstance(value, list):
        logger.error(f"{field} on hostel {hostel_id} is not a list; reading as empty", extra={"hostel_id": hostel_id})
        return []
    return value


class HostelRepository(DocumentRepository[Hostel]):
    collection = COLLECTION_HOSTELS
    schema = Hostel

    def _prepare(self, document: Document) -> Dict[str, Any]:
        data = super()._prepare(document)
        hostel_id = document[META_ID]
        for field in TEXT_ENCODED_FIELDS:
            data[field] = _decode_list(data.get(field), field, hostel_id)

        try:
            data["floors"] = _floors_adapter.validate_python(data["floors"])
        except PydanticValidationError as e:
            logger.error(
                f"Invalid room tree on hostel {hostel_id}; reading as no floors: {e}",
                extra={"hostel_id": hostel_id},
            )
            data["floors"] = []
        return data

    def to_fields(self, hostel: Hostel, fields: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """Serialize the selected top-level attributes (all when ``fields`` is None)."""
        document = hostel.to_document()
        selected = STORED_FIELDS if fields is None else {name: STORED_FIELDS[name] for name in fields}
        payload = {}
        for attribute, stored in selected.items():
            value = document[stored]
            if attribute in TEXT_ENCODED_FIELDS:
                value = json.dumps(value)
            payload[stored] = value
        return payload

    # ==================== Queries ====================

    def find_all_hostels(self) -> List[Hostel]:
        return self.find_all(ListQuery(order_by="name", limit=HOSTEL_LIST_LIMIT))

    def load(self, hostel_id: str) -> Hostel:
        """Strict load used by mutators; raises when the document is missing."""
        return self.get(hostel_id)

    # ==================== Writes ====================

    def insert(self, hostel: Hostel, created_at: str) -> str:
        fields = self.to_fields(hostel)
        fields["createdAt"] = created_at
        document = self.create_fields(fields, document_id=hostel.id or None)
        return document[META_ID]

    def save(
        self,
        hostel: Hostel,
        fields: Optional[Iterable[str]] = None,
        expected_version: Optional[int] = None,
    ) -> Hostel:
        """
        Write back only the supplied top-level fields of ``hostel``.

        Returns the hostel with ``version`` advanced to the stored version.
        """
        payload = self.to_fields(hostel, fields)
        document = self.update_fields(hostel.id, payload, expected_version=expected_version)
        return self.from_document(document)

    def save_tree(self, hostel: Hostel, expected_version: Optional[int] = None) -> Hostel:
        return self.save(hostel, TREE_FIELDS, expected_version=expected_version)

    def update_partial(self, hostel_id: str, changes: Dict[str, Any]) -> None:
        """Apply already camelCased changes, encoding the JSON text fields."""
        payload = dict(changes)
        for stored in ("floors", "features", "images"):
            if stored in payload:
                payload[stored] = json.dumps(payload[stored])
        self.update_fields(hostel_id, payload)
