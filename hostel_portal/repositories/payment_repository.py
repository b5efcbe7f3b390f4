"""
Payment repository.

Attachments are stored as JSON text, like the list fields of a hostel.
"""

import json
from typing import Any, Dict, List, Optional

from hostel_portal.config.logging import get_logger
from hostel_portal.config.settings import settings
from hostel_portal.core.constants import COLLECTION_PAYMENTS, META_ID, STUDENT_PAYMENTS_LIMIT
from hostel_portal.repositories.base.base_repository import DocumentRepository
from hostel_portal.repositories.base.document_store import Document, ListQuery, new_document_id
from hostel_portal.schemas.common.enums import PaymentStatus
from hostel_portal.schemas.payment import Payment

logger = get_logger(__name__)


def encode_attachments(fields: Dict[str, Any]) -> Dict[str, Any]:
    if "attachments" in fields and not isinstance(fields["attachments"], str):
        fields = {**fields, "attachments": json.dumps(fields["attachments"] or [])}
    return fields


class PaymentRepository(DocumentRepository[Payment]):
    collection = COLLECTION_PAYMENTS
    schema = Payment

    def __init__(self, store, max_list_limit: Optional[int] = None):
        super().__init__(store)
        self.max_list_limit = max_list_limit or settings.MAX_LIST_LIMIT

    def _prepare(self, document: Document) -> Dict[str, Any]:
        data = super()._prepare(document)
        raw = data.get("attachments")
        if isinstance(raw, str):
            try:
                data["attachments"] = json.loads(raw) if raw else []
            except ValueError:
                logger.error(
                    "Unparseable payment attachments; reading as empty",
                    extra={"payment_id": document[META_ID]},
                )
                data["attachments"] = []
        elif raw is None:
            data["attachments"] = []
        return data

    def to_fields(self, payment: Payment) -> Dict[str, Any]:
        return encode_attachments(super().to_fields(payment))

    # ==================== Queries ====================

    def find_all_payments(self) -> List[Payment]:
        return self.find_all(ListQuery(order_by="submittedAt", descending=True, limit=self.max_list_limit))

    def find_by_student(self, student_reg_number: str) -> List[Payment]:
        return self.find_all(ListQuery(
            filters={"studentRegNumber": student_reg_number},
            order_by="submittedAt",
            descending=True,
            limit=STUDENT_PAYMENTS_LIMIT,
        ))

    def find_by_status(self, status: PaymentStatus, descending: bool = True) -> List[Payment]:
        return self.find_all(ListQuery(
            filters={"status": status.value},
            order_by="submittedAt",
            descending=descending,
            limit=self.max_list_limit,
        ))

    def find_for_allocation(self, allocation_id: str, status: PaymentStatus) -> Optional[Payment]:
        return self.find_one(ListQuery(
            filters={"allocationId": allocation_id, "status": status.value},
            order_by="submittedAt",
            descending=True,
        ))

    # ==================== Writes ====================

    def insert(self, fields: Dict[str, Any]) -> Payment:
        payment = Payment.model_validate({"id": new_document_id(), **fields})
        document = self.create_fields(self.to_fields(payment), document_id=payment.id)
        return self.from_document(document)

    def update_changes(self, payment_id: str, changes: Dict[str, Any]) -> Payment:
        return self.from_document(self.update_fields(payment_id, encode_attachments(changes)))
