"""
Room allocation repository.
"""

from typing import Any, Dict, List, Optional

from hostel_portal.config.settings import settings
from hostel_portal.core.constants import COLLECTION_ROOM_ALLOCATIONS
from hostel_portal.repositories.base.base_repository import DocumentRepository
from hostel_portal.repositories.base.document_store import ListQuery, new_document_id
from hostel_portal.schemas.allocation import RoomAllocation
from hostel_portal.schemas.common.enums import AllocationPaymentStatus


class AllocationRepository(DocumentRepository[RoomAllocation]):
    collection = COLLECTION_ROOM_ALLOCATIONS
    schema = RoomAllocation

    def __init__(self, store, max_list_limit: Optional[int] = None):
        super().__init__(store)
        self.max_list_limit = max_list_limit or settings.MAX_LIST_LIMIT

    def _recent_first(self, **filters: Any) -> ListQuery:
        return ListQuery(
            filters=filters,
            order_by="allocatedAt",
            descending=True,
            limit=self.max_list_limit,
        )

    # ==================== Queries ====================

    def find_all_allocations(self) -> List[RoomAllocation]:
        return self.find_all(self._recent_first())

    def find_by_student(self, student_reg_number: str) -> Optional[RoomAllocation]:
        """Most recent allocation of a student."""
        return self.find_one(self._recent_first(studentRegNumber=student_reg_number))

    def list_by_hostel(self, hostel_id: str) -> List[RoomAllocation]:
        return self.list(self._recent_first(hostelId=hostel_id))

    def list_unpaid(self) -> List[RoomAllocation]:
        """Pending and overdue allocations; raises on store failure."""
        return [
            allocation
            for allocation in self.list(self._recent_first())
            if allocation.is_unpaid
        ]

    def list_by_status(self, status: AllocationPaymentStatus) -> List[RoomAllocation]:
        return self.list(self._recent_first(paymentStatus=status.value))

    # ==================== Writes ====================

    def insert(self, fields: Dict[str, Any]) -> RoomAllocation:
        """Create an allocation from its field values and return it with its new id."""
        allocation = RoomAllocation.model_validate({"id": new_document_id(), **fields})
        document = self.create_fields(self.to_fields(allocation), document_id=allocation.id)
        return self.from_document(document)

    def update_changes(
        self,
        allocation_id: str,
        changes: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> RoomAllocation:
        """Apply camelCase ``changes``; with ``expected_version`` the write only lands on that version."""
        return self.from_document(self.update_fields(allocation_id, changes, expected_version=expected_version))
