"""
Room allocation schemas.

An allocation is the authoritative record that a student occupies a room
for a semester; the room's occupant list mirrors it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from hostel_portal.schemas.common.base import BaseSchema, BaseUpdateSchema
from hostel_portal.schemas.common.enums import AllocationPaymentStatus

__all__ = [
    "RoomAllocation",
    "RoomAllocationUpdate",
]


class RoomAllocation(BaseSchema):
    id: str
    student_reg_number: str = Field(..., min_length=1)
    room_id: str
    hostel_id: str
    allocated_at: datetime
    payment_status: AllocationPaymentStatus = AllocationPaymentStatus.PENDING
    payment_deadline: datetime
    semester: str
    academic_year: str
    payment_id: Optional[str] = None
    user_id: Optional[str] = None
    version: Optional[int] = Field(default=None, exclude=True)

    @property
    def is_unpaid(self) -> bool:
        return self.payment_status in (AllocationPaymentStatus.PENDING, AllocationPaymentStatus.OVERDUE)


class RoomAllocationUpdate(BaseUpdateSchema):
    """The only allocation fields that change after creation."""

    payment_status: Optional[AllocationPaymentStatus] = None
    payment_deadline: Optional[datetime] = None
    payment_id: Optional[str] = None
