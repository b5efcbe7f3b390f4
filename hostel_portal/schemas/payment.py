"""
Payment schemas.

Students submit payments against an allocation; an administrator approves
or rejects them. Approval is the only path that marks an allocation paid.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from hostel_portal.schemas.common.base import BaseSchema, BaseUpdateSchema
from hostel_portal.schemas.common.enums import PaymentStatus

__all__ = [
    "Payment",
    "PaymentSubmission",
    "StudentPaymentUpdate",
    "PaymentStatistics",
]


class PaymentSubmission(BaseSchema):
    student_reg_number: str = Field(..., min_length=1)
    allocation_id: str = Field(..., min_length=1)
    receipt_number: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    payment_method: str
    attachments: List[str] = Field(default_factory=list)
    notes: str = ""


class Payment(PaymentSubmission):
    id: str
    submitted_at: datetime
    status: PaymentStatus = PaymentStatus.PENDING
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    user_id: Optional[str] = None

    @property
    def is_decided(self) -> bool:
        return self.status != PaymentStatus.PENDING


class StudentPaymentUpdate(BaseUpdateSchema):
    """Fields a student may correct before the payment is reviewed."""

    receipt_number: Optional[str] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    attachments: Optional[List[str]] = None


class PaymentStatistics(BaseSchema):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    total_amount: float = 0
