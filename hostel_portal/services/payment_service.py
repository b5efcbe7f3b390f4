"""
Payment lifecycle.

Students submit payments against an allocation; an administrator approves
or rejects them. Approval, including a payment recorded directly by an
administrator, is the only path that marks an allocation ``Paid``. The
payment write and the allocation write are separate: if the second one
fails the payment stays approved and the error propagates.
"""

from typing import List, Optional

from hostel_portal.core.exceptions import (
    AllocationNotFoundError,
    DocumentNotFoundError,
    InvalidStateError,
    PaymentNotFoundError,
)
from hostel_portal.repositories.allocation_repository import AllocationRepository
from hostel_portal.repositories.payment_repository import PaymentRepository
from hostel_portal.schemas.common.enums import AllocationPaymentStatus, PaymentStatus
from hostel_portal.schemas.payment import Payment, PaymentStatistics, PaymentSubmission, StudentPaymentUpdate
from hostel_portal.services.base.base_service import BaseService
from hostel_portal.utils.datetime_utils import to_iso


class PaymentService(BaseService):
    """Record, review and query payments."""

    def __init__(self, store, clock=None, app_settings=None):
        super().__init__(store, clock, app_settings)
        self.payments = PaymentRepository(store, self.config.MAX_LIST_LIMIT)
        self.allocations = AllocationRepository(store, self.config.MAX_LIST_LIMIT)

    def _get_payment(self, payment_id: str) -> Payment:
        try:
            return self.payments.get(payment_id)
        except DocumentNotFoundError:
            raise PaymentNotFoundError(payment_id)

    def _require_pending(self, payment: Payment, action: str) -> None:
        if payment.is_decided:
            raise InvalidStateError(
                f"Cannot {action} a payment that is already {payment.status.value}",
                current_state=payment.status.value,
            )

    def _mark_allocation_paid(self, allocation_id: str, payment_id: str) -> None:
        try:
            self.allocations.update_changes(
                allocation_id,
                {"paymentStatus": AllocationPaymentStatus.PAID.value, "paymentId": payment_id},
            )
        except DocumentNotFoundError:
            raise AllocationNotFoundError(allocation_id)

    # ==================== Student Actions ====================

    def submit(self, submission: PaymentSubmission, user_id: Optional[str] = None) -> str:
        payment = self.payments.insert({
            **submission.model_dump(),
            "submitted_at": self.now(),
            "status": PaymentStatus.PENDING,
            "user_id": user_id,
        })
        self._logger.info(
            "Payment submitted",
            extra={"payment_id": payment.id, "allocation_id": payment.allocation_id},
        )
        return payment.id

    def update_student_payment(self, payment_id: str, update: StudentPaymentUpdate) -> Payment:
        """Edit a payment's receipt details while it is still under review."""
        self._require_pending(self._get_payment(payment_id), "edit")
        return self.payments.update_changes(payment_id, update.changes())

    # ==================== Admin Actions ====================

    def approve(self, payment_id: str, admin_email: str) -> Payment:
        payment = self._get_payment(payment_id)
        self._require_pending(payment, "approve")

        approved = self.payments.update_changes(payment_id, {
            "status": PaymentStatus.APPROVED.value,
            "approvedBy": admin_email,
            "approvedAt": to_iso(self.now()),
        })
        self._mark_allocation_paid(payment.allocation_id, payment_id)
        self._logger.info(
            "Payment approved",
            extra={"payment_id": payment_id, "allocation_id": payment.allocation_id, "approved_by": admin_email},
        )
        return approved

    def reject(self, payment_id: str, admin_email: str, reason: str) -> Payment:
        """Reject a payment; the allocation is left as it is so the student can resubmit."""
        payment = self._get_payment(payment_id)
        self._require_pending(payment, "reject")

        rejected = self.payments.update_changes(payment_id, {
            "status": PaymentStatus.REJECTED.value,
            "approvedBy": admin_email,
            "approvedAt": to_iso(self.now()),
            "rejectionReason": reason,
        })
        self._logger.info("Payment rejected", extra={"payment_id": payment_id, "approved_by": admin_email})
        return rejected

    def add_admin_payment(
        self,
        submission: PaymentSubmission,
        admin_email: str,
        user_id: Optional[str] = None,
    ) -> str:
        """Record a payment received by an administrator; it is approved on creation."""
        now = self.now()
        payment = self.payments.insert({
            **submission.model_dump(),
            "submitted_at": now,
            "status": PaymentStatus.APPROVED,
            "approved_by": admin_email,
            "approved_at": now,
            "user_id": user_id,
        })
        self._mark_allocation_paid(payment.allocation_id, payment.id)
        return payment.id

    def delete_payment(self, payment_id: str) -> None:
        """Delete a payment that has not been approved; an approved one backs a paid allocation."""
        payment = self._get_payment(payment_id)
        if payment.status == PaymentStatus.APPROVED:
            raise InvalidStateError("Cannot delete an approved payment", current_state=payment.status.value)
        try:
            self.payments.delete(payment_id)
        except DocumentNotFoundError:
            raise PaymentNotFoundError(payment_id)

    # ==================== Queries ====================

    def get_payment(self, payment_id: str) -> Optional[Payment]:
        return self.payments.find_by_id(payment_id)

    def list_payments(self) -> List[Payment]:
        return self.payments.find_all_payments()

    def list_student_payments(self, student_reg_number: str) -> List[Payment]:
        return self.payments.find_by_student(student_reg_number)

    def list_pending_payments(self) -> List[Payment]:
        """Oldest submission first."""
        return self.payments.find_by_status(PaymentStatus.PENDING, descending=False)

    def list_payments_by_status(self, status: PaymentStatus) -> List[Payment]:
        return self.payments.find_by_status(status)

    def get_approved_payment_for_allocation(self, allocation_id: str) -> Optional[Payment]:
        return self.payments.find_for_allocation(allocation_id, PaymentStatus.APPROVED)

    def get_pending_payment_for_allocation(self, allocation_id: str) -> Optional[Payment]:
        return self.payments.find_for_allocation(allocation_id, PaymentStatus.PENDING)

    def get_statistics(self) -> PaymentStatistics:
        payments = self.list_payments()
        approved = [p for p in payments if p.status == PaymentStatus.APPROVED]
        return PaymentStatistics(
            total=len(payments),
            pending=sum(1 for p in payments if p.status == PaymentStatus.PENDING),
            approved=len(approved),
            rejected=sum(1 for p in payments if p.status == PaymentStatus.REJECTED),
            total_amount=sum(p.amount for p in approved),
        )
