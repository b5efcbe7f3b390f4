"""
Deadline sweep.

Scans unpaid allocations and revokes the ones whose payment window has
closed. When the window closes depends on the revoke window policy:

- ``deadline``: as soon as ``paymentDeadline`` has passed. The deadline was
  computed as allocation time plus the grace period.
- ``deadline_plus_grace``: one more grace period after ``paymentDeadline``.

Each revocation is independent; a failure is counted and the sweep moves
on. An allocation approved after the scan is re-read and left in place.
Running the sweep again with nothing newly expired changes nothing.
"""

from datetime import datetime
from typing import List, Optional

from hostel_portal.schemas.allocation import RoomAllocation
from hostel_portal.schemas.common.enums import RevokeWindowPolicy
from hostel_portal.schemas.lifecycle import CleanupError, SweepResult, SweepStatus
from hostel_portal.schemas.settings import HostelSettings
from hostel_portal.services.allocation_service import AllocationService
from hostel_portal.services.base.base_service import BaseService
from hostel_portal.services.base.service_result import ServiceResult
from hostel_portal.utils.datetime_utils import add_hours


def revoke_after(allocation: RoomAllocation, settings: HostelSettings, policy: RevokeWindowPolicy) -> datetime:
    """Instant after which ``allocation`` may be revoked."""
    if policy == RevokeWindowPolicy.DEADLINE_PLUS_GRACE:
        return add_hours(allocation.payment_deadline, settings.payment_grace_period)
    return allocation.payment_deadline


class DeadlineSweepService(BaseService):
    """Find and revoke allocations that were not paid in time."""

    def __init__(
        self,
        store,
        clock=None,
        app_settings=None,
        allocation_service: Optional[AllocationService] = None,
        policy: Optional[RevokeWindowPolicy] = None,
    ):
        super().__init__(store, clock, app_settings)
        self.allocation_service = allocation_service or AllocationService(store, self.clock, self.config)
        self.policy = policy or RevokeWindowPolicy(self.config.REVOKE_WINDOW_POLICY)

    @property
    def settings_service(self):
        return self.allocation_service.settings_service

    def find_expired(
        self,
        unpaid: List[RoomAllocation],
        settings: HostelSettings,
        now: datetime,
    ) -> List[RoomAllocation]:
        return [a for a in unpaid if now > revoke_after(a, settings, self.policy)]

    def _revoke_one(self, allocation: RoomAllocation) -> ServiceResult[bool]:
        """Success carries whether the allocation was revoked; a paid one is left alone."""
        try:
            revoked = self.allocation_service.revoke_unpaid(allocation.id)
        except Exception as e:
            return self._handle_exception(
                e,
                "revoke expired allocation",
                allocation.id,
                additional_context={"student_reg_number": allocation.student_reg_number},
            )
        if revoked:
            self._logger.info(
                f"Revoked allocation for student {allocation.student_reg_number} in room {allocation.room_id}"
            )
        return ServiceResult.success(revoked)

    def run(self, now: Optional[datetime] = None) -> SweepResult:
        now = now or self.now()
        settings = self.settings_service.get_settings()
        if not settings.auto_revoke_unpaid_allocations:
            return SweepResult(message="Auto-revoke is disabled", timestamp=now)

        unpaid = self.allocation_service.allocations.list_unpaid()
        expired = self.find_expired(unpaid, settings, now)
        self._logger.info(
            f"Found {len(expired)} expired allocations to revoke",
            extra={"policy": self.policy.value},
        )

        outcomes = [(allocation, self._revoke_one(allocation)) for allocation in expired]
        revoked = sum(1 for _, outcome in outcomes if outcome and outcome.data)
        self._logger.info(f"Successfully revoked {revoked} out of {len(expired)} expired allocations")

        return SweepResult(
            message="Payment deadline check completed",
            total_expired=len(expired),
            revoked_count=revoked,
            timestamp=now,
            errors=[
                CleanupError(allocation_id=allocation.id, error=outcome.message)
                for allocation, outcome in outcomes
                if not outcome
            ],
        )

    def status(self, now: Optional[datetime] = None) -> SweepStatus:
        """Counts the next ``run`` would act on, without changing anything."""
        now = now or self.now()
        settings = self.settings_service.get_settings()
        unpaid = self.allocation_service.allocations.list_unpaid()
        return SweepStatus(
            total_unpaid_allocations=len(unpaid),
            expired_allocations=len(self.find_expired(unpaid, settings, now)),
            auto_revoke_enabled=settings.auto_revoke_unpaid_allocations,
            grace_period_hours=settings.payment_grace_period,
            revoke_window_policy=self.policy,
            timestamp=now,
        )
