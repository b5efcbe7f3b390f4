"""
Room allocation lifecycle.

An allocation record is the authoritative "student occupies room" fact; the
room's occupant list mirrors it. Allocating writes the record first and the
tree second, revoking edits the tree first and deletes the record last, so
a failure in between always leaves the record visible.

State machine of ``paymentStatus``::

    Pending --(payment approved)--> Paid
    Pending --(deadline passed)--> Overdue --(auto-revoke)--> deleted
    any --(revoke)--> deleted

Paid is terminal. Overdue flagging only lands on the version that was
listed, and automatic revocation re-reads the record first, so an approval
racing either one wins.
"""

from typing import List, Optional

from hostel_portal.core.exceptions import (
    AllocationNotFoundError,
    BaseAppException,
    DocumentNotFoundError,
    InvalidStateError,
    OptimisticLockError,
    RoomNotFoundError,
    RoomUnavailableError,
)
from hostel_portal.repositories.allocation_repository import AllocationRepository
from hostel_portal.schemas.allocation import RoomAllocation, RoomAllocationUpdate
from hostel_portal.schemas.common.enums import AllocationPaymentStatus
from hostel_portal.schemas.hostel import Hostel, RoomDetails
from hostel_portal.schemas.lifecycle import CleanupError, OverdueCheckResult
from hostel_portal.services.base.base_service import BaseService
from hostel_portal.services.hostel_tree_service import HostelTreeService, decorate_room
from hostel_portal.services.settings_service import SettingsService
from hostel_portal.utils.academic_calendar import current_academic_year, current_semester
from hostel_portal.utils.datetime_utils import add_days, add_hours


class AllocationService(BaseService):
    """Create, revoke and query room allocations."""

    def __init__(
        self,
        store,
        clock=None,
        app_settings=None,
        tree: Optional[HostelTreeService] = None,
        settings_service: Optional[SettingsService] = None,
    ):
        super().__init__(store, clock, app_settings)
        self.tree = tree or HostelTreeService(store, self.clock, self.config)
        self.settings_service = settings_service or SettingsService(store, self.clock, self.config)
        self.allocations = AllocationRepository(store, self.config.MAX_LIST_LIMIT)

    # ==================== Allocate / Revoke ====================

    def allocate(
        self,
        student_reg_number: str,
        room_id: str,
        hostel_id: str,
        user_id: Optional[str] = None,
    ) -> RoomAllocation:
        """
        Assign a student to a room.

        Raises:
            HostelNotFoundError, RoomNotFoundError: unknown hostel or room
            RoomUnavailableError: the room is full or reserved
        """
        location = self.tree.load(hostel_id).find_room(room_id)
        if location is None:
            raise RoomNotFoundError(room_id)
        now = self.now()
        if not location.room.is_selectable():
            raise RoomUnavailableError(room_id=room_id, reason=self._unavailable_reason(location.room, now))

        grace_period = self.settings_service.get_settings().payment_grace_period
        allocation = self.allocations.insert({
            "student_reg_number": student_reg_number,
            "room_id": room_id,
            "hostel_id": hostel_id,
            "allocated_at": now,
            "payment_status": AllocationPaymentStatus.PENDING,
            "payment_deadline": add_hours(now, grace_period),
            "semester": current_semester(now),
            "academic_year": current_academic_year(now),
            "user_id": user_id,
        })

        def occupy(hostel: Hostel) -> None:
            found = hostel.find_room(room_id)
            if found is None:
                raise RoomNotFoundError(room_id)
            room = found.room
            if not room.compute_availability():
                raise RoomUnavailableError(room_id=room_id, reason=self._unavailable_reason(room, now))
            room.occupants.append(student_reg_number)
            if not room.has_space:
                room.is_available = False

        try:
            self.tree.mutate(hostel_id, occupy, "allocate room")
        except RoomUnavailableError:
            # The tree was not written; the record must not outlive the rejection.
            self.allocations.delete(allocation.id)
            raise
        except BaseAppException as e:
            self._logger.error(
                f"Allocation recorded but room occupancy not updated: {e}",
                exc_info=True,
                extra={"allocation_id": allocation.id, "room_id": room_id},
            )
            raise

        self._logger.info(
            "Room allocated",
            extra={
                "allocation_id": allocation.id,
                "student_reg_number": student_reg_number,
                "room_id": room_id,
                "hostel_id": hostel_id,
            },
        )
        return allocation

    @staticmethod
    def _unavailable_reason(room, now) -> str:
        if not room.has_space:
            return "full"
        if room.reservation_expired(now):
            return "reservation expired"
        if room.is_reserved:
            return "reserved"
        return "unavailable"

    def _get_allocation(self, allocation_id: str) -> RoomAllocation:
        try:
            return self.allocations.get(allocation_id)
        except DocumentNotFoundError:
            raise AllocationNotFoundError(allocation_id)

    def revoke(self, allocation_id: str) -> None:
        """Remove the student from the room, then delete the allocation."""
        self.tree.release_allocation(self._get_allocation(allocation_id))

    def revoke_unpaid(self, allocation_id: str) -> bool:
        """
        Revoke an allocation only if it is still unpaid when re-read.

        Returns False, leaving everything untouched, when a payment was
        approved after the caller listed the allocation.
        """
        allocation = self._get_allocation(allocation_id)
        if not allocation.is_unpaid:
            self._logger.info(
                "Allocation paid since it was listed; not revoking",
                extra={"allocation_id": allocation_id, "payment_status": allocation.payment_status.value},
            )
            return False
        self.tree.release_allocation(allocation)
        return True

    # ==================== Queries ====================

    def list_allocations(self) -> List[RoomAllocation]:
        return self.allocations.find_all_allocations()

    def get_allocation(self, allocation_id: str) -> Optional[RoomAllocation]:
        return self.allocations.find_by_id(allocation_id)

    def get_allocation_by_student(self, student_reg_number: str) -> Optional[RoomAllocation]:
        return self.allocations.find_by_student(student_reg_number)

    def update_allocation(self, allocation_id: str, update: RoomAllocationUpdate) -> RoomAllocation:
        changes = update.changes()
        current = self.allocations.find_by_id(allocation_id)
        if current is None:
            raise AllocationNotFoundError(allocation_id)
        self._check_status_change(current.payment_status, changes.get("paymentStatus"))
        return self.allocations.update_changes(allocation_id, changes, expected_version=current.version)

    @staticmethod
    def _check_status_change(current: AllocationPaymentStatus, requested: Optional[str]) -> None:
        """Paid is reached only through payment approval and is never left."""
        if requested is None or requested == current.value:
            return
        if current == AllocationPaymentStatus.PAID:
            raise InvalidStateError("A paid allocation cannot change payment status", current_state=current.value)
        if requested == AllocationPaymentStatus.PAID.value:
            raise InvalidStateError("Only an approved payment can mark an allocation paid", current_state=current.value)
        if current == AllocationPaymentStatus.OVERDUE and requested == AllocationPaymentStatus.PENDING.value:
            raise InvalidStateError("An overdue allocation cannot return to pending", current_state=current.value)

    def get_room_details(self, allocation: RoomAllocation) -> Optional[RoomDetails]:
        hostel = self.tree.get_hostel(allocation.hostel_id)
        if hostel is None:
            return None
        location = hostel.find_room(allocation.room_id)
        if location is None:
            return None
        return RoomDetails(
            room=decorate_room(hostel, location.floor, location.room),
            hostel=hostel,
            price=hostel.price_per_semester,
        )

    # ==================== Deadlines ====================

    def check_and_update_overdue(self) -> OverdueCheckResult:
        """
        Flag pending allocations whose deadline has passed as overdue, then
        revoke exactly those when auto-revoke is enabled.
        """
        now = self.now()
        result = OverdueCheckResult()
        pending = self.allocations.list_by_status(AllocationPaymentStatus.PENDING)

        for allocation in pending:
            if allocation.payment_deadline >= now:
                continue
            try:
                self.allocations.update_changes(
                    allocation.id,
                    {"paymentStatus": AllocationPaymentStatus.OVERDUE.value},
                    expected_version=allocation.version,
                )
                result.marked_overdue.append(allocation.id)
            except OptimisticLockError:
                # Changed since listing, e.g. approved; the next run sees the new state.
                self._logger.info("Allocation changed since listing; not marking overdue", extra={"allocation_id": allocation.id})
            except BaseAppException as e:
                result.errors.append(CleanupError(allocation_id=allocation.id, error=str(e)))

        self._logger.info(f"Updated {len(result.marked_overdue)} allocations to overdue status")

        if not self.settings_service.get_settings().auto_revoke_unpaid_allocations:
            return result

        for allocation_id in result.marked_overdue:
            try:
                if self.revoke_unpaid(allocation_id):
                    result.revoked.append(allocation_id)
            except BaseAppException as e:
                self._logger.error(
                    f"Error auto-revoking overdue allocation: {e}",
                    exc_info=True,
                    extra={"allocation_id": allocation_id},
                )
                result.errors.append(CleanupError(allocation_id=allocation_id, error=str(e)))

        self._logger.info(f"Auto-revoked {len(result.revoked)} overdue allocations")
        return result

    # ==================== Reservations ====================

    def reserve_room(self, room_id: str, hostel_id: str, admin_email: str, days: float) -> None:
        reserved_until = add_days(self.now(), days)

        def reserve(hostel: Hostel) -> None:
            location = hostel.find_room(room_id)
            if location is None:
                raise RoomNotFoundError(room_id)
            room = location.room
            room.is_reserved = True
            room.reserved_by = admin_email
            room.reserved_until = reserved_until
            room.is_available = room.compute_availability()

        self.tree.mutate(hostel_id, reserve, "reserve room")
        self._logger.info("Room reserved", extra={"room_id": room_id, "reserved_by": admin_email})

    def unreserve_room(self, room_id: str, hostel_id: str) -> None:
        def unreserve(hostel: Hostel) -> None:
            location = hostel.find_room(room_id)
            if location is None:
                raise RoomNotFoundError(room_id)
            room = location.room
            room.is_reserved = False
            room.reserved_by = None
            room.reserved_until = None
            room.is_available = room.compute_availability()

        self.tree.mutate(hostel_id, unreserve, "unreserve room")
