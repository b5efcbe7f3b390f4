"""
Hostel tree service.

Every structural edit of a hostel follows the same sequence: load the whole
hostel document, edit the in-memory floor/room tree, recompute the
capacity and occupancy counters from scratch, then write the tree fields
back. ``mutate`` owns that sequence and applies the configured write
discipline:

- ``none``: plain last-write-wins. Two concurrent edits of one hostel can
  lose an update.
- ``lock``: edits of one hostel are serialized by an in-process lock.
- ``optimistic``: the write is conditional on the version that was loaded;
  a stale write is retried from a fresh load.
"""

from typing import Callable, List, Optional, TypeVar

from hostel_portal.core.exceptions import (
    BaseAppException,
    DocumentNotFoundError,
    DuplicateEntryError,
    FloorNotFoundError,
    HostelNotFoundError,
    OccupantNotFoundError,
    OptimisticLockError,
    RoomNotFoundError,
)
from hostel_portal.core.locks import HostelLockRegistry
from hostel_portal.repositories.allocation_repository import AllocationRepository
from hostel_portal.repositories.base.document_store import new_document_id
from hostel_portal.repositories.hostel_repository import HostelRepository
from hostel_portal.schemas.allocation import RoomAllocation
from hostel_portal.schemas.common.enums import Gender
from hostel_portal.schemas.hostel import (
    AvailableRoom,
    Floor,
    Hostel,
    HostelCreate,
    HostelUpdate,
    Room,
    RoomRangeRequest,
    floor_id_for,
    room_id_for,
)
from hostel_portal.schemas.lifecycle import CascadeResult, CleanupError
from hostel_portal.services.base.base_service import BaseService
from hostel_portal.utils.datetime_utils import to_iso

T = TypeVar("T")


class HostelTreeService(BaseService):
    """Read and edit hostel trees, keeping counters and allocations in step."""

    def __init__(self, store, clock=None, app_settings=None, locks: Optional[HostelLockRegistry] = None):
        super().__init__(store, clock, app_settings)
        self.hostels = HostelRepository(store)
        self.allocations = AllocationRepository(store, self.config.MAX_LIST_LIMIT)
        self.locks = locks or HostelLockRegistry(enabled=self.concurrency_mode == "lock")

    @property
    def concurrency_mode(self) -> str:
        return self.config.CONCURRENCY_MODE

    # ==================== Read-Modify-Write ====================

    def load(self, hostel_id: str) -> Hostel:
        try:
            return self.hostels.load(hostel_id)
        except DocumentNotFoundError:
            raise HostelNotFoundError(hostel_id)

    def mutate(self, hostel_id: str, mutator: Callable[[Hostel], T], operation: str = "edit hostel") -> T:
        """
        Run ``mutator`` against a freshly loaded tree and save the result.

        Whatever the mutator raises propagates and nothing is written.
        """
        optimistic = self.concurrency_mode == "optimistic"
        attempts = self.config.OPTIMISTIC_MAX_ATTEMPTS if optimistic else 1

        with self.locks.hold(hostel_id):
            for attempt in range(1, attempts + 1):
                hostel = self.load(hostel_id)
                outcome = mutator(hostel)
                hostel.recompute_totals()
                try:
                    self.hostels.save_tree(hostel, expected_version=hostel.version if optimistic else None)
                except OptimisticLockError:
                    if attempt == attempts:
                        self._logger.error(
                            f"Giving up on {operation} after {attempts} stale writes",
                            extra={"hostel_id": hostel_id},
                        )
                        raise
                    self._logger.info(
                        f"Retrying {operation} after a stale write",
                        extra={"hostel_id": hostel_id, "attempt": attempt},
                    )
                    continue
                return outcome

    # ==================== Hostels ====================

    def list_hostels(self) -> List[Hostel]:
        return self.hostels.find_all_hostels()

    def get_hostel(self, hostel_id: str) -> Optional[Hostel]:
        return self.hostels.find_by_id(hostel_id)

    def create_hostel(self, data: HostelCreate) -> str:
        """Create a hostel; a hostel with the same name is reused instead."""
        wanted = data.name.strip().lower()
        for existing in self.list_hostels():
            if existing.name.strip().lower() == wanted:
                self._logger.info(
                    f'Hostel "{data.name}" already exists, skipping creation',
                    extra={"hostel_id": existing.id},
                )
                return existing.id

        hostel = Hostel.model_validate({**data.model_dump(), "id": new_document_id()})
        hostel.recompute_totals()
        hostel_id = self.hostels.insert(hostel, created_at=to_iso(self.now()))
        self._logger.info(f'Created hostel "{hostel.name}"', extra={"hostel_id": hostel_id})
        return hostel_id

    def update_hostel(self, hostel_id: str, update: HostelUpdate) -> None:
        try:
            self.hostels.update_partial(hostel_id, update.changes())
        except DocumentNotFoundError:
            raise HostelNotFoundError(hostel_id)

    def delete_hostel(self, hostel_id: str) -> int:
        """Delete a hostel and every allocation in it; returns the number of allocations removed."""
        allocations = self.allocations.list_by_hostel(hostel_id)
        for allocation in allocations:
            self.allocations.delete(allocation.id)
        try:
            self.hostels.delete(hostel_id)
        except DocumentNotFoundError:
            raise HostelNotFoundError(hostel_id)
        self.locks.discard(hostel_id)
        self._logger.info(
            f"Deleted hostel and {len(allocations)} allocation(s)",
            extra={"hostel_id": hostel_id},
        )
        return len(allocations)

    # ==================== Floors and Rooms ====================

    def add_floor(self, hostel_id: str, number: str, name: str) -> Floor:
        def add(hostel: Hostel) -> Floor:
            for floor in hostel.floors:
                if floor.number == number:
                    raise DuplicateEntryError("Floor already exists", field="number", value=number)
                if floor.name == name:
                    raise DuplicateEntryError("Floor already exists", field="name", value=name)
            floor = Floor(id=floor_id_for(hostel_id, number), number=number, name=name)
            hostel.floors.append(floor)
            return floor

        return self.mutate(hostel_id, add, "add floor")

    def add_rooms_in_range(self, hostel_id: str, floor_id: str, request: RoomRangeRequest) -> List[Room]:
        """
        Add one room per number in the inclusive range.

        Numbers that already exist on the floor are skipped; the added rooms
        are returned.
        """

        def add(hostel: Hostel) -> List[Room]:
            floor = hostel.find_floor(floor_id)
            if floor is None:
                raise FloorNotFoundError(floor_id)
            existing = {room.number for room in floor.rooms}
            added = [
                Room(
                    id=room_id_for(hostel_id, floor_id, number),
                    number=number,
                    capacity=request.capacity,
                    gender=request.gender,
                    features=list(request.features),
                )
                for number in request.room_numbers()
                if number not in existing
            ]
            floor.rooms.extend(added)
            return added

        added = self.mutate(hostel_id, add, "add rooms")
        self._logger.info(
            f"Added {len(added)} room(s)",
            extra={"hostel_id": hostel_id, "floor_id": floor_id},
        )
        return added

    def remove_room(self, hostel_id: str, room_id: str) -> CascadeResult:
        def remove(hostel: Hostel) -> None:
            location = hostel.find_room(room_id)
            if location is None:
                raise RoomNotFoundError(room_id)
            location.floor.rooms.remove(location.room)

        self.mutate(hostel_id, remove, "remove room")
        return self._revoke_room_allocations(hostel_id, {room_id})

    def remove_floor(self, hostel_id: str, floor_id: str) -> CascadeResult:
        def remove(hostel: Hostel) -> set:
            floor = hostel.find_floor(floor_id)
            if floor is None:
                raise FloorNotFoundError(floor_id)
            hostel.floors.remove(floor)
            return {room.id for room in floor.rooms}

        room_ids = self.mutate(hostel_id, remove, "remove floor")
        return self._revoke_room_allocations(hostel_id, room_ids)

    def remove_occupant(self, hostel_id: str, room_id: str, reg_number: str) -> CascadeResult:
        """Take a student out of a room, then revoke their allocation for it."""

        def remove(hostel: Hostel) -> None:
            location = hostel.find_room(room_id)
            if location is None:
                raise RoomNotFoundError(room_id)
            room = location.room
            if reg_number not in room.occupants:
                raise OccupantNotFoundError(reg_number)
            room.occupants.remove(reg_number)
            if room.has_space:
                room.is_available = True

        self.mutate(hostel_id, remove, "remove occupant")

        result = CascadeResult()
        try:
            allocation = self.allocations.find_by_student(reg_number)
            if allocation is not None and allocation.room_id == room_id:
                self.release_allocation(allocation)
                result.revoked_allocation_ids.append(allocation.id)
        except BaseAppException as e:
            self._logger.error(f"Error revoking allocation of removed occupant: {e}", exc_info=True)
            result.cleanup_errors.append(CleanupError(error=str(e)))
        return result

    def _revoke_room_allocations(self, hostel_id: str, room_ids: set) -> CascadeResult:
        """Best-effort revocation of allocations that point at removed rooms."""
        result = CascadeResult()
        if not room_ids:
            return result

        try:
            allocations = [a for a in self.allocations.list_by_hostel(hostel_id) if a.room_id in room_ids]
        except BaseAppException as e:
            self._logger.error(f"Error listing allocations of removed rooms: {e}", exc_info=True)
            result.cleanup_errors.append(CleanupError(error=str(e)))
            return result

        for allocation in allocations:
            try:
                self.release_allocation(allocation)
                result.revoked_allocation_ids.append(allocation.id)
            except BaseAppException as e:
                self._logger.error(
                    f"Error revoking allocation of removed room: {e}",
                    exc_info=True,
                    extra={"allocation_id": allocation.id},
                )
                result.cleanup_errors.append(CleanupError(allocation_id=allocation.id, error=str(e)))
        return result

    # ==================== Occupancy ====================

    def release_allocation(self, allocation: RoomAllocation) -> None:
        """
        Take the allocated student out of the room, then delete the allocation.

        Any removal reopens the room. A hostel or room that no longer exists
        is skipped. The record is deleted last so that a failure leaves it
        visible.
        """

        def vacate(hostel: Hostel) -> None:
            location = hostel.find_room(allocation.room_id)
            if location is None:
                raise RoomNotFoundError(allocation.room_id)
            room = location.room
            if allocation.student_reg_number in room.occupants:
                room.occupants.remove(allocation.student_reg_number)
            room.is_available = True

        try:
            self.mutate(allocation.hostel_id, vacate, "revoke allocation")
        except (HostelNotFoundError, RoomNotFoundError) as e:
            self._logger.warning(
                f"Allocation points at a missing room, deleting record only: {e}",
                extra={"allocation_id": allocation.id},
            )

        self.allocations.delete(allocation.id)
        self._logger.info(
            "Allocation revoked",
            extra={
                "allocation_id": allocation.id,
                "student_reg_number": allocation.student_reg_number,
                "room_id": allocation.room_id,
            },
        )

    def list_available_rooms(self, gender: Gender) -> List[AvailableRoom]:
        """Selectable rooms for ``gender`` across active hostels."""
        rooms = []
        for hostel in self.list_hostels():
            if not hostel.is_active or hostel.gender not in (gender, Gender.MIXED):
                continue
            for floor, room in hostel.iter_rooms():
                if room.is_selectable(gender):
                    rooms.append(decorate_room(hostel, floor, room))
        return rooms


def decorate_room(hostel: Hostel, floor: Floor, room: Room) -> AvailableRoom:
    return AvailableRoom.model_validate({
        **room.to_document(),
        "hostelId": hostel.id,
        "hostelName": hostel.name,
        "floorName": floor.name,
        "price": hostel.price_per_semester,
    })
