"""
Unit Tests for HostelTreeService
Covers tree edits, denormalized counters and cascading cleanup.
"""
from datetime import timedelta

import pytest

from hostel_portal.core.constants import COLLECTION_HOSTELS, COLLECTION_ROOM_ALLOCATIONS
from hostel_portal.core.exceptions import (
    DuplicateEntryError,
    FloorNotFoundError,
    HostelNotFoundError,
    OccupantNotFoundError,
    RoomNotFoundError,
    StoreError,
)
from hostel_portal.core.locks import HostelLockRegistry
from hostel_portal.schemas.common.enums import Gender
from hostel_portal.schemas.hostel import HostelCreate, HostelUpdate, Room, RoomRangeRequest
from hostel_portal.services import AllocationService, HostelTreeService
from tests.support import START, FailingStore, build_hostel


def assert_counters_consistent(hostel):
    assert hostel.total_capacity == sum(room.capacity for _, room in hostel.iter_rooms())
    assert hostel.current_occupancy == sum(len(room.occupants) for _, room in hostel.iter_rooms())


class TestHostels:
    """Test hostel creation, update and deletion"""

    def test_create_hostel_starts_empty(self, tree_service):
        hostel_id = tree_service.create_hostel(HostelCreate(name="Eagle", price_per_semester=1500))

        hostel = tree_service.get_hostel(hostel_id)
        assert hostel.name == "Eagle"
        assert hostel.floors == []
        assert hostel.total_capacity == 0
        assert hostel.current_occupancy == 0

    def test_create_hostel_reuses_same_name(self, tree_service):
        first = tree_service.create_hostel(HostelCreate(name="Eagle"))

        second = tree_service.create_hostel(HostelCreate(name="  eagle "))

        assert second == first
        assert len(tree_service.list_hostels()) == 1

    def test_list_hostels_ordered_by_name(self, tree_service):
        for name in ("Osprey", "Eagle", "Kestrel"):
            tree_service.create_hostel(HostelCreate(name=name))

        assert [h.name for h in tree_service.list_hostels()] == ["Eagle", "Kestrel", "Osprey"]

    def test_get_missing_hostel_returns_none(self, tree_service):
        assert tree_service.get_hostel("missing") is None

    def test_update_hostel_keeps_tree(self, tree_service, eagle):
        hostel_id, _ = eagle

        tree_service.update_hostel(hostel_id, HostelUpdate(is_active=False, features=["wifi"]))

        hostel = tree_service.get_hostel(hostel_id)
        assert hostel.is_active is False
        assert hostel.features == ["wifi"]
        assert len(hostel.floors) == 1

    def test_update_missing_hostel(self, tree_service):
        with pytest.raises(HostelNotFoundError):
            tree_service.update_hostel("missing", HostelUpdate(name="x"))

    def test_delete_hostel_removes_its_allocations(self, tree_service, allocation_service, eagle, reg_number):
        hostel_id, room_id = eagle
        allocation_service.allocate(reg_number(), room_id, hostel_id)
        allocation_service.allocate(reg_number(), room_id, hostel_id)

        removed = tree_service.delete_hostel(hostel_id)

        assert removed == 2
        assert tree_service.get_hostel(hostel_id) is None

    def test_delete_hostel_forgets_its_lock(self, store, clock, config, allocation_service):
        tree = HostelTreeService(store, clock, config, locks=HostelLockRegistry())
        hostel_id, _ = build_hostel(tree)
        assert hostel_id in tree.locks

        tree.delete_hostel(hostel_id)

        assert hostel_id not in tree.locks
        assert allocation_service.list_allocations() == []


class TestFloorsAndRooms:
    """Test structural edits and counter maintenance"""

    def test_add_floor(self, tree_service):
        hostel_id = tree_service.create_hostel(HostelCreate(name="Eagle"))

        floor = tree_service.add_floor(hostel_id, "1", "First")

        assert floor.id == f"{hostel_id}_floor_1"
        assert tree_service.get_hostel(hostel_id).floors[0].name == "First"

    @pytest.mark.parametrize("number,name,field", [("0", "Other", "number"), ("9", "Ground", "name")])
    def test_add_duplicate_floor(self, tree_service, eagle, number, name, field):
        hostel_id, _ = eagle

        with pytest.raises(DuplicateEntryError) as exc_info:
            tree_service.add_floor(hostel_id, number, name)

        assert exc_info.value.details["field"] == field

    def test_add_floor_to_missing_hostel(self, tree_service):
        with pytest.raises(HostelNotFoundError):
            tree_service.add_floor("missing", "0", "Ground")

    def test_add_rooms_skips_existing_numbers(self, tree_service):
        hostel_id, floor_id = build_hostel(tree_service, rooms=(("A", 3, 3, 4),))
        before = tree_service.get_hostel(hostel_id).total_capacity

        added = tree_service.add_rooms_in_range(
            hostel_id, floor_id, RoomRangeRequest(start_number=1, end_number=5, prefix="A", capacity=4)
        )

        hostel = tree_service.get_hostel(hostel_id)
        assert [room.number for room in added] == ["A1", "A2", "A4", "A5"]
        assert hostel.total_capacity == before + 16
        assert sorted(room.number for _, room in hostel.iter_rooms()) == ["A1", "A2", "A3", "A4", "A5"]
        assert_counters_consistent(hostel)

    def test_add_rooms_to_missing_floor(self, tree_service, eagle):
        hostel_id, _ = eagle

        with pytest.raises(FloorNotFoundError):
            tree_service.add_rooms_in_range(
                hostel_id, "nope", RoomRangeRequest(start_number=1, end_number=2, capacity=2)
            )

    def test_invalid_range_is_rejected(self):
        with pytest.raises(ValueError):
            RoomRangeRequest(start_number=5, end_number=1, capacity=2)

    def test_remove_room_revokes_its_allocations(self, tree_service, allocation_service, reg_number):
        hostel_id, floor_id = build_hostel(tree_service, rooms=(("G", 1, 2, 2),))
        room_1 = f"{hostel_id}_{floor_id}_G1"
        room_2 = f"{hostel_id}_{floor_id}_G2"
        doomed = allocation_service.allocate(reg_number(), room_1, hostel_id)
        kept = allocation_service.allocate(reg_number(), room_2, hostel_id)

        result = tree_service.remove_room(hostel_id, room_1)

        assert result.fully_succeeded
        assert result.revoked_allocation_ids == [doomed.id]
        assert allocation_service.get_allocation(doomed.id) is None
        assert allocation_service.get_allocation(kept.id) is not None
        hostel = tree_service.get_hostel(hostel_id)
        assert hostel.find_room(room_1) is None
        assert hostel.total_capacity == 2
        assert hostel.current_occupancy == 1

    def test_remove_missing_room(self, tree_service, eagle):
        hostel_id, _ = eagle

        with pytest.raises(RoomNotFoundError):
            tree_service.remove_room(hostel_id, "missing")

    def test_remove_floor_revokes_allocations_of_all_its_rooms(self, tree_service, allocation_service, reg_number):
        hostel_id, floor_id = build_hostel(tree_service, rooms=(("G", 1, 2, 1),))
        for number in ("G1", "G2"):
            allocation_service.allocate(reg_number(), f"{hostel_id}_{floor_id}_{number}", hostel_id)

        result = tree_service.remove_floor(hostel_id, floor_id)

        assert len(result.revoked_allocation_ids) == 2
        assert allocation_service.list_allocations() == []
        hostel = tree_service.get_hostel(hostel_id)
        assert hostel.floors == []
        assert hostel.total_capacity == 0
        assert hostel.current_occupancy == 0

    def test_remove_floor_reports_cleanup_failures(self, clock, config, reg_number):
        store = FailingStore()
        tree = HostelTreeService(store, clock, config)
        allocations = AllocationService(store, clock, config, tree=tree)
        hostel_id, floor_id = build_hostel(tree)
        allocation = allocations.allocate(reg_number(), f"{hostel_id}_{floor_id}_G1", hostel_id)
        store.fail("delete", COLLECTION_ROOM_ALLOCATIONS)

        result = tree.remove_floor(hostel_id, floor_id)

        assert result.primary_succeeded
        assert not result.fully_succeeded
        assert result.cleanup_errors[0].allocation_id == allocation.id
        assert tree.get_hostel(hostel_id).floors == []

    def test_failed_tree_write_changes_nothing(self, clock, config):
        store = FailingStore()
        tree = HostelTreeService(store, clock, config)
        hostel_id, floor_id = build_hostel(tree)
        store.fail("update", COLLECTION_HOSTELS)

        with pytest.raises(StoreError):
            tree.remove_floor(hostel_id, floor_id)

        assert len(tree.get_hostel(hostel_id).floors) == 1


class TestOccupants:
    """Test occupant removal"""

    def test_remove_occupant_reopens_room_and_revokes(self, tree_service, allocation_service, reg_number):
        hostel_id, floor_id = build_hostel(tree_service, rooms=(("G", 1, 1, 1),))
        room_id = f"{hostel_id}_{floor_id}_G1"
        student = reg_number()
        allocation = allocation_service.allocate(student, room_id, hostel_id)
        assert tree_service.get_hostel(hostel_id).find_room(room_id).room.is_available is False

        result = tree_service.remove_occupant(hostel_id, room_id, student)

        assert result.revoked_allocation_ids == [allocation.id]
        room = tree_service.get_hostel(hostel_id).find_room(room_id).room
        assert room.occupants == []
        assert room.is_available is True
        assert allocation_service.get_allocation_by_student(student) is None

    def test_remove_unknown_occupant(self, tree_service, eagle):
        hostel_id, room_id = eagle

        with pytest.raises(OccupantNotFoundError):
            tree_service.remove_occupant(hostel_id, room_id, "H000000X")


class TestStoredTree:
    """Test how the tree is read back from the store"""

    def test_round_trip_preserves_tree(self, tree_service, allocation_service, eagle, reg_number):
        hostel_id, room_id = eagle
        student = reg_number()
        allocation_service.allocate(student, room_id, hostel_id)

        hostel = tree_service.load(hostel_id)

        room = hostel.find_room(room_id).room
        assert room.occupants == [student]
        assert room.capacity == 2
        assert hostel.version is not None
        assert_counters_consistent(hostel)

    def test_floors_stored_as_text(self, store, tree_service, eagle):
        hostel_id, _ = eagle

        assert isinstance(store.get(COLLECTION_HOSTELS, hostel_id)["floors"], str)

    @pytest.mark.parametrize("raw", ["{not json", '{"a": 1}', '[{"id": 1}]'])
    def test_corrupt_floors_read_as_empty(self, store, tree_service, eagle, raw):
        hostel_id, _ = eagle
        store.update(COLLECTION_HOSTELS, hostel_id, {"floors": raw})

        hostel = tree_service.get_hostel(hostel_id)

        assert hostel is not None
        assert hostel.floors == []

    def test_load_missing_hostel(self, tree_service):
        with pytest.raises(HostelNotFoundError):
            tree_service.load("missing")


class TestAvailability:
    """Test room availability rules"""

    def make_room(self, **overrides):
        data = {"id": "r1", "number": "G1", "capacity": 2}
        data.update(overrides)
        return Room(**data)

    def test_room_with_space_is_selectable(self):
        assert self.make_room(occupants=["H1"]).is_selectable()

    def test_full_room_is_not_selectable(self):
        room = self.make_room(occupants=["H1", "H2"])

        assert not room.compute_availability()
        assert not room.is_selectable()

    def test_reserved_room_is_not_selectable(self):
        assert not self.make_room(is_reserved=True).is_selectable()

    def test_expired_reservation_still_blocks(self):
        room = self.make_room(is_reserved=True, reserved_until=START - timedelta(days=1))

        assert room.reservation_expired(START)
        assert not room.is_selectable()

    def test_room_marked_unavailable_is_not_selectable(self):
        assert not self.make_room(is_available=False).is_selectable()

    def test_gender_must_match_unless_mixed(self):
        assert self.make_room(gender=Gender.FEMALE).is_selectable(Gender.FEMALE)
        assert not self.make_room(gender=Gender.FEMALE).is_selectable(Gender.MALE)
        assert self.make_room(gender=Gender.MIXED).is_selectable(Gender.MALE)

    def test_overfull_room_is_invalid(self):
        with pytest.raises(ValueError):
            self.make_room(capacity=1, occupants=["H1", "H2"])

    def test_list_available_rooms(self, tree_service, allocation_service, reg_number):
        hostel_id, floor_id = build_hostel(tree_service, rooms=(("G", 1, 3, 1),))
        allocation_service.allocate(reg_number(), f"{hostel_id}_{floor_id}_G1", hostel_id)
        allocation_service.reserve_room(f"{hostel_id}_{floor_id}_G2", hostel_id, "admin@x.com", 3)
        build_hostel(tree_service, name="Doves", gender=Gender.FEMALE)

        rooms = tree_service.list_available_rooms(Gender.MALE)

        assert [room.number for room in rooms] == ["G3"]
        assert rooms[0].hostel_name == "Eagle"
        assert rooms[0].floor_name == "Ground"
        assert rooms[0].price == 1500

    def test_inactive_hostels_are_not_listed(self, tree_service, eagle):
        hostel_id, _ = eagle
        tree_service.update_hostel(hostel_id, HostelUpdate(is_active=False))

        assert tree_service.list_available_rooms(Gender.MALE) == []
