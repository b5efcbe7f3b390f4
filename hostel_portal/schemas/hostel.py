"""
Hostel tree schemas.

A hostel document embeds its whole structure: hostel -> floors -> rooms ->
occupants. These models validate that tree when it is read back from the
store and carry the helpers every structural mutation relies on.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterator, List, NamedTuple, Optional

from pydantic import ConfigDict, Field, model_validator

from hostel_portal.schemas.common.base import BaseSchema, BaseUpdateSchema
from hostel_portal.schemas.common.enums import Gender

__all__ = [
    "Room",
    "Floor",
    "Hostel",
    "HostelCreate",
    "HostelUpdate",
    "RoomLocation",
    "AvailableRoom",
    "RoomRangeRequest",
    "RoomDetails",
    "room_id_for",
    "floor_id_for",
]


def room_id_for(hostel_id: str, floor_id: str, room_number: str) -> str:
    """Deterministic room id derived from its position in the tree."""
    return f"{hostel_id}_{floor_id}_{room_number}"


def floor_id_for(hostel_id: str, floor_number: str) -> str:
    return f"{hostel_id}_floor_{floor_number}"


class Room(BaseSchema):
    """A room inside a floor. Occupants are student registration numbers."""

    model_config = ConfigDict(extra="allow")

    id: str
    number: str
    capacity: int = Field(..., ge=1)
    gender: Gender = Gender.MIXED
    occupants: List[str] = Field(default_factory=list)
    is_available: bool = True
    is_reserved: bool = False
    reserved_by: Optional[str] = None
    reserved_until: Optional[datetime] = None
    features: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_occupancy(self) -> "Room":
        if len(self.occupants) > self.capacity:
            raise ValueError(
                f"Room {self.id} has {len(self.occupants)} occupants for capacity {self.capacity}"
            )
        return self

    @property
    def has_space(self) -> bool:
        return len(self.occupants) < self.capacity

    def compute_availability(self) -> bool:
        """
        Availability derived from the room's state.

        A reserved room stays blocked until it is explicitly unreserved, even
        once ``reserved_until`` has passed.
        """
        return self.has_space and not self.is_reserved

    def reservation_expired(self, now: datetime) -> bool:
        return self.is_reserved and self.reserved_until is not None and self.reserved_until <= now

    def is_selectable(self, gender: Optional[Gender] = None) -> bool:
        """Whether a student may pick this room right now."""
        if not (self.is_available and self.compute_availability()):
            return False
        if gender is None:
            return True
        return self.gender in (gender, Gender.MIXED)


class Floor(BaseSchema):
    model_config = ConfigDict(extra="allow")

    id: str
    number: str
    name: str
    rooms: List[Room] = Field(default_factory=list)


class RoomLocation(NamedTuple):
    floor: Floor
    room: Room


class Hostel(BaseSchema):
    """
    A hostel with its embedded floor/room tree.

    ``total_capacity`` and ``current_occupancy`` are denormalized counters;
    call ``recompute_totals`` after any edit of the tree.
    """

    id: str
    name: str
    description: str = ""
    gender: Gender = Gender.MIXED
    is_active: bool = True
    price_per_semester: float = Field(default=0, ge=0)
    total_capacity: int = 0
    current_occupancy: int = 0
    floors: List[Floor] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)

    # Store version the tree was loaded at; never serialized.
    version: Optional[int] = Field(default=None, exclude=True)

    def iter_rooms(self) -> Iterator[RoomLocation]:
        for floor in self.floors:
            for room in floor.rooms:
                yield RoomLocation(floor, room)

    def find_room(self, room_id: str) -> Optional[RoomLocation]:
        """Scan floors then rooms for ``room_id``."""
        for location in self.iter_rooms():
            if location.room.id == room_id:
                return location
        return None

    def find_floor(self, floor_id: str) -> Optional[Floor]:
        return next((floor for floor in self.floors if floor.id == floor_id), None)

    def compute_total_capacity(self) -> int:
        return sum(room.capacity for _, room in self.iter_rooms())

    def compute_current_occupancy(self) -> int:
        return sum(len(room.occupants) for _, room in self.iter_rooms())

    def recompute_totals(self) -> "Hostel":
        self.total_capacity = self.compute_total_capacity()
        self.current_occupancy = self.compute_current_occupancy()
        return self


class HostelCreate(BaseSchema):
    name: str = Field(..., min_length=1)
    description: str = ""
    gender: Gender = Gender.MIXED
    is_active: bool = True
    price_per_semester: float = Field(default=0, ge=0)
    floors: List[Floor] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)


class HostelUpdate(BaseUpdateSchema):
    """Top-level hostel fields an administrator may change."""

    name: Optional[str] = None
    description: Optional[str] = None
    gender: Optional[Gender] = None
    is_active: Optional[bool] = None
    price_per_semester: Optional[float] = Field(default=None, ge=0)
    features: Optional[List[str]] = None
    images: Optional[List[str]] = None


class AvailableRoom(Room):
    """A selectable room decorated with where it is and what it costs."""

    hostel_id: str
    hostel_name: str
    floor_name: str
    price: float


class RoomRangeRequest(BaseSchema):
    """Inclusive numeric range of rooms to add to one floor."""

    start_number: int = Field(..., ge=0)
    end_number: int = Field(..., ge=0)
    prefix: str = ""
    suffix: str = ""
    capacity: int = Field(..., ge=1)
    gender: Gender = Gender.MIXED
    features: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_range(self) -> "RoomRangeRequest":
        if self.end_number < self.start_number:
            raise ValueError("end_number must not be lower than start_number")
        return self

    def room_numbers(self) -> List[str]:
        return [
            f"{self.prefix}{number}{self.suffix}"
            for number in range(self.start_number, self.end_number + 1)
        ]


class RoomDetails(BaseSchema):
    """The room an allocation points at, with its hostel and price."""

    room: AvailableRoom
    hostel: Hostel
    price: float
