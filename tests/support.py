"""
Test doubles shared by the test-suite.
"""
import threading
from datetime import datetime, timedelta, timezone

from hostel_portal.core.exceptions import StoreError
from hostel_portal.repositories.base import InMemoryDocumentStore
from hostel_portal.schemas.common.enums import Gender
from hostel_portal.schemas.hostel import HostelCreate, RoomRangeRequest

# 1 September 2025, noon UTC: first semester of 2025/2026.
START = datetime(2025, 9, 1, 12, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


class FailingStore(InMemoryDocumentStore):
    """In-memory store whose selected operations on selected collections fail."""

    def __init__(self):
        super().__init__()
        self.failures = set()

    def fail(self, operation: str, collection: str) -> None:
        self.failures.add((operation, collection))

    def _check(self, operation: str, collection: str) -> None:
        if (operation, collection) in self.failures:
            raise StoreError("Store unavailable", operation=operation, collection=collection)

    def get(self, collection, document_id):
        self._check("get", collection)
        return super().get(collection, document_id)

    def list(self, collection, query=None):
        self._check("list", collection)
        return super().list(collection, query)

    def update(self, collection, document_id, fields, expected_version=None):
        self._check("update", collection)
        return super().update(collection, document_id, fields, expected_version)

    def delete(self, collection, document_id):
        self._check("delete", collection)
        return super().delete(collection, document_id)


class PausingStore(InMemoryDocumentStore):
    """
    In-memory store that holds the first ``parties`` updates of one
    collection at a barrier, so that concurrent read-modify-write sequences
    all finish reading before any of them writes.

    A barrier that times out is broken and lets every later writer through.
    """

    def __init__(self, collection: str, parties: int = 2, timeout: float = 2.0):
        super().__init__()
        self.collection = collection
        self.barrier = threading.Barrier(parties, timeout=timeout)
        self._pending = 0
        self._count_lock = threading.Lock()

    def arm(self) -> None:
        self._pending = self.barrier.parties

    def update(self, collection, document_id, fields, expected_version=None):
        if collection == self.collection:
            with self._count_lock:
                pause = self._pending > 0
                if pause:
                    self._pending -= 1
            if pause:
                try:
                    self.barrier.wait()
                except threading.BrokenBarrierError:
                    pass
        return super().update(collection, document_id, fields, expected_version)



class HookedStore(InMemoryDocumentStore):
    """
    In-memory store that runs a callback once, right after the first
    matching operation on one collection returns. Used to land a write
    between a service's read and its follow-up write.
    """

    def __init__(self):
        super().__init__()
        self.hooks = {}

    def after(self, operation: str, collection: str, callback) -> None:
        self.hooks[(operation, collection)] = callback

    def _fire(self, operation: str, collection: str) -> None:
        callback = self.hooks.pop((operation, collection), None)
        if callback is not None:
            callback()

    def list(self, collection, query=None):
        documents = super().list(collection, query)
        self._fire("list", collection)
        return documents

    def create(self, collection, document_id, fields):
        document = super().create(collection, document_id, fields)
        self._fire("create", collection)
        return document

    def update(self, collection, document_id, fields, expected_version=None):
        document = super().update(collection, document_id, fields, expected_version)
        self._fire("update", collection)
        return document


def build_hostel(tree, name: str = "Eagle", rooms=(("G", 1, 1, 2),), gender=None):
    """
    Create a hostel with one floor "Ground" and the given room ranges.

    Each range is ``(prefix, start, end, capacity)``. Returns the hostel id
    and the floor id.
    """
    hostel_id = tree.create_hostel(
        HostelCreate(name=name, gender=gender or Gender.MIXED, price_per_semester=1500)
    )
    floor = tree.add_floor(hostel_id, "0", "Ground")
    for prefix, start, end, capacity in rooms:
        tree.add_rooms_in_range(
            hostel_id,
            floor.id,
            RoomRangeRequest(start_number=start, end_number=end, prefix=prefix, capacity=capacity),
        )
    return hostel_id, floor.id
