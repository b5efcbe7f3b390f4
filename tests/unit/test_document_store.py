"""
Unit Tests for the document store adapters
Both adapters must behave the same; every test runs against each.
"""
import pytest

from hostel_portal.core.constants import META_ID, META_VERSION
from hostel_portal.core.exceptions import DocumentNotFoundError, DuplicateEntryError, OptimisticLockError
from hostel_portal.db.session import build_engine, build_session_factory
from hostel_portal.repositories.base import InMemoryDocumentStore, ListQuery, SqlAlchemyDocumentStore


@pytest.fixture(params=["memory", "sql"])
def any_store(request):
    if request.param == "memory":
        return InMemoryDocumentStore()
    engine = build_engine("sqlite://", echo=False)
    return SqlAlchemyDocumentStore(build_session_factory(engine))


class TestSingleDocumentOperations:
    """Test create/get/update/delete"""

    def test_create_generates_id_and_metadata(self, any_store):
        document = any_store.create("hostels", None, {"name": "Eagle"})

        assert document[META_ID]
        assert document[META_VERSION] == 1
        assert any_store.get("hostels", document[META_ID])["name"] == "Eagle"

    def test_create_with_existing_id_fails(self, any_store):
        any_store.create("settings", "hostel-settings", {"paymentGracePeriod": 24})

        with pytest.raises(DuplicateEntryError):
            any_store.create("settings", "hostel-settings", {"paymentGracePeriod": 48})

    def test_update_merges_fields_and_bumps_version(self, any_store):
        doc_id = any_store.create("hostels", None, {"name": "Eagle", "isActive": True})[META_ID]

        updated = any_store.update("hostels", doc_id, {"isActive": False})

        assert updated["name"] == "Eagle"
        assert updated["isActive"] is False
        assert updated[META_VERSION] == 2

    def test_update_ignores_metadata_in_fields(self, any_store):
        doc_id = any_store.create("hostels", None, {"name": "Eagle"})[META_ID]

        updated = any_store.update("hostels", doc_id, {"name": "Falcon", META_VERSION: 99})

        assert updated[META_VERSION] == 2

    def test_conditional_update_rejects_stale_version(self, any_store):
        doc_id = any_store.create("hostels", None, {"name": "Eagle"})[META_ID]
        any_store.update("hostels", doc_id, {"name": "Falcon"}, expected_version=1)

        with pytest.raises(OptimisticLockError):
            any_store.update("hostels", doc_id, {"name": "Hawk"}, expected_version=1)

        assert any_store.get("hostels", doc_id)["name"] == "Falcon"

    def test_missing_document(self, any_store):
        with pytest.raises(DocumentNotFoundError):
            any_store.get("hostels", "missing")
        with pytest.raises(DocumentNotFoundError):
            any_store.update("hostels", "missing", {"name": "x"})
        with pytest.raises(DocumentNotFoundError):
            any_store.delete("hostels", "missing")

    def test_delete(self, any_store):
        doc_id = any_store.create("payments", None, {"amount": 10})[META_ID]

        any_store.delete("payments", doc_id)

        with pytest.raises(DocumentNotFoundError):
            any_store.get("payments", doc_id)

    def test_returned_documents_are_copies(self, any_store):
        doc_id = any_store.create("hostels", None, {"features": ["wifi"]})[META_ID]

        any_store.get("hostels", doc_id)["features"].append("gym")

        assert any_store.get("hostels", doc_id)["features"] == ["wifi"]


class TestListQuery:
    """Test filters, ordering and pagination"""

    @pytest.fixture
    def allocations(self, any_store):
        for reg, status, at in [
            ("H1", "Pending", "2025-09-01T10:00:00Z"),
            ("H2", "Paid", "2025-09-02T10:00:00Z"),
            ("H3", "Pending", "2025-09-03T10:00:00Z"),
        ]:
            any_store.create("roomAllocations", None, {
                "studentRegNumber": reg, "paymentStatus": status, "allocatedAt": at,
            })
        return any_store

    def test_equality_filter(self, allocations):
        found = allocations.list("roomAllocations", ListQuery(filters={"paymentStatus": "Pending"}))

        assert sorted(doc["studentRegNumber"] for doc in found) == ["H1", "H3"]

    def test_order_descending_with_limit(self, allocations):
        found = allocations.list(
            "roomAllocations", ListQuery(order_by="allocatedAt", descending=True, limit=2)
        )

        assert [doc["studentRegNumber"] for doc in found] == ["H3", "H2"]

    def test_offset(self, allocations):
        found = allocations.list("roomAllocations", ListQuery(order_by="allocatedAt", offset=1))

        assert [doc["studentRegNumber"] for doc in found] == ["H2", "H3"]

    def test_unknown_collection_is_empty(self, any_store):
        assert any_store.list("applications") == []
