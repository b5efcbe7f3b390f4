"""
Core application constants.

Collection names and well-known document ids of the document store, plus
the fixed limits used by list queries.
"""

from typing import Final

# Collections
COLLECTION_USERS: Final[str] = "users"
COLLECTION_STUDENTS: Final[str] = "students"
COLLECTION_APPLICATIONS: Final[str] = "applications"
COLLECTION_HOSTELS: Final[str] = "hostels"
COLLECTION_ROOMS: Final[str] = "rooms"  # rooms are embedded in hostel documents
COLLECTION_PAYMENTS: Final[str] = "payments"
COLLECTION_ROOM_ALLOCATIONS: Final[str] = "roomAllocations"
COLLECTION_SETTINGS: Final[str] = "settings"

# Well-known settings documents
APPLICATION_SETTINGS_DOCUMENT_ID: Final[str] = "application-limits"
HOSTEL_SETTINGS_DOCUMENT_ID: Final[str] = "hostel-settings"

# Query limits
HOSTEL_LIST_LIMIT: Final[int] = 100
STUDENT_PAYMENTS_LIMIT: Final[int] = 100

# Document metadata keys
META_ID: Final[str] = "$id"
META_VERSION: Final[str] = "$version"
META_CREATED_AT: Final[str] = "$createdAt"
META_UPDATED_AT: Final[str] = "$updatedAt"
META_KEYS: Final[tuple] = (META_ID, META_VERSION, META_CREATED_AT, META_UPDATED_AT)

# HTTP
HEADER_REQUEST_ID: Final[str] = "X-Request-ID"
