"""
Enumeration types used across the allocation and payment lifecycles.
"""

from enum import Enum

__all__ = [
    "Gender",
    "AllocationPaymentStatus",
    "PaymentStatus",
    "RevokeWindowPolicy",
    "SettingsProfile",
    "ApplicationWindowStatus",
]


class Gender(str, Enum):
    """Gender policy of a hostel or a room."""

    MALE = "Male"
    FEMALE = "Female"
    MIXED = "Mixed"


class AllocationPaymentStatus(str, Enum):
    """Payment state of a room allocation."""

    PENDING = "Pending"
    PAID = "Paid"
    OVERDUE = "Overdue"


class PaymentStatus(str, Enum):
    """Review state of a submitted payment."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class RevokeWindowPolicy(str, Enum):
    """
    When an unpaid allocation becomes eligible for automatic revocation.

    ``deadline`` revokes as soon as ``paymentDeadline`` has passed (the
    deadline already embeds one grace period). ``deadline_plus_grace`` waits
    a second grace period past the deadline.
    """

    DEADLINE = "deadline"
    DEADLINE_PLUS_GRACE = "deadline_plus_grace"


class SettingsProfile(str, Enum):
    """Named fallback used when no hostel settings document exists."""

    ALLOCATION = "allocation"
    ADMIN = "admin"


class ApplicationWindowStatus(str, Enum):
    UPCOMING = "upcoming"
    OPEN = "open"
    CLOSED = "closed"
