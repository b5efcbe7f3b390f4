"""
Typed repositories over the document store collections.
"""

from hostel_portal.repositories.allocation_repository import AllocationRepository
from hostel_portal.repositories.hostel_repository import HostelRepository
from hostel_portal.repositories.payment_repository import PaymentRepository
from hostel_portal.repositories.settings_repository import (
    ApplicationSettingsRepository,
    HostelSettingsRepository,
)

__all__ = [
    "AllocationRepository",
    "HostelRepository",
    "PaymentRepository",
    "ApplicationSettingsRepository",
    "HostelSettingsRepository",
]
