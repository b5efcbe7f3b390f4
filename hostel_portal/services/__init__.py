"""
Lifecycle services: settings, hostel trees, allocations, payments and the
deadline sweep.
"""

from hostel_portal.services.allocation_service import AllocationService
from hostel_portal.services.deadline_sweep_service import DeadlineSweepService
from hostel_portal.services.hostel_tree_service import HostelTreeService
from hostel_portal.services.payment_service import PaymentService
from hostel_portal.services.settings_service import SettingsService

__all__ = [
    "AllocationService",
    "DeadlineSweepService",
    "HostelTreeService",
    "PaymentService",
    "SettingsService",
]
