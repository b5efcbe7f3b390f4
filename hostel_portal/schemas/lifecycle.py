"""
Outcome reports of multi-step lifecycle operations.

Structural edits and sweeps run several independent writes; these models
report which parts succeeded so callers can see partial failures.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from hostel_portal.schemas.common.base import BaseSchema
from hostel_portal.schemas.common.enums import RevokeWindowPolicy

__all__ = [
    "CleanupError",
    "CascadeResult",
    "OverdueCheckResult",
    "SweepResult",
    "SweepStatus",
]


class CleanupError(BaseSchema):
    allocation_id: Optional[str] = None
    error: str


class CascadeResult(BaseSchema):
    """Primary structural edit plus its best-effort allocation cleanup."""

    primary_succeeded: bool = True
    revoked_allocation_ids: List[str] = Field(default_factory=list)
    cleanup_errors: List[CleanupError] = Field(default_factory=list)

    @property
    def fully_succeeded(self) -> bool:
        return self.primary_succeeded and not self.cleanup_errors


class OverdueCheckResult(BaseSchema):
    marked_overdue: List[str] = Field(default_factory=list)
    revoked: List[str] = Field(default_factory=list)
    errors: List[CleanupError] = Field(default_factory=list)


class SweepResult(BaseSchema):
    message: str
    total_expired: int = 0
    revoked_count: int = 0
    timestamp: datetime
    errors: List[CleanupError] = Field(default_factory=list)


class SweepStatus(BaseSchema):
    message: str = "Payment deadline status"
    total_unpaid_allocations: int
    expired_allocations: int
    auto_revoke_enabled: bool
    grace_period_hours: int
    revoke_window_policy: RevokeWindowPolicy
    timestamp: datetime
