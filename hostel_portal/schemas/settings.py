"""
Singleton settings documents: hostel operations and the application window.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from hostel_portal.schemas.common.base import BaseSchema, BaseUpdateSchema
from hostel_portal.schemas.common.enums import ApplicationWindowStatus

__all__ = [
    "HostelSettings",
    "HostelSettingsUpdate",
    "ApplicationSettings",
    "ApplicationSettingsUpdate",
    "ApplicationCountdown",
]


class HostelSettings(BaseSchema):
    payment_grace_period: int = Field(..., ge=0, description="Hours a student has to pay after allocation")
    auto_revoke_unpaid_allocations: bool
    max_room_capacity: int = Field(..., ge=1)
    allow_mixed_gender: bool
    updated_at: Optional[datetime] = None


class HostelSettingsUpdate(BaseUpdateSchema):
    payment_grace_period: Optional[int] = Field(default=None, ge=0)
    auto_revoke_unpaid_allocations: Optional[bool] = None
    max_room_capacity: Optional[int] = Field(default=None, ge=1)
    allow_mixed_gender: Optional[bool] = None


class ApplicationSettings(BaseSchema):
    boy_limit: int = 0
    girl_limit: int = 0
    auto_accept_boys_limit: int = 0
    auto_accept_girls_limit: int = 0
    start_date_time: Optional[datetime] = None
    end_date_time: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ApplicationSettingsUpdate(BaseUpdateSchema):
    boy_limit: Optional[int] = Field(default=None, ge=0)
    girl_limit: Optional[int] = Field(default=None, ge=0)
    auto_accept_boys_limit: Optional[int] = Field(default=None, ge=0)
    auto_accept_girls_limit: Optional[int] = Field(default=None, ge=0)
    start_date_time: Optional[datetime] = None
    end_date_time: Optional[datetime] = None


class ApplicationCountdown(BaseSchema):
    status: ApplicationWindowStatus
    target_date: Optional[datetime] = None
    time_remaining: str
