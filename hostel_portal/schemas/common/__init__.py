from hostel_portal.schemas.common.base import BaseSchema, BaseUpdateSchema
from hostel_portal.schemas.common.enums import (
    AllocationPaymentStatus,
    ApplicationWindowStatus,
    Gender,
    PaymentStatus,
    RevokeWindowPolicy,
    SettingsProfile,
)

__all__ = [
    "BaseSchema",
    "BaseUpdateSchema",
    "AllocationPaymentStatus",
    "ApplicationWindowStatus",
    "Gender",
    "PaymentStatus",
    "RevokeWindowPolicy",
    "SettingsProfile",
]
