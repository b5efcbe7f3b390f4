"""
Success/failure container for operations that report rather than raise.

Batch operations such as the deadline sweep run many independent writes;
each one yields a ``ServiceResult`` so that one failure is counted instead
of aborting the batch.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from hostel_portal.core.exceptions import BaseAppException, ErrorCode


class ErrorSeverity(str, Enum):
    """Error severity levels."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class ServiceError:
    """A failed operation with context."""

    code: ErrorCode
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    details: Optional[Dict[str, Any]] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)


TData = TypeVar("TData")


@dataclass
class ServiceResult(Generic[TData]):
    """Outcome of one operation; truthy on success."""

    is_success: bool
    data: Optional[TData] = None
    error: Optional[ServiceError] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, data: Optional[TData] = None, message: Optional[str] = None) -> "ServiceResult[TData]":
        return cls(is_success=True, data=data, message=message)

    @classmethod
    def failure(cls, error: ServiceError) -> "ServiceResult[TData]":
        return cls(is_success=False, error=error, message=error.message)

    @classmethod
    def from_exception(
        cls,
        exception: Exception,
        operation: str,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
    ) -> "ServiceResult[TData]":
        """Failed result carrying the application error code when there is one."""
        code = exception.error_code if isinstance(exception, BaseAppException) else ErrorCode.INTERNAL_ERROR
        return cls.failure(
            ServiceError(
                code=code,
                message=f"Failed to {operation}: {exception}",
                severity=severity,
                details={"exception_type": type(exception).__name__},
            )
        )

    def __bool__(self) -> bool:
        return self.is_success


__all__ = [
    "ErrorSeverity",
    "ServiceError",
    "ServiceResult",
]
