"""
Custom Exceptions for the Hostel Allocation Service

This module defines the exception classes raised by the document store,
the hostel tree, and the allocation and payment lifecycles.
"""

from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Authentication
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    INVALID_STATE = "INVALID_STATE"

    # Store errors
    STORE_ERROR = "STORE_ERROR"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    STALE_WRITE = "STALE_WRITE"

    # Business logic errors
    ROOM_UNAVAILABLE = "ROOM_UNAVAILABLE"

    # Entity specific errors
    HOSTEL_NOT_FOUND = "HOSTEL_NOT_FOUND"
    FLOOR_NOT_FOUND = "FLOOR_NOT_FOUND"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    OCCUPANT_NOT_FOUND = "OCCUPANT_NOT_FOUND"
    ALLOCATION_NOT_FOUND = "ALLOCATION_NOT_FOUND"
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# Validation Exceptions
# ========================================

class ValidationError(BaseAppException):
    """Exception raised when data validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        status_code: int = 422
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, error_code, details, status_code)


class DuplicateEntryError(BaseAppException):
    """Exception raised when trying to create a duplicate entry"""

    def __init__(
        self,
        message: str = "Duplicate entry",
        field: Optional[str] = None,
        value: Optional[str] = None,
        collection: Optional[str] = None
    ):
        details = {
            "field": field,
            "value": value,
            "collection": collection
        }
        super().__init__(message, ErrorCode.DUPLICATE_ENTRY, details, 409)


class InvalidStateError(BaseAppException):
    """Exception raised when an entity is not in a state that allows the operation"""

    def __init__(
        self,
        message: str = "Invalid state for operation",
        current_state: Optional[str] = None
    ):
        details = {"current_state": current_state} if current_state else {}
        super().__init__(message, ErrorCode.INVALID_STATE, details, 409)


class RoomUnavailableError(BaseAppException):
    """Exception raised when a room cannot take another occupant"""

    def __init__(
        self,
        message: str = "Room is not available",
        room_id: Optional[str] = None,
        reason: Optional[str] = None
    ):
        details = {"room_id": room_id}
        if reason:
            details["reason"] = reason
        super().__init__(message, ErrorCode.ROOM_UNAVAILABLE, details, 409)


# ========================================
# Not Found Exceptions
# ========================================

class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id:
                message += f" (ID: {resource_id})"

        details = {
            "resource_type": resource_type,
            "resource_id": resource_id
        }
        super().__init__(message, ErrorCode.RESOURCE_NOT_FOUND, details, 404)


class HostelNotFoundError(ResourceNotFoundError):
    """Exception raised when a hostel is not found"""

    def __init__(self, hostel_id: Optional[str] = None, message: Optional[str] = None):
        super().__init__("Hostel", hostel_id, message)
        self.error_code = ErrorCode.HOSTEL_NOT_FOUND


class FloorNotFoundError(ResourceNotFoundError):
    """Exception raised when a floor is not found in a hostel"""

    def __init__(self, floor_id: Optional[str] = None, message: Optional[str] = None):
        super().__init__("Floor", floor_id, message)
        self.error_code = ErrorCode.FLOOR_NOT_FOUND


class RoomNotFoundError(ResourceNotFoundError):
    """Exception raised when a room is not found"""

    def __init__(self, room_id: Optional[str] = None, message: Optional[str] = None):
        super().__init__("Room", room_id, message)
        self.error_code = ErrorCode.ROOM_NOT_FOUND


class OccupantNotFoundError(ResourceNotFoundError):
    """Exception raised when a student is not an occupant of a room"""

    def __init__(self, reg_number: Optional[str] = None, message: Optional[str] = None):
        super().__init__("Occupant", reg_number, message or "Occupant not found in room")
        self.error_code = ErrorCode.OCCUPANT_NOT_FOUND


class AllocationNotFoundError(ResourceNotFoundError):
    """Exception raised when a room allocation is not found"""

    def __init__(self, allocation_id: Optional[str] = None, message: Optional[str] = None):
        super().__init__("Room allocation", allocation_id, message)
        self.error_code = ErrorCode.ALLOCATION_NOT_FOUND


class PaymentNotFoundError(ResourceNotFoundError):
    """Exception raised when a payment is not found"""

    def __init__(self, payment_id: Optional[str] = None, message: Optional[str] = None):
        super().__init__("Payment", payment_id, message)
        self.error_code = ErrorCode.PAYMENT_NOT_FOUND


# ========================================
# Store Exceptions
# ========================================

class StoreError(BaseAppException):
    """Exception raised when a document store operation fails"""

    def __init__(
        self,
        message: str = "Document store operation failed",
        operation: Optional[str] = None,
        collection: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.STORE_ERROR,
        status_code: int = 503
    ):
        details = {
            "operation": operation,
            "collection": collection
        }
        super().__init__(message, error_code, details, status_code)


class DocumentNotFoundError(StoreError):
    """Exception raised by the store when a document id does not resolve"""

    def __init__(self, collection: str, document_id: str):
        super().__init__(
            f"Document {document_id} not found in {collection}",
            operation="get",
            collection=collection,
            error_code=ErrorCode.DOCUMENT_NOT_FOUND,
            status_code=404
        )
        self.details["document_id"] = document_id


class OptimisticLockError(StoreError):
    """Exception raised when a conditional write finds a newer version stored"""

    def __init__(
        self,
        collection: str,
        document_id: str,
        expected_version: Optional[int] = None,
        actual_version: Optional[int] = None
    ):
        super().__init__(
            f"Stale write rejected for {collection}/{document_id}",
            operation="update",
            collection=collection,
            error_code=ErrorCode.STALE_WRITE,
            status_code=409
        )
        self.details.update({
            "document_id": document_id,
            "expected_version": expected_version,
            "actual_version": actual_version
        })


# ========================================
# Authentication Exceptions
# ========================================

class AuthenticationError(BaseAppException):
    """Exception raised when authentication fails"""

    def __init__(
        self,
        message: str = "Authentication failed",
        error_code: ErrorCode = ErrorCode.AUTHENTICATION_FAILED,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, error_code, details, 401)
