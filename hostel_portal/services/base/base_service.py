"""
Base service class providing common functionality for all services.
"""

from typing import Any, Dict, Optional

from hostel_portal.config.logging import get_logger
from hostel_portal.config.settings import Settings, get_settings
from hostel_portal.repositories.base.document_store import DocumentStore
from hostel_portal.services.base.service_result import ErrorSeverity, ServiceResult
from hostel_portal.utils.datetime_utils import Clock, utcnow


class BaseService:
    """
    Base service with common behaviors:
    - Shared logger, document store and configuration
    - An injectable clock, so time-dependent rules are testable
    - Exception to ``ServiceResult`` conversion for batch operations
    """

    def __init__(
        self,
        store: DocumentStore,
        clock: Optional[Clock] = None,
        app_settings: Optional[Settings] = None,
    ):
        self.store = store
        self.clock: Clock = clock or utcnow
        self.config: Settings = app_settings or get_settings()
        self._logger = get_logger(self.__class__.__name__)

    def now(self):
        return self.clock()

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        additional_context: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """
        Log an exception with context and convert it to a failed ServiceResult.

        Args:
            exception: The caught exception
            operation: Description of the operation that failed
            entity_ref: Reference to the entity involved
            severity: Error severity level
            additional_context: Extra context for logging
        """
        context = {
            "operation": operation,
            "entity_ref": str(entity_ref) if entity_ref is not None else None,
            "exception_type": type(exception).__name__,
        }
        if additional_context:
            context.update(additional_context)

        self._logger.error(f"Error during {operation}: {exception}", exc_info=True, extra=context)
        return ServiceResult.from_exception(exception, operation, severity=severity)
