"""
Deadline-check trigger.

Called by an external scheduler. ``POST`` runs the sweep and needs the
shared ``PAYMENT_CHECK_TOKEN`` as a bearer token; ``GET`` reports what a
sweep would do without changing anything.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import JSONResponse

from hostel_portal.api.deps import get_sweep_service
from hostel_portal.config.logging import get_logger
from hostel_portal.config.settings import get_settings
from hostel_portal.core.exceptions import AuthenticationError
from hostel_portal.core.security import require_bearer_token
from hostel_portal.services.deadline_sweep_service import DeadlineSweepService

logger = get_logger(__name__)

router = APIRouter(prefix="/check-payment-deadlines")

_RUN_FIELDS = {"message", "total_expired", "revoked_count", "timestamp"}


def _internal_error(error: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error", "error": str(error)},
    )


@router.post("")
def check_payment_deadlines(
    authorization: Optional[str] = Header(default=None),
    sweep: DeadlineSweepService = Depends(get_sweep_service),
):
    try:
        require_bearer_token(authorization, get_settings().PAYMENT_CHECK_TOKEN)
    except AuthenticationError as e:
        logger.warning("Unauthorized payment deadline check attempt")
        return JSONResponse(
            status_code=e.status_code,
            content={"message": "Unauthorized", "error": e.message},
        )

    try:
        result = sweep.run()
    except Exception as e:
        logger.error(f"Error checking payment deadlines: {e}", exc_info=True)
        return _internal_error(e)
    return result.model_dump(mode="json", by_alias=True, include=_RUN_FIELDS)


@router.get("")
def payment_deadline_status(sweep: DeadlineSweepService = Depends(get_sweep_service)):
    try:
        return sweep.status().to_document()
    except Exception as e:
        logger.error(f"Error checking payment deadline status: {e}", exc_info=True)
        return _internal_error(e)
