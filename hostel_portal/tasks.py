"""
Background tasks.
"""

from functools import lru_cache
from typing import Any, Dict, Optional

from hostel_portal.config.logging import get_logger
from hostel_portal.config.settings import get_settings
from hostel_portal.core.background_tasks import DEADLINE_SWEEP_TASK, celery_app
from hostel_portal.db.store import build_store
from hostel_portal.repositories.base import DocumentStore
from hostel_portal.services import AllocationService, DeadlineSweepService
from hostel_portal.utils.datetime_utils import Clock

logger = get_logger(__name__)


def sweep_deadlines(store: DocumentStore, clock: Optional[Clock] = None) -> Dict[str, Any]:
    """
    Flag overdue allocations, revoke them when auto-revoke is on, then run
    the deadline sweep for anything still unpaid past its revoke window.
    """
    allocation_service = AllocationService(store, clock)
    overdue = allocation_service.check_and_update_overdue()
    sweep = DeadlineSweepService(store, clock, allocation_service=allocation_service).run()
    summary = {
        "markedOverdue": len(overdue.marked_overdue),
        "revokedOverdue": len(overdue.revoked),
        **sweep.model_dump(mode="json", by_alias=True, exclude={"errors"}),
    }
    logger.info(
        "Deadline sweep finished",
        extra={"marked_overdue": summary["markedOverdue"], "revoked_count": summary["revokedCount"]},
    )
    return summary


@lru_cache()
def get_worker_store() -> DocumentStore:
    """One store, and so one engine, per worker process."""
    return build_store(get_settings())


@celery_app.task(name=DEADLINE_SWEEP_TASK)
def run_deadline_sweep() -> Dict[str, Any]:
    return sweep_deadlines(get_worker_store())
