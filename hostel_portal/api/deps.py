"""
FastAPI dependencies.

The document store and the hostel lock registry are process-wide; services
are cheap and built per request on top of them.

Example usage in a router:
    from fastapi import Depends, APIRouter
    from hostel_portal.api import deps

    router = APIRouter()

    @router.get("/status")
    def status(sweep = Depends(deps.get_sweep_service)):
        return sweep.status()
"""

from functools import lru_cache

from fastapi import Depends

from hostel_portal.config.settings import get_settings
from hostel_portal.core.locks import HostelLockRegistry
from hostel_portal.db.store import build_store
from hostel_portal.repositories.base import DocumentStore
from hostel_portal.services import (
    AllocationService,
    DeadlineSweepService,
    HostelTreeService,
    PaymentService,
    SettingsService,
)


# --- Process-wide resources ----------------------------------------------------

@lru_cache()
def get_store() -> DocumentStore:
    return build_store(get_settings())


@lru_cache()
def get_lock_registry() -> HostelLockRegistry:
    return HostelLockRegistry(enabled=get_settings().CONCURRENCY_MODE == "lock")


# --- Services ------------------------------------------------------------------

def get_settings_service(store: DocumentStore = Depends(get_store)) -> SettingsService:
    return SettingsService(store)


def get_hostel_tree_service(store: DocumentStore = Depends(get_store)) -> HostelTreeService:
    return HostelTreeService(store, locks=get_lock_registry())


def get_allocation_service(
    store: DocumentStore = Depends(get_store),
    tree: HostelTreeService = Depends(get_hostel_tree_service),
    settings_service: SettingsService = Depends(get_settings_service),
) -> AllocationService:
    return AllocationService(store, tree=tree, settings_service=settings_service)


def get_payment_service(store: DocumentStore = Depends(get_store)) -> PaymentService:
    return PaymentService(store)


def get_sweep_service(
    store: DocumentStore = Depends(get_store),
    allocation_service: AllocationService = Depends(get_allocation_service),
) -> DeadlineSweepService:
    return DeadlineSweepService(store, allocation_service=allocation_service)


__all__ = [
    "get_store",
    "get_lock_registry",
    "get_settings_service",
    "get_hostel_tree_service",
    "get_allocation_service",
    "get_payment_service",
    "get_sweep_service",
]
