"""
Hostel portal - Test Configuration and Fixtures
"""
import os

import pytest

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['STORE_BACKEND'] = 'memory'
os.environ['PAYMENT_CHECK_TOKEN'] = 'test-check-token'
os.environ['LOG_LEVEL'] = 'WARNING'
os.environ['ENABLE_PERIODIC_TASKS'] = 'false'

from hostel_portal.config.settings import Settings
from hostel_portal.repositories.base import InMemoryDocumentStore
from hostel_portal.services import (
    AllocationService,
    DeadlineSweepService,
    HostelTreeService,
    PaymentService,
    SettingsService,
)
from tests.support import START, FrozenClock, build_hostel


@pytest.fixture
def reg_number(faker):
    """Factory of unique student registration numbers like ``H123456X``."""
    seen = set()

    def make() -> str:
        while True:
            value = faker.bothify("H######?").upper()
            if value not in seen:
                seen.add(value)
                return value

    return make


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(START)


@pytest.fixture
def config() -> Settings:
    return Settings()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def settings_service(store, clock, config) -> SettingsService:
    return SettingsService(store, clock, config)


@pytest.fixture
def tree_service(store, clock, config) -> HostelTreeService:
    return HostelTreeService(store, clock, config)


@pytest.fixture
def allocation_service(store, clock, config, tree_service, settings_service) -> AllocationService:
    return AllocationService(store, clock, config, tree=tree_service, settings_service=settings_service)


@pytest.fixture
def payment_service(store, clock, config) -> PaymentService:
    return PaymentService(store, clock, config)


@pytest.fixture
def sweep_service(store, clock, config, allocation_service) -> DeadlineSweepService:
    return DeadlineSweepService(store, clock, config, allocation_service=allocation_service)


@pytest.fixture
def eagle(tree_service):
    """Hostel "Eagle", floor "Ground", one room "G1" of capacity 2."""
    hostel_id, floor_id = build_hostel(tree_service)
    return hostel_id, f"{hostel_id}_{floor_id}_G1"
