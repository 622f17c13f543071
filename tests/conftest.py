"""Pytest fixtures for testing"""

import random

import pytest
from fastapi.testclient import TestClient

from odysseus_gateway.api.dependencies import get_account_store, get_bank_api
from odysseus_gateway.api.main import create_app
from odysseus_gateway.domain.models import TransferLimits
from odysseus_gateway.infrastructure.clients.mock_bank import MockBankAPI
from odysseus_gateway.infrastructure.store import InMemoryAccountStore
from odysseus_gateway.services.transfers import TransferOrchestrator
from tests.factories import SleepRecorder, make_limits, make_snapshot


@pytest.fixture
def limits() -> TransferLimits:
    """Fresh limits: daily 10000, monthly 50000, per-transaction 5000"""
    return make_limits()


@pytest.fixture
def store() -> InMemoryAccountStore:
    """Store with a single default account holding 10000"""
    return InMemoryAccountStore(make_snapshot())


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def bank(store: InMemoryAccountStore) -> MockBankAPI:
    """Bank that never fails and never waits"""
    return MockBankAPI(store, failure_rate=0.0, transfer_delay=0.0, rng=random.Random(7))


@pytest.fixture
def orchestrator(store, bank, sleep) -> TransferOrchestrator:
    return TransferOrchestrator(store, bank, max_attempts=3, base_delay=1.0, max_delay=10.0, sleep=sleep)


@pytest.fixture
def seeded_store() -> InMemoryAccountStore:
    """Store with the demo seed data from settings"""
    return InMemoryAccountStore()


@pytest.fixture
def client(seeded_store: InMemoryAccountStore) -> TestClient:
    """Create FastAPI test client backed by a fresh seeded store"""
    app = create_app()

    def override_bank():
        return MockBankAPI(seeded_store, failure_rate=0.0, transfer_delay=0.0)

    app.dependency_overrides[get_account_store] = lambda: seeded_store
    app.dependency_overrides[get_bank_api] = override_bank
    return TestClient(app)
