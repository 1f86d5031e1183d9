"""Shared fixtures: rooms, rates, a ledger and an app over an in-memory store."""

import os

# Keep tests off the network and the working-directory database
os.environ["LLM_ENABLED"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from rentledger.api.app import create_app  # noqa: E402
from rentledger.config import reset_app_config  # noqa: E402
from rentledger.schemas.ledger import GlobalRates, Room  # noqa: E402
from rentledger.services.ledger import BillingLedger  # noqa: E402
from rentledger.services.store import InMemoryStore  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_config():
    """Re-read environment for every test."""
    reset_app_config()
    yield
    reset_app_config()


@pytest.fixture
def rooms() -> list[Room]:
    return [
        Room(id="room-1", name="Phòng 1", base_rent=3_500_000, pin="1111"),
        Room(id="room-2", name="Phòng 2", base_rent=3_000_000, pin="2222"),
    ]


@pytest.fixture
def rates() -> GlobalRates:
    return GlobalRates(electricity_rate=3500, water_rate=25000, service_fee=150000, other_fee=0)


@pytest.fixture
def ledger() -> BillingLedger:
    return BillingLedger()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def analysis_service():
    service = AsyncMock()
    service.summarize = AsyncMock(return_value="## Báo cáo")
    return service


@pytest.fixture
def client(store, analysis_service):
    """API client over an in-memory store; lifespan runs inside the context."""
    app = create_app(store=store, analysis_service=analysis_service)
    with TestClient(app) as test_client:
        yield test_client
