# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from token_orchestrator.main import create_app
from token_orchestrator.services.keystore import KeyStore

LEASE = 300.0
START = 1_700_000_000.0


class ManualClock:
    """Virtual clock; advance it explicitly"""

    def __init__(self, now: float = START):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def store(clock):
    return KeyStore(lease_duration=LEASE, clock=clock)


@pytest.fixture
def app(store):
    # Sweeps are driven by the tests through app.state.reaper.tick()
    return create_app(store=store, reaper_enabled=False)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
