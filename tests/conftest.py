"""Test configuration and fixtures.

Fixtures: temporary offline queue, in-memory check-in store with a loopback
client, ceremony state, invitee/payload factories, simulation config.
"""
from unittest.mock import MagicMock

import pytest

from gradpass.checkin.state import CheckInState
from gradpass.config import remote as remote_config
from gradpass.core.constants import DEFAULT_OPERATOR, ROLE_STUDENT
from gradpass.core.models import Invitee
from gradpass.offline.queue import LocalQueue
from gradpass.remote.contract import InMemoryCheckInStore
from gradpass.remote.loopback import LoopbackClient
from gradpass.simulation import SimConfig

CEREMONY_ID = "CER-2026"


@pytest.fixture(autouse=True)
def isolate_config(tmp_path, monkeypatch):
    """Keep every test away from ~/.gradpass and the real endpoint."""
    monkeypatch.setattr(remote_config, "QUEUE_DIR", tmp_path / "default-queue")
    monkeypatch.setattr(remote_config, "OPERATOR", DEFAULT_OPERATOR)
    monkeypatch.setattr(remote_config, "CHECKINS_URL", "http://checkins.test/api/checkins")


@pytest.fixture
def queue(tmp_path) -> LocalQueue:
    """Empty offline queue in a temporary directory."""
    return LocalQueue(tmp_path / "offline")


@pytest.fixture
def store() -> InMemoryCheckInStore:
    return InMemoryCheckInStore()


@pytest.fixture
def client(store) -> LoopbackClient:
    """Online loopback client bound to the store."""
    return LoopbackClient(store, seed=7)


@pytest.fixture
def state() -> CheckInState:
    return CheckInState(ceremony_id=CEREMONY_ID)


@pytest.fixture
def make_invitee():
    """Factory: make_invitee(1) -> Invitee inv-1 holding ticket T-1."""
    def _make(n: int, name: str | None = None, role: str = ROLE_STUDENT,
              ceremony_id: str = CEREMONY_ID) -> Invitee:
        return Invitee(
            id=f"inv-{n}",
            name=name or f"Invitee {n}",
            ceremony_id=ceremony_id,
            ticket_code=f"T-{n}",
            role=role,
        )
    return _make


@pytest.fixture
def make_payload():
    """Factory for wire-shaped check-in payloads."""
    def _make(n: int = 1, scanned_at: str = "2026-06-20T15:00:00Z",
              ceremony_id: str = CEREMONY_ID, source: str = "scanner") -> dict:
        return {
            "inviteeId": f"inv-{n}",
            "ceremonyId": ceremony_id,
            "ticketCode": f"T-{n}",
            "scannedAt": scanned_at,
            "source": source,
            "operator": DEFAULT_OPERATOR,
        }
    return _make


@pytest.fixture
def mock_session() -> MagicMock:
    """requests.Session stand-in; set .post/.get return values per test."""
    return MagicMock()


@pytest.fixture
def sim_config() -> SimConfig:
    """Provide default SimConfig."""
    return SimConfig()
