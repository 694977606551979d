"""In-process client bound to an InMemoryCheckInStore.

Same interface as CheckInClient, plus knobs to take the "network" down and
inject failures. Used by the simulator and the test suite.
"""
import random

from gradpass.core.errors import MalformedResponse, RemoteUnavailable
from gradpass.core.models import CheckInRecord

from .client import SubmitResult
from .contract import InMemoryCheckInStore


class LoopbackClient:
    """CheckInClient stand-in with failure injection.

    Attributes:
        store: Backing store acting as the server
        online: False makes every call raise RemoteUnavailable
        failure_rate: Probability a submit fails before reaching the store
        calls: Payloads passed to submit, in call order
    """

    def __init__(
        self,
        store: InMemoryCheckInStore | None = None,
        online: bool = True,
        failure_rate: float = 0.0,
        seed: int | None = None,
    ):
        self.store = store if store is not None else InMemoryCheckInStore()
        self.online = online
        self.failure_rate = failure_rate
        self.calls: list[dict] = []
        self._rng = random.Random(seed)
        self._fail_next = 0
        self._malformed_next = 0

    def fail_next(self, n: int = 1):
        """Next n submits answer 503 without reaching the store."""
        self._fail_next += n

    def malformed_next(self, n: int = 1):
        """Next n submits reach the store but return an unreadable body."""
        self._malformed_next += n

    def is_reachable(self) -> bool:
        return self.online

    def submit(self, payload: dict) -> SubmitResult:
        self.calls.append(dict(payload))

        if not self.online:
            raise RemoteUnavailable("network unreachable")
        if self._fail_next > 0:
            self._fail_next -= 1
            raise RemoteUnavailable("check-in endpoint returned 503: injected", 503)
        if self.failure_rate and self._rng.random() < self.failure_rate:
            raise RemoteUnavailable("check-in endpoint returned 502: injected", 502)

        status, body = self.store.handle_post(payload)

        if self._malformed_next > 0:
            self._malformed_next -= 1
            raise MalformedResponse("check-in endpoint returned non-JSON body", status)
        if status != 200:
            raise RemoteUnavailable(f"check-in endpoint returned {status}: {body.get('error')}", status)

        return SubmitResult(id=body["id"], duplicate=body.get("duplicate", False))

    def list_checkins(self, ceremony_id: str) -> list[CheckInRecord]:
        if not self.online:
            raise RemoteUnavailable("network unreachable")
        status, body = self.store.handle_get(ceremony_id)
        if status != 200:
            raise RemoteUnavailable(f"check-in endpoint returned {status}: {body.get('error')}", status)
        return [CheckInRecord.from_dict(item) for item in body["items"]]
