"""Failure-injection simulation of a ceremony door.

Scans every invitee once (some twice) while the network flaps and the
endpoint fails at random, then reconnects and syncs until the queue drains.

Checked invariants:
- no loss: after the scans, confirmed + queued covers every invitee exactly once
- at most once: the store never holds two check-ins for one invitee
- convergence: after syncing, the queue is empty and every invitee is confirmed
"""
import random
import time
from dataclasses import dataclass, field

from gradpass.checkin.recorder import record_checkin
from gradpass.checkin.state import CheckInState
from gradpass.core.constants import ROLE_GUEST, ROLE_STUDENT, STATUS_DUPLICATE
from gradpass.core.models import Invitee
from gradpass.core.receipt import emit_receipt
from gradpass.offline.queue import LocalQueue
from gradpass.offline.sync import sync_pending
from gradpass.remote.contract import InMemoryCheckInStore
from gradpass.remote.loopback import LoopbackClient


@dataclass
class SimConfig:
    """Simulation configuration parameters."""
    n_invitees: int = 50
    failure_rate: float = 0.3  # probability a reachable endpoint still fails
    offline_rate: float = 0.2  # probability the network is down at a scan
    double_scan_rate: float = 0.1  # probability of an immediate re-scan
    random_seed: int = 42  # deterministic
    max_sync_passes: int = 50
    ceremony_id: str = "SIM-CEREMONY"


@dataclass
class SimState:
    """Simulation state tracking."""
    scans: int = 0
    outcomes: dict[str, int] = field(default_factory=dict)
    sync_passes: int = 0
    retries: int = 0
    violations: list[str] = field(default_factory=list)


def build_invitees(config: SimConfig) -> list[Invitee]:
    """Every third invitee a student, the rest guests; tickets T-1..T-N."""
    return [
        Invitee(
            id=f"inv-{i}",
            name=f"Invitee {i}",
            ceremony_id=config.ceremony_id,
            ticket_code=f"T-{i}",
            role=ROLE_STUDENT if i % 3 == 1 else ROLE_GUEST,
        )
        for i in range(1, config.n_invitees + 1)
    ]


def run_simulation(config: SimConfig, queue: LocalQueue) -> tuple[SimState, dict]:
    """Execute the scan phase and the sync phase.

    Args:
        config: Simulation parameters
        queue: Empty offline queue to use

    Returns:
        (SimState, summary receipt)
    """
    t0 = time.perf_counter()
    rng = random.Random(config.random_seed)
    store = InMemoryCheckInStore()
    client = LoopbackClient(store, failure_rate=config.failure_rate, seed=config.random_seed)
    state = CheckInState(ceremony_id=config.ceremony_id)
    sim = SimState()
    invitees = build_invitees(config)

    # Scan phase
    for invitee in invitees:
        client.online = rng.random() >= config.offline_rate
        outcome = record_checkin(state, invitee, client, queue)
        sim.scans += 1
        sim.outcomes[outcome.status] = sim.outcomes.get(outcome.status, 0) + 1

        if rng.random() < config.double_scan_rate:
            calls_before = len(client.calls)
            again = record_checkin(state, invitee, client, queue)
            sim.scans += 1
            sim.outcomes[again.status] = sim.outcomes.get(again.status, 0) + 1
            if again.status != STATUS_DUPLICATE:
                sim.violations.append(f"re-scan of {invitee.id} not reported as duplicate")
            if len(client.calls) != calls_before:
                sim.violations.append(f"re-scan of {invitee.id} reached the network")

    confirmed = {r.invitee_id for r in store.records()}
    pending = [r.invitee_id for r in queue.get_pending_checkins()]
    if len(pending) != len(set(pending)):
        sim.violations.append("invitee queued more than once")
    covered = confirmed | set(pending)
    if covered != {i.id for i in invitees}:
        sim.violations.append(f"lost check-ins: {sorted({i.id for i in invitees} - covered)}")

    # Sync phase
    client.online = True
    while queue.get_queue_size() and sim.sync_passes < config.max_sync_passes:
        summary = sync_pending(client, queue)
        sim.sync_passes += 1
        sim.retries += summary["failed"]

    if queue.get_queue_size():
        sim.violations.append(f"queue not drained after {sim.sync_passes} passes")
    if store.count(config.ceremony_id) != config.n_invitees:
        sim.violations.append(
            f"store holds {store.count(config.ceremony_id)} check-ins for {config.n_invitees} invitees"
        )

    receipt = emit_receipt("simulation", {
        "tenant_id": config.ceremony_id,
        "n_invitees": config.n_invitees,
        "scans": sim.scans,
        "outcomes": sim.outcomes,
        "sync_passes": sim.sync_passes,
        "retries": sim.retries,
        "confirmed": store.count(config.ceremony_id),
        "remaining": queue.get_queue_size(),
        "violations": sim.violations,
        "elapsed_ms": (time.perf_counter() - t0) * 1000,
    })

    return sim, receipt
