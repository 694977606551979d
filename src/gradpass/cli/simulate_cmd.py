"""Simulation command: flaky-network door run with invariant checks."""
import sys
import tempfile

import click

from gradpass.offline.queue import LocalQueue
from gradpass.simulation import SimConfig, run_simulation

from .output import print_error, print_json, print_success


@click.command()
@click.option('--invitees', default=50, help='Number of invitees to admit')
@click.option('--failure-rate', default=0.3, help='Probability a reachable endpoint fails')
@click.option('--offline-rate', default=0.2, help='Probability the network is down at a scan')
@click.option('--double-scan-rate', default=0.1, help='Probability of an immediate re-scan')
@click.option('--seed', default=42, help='Random seed')
def simulate(invitees: int, failure_rate: float, offline_rate: float,
             double_scan_rate: float, seed: int):
    """Run a failure-injection simulation against an in-memory store."""
    config = SimConfig(
        n_invitees=invitees,
        failure_rate=failure_rate,
        offline_rate=offline_rate,
        double_scan_rate=double_scan_rate,
        random_seed=seed,
    )

    with tempfile.TemporaryDirectory(prefix="gradpass-sim-") as queue_dir:
        sim, _ = run_simulation(config, LocalQueue(queue_dir))

    print_json({
        "scans": sim.scans,
        "outcomes": sim.outcomes,
        "sync_passes": sim.sync_passes,
        "retries": sim.retries,
        "violations": sim.violations,
    })

    if sim.violations:
        print_error(f"{len(sim.violations)} invariant violations")
        sys.exit(1)
    print_success(f"All {invitees} invitees admitted exactly once")
