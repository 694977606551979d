"""Failure-injection simulation of the offline check-in flow."""
from gradpass.simulation.run import SimConfig, SimState, build_invitees, run_simulation

__all__ = [
    "SimConfig",
    "SimState",
    "build_invitees",
    "run_simulation",
]
