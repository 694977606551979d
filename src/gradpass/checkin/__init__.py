"""Check-in recording for the door devices.

Usage:
    from gradpass.checkin import CheckInState, record_checkin

    state = CheckInState(ceremony_id="CER-2026")
    hydrate_state(state, client, queue)
    outcome = record_checkin(state, invitee, client, queue)
"""
from gradpass.checkin.state import CheckInState, ensure_not_checked_in, hydrate_state
from gradpass.checkin.recorder import (
    CheckInOutcome,
    find_invitee,
    handle_scan,
    record_checkin,
)

__all__ = [
    "CheckInState",
    "ensure_not_checked_in",
    "hydrate_state",
    "CheckInOutcome",
    "find_invitee",
    "handle_scan",
    "record_checkin",
]
