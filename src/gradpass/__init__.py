"""
gradpass - Offline-tolerant check-in core for graduation ceremonies

Door devices record one admission per invitee per ceremony. When the
check-in endpoint cannot confirm a write, the check-in waits in a durable
local queue and is pushed again when connectivity returns.

The rules:
    A scan is recorded at most once per invitee
    A check-in the endpoint never confirmed is never dropped
"""

__version__ = "1.0.0"

from gradpass.core.receipt import dual_hash, emit_receipt
from gradpass.core.errors import (
    CheckInError,
    DuplicateCheckIn,
    MalformedResponse,
    QueueOperationFailure,
    RemoteUnavailable,
)
from gradpass.core.models import CheckInRecord, Invitee, PendingSyncRecord
from gradpass.checkin import CheckInOutcome, CheckInState, handle_scan, hydrate_state, record_checkin
from gradpass.offline import ConnectivityMonitor, LocalQueue, SyncReconciler, sync_pending
from gradpass.remote import CheckInClient, InMemoryCheckInStore, LoopbackClient

__all__ = [
    "__version__",
    "dual_hash",
    "emit_receipt",
    "CheckInError",
    "DuplicateCheckIn",
    "MalformedResponse",
    "QueueOperationFailure",
    "RemoteUnavailable",
    "CheckInRecord",
    "Invitee",
    "PendingSyncRecord",
    "CheckInOutcome",
    "CheckInState",
    "handle_scan",
    "hydrate_state",
    "record_checkin",
    "ConnectivityMonitor",
    "LocalQueue",
    "SyncReconciler",
    "sync_pending",
    "CheckInClient",
    "InMemoryCheckInStore",
    "LoopbackClient",
]
