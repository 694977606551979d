"""Core subpackage for gradpass primitives.

Exports receipts, errors, the data model and the constants the other
subpackages share.
"""
from .receipt import dual_hash, emit_receipt, utc_now
from .errors import (
    CheckInError,
    DuplicateCheckIn,
    MalformedResponse,
    QueueOperationFailure,
    RemoteUnavailable,
)
from .models import (
    CheckInRecord,
    Invitee,
    PendingSyncRecord,
    parse_timestamp,
    pending_key,
)
from .constants import (
    CHECKIN_SOURCES,
    DEFAULT_OPERATOR,
    QUEUE_WARN_THRESHOLD,
    STATUS_ADMITTED,
    STATUS_DUPLICATE,
    STATUS_QUEUED,
    STATUS_UNKNOWN_TICKET,
)

__all__ = [
    # Receipt primitives
    "dual_hash",
    "emit_receipt",
    "utc_now",
    # Errors
    "CheckInError",
    "DuplicateCheckIn",
    "MalformedResponse",
    "QueueOperationFailure",
    "RemoteUnavailable",
    # Model
    "CheckInRecord",
    "Invitee",
    "PendingSyncRecord",
    "parse_timestamp",
    "pending_key",
    # Constants
    "CHECKIN_SOURCES",
    "DEFAULT_OPERATOR",
    "QUEUE_WARN_THRESHOLD",
    "STATUS_ADMITTED",
    "STATUS_DUPLICATE",
    "STATUS_QUEUED",
    "STATUS_UNKNOWN_TICKET",
]
