"""Error taxonomy for the check-in core.

DuplicateCheckIn and the remote errors are recoverable and are absorbed at
the Recorder/Reconciler boundary. QueueOperationFailure is the one class that
must reach the operator: never catch it silently.
"""


class CheckInError(Exception):
    """Base exception for check-in operations."""


class DuplicateCheckIn(CheckInError):
    """Invitee already has a confirmed check-in for the ceremony."""

    def __init__(self, invitee_id: str, name: str = "", ceremony_id: str = ""):
        self.invitee_id = invitee_id
        self.name = name or invitee_id
        self.ceremony_id = ceremony_id
        super().__init__(f"{self.name} already admitted")


class RemoteUnavailable(CheckInError):
    """Network failure or non-2xx response from the check-in endpoint."""

    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)


class MalformedResponse(RemoteUnavailable):
    """2xx response whose body is unparseable or not a confirmation."""


class QueueOperationFailure(CheckInError):
    """Local queue storage is unreadable or unwritable."""

    def __init__(self, operation: str, path: str, reason: str):
        self.operation = operation
        self.path = path
        self.reason = reason
        super().__init__(f"offline queue {operation} failed at {path}: {reason}")
