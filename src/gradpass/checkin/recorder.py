"""Check-in Recorder: one admission per scan, whatever the network does.

record_checkin flow:
1. Duplicate check against the ceremony state (no write on duplicate)
2. Build the record and append it to state (optimistic)
3. One remote write; a server-side duplicate counts as success
4. Any remote failure -> offline queue, reported as "queued"

Queue failures are not absorbed: the admission may be lost, so the operator
has to see the error.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Iterable

from gradpass.config import remote as remote_config
from gradpass.core.constants import (
    CHECKIN_SOURCES,
    ROLE_STUDENT,
    SOURCE_SCANNER,
    STATUS_ADMITTED,
    STATUS_DUPLICATE,
    STATUS_QUEUED,
    STATUS_UNKNOWN_TICKET,
)
from gradpass.core.errors import DuplicateCheckIn, QueueOperationFailure, RemoteUnavailable
from gradpass.core.models import CheckInRecord, Invitee
from gradpass.core.receipt import emit_receipt, utc_now
from gradpass.offline.queue import LocalQueue

from .state import CheckInState, ensure_not_checked_in

logger = logging.getLogger("gradpass.checkin")


@dataclass
class CheckInOutcome:
    """What the operator is told after a scan."""
    status: str  # admitted, duplicate, queued, unknown_ticket
    message: str
    record: CheckInRecord | None = None
    remote_duplicate: bool = False
    remote_id: str | None = None
    pending_id: str | None = None

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "message": self.message,
            "record": self.record.to_dict() if self.record else None,
            "remote_duplicate": self.remote_duplicate,
            "remote_id": self.remote_id,
            "pending_id": self.pending_id,
        }


def _role_label(role: str) -> str:
    return "Student" if role == ROLE_STUDENT else "Guest"


def record_checkin(
    state: CheckInState,
    invitee: Invitee,
    client,
    queue: LocalQueue,
    source: str = SOURCE_SCANNER,
    operator: str | None = None,
) -> CheckInOutcome:
    """Record the admission of an invitee.

    Args:
        state: Ceremony check-in state (mutated: one append on success paths)
        invitee: Ticket holder being admitted
        client: Object with submit(payload) -> SubmitResult
        queue: Offline queue used when the remote write fails
        source: "scanner" or "manual"
        operator: Staff/device label (defaults to GRADPASS_OPERATOR)

    Returns:
        CheckInOutcome with status admitted, duplicate or queued

    Raises:
        ValueError: Unknown source or invitee from another ceremony
        QueueOperationFailure: Remote write failed and the queue is unusable
    """
    if source not in CHECKIN_SOURCES:
        raise ValueError(f"unknown check-in source: {source}")
    if invitee.ceremony_id != state.ceremony_id:
        raise ValueError(
            f"invitee {invitee.id} belongs to ceremony {invitee.ceremony_id}, not {state.ceremony_id}"
        )

    try:
        ensure_not_checked_in(state, invitee)
    except DuplicateCheckIn as e:
        emit_receipt("checkin_duplicate", {
            "tenant_id": state.ceremony_id,
            "invitee_id": invitee.id,
            "ticket_code": invitee.ticket_code,
        })
        return CheckInOutcome(status=STATUS_DUPLICATE, message=str(e))

    record = CheckInRecord(
        id=str(uuid.uuid4()),
        invitee_id=invitee.id,
        ceremony_id=invitee.ceremony_id,
        ticket_code=invitee.ticket_code,
        scanned_at=utc_now(),
        source=source,
        operator=operator or remote_config.OPERATOR,
    )
    state.append(record)

    try:
        result = client.submit(record.to_dict())
    except RemoteUnavailable as e:
        logger.warning("check-in for %s not confirmed, queuing: %s", invitee.id, e)
        try:
            pending = queue.queue_checkin(record.to_payload())
        except QueueOperationFailure:
            # Neither confirmed nor queued: the invitee must stay admittable
            state.discard(invitee.id)
            raise
        emit_receipt("checkin_queued", {
            "tenant_id": state.ceremony_id,
            "invitee_id": invitee.id,
            "pending_id": pending.id,
            "reason": str(e),
        })
        return CheckInOutcome(
            status=STATUS_QUEUED,
            message=f"{invitee.name} queued offline. Will sync automatically.",
            record=record,
            pending_id=pending.id,
        )

    emit_receipt("checkin_recorded", {
        "tenant_id": state.ceremony_id,
        "invitee_id": invitee.id,
        "record_id": record.id,
        "remote_id": result.id,
        "remote_duplicate": result.duplicate,
        "source": source,
    })
    return CheckInOutcome(
        status=STATUS_ADMITTED,
        message=f"{invitee.name} admitted. Role: {_role_label(invitee.role)}",
        record=record,
        remote_duplicate=result.duplicate,
        remote_id=result.id,
    )


def find_invitee(
    ticket_code: str,
    invitees: Iterable[Invitee],
    ceremony_id: str,
) -> Invitee | None:
    """Invitee of this ceremony holding the ticket code, if any."""
    code = ticket_code.strip()
    for invitee in invitees:
        if invitee.ticket_code == code and invitee.ceremony_id == ceremony_id:
            return invitee
    return None


def handle_scan(
    state: CheckInState,
    ticket_code: str,
    invitees: Iterable[Invitee],
    client,
    queue: LocalQueue,
    operator: str | None = None,
) -> CheckInOutcome:
    """Resolve a scanned code and record the admission.

    A code that matches no invitee of the ceremony performs no write.
    """
    invitee = find_invitee(ticket_code, invitees, state.ceremony_id)
    if invitee is None:
        emit_receipt("checkin_unknown_ticket", {
            "tenant_id": state.ceremony_id,
            "ticket_code": ticket_code,
        })
        return CheckInOutcome(
            status=STATUS_UNKNOWN_TICKET,
            message=f"Ticket {ticket_code} does not belong to this ceremony.",
        )

    return record_checkin(state, invitee, client, queue, source=SOURCE_SCANNER, operator=operator)
