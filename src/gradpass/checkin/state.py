"""Per-ceremony check-in state.

The set of admitted invitees lives in an explicit object handed to the
Recorder, so the duplicate check is a pure function of (state, invitee).
"""
import logging
from dataclasses import dataclass, field

from gradpass.core.constants import HYDRATED_OPERATOR
from gradpass.core.errors import DuplicateCheckIn, RemoteUnavailable
from gradpass.core.models import CheckInRecord, Invitee
from gradpass.core.receipt import emit_receipt
from gradpass.offline.queue import LocalQueue

logger = logging.getLogger("gradpass.checkin")


@dataclass
class CheckInState:
    """Admissions known to this device for one ceremony.

    Holds server-confirmed records plus optimistic local ones.
    """
    ceremony_id: str
    records: list[CheckInRecord] = field(default_factory=list)
    _invitee_ids: set[str] = field(default_factory=set, init=False, repr=False)

    def __post_init__(self):
        initial, self.records = self.records, []
        for record in initial:
            self.append(record)

    @property
    def checked_in_ids(self) -> frozenset[str]:
        return frozenset(self._invitee_ids)

    def has(self, invitee_id: str) -> bool:
        return invitee_id in self._invitee_ids

    def append(self, record: CheckInRecord) -> bool:
        """Add a record; ignored if its invitee is already admitted.

        Returns:
            True if the record was added

        Raises:
            ValueError: If the record belongs to another ceremony
        """
        if record.ceremony_id != self.ceremony_id:
            raise ValueError(
                f"record for ceremony {record.ceremony_id} in state for {self.ceremony_id}"
            )
        if record.invitee_id in self._invitee_ids:
            return False
        self.records.append(record)
        self._invitee_ids.add(record.invitee_id)
        return True

    def clear(self):
        self.records = []
        self._invitee_ids = set()

    def discard(self, invitee_id: str) -> bool:
        """Drop the invitee's record, if any.

        Returns:
            True if a record was removed
        """
        if invitee_id not in self._invitee_ids:
            return False
        self.records = [r for r in self.records if r.invitee_id != invitee_id]
        self._invitee_ids.discard(invitee_id)
        return True

    def merge(self, records: list[CheckInRecord]) -> int:
        """Add records for invitees not yet known; others are skipped.

        Returns:
            Number of records added
        """
        added = 0
        for record in records:
            if record.ceremony_id == self.ceremony_id and self.append(record):
                added += 1
        return added


def ensure_not_checked_in(state: CheckInState, invitee: Invitee):
    """Precondition for recording an admission.

    Raises:
        DuplicateCheckIn: If the invitee is already admitted in this state
    """
    if state.has(invitee.id):
        raise DuplicateCheckIn(invitee.id, invitee.name, state.ceremony_id)


def hydrate_state(state: CheckInState, client, queue: LocalQueue | None = None) -> dict:
    """Load confirmed check-ins from the listing endpoint into state.

    Server rows win for invitees they cover; optimistic local records for
    other invitees are kept. Check-ins still waiting in the offline queue
    also count as admitted, so a restarted device cannot record them twice.
    When the endpoint is unreachable the state keeps what it has.

    Returns:
        Counts of records merged from the server and from the queue
    """
    remote_added = 0
    remote_ok = True
    try:
        server_records = client.list_checkins(state.ceremony_id)
    except RemoteUnavailable as e:
        logger.warning("could not load check-ins for %s: %s", state.ceremony_id, e)
        remote_ok = False
    else:
        for record in server_records:
            if record.operator is None:
                record.operator = HYDRATED_OPERATOR
        server_ids = {r.invitee_id for r in server_records}
        local_only = [r for r in state.records if r.invitee_id not in server_ids]
        state.clear()
        remote_added = state.merge(server_records)
        state.merge(local_only)

    queued_added = 0
    if queue is not None:
        queued = [
            CheckInRecord(
                id=pending.id,
                invitee_id=pending.invitee_id,
                ceremony_id=pending.ceremony_id,
                ticket_code=pending.ticket_code,
                scanned_at=pending.scanned_at,
                source=pending.source,
                operator=pending.operator,
            )
            for pending in queue.get_pending_checkins()
            if pending.ceremony_id == state.ceremony_id
        ]
        queued_added = state.merge(queued)

    summary = {
        "tenant_id": state.ceremony_id,
        "remote_ok": remote_ok,
        "remote_records": remote_added,
        "queued_records": queued_added,
        "checked_in": len(state.records),
    }
    emit_receipt("checkin_hydrate", summary)
    return summary
