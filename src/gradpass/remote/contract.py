"""Server-side contract of the check-in endpoint.

validate_checkin_body mirrors the endpoint's request validation.
InMemoryCheckInStore implements the endpoint's semantics (existence check
before insert, duplicate indicator, listing) for tests, simulations and dry
runs without a hosted database.
"""
import uuid

from gradpass.core.constants import CHECKIN_SOURCES
from gradpass.core.models import CheckInRecord, parse_timestamp

REQUIRED_FIELDS = ["inviteeId", "ceremonyId", "ticketCode", "scannedAt", "source"]


def validate_checkin_body(body: dict) -> list[str]:
    """Validate a POST body.

    Returns:
        List of error messages, empty when the body is acceptable
    """
    if not isinstance(body, dict):
        return ["body must be a JSON object."]

    errors = []
    for name in REQUIRED_FIELDS:
        if not body.get(name):
            errors.append(f"{name} is required.")

    scanned_at = body.get("scannedAt")
    if scanned_at and parse_timestamp(scanned_at) is None:
        errors.append("scannedAt must be a valid date.")

    source = body.get("source")
    if source and source not in CHECKIN_SOURCES:
        errors.append("source is invalid.")

    return errors


class InMemoryCheckInStore:
    """Authoritative check-in store keyed by (ceremonyId, inviteeId)."""

    def __init__(self):
        self._records: dict[tuple[str, str], CheckInRecord] = {}

    def handle_post(self, body: dict) -> tuple[int, dict]:
        """Record a check-in; an existing one yields ok + duplicate.

        Returns:
            (HTTP status, JSON body)
        """
        errors = validate_checkin_body(body)
        if errors:
            return 400, {"error": " ".join(errors)}

        key = (body["ceremonyId"], body["inviteeId"])
        existing = self._records.get(key)
        if existing is not None:
            return 200, {"ok": True, "duplicate": True, "id": existing.id}

        record = CheckInRecord(
            id=body.get("id") or str(uuid.uuid4()),
            invitee_id=body["inviteeId"],
            ceremony_id=body["ceremonyId"],
            ticket_code=body["ticketCode"],
            scanned_at=body["scannedAt"],
            source=body["source"],
            operator=body.get("operator"),
        )
        self._records[key] = record
        return 200, {"ok": True, "duplicate": False, "id": record.id}

    def handle_get(self, ceremony_id: str | None) -> tuple[int, dict]:
        """List a ceremony's check-ins, newest scan first."""
        if not ceremony_id:
            return 400, {"error": "ceremonyId is required in the query."}

        items = [r for r in self._records.values() if r.ceremony_id == ceremony_id]
        items.sort(key=lambda r: parse_timestamp(r.scanned_at), reverse=True)
        return 200, {"ok": True, "items": [r.to_dict() for r in items]}

    def get(self, ceremony_id: str, invitee_id: str) -> CheckInRecord | None:
        return self._records.get((ceremony_id, invitee_id))

    def count(self, ceremony_id: str | None = None) -> int:
        if ceremony_id is None:
            return len(self._records)
        return sum(1 for r in self._records.values() if r.ceremony_id == ceremony_id)

    def records(self) -> list[CheckInRecord]:
        return list(self._records.values())
