"""Check-in data model.

Attributes are snake_case; to_dict()/from_dict() translate to the camelCase
shape used on the wire and in the offline queue file.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .constants import (
    DEFAULT_OPERATOR,
    QUEUE_KEY_SEPARATOR,
    ROLE_STUDENT,
    SOURCE_SCANNER,
)


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None when it is not a date."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def pending_key(ticket_code: str, scanned_at: str) -> str:
    """Queue key for a scan event: ticketCode-scannedAt."""
    return f"{ticket_code}{QUEUE_KEY_SEPARATOR}{scanned_at}"


@dataclass
class Invitee:
    """Ticket holder as resolved from the ceremony roster."""
    id: str
    name: str
    ceremony_id: str
    ticket_code: str
    role: str = ROLE_STUDENT

    @classmethod
    def from_dict(cls, data: dict) -> "Invitee":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            ceremony_id=data["ceremonyId"],
            ticket_code=data["ticketCode"],
            role=data.get("role", ROLE_STUDENT),
        )


@dataclass
class CheckInRecord:
    """Authoritative record of one admission."""
    id: str
    invitee_id: str
    ceremony_id: str
    ticket_code: str
    scanned_at: str
    source: str = SOURCE_SCANNER
    operator: str | None = DEFAULT_OPERATOR

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "inviteeId": self.invitee_id,
            "ceremonyId": self.ceremony_id,
            "ticketCode": self.ticket_code,
            "scannedAt": self.scanned_at,
            "source": self.source,
            "operator": self.operator,
        }

    def to_payload(self) -> dict:
        """Queue payload: the record without its client id."""
        payload = self.to_dict()
        del payload["id"]
        return payload

    @classmethod
    def from_dict(cls, data: dict) -> "CheckInRecord":
        return cls(
            id=data["id"],
            invitee_id=data["inviteeId"],
            ceremony_id=data["ceremonyId"],
            ticket_code=data["ticketCode"],
            scanned_at=data["scannedAt"],
            source=data.get("source") or SOURCE_SCANNER,
            operator=data.get("operator"),
        )


@dataclass
class PendingSyncRecord:
    """Check-in payload waiting in the offline queue.

    The id is derived from ticket code and scan time, so re-queuing the same
    scan event overwrites rather than duplicates.
    """
    invitee_id: str
    ceremony_id: str
    ticket_code: str
    scanned_at: str
    source: str = SOURCE_SCANNER
    operator: str | None = None
    retry_count: int = 0
    last_tried_at: str | None = None
    id: str = field(default="")

    def __post_init__(self):
        if not self.id:
            self.id = pending_key(self.ticket_code, self.scanned_at)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "inviteeId": self.invitee_id,
            "ceremonyId": self.ceremony_id,
            "ticketCode": self.ticket_code,
            "scannedAt": self.scanned_at,
            "source": self.source,
            "operator": self.operator,
            "retryCount": self.retry_count,
        }
        if self.last_tried_at is not None:
            data["lastTriedAt"] = self.last_tried_at
        return data

    def to_submission(self) -> dict:
        """Body for the check-in endpoint; the queue key doubles as idempotency key."""
        data = self.to_dict()
        data.pop("retryCount")
        data.pop("lastTriedAt", None)
        return data

    @classmethod
    def from_payload(cls, payload: dict) -> "PendingSyncRecord":
        """Fresh queue entry from a check-in payload (retry count reset)."""
        return cls(
            invitee_id=payload["inviteeId"],
            ceremony_id=payload["ceremonyId"],
            ticket_code=payload["ticketCode"],
            scanned_at=payload["scannedAt"],
            source=payload.get("source") or SOURCE_SCANNER,
            operator=payload.get("operator"),
        )

    @classmethod
    def from_dict(cls, data: dict) -> "PendingSyncRecord":
        return cls(
            id=data["id"],
            invitee_id=data["inviteeId"],
            ceremony_id=data["ceremonyId"],
            ticket_code=data["ticketCode"],
            scanned_at=data["scannedAt"],
            source=data.get("source") or SOURCE_SCANNER,
            operator=data.get("operator"),
            retry_count=int(data.get("retryCount", 0)),
            last_tried_at=data.get("lastTriedAt"),
        )
