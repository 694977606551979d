"""Local check-in queue for offline operation.

Uses file-based storage (no database required) to hold check-ins whose
remote write could not be confirmed. Records leave the queue only when the
sync pass gets a confirmation from the check-in endpoint.

Design constraints:
- File-based only, survives process restarts
- Keyed by ticketCode-scannedAt: re-queuing the same scan overwrites
- Every operation is one locked read-modify-write with atomic replace
- Never drops a record; a growing queue only warns
"""
import copy
import fcntl
import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path

from gradpass.config import remote as remote_config
from gradpass.core.constants import (
    QUEUE_FILE_TEMPLATE,
    QUEUE_STORAGE_VERSION,
    QUEUE_WARN_THRESHOLD,
    SYNC_STATE_FILE,
)
from gradpass.core.errors import QueueOperationFailure
from gradpass.core.models import PendingSyncRecord, parse_timestamp
from gradpass.core.receipt import emit_receipt, utc_now

logger = logging.getLogger("gradpass.offline.queue")


class LocalQueue:
    """Durable store of PendingSyncRecords backed by a JSON file.

    Attributes:
        queue_dir: Directory holding the queue and sync state files
        path: Versioned queue file (pending_v1.json)
        warn_threshold: Queue size above which enqueues raise a backpressure warning
    """

    def __init__(self, queue_dir: str | Path, warn_threshold: int = QUEUE_WARN_THRESHOLD):
        self.queue_dir = Path(queue_dir)
        self.path = self.queue_dir / QUEUE_FILE_TEMPLATE.format(version=QUEUE_STORAGE_VERSION)
        self.state_path = self.queue_dir / SYNC_STATE_FILE
        self.lock_path = self.queue_dir / ".queue.lock"
        self.warn_threshold = warn_threshold

    # ------------------------------------------------------------------
    # Queue operations
    # ------------------------------------------------------------------

    def queue_checkin(self, payload: dict) -> PendingSyncRecord:
        """Upsert a check-in payload by its derived key.

        Args:
            payload: Check-in fields (inviteeId, ceremonyId, ticketCode, scannedAt, source, operator)

        Returns:
            The stored PendingSyncRecord (retryCount 0)

        Raises:
            QueueOperationFailure: If the queue file cannot be read or written
        """
        try:
            record = PendingSyncRecord.from_payload(payload)
        except KeyError as e:
            raise self._failure("enqueue", f"payload missing field {e}") from e

        with self._transaction("enqueue") as records:
            replaced = record.id in records
            records[record.id] = record.to_dict()
            size = len(records)

        emit_receipt("offline_enqueue", {
            "tenant_id": record.ceremony_id,
            "pending_id": record.id,
            "invitee_id": record.invitee_id,
            "replaced": replaced,
            "queue_size": size,
        })

        if size > self.warn_threshold:
            logger.warning(
                "offline queue holds %d check-ins (warn threshold %d); nothing is dropped",
                size, self.warn_threshold,
            )
            emit_receipt("queue_backpressure", {
                "tenant_id": record.ceremony_id,
                "queue_size": size,
                "threshold": self.warn_threshold,
                "action": "warn",
            })

        return record

    def get_pending_checkins(self) -> list[PendingSyncRecord]:
        """All queued records in insertion order."""
        records = self._read("read")
        return [PendingSyncRecord.from_dict(r) for r in records.values()]

    def get_pending_checkin(self, pending_id: str) -> PendingSyncRecord | None:
        """Single queued record, or None if absent."""
        data = self._read("read").get(pending_id)
        return PendingSyncRecord.from_dict(data) if data else None

    def delete_pending_checkin(self, pending_id: str) -> bool:
        """Remove a confirmed record. No-op if absent.

        Returns:
            True if a record was removed
        """
        with self._transaction("delete") as records:
            removed = records.pop(pending_id, None) is not None
        return removed

    def mark_retry(self, pending_id: str) -> PendingSyncRecord | None:
        """Bump retryCount and stamp lastTriedAt. No-op if absent.

        A competing sync pass may already have deleted the record.

        Returns:
            Updated record, or None if it was not queued
        """
        with self._transaction("mark_retry") as records:
            data = records.get(pending_id)
            if data is None:
                return None
            data["retryCount"] = int(data.get("retryCount", 0)) + 1
            data["lastTriedAt"] = utc_now()
            updated = PendingSyncRecord.from_dict(data)
        return updated

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_queue_size(self) -> int:
        """Count pending check-ins."""
        return len(self._read("read"))

    def peek(self, n: int = 10) -> list[PendingSyncRecord]:
        """Oldest N queued records without removing them."""
        return self.get_pending_checkins()[:n]

    def get_sync_status(self) -> dict:
        """Pending count, oldest scan, max retries and last sync metadata."""
        pending = self.get_pending_checkins()
        state = self._load_state()
        return {
            "pending_count": len(pending),
            "oldest_scanned_at": _oldest_scan(pending),
            "max_retry_count": max((r.retry_count for r in pending), default=0),
            "last_sync_time": state.get("last_sync_time"),
            "last_sync": state.get("last_sync"),
            "queue_path": str(self.path),
            "storage_version": QUEUE_STORAGE_VERSION,
        }

    def record_sync(self, summary: dict):
        """Persist metadata about the last completed sync pass."""
        state = {
            "last_sync_time": utc_now(),
            "last_sync": summary,
        }
        self._atomic_write("record_sync", self.state_path, state)

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self, operation: str):
        """Exclusive read-modify-write over the records mapping.

        The file is only rewritten when the records changed.
        """
        try:
            self.queue_dir.mkdir(parents=True, exist_ok=True)
            lock = open(self.lock_path, "a")
        except OSError as e:
            raise self._failure(operation, str(e)) from e

        with lock:
            fcntl.flock(lock.fileno(), fcntl.LOCK_EX)
            try:
                records = self._read(operation)
                original = copy.deepcopy(records)
                yield records
                if records != original:
                    self._atomic_write(operation, self.path, {
                        "version": QUEUE_STORAGE_VERSION,
                        "records": records,
                    })
            finally:
                fcntl.flock(lock.fileno(), fcntl.LOCK_UN)

    def _read(self, operation: str) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise self._failure(operation, str(e)) from e

        if not isinstance(data, dict) or not isinstance(data.get("records"), dict):
            raise self._failure(operation, "queue file has no records mapping")
        if data.get("version") != QUEUE_STORAGE_VERSION:
            raise self._failure(operation, f"unsupported queue version {data.get('version')!r}")
        return data["records"]

    def _atomic_write(self, operation: str, path: Path, data: dict):
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w") as f:
                # Key order is queue order
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except (OSError, TypeError) as e:
            raise self._failure(operation, str(e)) from e

    def _load_state(self) -> dict:
        if not self.state_path.exists():
            return {}
        try:
            with open(self.state_path) as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise self._failure("read_state", str(e)) from e

    def _failure(self, operation: str, reason: str) -> QueueOperationFailure:
        """Log loudly and build the error; check-ins may be lost past this point."""
        logger.error("offline queue %s failed at %s: %s", operation, self.path, reason)
        emit_receipt("offline_queue_failure", {
            "operation": operation,
            "queue_path": str(self.path),
            "reason": reason,
        })
        return QueueOperationFailure(operation, str(self.path), reason)


def default_queue() -> LocalQueue:
    """Queue in the configured GRADPASS_QUEUE_DIR."""
    return LocalQueue(remote_config.QUEUE_DIR)


def _oldest_scan(pending: list[PendingSyncRecord]) -> str | None:
    """Earliest scannedAt by instant, not by string order."""
    dated = [(parse_timestamp(r.scanned_at), r.scanned_at) for r in pending]
    dated = [d for d in dated if d[0] is not None]
    if not dated:
        return None
    return min(dated)[1]
