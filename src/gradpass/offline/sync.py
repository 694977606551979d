"""Sync pass that drains the offline queue into the check-in endpoint.

Sync process:
1. Snapshot the queue (empty -> return, no network)
2. Submit each record in queue order, one at a time
3. Confirmed -> delete; any remote failure -> mark_retry and move on
4. Record the pass summary

Records queued while a pass runs wait for the next pass. No record is ever
discarded: failures only bump retryCount.
"""
import logging
import threading
import uuid

from gradpass.core.errors import RemoteUnavailable
from gradpass.core.receipt import emit_receipt

from .queue import LocalQueue
from .reconnect import ConnectivityMonitor

logger = logging.getLogger("gradpass.offline.sync")


def sync_pending(client, queue: LocalQueue) -> dict:
    """Run one pass over the queued check-ins.

    Args:
        client: Object with submit(payload) -> SubmitResult (CheckInClient or LoopbackClient)
        queue: Local queue to drain

    Returns:
        Summary with attempted, synced, duplicates, failed, remaining

    Raises:
        QueueOperationFailure: If the queue cannot be read or updated
    """
    pending = queue.get_pending_checkins()
    if not pending:
        return {
            "success": True,
            "reason": "queue_empty",
            "attempted": 0,
            "synced": 0,
            "duplicates": 0,
            "failed": 0,
            "remaining": 0,
        }

    batch_id = str(uuid.uuid4())
    synced = 0
    duplicates = 0
    failed = 0

    for record in pending:
        try:
            result = client.submit(record.to_submission())
        except RemoteUnavailable as e:
            logger.warning("check-in %s not synced: %s", record.id, e)
            updated = queue.mark_retry(record.id)
            failed += 1
            emit_receipt("sync_retry", {
                "tenant_id": record.ceremony_id,
                "batch_id": batch_id,
                "pending_id": record.id,
                "retry_count": updated.retry_count if updated else None,
                "status": getattr(e, "status", None),
                "reason": str(e),
            })
            continue

        queue.delete_pending_checkin(record.id)
        synced += 1
        if result.duplicate:
            duplicates += 1

    remaining = queue.get_queue_size()
    summary = {
        "success": failed == 0,
        "batch_id": batch_id,
        "attempted": len(pending),
        "synced": synced,
        "duplicates": duplicates,
        "failed": failed,
        "remaining": remaining,
    }

    emit_receipt("offline_sync", summary)
    queue.record_sync(summary)

    return summary


class SyncReconciler:
    """Runs sync passes on reconnect and at start-up, one pass at a time.

    Attributes:
        client: Check-in endpoint client
        queue: Local queue to drain
        monitor: Optional connectivity event source
    """

    def __init__(self, client, queue: LocalQueue, monitor: ConnectivityMonitor | None = None):
        self.client = client
        self.queue = queue
        self.monitor = monitor
        self._in_flight = threading.Lock()
        self._unsubscribe = None

    @property
    def attached(self) -> bool:
        return self._unsubscribe is not None

    def sync_pending(self) -> dict:
        """One pass, unless another pass is already running."""
        if not self._in_flight.acquire(blocking=False):
            emit_receipt("offline_sync_skipped", {
                "reason": "pass_in_flight",
            })
            return {"success": True, "skipped": True, "reason": "pass_in_flight"}
        try:
            return sync_pending(self.client, self.queue)
        finally:
            self._in_flight.release()

    def start(self) -> dict | None:
        """Subscribe to reconnects and sync now if already online.

        Returns:
            Start-up pass summary, or None when offline
        """
        if self.monitor is None:
            return self.sync_pending()

        if self._unsubscribe is None:
            self._unsubscribe = self.monitor.subscribe(self._on_reconnect)

        # An offline -> online transition already ran the pass via the listener
        previous = self.monitor.online
        if self.monitor.check() and previous is not False:
            return self.sync_pending()
        return None

    def stop(self):
        """Deregister the reconnect listener."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_reconnect(self):
        self.sync_pending()
