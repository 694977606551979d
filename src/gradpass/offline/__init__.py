"""Offline mode: durable check-in queue and reconnect sync.

Check-ins that the endpoint could not confirm are queued on disk and pushed
again when connectivity returns. A queued check-in leaves the queue only
after the endpoint confirms it.

Usage:
    from gradpass.offline import LocalQueue, SyncReconciler, ConnectivityMonitor

    queue = LocalQueue("~/.gradpass/offline")
    monitor = ConnectivityMonitor(endpoint_probe())
    reconciler = SyncReconciler(client, queue, monitor)
    reconciler.start()
    monitor.watch()
"""
from gradpass.offline.queue import LocalQueue, default_queue
from gradpass.offline.sync import SyncReconciler, sync_pending
from gradpass.offline.reconnect import (
    ConnectivityMonitor,
    endpoint_probe,
    is_connected,
)

__all__ = [
    # Queue
    "LocalQueue",
    "default_queue",
    # Sync
    "SyncReconciler",
    "sync_pending",
    # Reconnection
    "ConnectivityMonitor",
    "endpoint_probe",
    "is_connected",
]
