"""Offline mode CLI commands."""
import sys

import click

from gradpass.config import remote as remote_config
from gradpass.core.errors import QueueOperationFailure
from gradpass.offline.queue import default_queue
from gradpass.offline.reconnect import ConnectivityMonitor, endpoint_probe
from gradpass.offline.sync import SyncReconciler
from gradpass.remote.client import CheckInClient

from .output import print_error, print_json, print_success, table


@click.group()
def offline():
    """Offline queue and sync commands."""
    pass


@offline.command()
def status():
    """Show offline queue status."""
    try:
        sync_status = default_queue().get_sync_status()
    except QueueOperationFailure as e:
        print_error(f"Status check failed: {e}")
        sys.exit(2)
    sync_status["connected"] = endpoint_probe()()
    sync_status["endpoint"] = remote_config.CHECKINS_URL
    print_json(sync_status)


@offline.command('queue')
@click.option('--limit', '-n', default=10, help='Number of check-ins to show')
def show_queue(limit: int):
    """List pending check-ins in queue."""
    try:
        queue = default_queue()
        records = queue.peek(limit)
        size = queue.get_queue_size()
    except QueueOperationFailure as e:
        print_error(f"Queue list failed: {e}")
        sys.exit(2)

    if not records:
        click.echo("Queue is empty")
        return

    click.echo(f"Showing {len(records)} of {size} pending check-ins:\n")
    table(
        ["Ticket", "Invitee", "Ceremony", "Scanned at", "Retries", "Last tried"],
        [[r.ticket_code, r.invitee_id, r.ceremony_id, r.scanned_at, r.retry_count, r.last_tried_at or "-"]
         for r in records],
    )


@offline.command('sync')
@click.option('--force', is_flag=True, help='Force sync attempt even if not connected')
def do_sync(force: bool):
    """Push queued check-ins to the check-in endpoint."""
    if not endpoint_probe()() and not force:
        print_error("Not connected. Use --force to attempt anyway.")
        sys.exit(1)

    try:
        result = SyncReconciler(CheckInClient(), default_queue()).sync_pending()
    except QueueOperationFailure as e:
        print_error(f"Sync failed: {e}")
        sys.exit(2)

    if result.get("success"):
        print_success(f"Synced {result.get('synced', 0)} check-ins")
    else:
        print_error(f"{result['failed']} check-ins still pending, will retry")
    print_json(result)


@offline.command()
def connected():
    """Check if the check-in endpoint is reachable."""
    is_connected = endpoint_probe()()
    print_json({
        "connected": is_connected,
        "status": "online" if is_connected else "offline",
        "endpoint": remote_config.CHECKINS_URL,
    })


@offline.command()
@click.option('--interval', type=float, default=None, help='Seconds between probes')
@click.option('--max-polls', type=int, default=None, help='Stop after N probes')
def watch(interval: float | None, max_polls: int | None):
    """Sync now if online, then sync on every reconnect."""
    monitor = ConnectivityMonitor(endpoint_probe(), interval=interval)
    reconciler = SyncReconciler(CheckInClient(), default_queue(), monitor)

    try:
        reconciler.start()
        polls = monitor.watch(max_polls=max_polls)
        click.echo(f"Stopped after {polls} probes")
    except KeyboardInterrupt:
        click.echo("Stopped")
    except QueueOperationFailure as e:
        print_error(f"Sync stopped: {e}")
        sys.exit(2)
    finally:
        reconciler.stop()
