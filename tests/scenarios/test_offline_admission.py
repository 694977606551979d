"""Door scenarios: offline admission, double tap, cross-device duplicate.

Pass criteria:
- Offline scan is queued once and drains on reconnect
- Double tap never reaches the network twice
- A remote duplicate counts as an admission and is not queued
- Queued scans survive a restart of the device
"""
from gradpass.checkin.recorder import handle_scan, record_checkin
from gradpass.checkin.state import CheckInState, hydrate_state
from gradpass.core.constants import STATUS_ADMITTED, STATUS_DUPLICATE, STATUS_QUEUED
from gradpass.offline.queue import LocalQueue
from gradpass.offline.reconnect import ConnectivityMonitor
from gradpass.offline.sync import SyncReconciler


class Network:
    """Switchable link shared by the loopback client and the probe."""

    def __init__(self, client):
        self.client = client

    def up(self):
        self.client.online = True

    def down(self):
        self.client.online = False

    def probe(self) -> bool:
        return self.client.online


class TestOfflineAdmission:
    """Invitee A holds T-1 and is scanned while offline."""

    def test_offline_scan_drains_on_reconnect(self, state, client, store, queue, make_invitee):
        """OFFLINE: one queued record, synced by the reconnect event."""
        network = Network(client)
        monitor = ConnectivityMonitor(network.probe, interval=0)
        reconciler = SyncReconciler(client, queue, monitor)

        network.down()
        assert reconciler.start() is None
        assert monitor.online is False

        outcome = handle_scan(state, "T-1", [make_invitee(1, name="A")], client, queue)

        assert outcome.status == STATUS_QUEUED
        pending = queue.get_pending_checkins()
        assert len(pending) == 1
        assert pending[0].retry_count == 0

        network.up()
        monitor.check()

        assert queue.get_queue_size() == 0
        assert store.count() == 1
        assert store.get(state.ceremony_id, "inv-1").ticket_code == "T-1"
        reconciler.stop()

    def test_failed_sync_keeps_record_for_next_reconnect(self, state, client, store, queue, make_invitee):
        """OFFLINE: a flaky first sync only bumps retryCount."""
        network = Network(client)
        monitor = ConnectivityMonitor(network.probe, interval=0)
        reconciler = SyncReconciler(client, queue, monitor)
        reconciler.start()

        network.down()
        monitor.check()
        record_checkin(state, make_invitee(1), client, queue)

        client.fail_next(1)
        network.up()
        monitor.check()

        assert queue.get_pending_checkins()[0].retry_count == 1
        assert store.count() == 0

        network.down()
        monitor.check()
        network.up()
        monitor.check()

        assert queue.get_queue_size() == 0
        assert store.count() == 1


class TestDoubleTap:
    """Invitee B holds T-2 and is scanned twice in quick succession."""

    def test_second_tap_is_local_duplicate(self, state, client, store, queue, make_invitee):
        """DOUBLE TAP: one remote write, second scan rejected locally."""
        invitees = [make_invitee(2, name="B")]

        first = handle_scan(state, "T-2", invitees, client, queue)
        second = handle_scan(state, "T-2", invitees, client, queue)

        assert first.status == STATUS_ADMITTED
        assert second.status == STATUS_DUPLICATE
        assert second.message == "B already admitted"
        assert len(client.calls) == 1
        assert store.count() == 1
        assert queue.get_queue_size() == 0


class TestRemoteDuplicate:
    """Invitee C was admitted on another device."""

    def test_remote_duplicate_is_admission(self, state, client, store, queue, make_invitee, make_payload):
        """CROSS DEVICE: duplicate:true is success, nothing queued."""
        store.handle_post(make_payload(3))

        outcome = record_checkin(state, make_invitee(3, name="C"), client, queue)

        assert outcome.status == STATUS_ADMITTED
        assert outcome.remote_duplicate is True
        assert outcome.remote_id == store.get(state.ceremony_id, "inv-3").id
        assert queue.get_queue_size() == 0
        assert state.has("inv-3")


class TestRestart:
    """Device restarts with scans still queued."""

    def test_queue_survives_restart(self, tmp_path, client, store, make_invitee):
        """RESTART: a fresh process sees the queue, knows the invitee, and drains it."""
        queue_dir = tmp_path / "door-1"
        first_boot = LocalQueue(queue_dir)
        client.online = False
        record_checkin(CheckInState("CER-2026"), make_invitee(1), client, first_boot)

        second_boot = LocalQueue(queue_dir)
        state = CheckInState("CER-2026")
        summary = hydrate_state(state, client, second_boot)

        assert summary["queued_records"] == 1
        assert record_checkin(state, make_invitee(1), client, second_boot).status == STATUS_DUPLICATE

        client.online = True
        result = SyncReconciler(client, second_boot).start()

        assert result["synced"] == 1
        assert second_boot.get_queue_size() == 0
        assert store.count() == 1
