"""Connectivity detection and reconnect notification.

The sync core only needs to know "connectivity came back". ConnectivityMonitor
turns any reachability probe into that event by polling it and calling its
listeners on each offline -> online transition.
"""
import socket
import time
from typing import Callable
from urllib.parse import urlsplit

from gradpass.config import remote as remote_config
from gradpass.core.constants import PROBE_TIMEOUT_SECONDS
from gradpass.core.receipt import emit_receipt


def is_connected(
    host: str,
    port: int,
    timeout: float = PROBE_TIMEOUT_SECONDS
) -> bool:
    """Check if a TCP endpoint is reachable.

    Args:
        host: Endpoint host
        port: Endpoint port
        timeout: Connection timeout in seconds

    Returns:
        True if a connection could be opened
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(timeout)
        result = sock.connect_ex((host, port))
        sock.close()
        return result == 0
    except (socket.error, OSError):
        return False


def endpoint_probe(
    url: str | None = None,
    timeout: float = PROBE_TIMEOUT_SECONDS
) -> Callable[[], bool]:
    """Build a probe that checks TCP reachability of the check-in endpoint."""
    parts = urlsplit(url or remote_config.CHECKINS_URL)
    host = parts.hostname or "localhost"
    port = parts.port or (443 if parts.scheme == "https" else 80)

    def probe() -> bool:
        return is_connected(host, port, timeout)

    return probe


class ConnectivityMonitor:
    """Polls a probe and notifies listeners when connectivity returns.

    Listeners run on the polling thread, one after another. `online` is None
    until the first check.
    """

    def __init__(
        self,
        probe: Callable[[], bool],
        interval: float | None = None,
    ):
        self.probe = probe
        self.interval = interval if interval is not None else remote_config.PROBE_INTERVAL_SECONDS
        self.online: bool | None = None
        self._listeners: list[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register an on-reconnect listener.

        Returns:
            Function that removes the listener; safe to call more than once
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def check(self) -> bool:
        """Probe once, firing listeners on an offline -> online transition."""
        online = bool(self.probe())
        previous = self.online
        self.online = online

        if online and previous is False:
            emit_receipt("reconnection", {
                "status": "online",
                "listener_count": len(self._listeners),
            })
            for listener in list(self._listeners):
                listener()
        elif not online and previous is not False:
            emit_receipt("connectivity_lost", {
                "status": "offline",
            })

        return online

    def watch(
        self,
        max_polls: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> int:
        """Poll until max_polls is reached (forever when None).

        Returns:
            Number of polls performed
        """
        polls = 0
        while max_polls is None or polls < max_polls:
            self.check()
            polls += 1
            if max_polls is None or polls < max_polls:
                sleep(self.interval)
        return polls
