"""Background polling of device power state."""

import logging
import threading
from typing import Callable, Iterable, Optional

import requests

from ledgrid.models import AppConfig

STATE_PATH = "/json/state"
POLL_TIMEOUT = (0.8, 1.2)

PowerCallback = Callable[[str, bool], None]


def fetch_power_state(
    session: requests.Session,
    address: str,
    timeout: tuple[float, float] = POLL_TIMEOUT,
) -> Optional[bool]:
    """
    Read the ``on`` flag from a device's state document.

    Returns:
        True or False, or None if the device could not be read
    """
    try:
        response = session.get(f"http://{address}{STATE_PATH}", timeout=timeout)
    except requests.RequestException:
        return None
    if response.status_code != 200:
        return None
    try:
        state = response.json()
    except ValueError:
        return None
    if not isinstance(state, dict):
        return None
    return bool(state.get("on", True))


class PowerStateMonitor:
    """
    Keeps a map of device address to power state, refreshed on a daemon thread.

    A device that cannot be reached is recorded as off; a state document
    without an ``on`` flag counts as on. When a device's state changes
    the callback (if any) is invoked from the polling thread.

    Example:
        ```python
        with PowerStateMonitor(["192.168.1.50"], on_change=print) as monitor:
            ...
            if monitor.is_on("192.168.1.50"):
                ...
        ```
    """

    def __init__(
        self,
        addresses: Iterable[str],
        interval: Optional[float] = None,
        on_change: Optional[PowerCallback] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
        config: Optional[AppConfig] = None,
    ):
        """
        Args:
            addresses: Devices to poll
            interval: Seconds between polls (defaults to config.power_poll_interval)
            on_change: Called with (address, is_on) when a state changes
            session: HTTP session to use (one is created if omitted)
            logger: Logger to use (defaults to this module's logger)
            config: Application config (defaults to AppConfig())
        """
        self.addresses = list(addresses)
        self.interval = interval if interval is not None else (config or AppConfig()).power_poll_interval
        self.on_change = on_change
        self._session = session or requests.Session()
        self._owns_session = session is None
        self._log = logger or logging.getLogger(__name__)

        self._states: dict[str, bool] = {}
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def is_on(self, address: str) -> Optional[bool]:
        """Last known power state, or None if the device was never polled."""
        with self._lock:
            return self._states.get(address)

    def snapshot(self) -> dict[str, bool]:
        """Copy of every known power state."""
        with self._lock:
            return dict(self._states)

    def refresh(self) -> None:
        """Poll every device once, on the calling thread."""
        for address in self.addresses:
            is_on = fetch_power_state(self._session, address) is True
            with self._lock:
                previous = self._states.get(address)
                self._states[address] = is_on

            if previous != is_on:
                self._log.info(f"Power state of {address}: {'ON' if is_on else 'OFF'}")
                if self.on_change is not None:
                    try:
                        self.on_change(address, is_on)
                    except Exception as e:
                        self._log.error(f"Error in power state callback for {address}: {e}")

    def start(self) -> None:
        """Start polling in the background. Does nothing if already running."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="ledgrid-power-monitor", daemon=True
        )
        self._thread.start()
        self._log.debug(f"Power monitor started for {len(self.addresses)} device(s)")

    def stop(self, timeout: float = 2.0) -> None:
        """Stop polling and wait briefly for the thread to exit."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        if self._owns_session:
            self._session.close()
        self._log.debug("Power monitor stopped")

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.refresh()
            self._stop_event.wait(self.interval)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
