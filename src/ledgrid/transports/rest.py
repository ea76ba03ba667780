"""
REST control client (JSON state API over HTTP).

A frame is posted to ``http://<device>/json/state`` as one segment whose
``i`` array lists every LED's color::

    {"on": true, "bri": 255,
     "seg": [{"id": 0, "start": 0, "stop": 256, "i": ["FF0000", "00FF00", ...]}]}

The per-LED entries are either six-digit hex strings or ``[r, g, b]``
triples, depending on RestPayloadFormat. Only HTTP 200 counts as success.
"""

import logging
import time
from typing import Any, Callable, Optional

import requests

from ledgrid.exceptions import TransportNotConnectedError
from ledgrid.models import Color, FailureReason, RestPayloadFormat, clamp_channel

from .gate import FrameGate
from .protocols import RgbFrame, SendResult

STATE_PATH = "/json/state"
DEFAULT_MIN_INTERVAL = 0.016
DEFAULT_TIMEOUT = 0.5
FULL_BRIGHTNESS = 255


def build_state_payload(
    rgb: RgbFrame,
    led_count: int,
    payload_format: RestPayloadFormat = RestPayloadFormat.HEX,
) -> dict[str, Any]:
    """
    Build the JSON body for one frame.

    LEDs beyond the end of rgb are sent as black.
    """
    leds: list[Any] = []
    available = len(rgb) // 3
    for i in range(led_count):
        if i < available:
            base = i * 3
            r = clamp_channel(rgb[base])
            g = clamp_channel(rgb[base + 1])
            b = clamp_channel(rgb[base + 2])
        else:
            r = g = b = 0

        if payload_format is RestPayloadFormat.HEX:
            leds.append(f"{r:02X}{g:02X}{b:02X}")
        else:
            leds.append([r, g, b])

    return {
        "on": True,
        "bri": FULL_BRIGHTNESS,
        "seg": [{"id": 0, "start": 0, "stop": led_count, "i": leds}],
    }


class RestControlClient:
    """Sends panel frames to a device's JSON state endpoint."""

    def __init__(
        self,
        address: str,
        led_count: int,
        payload_format: RestPayloadFormat = RestPayloadFormat.HEX,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            address: Host name or IP of the device
            led_count: LEDs described in every frame
            payload_format: Hex strings or RGB triples
            min_interval: Minimum seconds between frames
            timeout: HTTP timeout in seconds
            session: Session to use instead of creating one on open()
            logger: Logger to use (defaults to this module's logger)
            clock: Time source for the rate gate
        """
        self._address = address
        self.led_count = led_count
        self.payload_format = payload_format
        self.timeout = timeout
        self._log = logger or logging.getLogger(__name__)
        self._gate = FrameGate(min_interval, clock)
        self._session = session
        self._owns_session = session is None

    @property
    def address(self) -> str:
        return self._address

    @property
    def url(self) -> str:
        return f"http://{self._address}{STATE_PATH}"

    @property
    def is_open(self) -> bool:
        return self._session is not None

    def open(self) -> None:
        """Create the HTTP session if there is none."""
        if self._session is None:
            self._session = requests.Session()
            self._owns_session = True

    def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None:
            if self._owns_session:
                self._session.close()
            self._session = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def send_frame(self, rgb: RgbFrame) -> SendResult:
        """
        Post one frame, unless the previous one went out too recently.

        Raises:
            TransportNotConnectedError: If open() has not been called
        """
        self._require_session()
        if not self._gate.try_acquire():
            return SendResult.skipped_frame()

        payload = build_state_payload(rgb, self.led_count, self.payload_format)
        return self._post(payload, "frame")

    def turn_off(self) -> SendResult:
        """Switch the device off. Ignores the rate gate."""
        self._require_session()
        return self._post({"on": False}, "power off")

    def set_solid_color(self, color: Color) -> SendResult:
        """Set the first segment to one solid color."""
        self._require_session()
        return self._post({"seg": [{"col": [list(color.to_rgb_tuple())]}]}, "solid color")

    def get_state(self) -> Optional[dict[str, Any]]:
        """
        Fetch the device's current state document.

        Returns:
            The decoded JSON, or None if the request failed
        """
        session = self._require_session()
        try:
            response = session.get(self.url, timeout=self.timeout)
        except requests.RequestException as e:
            self._log.debug(f"Could not read state from {self._address}: {e}")
            return None

        if response.status_code != 200:
            self._log.debug(f"State request to {self._address} returned {response.status_code}")
            return None

        try:
            return response.json()
        except ValueError as e:
            self._log.debug(f"Invalid state JSON from {self._address}: {e}")
            return None

    def _post(self, payload: dict[str, Any], what: str) -> SendResult:
        session = self._require_session()
        try:
            response = session.post(self.url, json=payload, timeout=self.timeout)
        except requests.Timeout as e:
            self._log.error(f"Timed out sending {what} to {self._address}: {e}")
            return SendResult.failure(FailureReason.TIMEOUT, str(e))
        except requests.RequestException as e:
            self._log.error(f"Error sending {what} to {self._address}: {e}")
            return SendResult.failure(FailureReason.IO_ERROR, str(e))

        if response.status_code != 200:
            self._log.error(
                f"Failed to send {what} to {self._address}: HTTP {response.status_code}"
            )
            return SendResult.failure(FailureReason.HTTP_STATUS, f"HTTP {response.status_code}")

        return SendResult.success()

    def _require_session(self) -> requests.Session:
        if self._session is None:
            raise TransportNotConnectedError(self._address)
        return self._session
