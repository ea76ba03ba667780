"""
Lighting-control client (Art-Net DMX over UDP).

Each panel is one universe. A frame is a single packet::

    offset  size  field
    ------  ----  -----------------------------------------------
    0       8     id           b"Art-Net\\x00"
    8       2     opcode       0x00 0x50 (ArtDMX)
    10      2     version      0x00 0x0E (14)
    12      1     sequence     0 (not used)
    13      1     physical     0
    14      2     universe     little-endian
    16      2     length       1 + 3 * led_count, big-endian
    18      1     start code   0
    19      n     LED data     3 bytes per LED in the panel's channel order

Sends are gated to one per ``min_interval`` (8 ms by default); frames
arriving sooner are dropped and reported as successful skips.
"""

import logging
import socket
import struct
import time
from typing import Callable, Optional

from ledgrid.exceptions import TransportNotConnectedError
from ledgrid.models import ChannelOrder, FailureReason

from .gate import FrameGate
from .protocols import RgbFrame, SendResult

DEFAULT_PORT = 5568
ARTNET_ID = b"Art-Net\x00"
OP_DMX = 0x5000
PROTOCOL_VERSION = 14
HEADER_SIZE = 18
DEFAULT_MIN_INTERVAL = 0.008

TURN_OFF_REPEATS = 5
TURN_OFF_DELAY = 0.05

SOCKET_TIMEOUT = 0.001
LOG_EVERY_N_PACKETS = 60


def encode_dmx_packet(
    rgb: RgbFrame,
    led_count: int,
    universe: int,
    channel_order: ChannelOrder = ChannelOrder.GBR,
) -> bytes:
    """
    Build one ArtDMX packet.

    LEDs beyond the end of rgb are left black.
    """
    data_length = 1 + led_count * 3
    header = (
        ARTNET_ID
        + struct.pack(">HH", OP_DMX >> 8, PROTOCOL_VERSION)
        + bytes((0, 0))
        + struct.pack("<H", universe & 0xFFFF)
        + struct.pack(">H", data_length & 0xFFFF)
    )

    data = bytearray(data_length)  # data[0] is the DMX start code
    offset = 1
    for i in range(min(led_count, len(rgb) // 3)):
        base = i * 3
        data[offset] = channel_order.map_channel(base, 0, rgb)
        data[offset + 1] = channel_order.map_channel(base, 1, rgb)
        data[offset + 2] = channel_order.map_channel(base, 2, rgb)
        offset += 3

    return header + bytes(data)


class LightingControlClient:
    """Sends panel frames to one universe on an Art-Net device."""

    def __init__(
        self,
        address: str,
        led_count: int,
        universe: int,
        channel_order: ChannelOrder = ChannelOrder.GBR,
        port: int = DEFAULT_PORT,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            address: Host name or IP of the device
            led_count: LEDs carried in every packet
            universe: Art-Net universe of this panel
            channel_order: Byte order the device expects
            port: Art-Net UDP port
            min_interval: Minimum seconds between frames
            logger: Logger to use (defaults to this module's logger)
            clock: Time source for the rate gate
            sleep: Delay function used between turn-off packets
        """
        self._address = address
        self.led_count = led_count
        self.universe = universe
        self.channel_order = channel_order
        self.port = port
        self._log = logger or logging.getLogger(__name__)
        self._gate = FrameGate(min_interval, clock)
        self._sleep = sleep
        self._socket: Optional[socket.socket] = None
        self._send_count = 0

    @property
    def address(self) -> str:
        return self._address

    @property
    def send_count(self) -> int:
        """Packets sent so far (frames, not turn-off packets)."""
        return self._send_count

    @property
    def is_open(self) -> bool:
        return self._socket is not None

    def open(self) -> None:
        """Open the UDP socket if it is not already open."""
        if self._socket is not None:
            return
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.settimeout(SOCKET_TIMEOUT)
        self._socket = sock
        self._log.debug(
            f"Art-Net client ready for {self._address} "
            f"(universe {self.universe}, {self.channel_order.description})"
        )

    def close(self) -> None:
        """Close the UDP socket if open."""
        if self._socket is not None:
            self._socket.close()
            self._socket = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def send_frame(self, rgb: RgbFrame) -> SendResult:
        """
        Send one frame, unless the previous one went out too recently.

        Raises:
            TransportNotConnectedError: If open() has not been called
        """
        sock = self._require_socket()
        if not self._gate.try_acquire():
            return SendResult.skipped_frame()

        packet = encode_dmx_packet(rgb, self.led_count, self.universe, self.channel_order)
        try:
            sock.sendto(packet, (self._address, self.port))
        except OSError as e:
            self._log.error(
                f"Error sending Art-Net data to {self._address} (universe {self.universe}): {e}"
            )
            return SendResult.failure(FailureReason.IO_ERROR, str(e))

        self._send_count += 1
        if self._send_count % LOG_EVERY_N_PACKETS == 0:
            self._log.debug(
                f"Sent {self._send_count} packets to {self._address} (universe {self.universe})"
            )
        return SendResult.success()

    # The device reverts to its previous effect if the stream just stops,
    # so black frames are repeated to make the blackout stick.
    def turn_off(self) -> SendResult:
        """Send several all-black frames, ignoring the rate gate."""
        sock = self._require_socket()
        packet = encode_dmx_packet(b"", self.led_count, self.universe, self.channel_order)
        try:
            for _ in range(TURN_OFF_REPEATS):
                sock.sendto(packet, (self._address, self.port))
                self._sleep(TURN_OFF_DELAY)
        except OSError as e:
            self._log.error(f"Error turning off {self._address} via Art-Net: {e}")
            return SendResult.failure(FailureReason.IO_ERROR, str(e))
        return SendResult.success()

    def _require_socket(self) -> socket.socket:
        if self._socket is None:
            raise TransportNotConnectedError(self._address)
        return self._socket
