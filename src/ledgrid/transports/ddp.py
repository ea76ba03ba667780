"""
Pixel-streaming client (DDP over UDP).

Packet Layout
=============

Every packet is a 10-byte header followed by raw RGB bytes::

    offset  size  field
    ------  ----  -----------------------------------------------
    0       1     flags        0x40 (push) on the last packet only
    1       1     sequence     0-255, one value per frame, wraps
    2       1     data type    0x01 = RGB pixel data
    3       1     destination  0x01 = default output
    4       4     data offset  byte offset into the frame, big-endian
    8       2     data length  payload bytes in this packet, big-endian
    10      n     payload      R, G, B, R, G, B, ...

A frame longer than 480 LEDs (1440 bytes) is split into several packets.
All packets of one frame carry the same sequence number; the receiver
renders the assembled buffer when it sees the push flag.

Example: a 1000-LED frame becomes three packets with offsets 0, 1440 and
2880 and lengths 1440, 1440 and 120; only the third has the push flag.
"""

import logging
import socket
import struct
from typing import Optional, Sequence

from ledgrid.exceptions import FrameSizeError, TransportNotConnectedError
from ledgrid.models import Color, FailureReason

from .protocols import RgbFrame, SendResult

DEFAULT_PORT = 4048
MAX_LEDS_PER_PACKET = 480
HEADER_SIZE = 10

FLAG_PUSH = 0x40
DATA_TYPE_RGB = 0x01
DESTINATION_DEFAULT = 0x01

_HEADER = struct.Struct(">BBBBIH")


def encode_frame(rgb: RgbFrame, num_leds: int, sequence: int) -> list[bytes]:
    """
    Split one frame into DDP packets.

    Args:
        rgb: Flat RGB values; only the first num_leds * 3 are used
        num_leds: Number of LEDs in the frame
        sequence: Sequence number stamped on every packet

    Returns:
        Packets in transmission order
    """
    payload = _to_bytes(rgb, num_leds * 3)
    packets = []
    total_packets = (num_leds + MAX_LEDS_PER_PACKET - 1) // MAX_LEDS_PER_PACKET

    for packet_num in range(total_packets):
        start_led = packet_num * MAX_LEDS_PER_PACKET
        end_led = min(start_led + MAX_LEDS_PER_PACKET, num_leds)
        data_offset = start_led * 3
        data_length = (end_led - start_led) * 3
        is_last = packet_num == total_packets - 1

        header = _HEADER.pack(
            FLAG_PUSH if is_last else 0x00,
            sequence & 0xFF,
            DATA_TYPE_RGB,
            DESTINATION_DEFAULT,
            data_offset,
            data_length,
        )
        packets.append(header + payload[data_offset:data_offset + data_length])

    return packets


def _to_bytes(rgb: RgbFrame, count: int) -> bytes:
    if isinstance(rgb, (bytes, bytearray)):
        return bytes(rgb[:count])
    return bytes(v & 0xFF for v in rgb[:count])


class PixelStreamClient:
    """
    Streams RGB frames to one device using DDP.

    The UDP socket is opened by connect() and released by disconnect();
    sending while disconnected raises TransportNotConnectedError.
    """

    def __init__(
        self,
        address: str,
        port: int = DEFAULT_PORT,
        name: Optional[str] = None,
        led_count: int = 0,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            address: Host name or IP of the device
            port: DDP UDP port
            name: Display name used in log messages (defaults to address)
            led_count: LEDs blacked out by turn_off() when no count is given
            logger: Logger to use (defaults to this module's logger)
        """
        self._address = address
        self.port = port
        self.name = name or address
        self.led_count = led_count
        self._log = logger or logging.getLogger(__name__)
        self._socket: Optional[socket.socket] = None
        self._sequence = 0
        self._debug_logged = False

    @property
    def address(self) -> str:
        return self._address

    @property
    def sequence(self) -> int:
        """Sequence number the next frame will carry."""
        return self._sequence

    @property
    def is_connected(self) -> bool:
        return self._socket is not None

    def connect(self) -> None:
        """Open the UDP socket if it is not already open."""
        if self._socket is None:
            self._socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            self._log.debug(f"DDP socket opened for {self.name} ({self._address}:{self.port})")

    def disconnect(self) -> None:
        """Close the UDP socket if open."""
        if self._socket is not None:
            self._socket.close()
            self._socket = None
            self._log.debug(f"DDP socket closed for {self.name}")

    open = connect
    close = disconnect

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    def send_rgb(self, rgb: RgbFrame, num_leds: int) -> SendResult:
        """
        Send one frame of raw RGB data.

        Args:
            rgb: Flat RGB values laid out as [R, G, B, R, G, B, ...]
            num_leds: Number of LEDs represented in rgb

        Returns:
            SendResult; an OSError while sending yields a failed result

        Raises:
            TransportNotConnectedError: If connect() has not been called
            FrameSizeError: If rgb holds fewer than num_leds * 3 values
        """
        sock = self._socket
        if sock is None:
            raise TransportNotConnectedError(self._address)

        if len(rgb) < num_leds * 3:
            raise FrameSizeError(num_leds * 3, len(rgb), self._address)

        packets = encode_frame(rgb, num_leds, self._sequence)
        if not self._debug_logged and packets:
            self._debug_logged = True
            self._log_first_leds(packets[0])

        try:
            for packet in packets:
                sock.sendto(packet, (self._address, self.port))
        except socket.timeout as e:
            self._log.error(f"Timed out sending DDP frame to {self.name}: {e}")
            return SendResult.failure(FailureReason.TIMEOUT, str(e))
        except OSError as e:
            self._log.error(f"Failed to send DDP frame to {self.name}: {e}")
            return SendResult.failure(FailureReason.IO_ERROR, str(e))

        self._sequence = (self._sequence + 1) & 0xFF
        return SendResult.success()

    def send_frame(self, rgb: RgbFrame) -> SendResult:
        """Send a frame whose LED count is implied by its length."""
        return self.send_rgb(rgb, len(rgb) // 3)

    def send_colors(self, colors: Sequence[Color], num_leds: int) -> SendResult:
        """Send Color objects instead of raw RGB values."""
        if len(colors) < num_leds:
            raise FrameSizeError(num_leds, len(colors), self._address)
        rgb = bytearray(num_leds * 3)
        for i in range(num_leds):
            rgb[i * 3:i * 3 + 3] = colors[i].to_rgb_tuple()
        return self.send_rgb(rgb, num_leds)

    def turn_off(self, num_leds: Optional[int] = None) -> SendResult:
        """Send one all-black frame (defaults to led_count LEDs)."""
        count = self.led_count if num_leds is None else num_leds
        return self.send_rgb(bytes(count * 3), count)

    def _log_first_leds(self, packet: bytes, limit: int = 20) -> None:
        """Log the lit LEDs at the start of the first packet, once per client."""
        payload = packet[HEADER_SIZE:]
        lit = []
        for i in range(min(len(payload) // 3, limit)):
            r, g, b = payload[i * 3:i * 3 + 3]
            if r or g or b:
                lit.append(f"led={i} -> rgb({r},{g},{b})")
        self._log.debug(f"DDP debug for {self.name}: {', '.join(lit) if lit else '<none>'}")
