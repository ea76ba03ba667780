"""Tests for the DDP pixel-stream client."""

import socket
import struct
from unittest.mock import Mock, patch

import pytest

from ledgrid.exceptions import FrameSizeError, TransportNotConnectedError
from ledgrid.models import Color, FailureReason
from ledgrid.transports import DeviceTransport, PixelStreamClient, encode_frame
from ledgrid.transports.ddp import FLAG_PUSH, HEADER_SIZE


def header(packet: bytes):
    """Unpack (flags, sequence, data type, destination, offset, length)."""
    return struct.unpack(">BBBBIH", packet[:HEADER_SIZE])


@pytest.mark.unit
class TestEncodeFrame:
    """Test DDP packet encoding."""

    @pytest.mark.parametrize("num_leds,expected", [(1, 1), (256, 1), (480, 1), (481, 2), (1000, 3)])
    def test_packet_count(self, num_leds, expected):
        """A frame needs ceil(N / 480) packets."""
        packets = encode_frame(bytes(num_leds * 3), num_leds, 0)
        assert len(packets) == expected

    def test_push_flag_only_on_last_packet(self):
        """Only the final packet carries the push flag."""
        packets = encode_frame(bytes(1000 * 3), 1000, 9)
        flags = [header(p)[0] for p in packets]
        assert flags == [0x00, 0x00, FLAG_PUSH]

    def test_offsets_and_lengths(self):
        """Offsets are cumulative byte offsets; lengths cover the remainder."""
        packets = encode_frame(bytes(1000 * 3), 1000, 0)
        assert [header(p)[4] for p in packets] == [0, 1440, 2880]
        assert [header(p)[5] for p in packets] == [1440, 1440, 120]
        assert [len(p) for p in packets] == [1450, 1450, 130]

    def test_shared_sequence_and_constants(self):
        """Every packet of a frame has the same sequence, type 1 and destination 1."""
        for flags, seq, data_type, dest, _, _ in map(header, encode_frame(bytes(3000), 1000, 77)):
            assert seq == 77
            assert data_type == 1
            assert dest == 1

    def test_256_led_frame_is_one_packet(self):
        """A 16x16 panel fits one packet with a 768-byte payload."""
        rgb = bytes(range(256)) * 3
        (packet,) = encode_frame(rgb, 256, 0)
        flags, _, _, _, offset, length = header(packet)
        assert flags == FLAG_PUSH
        assert offset == 0
        assert length == 768
        assert packet[HEADER_SIZE:] == rgb

    def test_payload_keeps_input_order(self):
        """RGB triples are sent as given."""
        (packet,) = encode_frame([1, 2, 3, 4, 5, 6], 2, 0)
        assert packet[HEADER_SIZE:] == bytes([1, 2, 3, 4, 5, 6])


@pytest.fixture
def mock_socket():
    """Patch socket creation in the DDP module."""
    with patch("ledgrid.transports.ddp.socket.socket") as socket_cls:
        sock = Mock()
        socket_cls.return_value = sock
        yield sock


@pytest.mark.unit
class TestPixelStreamClient:
    """Test PixelStreamClient send behaviour."""

    def test_is_device_transport(self):
        """The client satisfies the transport protocol."""
        assert isinstance(PixelStreamClient("10.0.0.1"), DeviceTransport)

    def test_send_requires_connection(self):
        """Sending before connect() raises immediately."""
        client = PixelStreamClient("10.0.0.1")
        with pytest.raises(TransportNotConnectedError):
            client.send_rgb(bytes(3), 1)

    def test_short_frame_rejected(self, mock_socket):
        """A frame with fewer than num_leds * 3 values raises FrameSizeError."""
        with PixelStreamClient("10.0.0.1") as client:
            with pytest.raises(FrameSizeError) as exc_info:
                client.send_rgb(bytes(5), 2)
        assert exc_info.value.required == 6
        mock_socket.sendto.assert_not_called()

    def test_sends_to_address_and_port(self, mock_socket):
        """Packets go to the device on the configured port."""
        with PixelStreamClient("10.0.0.1", port=4049) as client:
            result = client.send_rgb(bytes(1000 * 3), 1000)

        assert result.ok
        assert mock_socket.sendto.call_count == 3
        for call in mock_socket.sendto.call_args_list:
            assert call.args[1] == ("10.0.0.1", 4049)

    def test_sequence_increments_per_frame_and_wraps(self, mock_socket):
        """Each frame gets the next sequence number, modulo 256."""
        client = PixelStreamClient("10.0.0.1")
        client.connect()
        for _ in range(257):
            client.send_rgb(bytes(3), 1)

        sequences = [header(call.args[0])[1] for call in mock_socket.sendto.call_args_list]
        assert sequences[:3] == [0, 1, 2]
        assert sequences[255] == 255
        assert sequences[256] == 0
        assert client.sequence == 1

    def test_os_error_returns_failure(self, mock_socket):
        """A socket error is reported, not raised, and the sequence does not advance."""
        mock_socket.sendto.side_effect = OSError("network unreachable")
        with PixelStreamClient("10.0.0.1") as client:
            result = client.send_rgb(bytes(3), 1)
            assert client.sequence == 0

        assert not result
        assert result.reason is FailureReason.IO_ERROR
        assert "unreachable" in result.detail

    def test_timeout_returns_failure(self, mock_socket):
        """A socket timeout is reported as TIMEOUT."""
        mock_socket.sendto.side_effect = socket.timeout("timed out")
        with PixelStreamClient("10.0.0.1") as client:
            result = client.send_rgb(bytes(3), 1)
        assert result.reason is FailureReason.TIMEOUT

    def test_disconnect_closes_socket(self, mock_socket):
        """disconnect() closes and forgets the socket."""
        client = PixelStreamClient("10.0.0.1")
        client.connect()
        assert client.is_connected
        client.disconnect()
        mock_socket.close.assert_called_once()
        assert not client.is_connected
        with pytest.raises(TransportNotConnectedError):
            client.send_frame(bytes(3))

    def test_send_frame_infers_led_count(self, mock_socket):
        """send_frame uses len(rgb) // 3 LEDs."""
        with PixelStreamClient("10.0.0.1") as client:
            client.send_frame(bytes(12))
        packet = mock_socket.sendto.call_args.args[0]
        assert header(packet)[5] == 12

    def test_send_colors(self, mock_socket):
        """Color objects are flattened to RGB."""
        with PixelStreamClient("10.0.0.1") as client:
            client.send_colors([Color(r=1, g=2, b=3), Color(r=4, g=5, b=6)], 2)
        packet = mock_socket.sendto.call_args.args[0]
        assert packet[HEADER_SIZE:] == bytes([1, 2, 3, 4, 5, 6])

    def test_turn_off_sends_black(self, mock_socket):
        """turn_off sends one black frame for led_count LEDs."""
        with PixelStreamClient("10.0.0.1", led_count=4) as client:
            assert client.turn_off()
        packet = mock_socket.sendto.call_args.args[0]
        assert packet[HEADER_SIZE:] == bytes(12)
