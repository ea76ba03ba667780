"""Enumerations for ledgrid."""

from enum import Enum


class TransportKind(str, Enum):
    """Wire protocol used to reach a panel."""

    DDP = "ddp"  # Pixel streaming over UDP
    ARTNET = "artnet"  # DMX-style lighting control over UDP
    REST = "rest"  # JSON state API over HTTP


class RestPayloadFormat(str, Enum):
    """Per-LED color encoding in a REST segment."""

    RGB_TRIPLES = "rgb"  # [[255, 0, 0], ...]
    HEX = "hex"  # ["FF0000", ...]


class FailureReason(str, Enum):
    """Why a transport call did not deliver a frame."""

    IO_ERROR = "io_error"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    NOT_CONNECTED = "not_connected"
    INVALID_FRAME = "invalid_frame"
