"""Device transports: DDP, Art-Net and REST clients behind one protocol."""

from .artnet import LightingControlClient, encode_dmx_packet
from .ddp import PixelStreamClient, encode_frame
from .gate import FrameGate
from .protocols import DeviceTransport, RgbFrame, SendResult
from .registry import (
    TransportFactory,
    create_transport,
    get_transport_factory,
    register_transport,
)
from .rest import RestControlClient, build_state_payload

__all__ = [
    # Protocol
    "DeviceTransport",
    "RgbFrame",
    "SendResult",
    # Clients
    "LightingControlClient",
    "PixelStreamClient",
    "RestControlClient",
    # Encoders
    "build_state_payload",
    "encode_dmx_packet",
    "encode_frame",
    # Helpers
    "FrameGate",
    # Registry
    "TransportFactory",
    "create_transport",
    "get_transport_factory",
    "register_transport",
]
