"""Data models for ledgrid."""

from .channel_order import ChannelOrder
from .color import Color, clamp_channel
from .config import AppConfig
from .device import DiscoveredDevice
from .enums import FailureReason, RestPayloadFormat, TransportKind
from .panel import LayoutDescriptor, PanelDescriptor

__all__ = [
    "AppConfig",
    # Models
    "ChannelOrder",
    "Color",
    "DiscoveredDevice",
    "LayoutDescriptor",
    "PanelDescriptor",
    # Enums
    "FailureReason",
    "RestPayloadFormat",
    "TransportKind",
    # Helpers
    "clamp_channel",
]
