"""ledgrid: drive networked LED matrix panels over DDP, Art-Net or REST."""

__version__ = "0.1.0"

from .grid import GridState
from .layout import load_layout
from .models import AppConfig, ChannelOrder, Color, LayoutDescriptor, PanelDescriptor

__all__ = [
    "AppConfig",
    "ChannelOrder",
    "Color",
    "GridState",
    "LayoutDescriptor",
    "PanelDescriptor",
    "load_layout",
]
