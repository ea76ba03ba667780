"""CLI commands for ledgrid."""

from .config import config
from .discover import discover
from .layout import layout_group
from .panels import off, test_pattern

__all__ = ["config", "discover", "layout_group", "off", "test_pattern"]
