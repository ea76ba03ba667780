"""Pytest fixtures for tests."""

import json
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import Mock

import pytest

from ledgrid.models import AppConfig, ChannelOrder, LayoutDescriptor, PanelDescriptor
from ledgrid.transports import SendResult


class FakeClock:
    """Manually advanced monotonic clock for rate-gate tests."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def temp_dir():
    """Create a temporary directory that gets cleaned up."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clock():
    """A fake clock starting at t=100s."""
    return FakeClock()


def make_panel(panel_id: str = "Grid02", grid_size: int = 2, pixel_size: int = 10, **kwargs):
    """Build a square panel whose window size matches its grid."""
    size = grid_size * pixel_size
    fields = dict(
        id=panel_id,
        device_address="192.168.1.50",
        led_count=grid_size * grid_size,
        origin_x=0,
        origin_y=0,
        width=size,
        height=size,
        grid_size=grid_size,
        pixel_size=pixel_size,
        channel_order=ChannelOrder.RGB,
    )
    fields.update(kwargs)
    return PanelDescriptor(**fields)


@pytest.fixture
def panel_factory():
    """Expose make_panel to tests."""
    return make_panel


@pytest.fixture
def two_panel_layout():
    """Two 2x2 panels side by side, 20px each, on a 40x20 window."""
    return LayoutDescriptor(
        name="test",
        window_width=40,
        window_height=20,
        panels=(
            make_panel("Left", device_address="10.0.0.1"),
            make_panel("Right", device_address="10.0.0.2", origin_x=20),
        ),
    )


@pytest.fixture
def config(temp_dir):
    """Default config with layouts in the temp directory."""
    return AppConfig(layouts_dir=temp_dir / "layouts")


@pytest.fixture
def mock_transports():
    """
    A transport factory producing Mock transports.

    The created mocks are collected in ``factory.created`` in panel order.
    Every mock accepts frames and reports success.
    """
    created = []

    def factory(panel, index, config, logger):
        transport = Mock()
        transport.address = panel.device_address
        transport.send_frame.return_value = SendResult.success()
        transport.turn_off.return_value = SendResult.success()
        created.append(transport)
        return transport

    factory.created = created
    return factory


@pytest.fixture
def layout_file(temp_dir):
    """Write a layout file using the camelCase keys of older layout files."""
    data = {
        "name": "Living room",
        "title": "Wall",
        "windowWidth": 480,
        "windowHeight": 240,
        "grids": [
            {
                "id": "Grid01",
                "deviceIp": "192.168.1.50",
                "ledCount": 256,
                "x": 0,
                "y": 0,
                "width": 240,
                "height": 240,
                "gridSize": 16,
                "pixelSize": 15,
                "colorMapping": "GBR",
            },
            {
                "id": "Grid02",
                "deviceIp": "192.168.1.51",
                "x": 240,
                "y": 0,
                "colorMapping": "rgb",
            },
        ],
    }
    path = temp_dir / "living_room.json"
    path.write_text(json.dumps(data))
    return path
