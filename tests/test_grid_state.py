"""Tests for GridState: buffers, coordinate mapping and dispatch."""

from unittest.mock import Mock, patch

import pytest

from ledgrid.exceptions import FrameSizeError, TransportNotConnectedError
from ledgrid.grid import GridPosition, GridState
from ledgrid.models import AppConfig, Color, FailureReason, LayoutDescriptor, TransportKind
from ledgrid.transports import LightingControlClient, PixelStreamClient, SendResult

from conftest import make_panel

A = Color(r=1, g=2, b=3)
B = Color(r=4, g=5, b=6)
C = Color(r=7, g=8, b=9)
D = Color(r=10, g=11, b=12)


def single_panel_layout(panel_id: str = "Grid02", **kwargs) -> LayoutDescriptor:
    return LayoutDescriptor(panels=(make_panel(panel_id, **kwargs),))


@pytest.mark.unit
class TestCoordinateMapping:
    """Test window-to-panel mapping."""

    def test_maps_into_second_panel(self, two_panel_layout, mock_transports):
        """A point in the right panel maps to its local LED."""
        grid = GridState(two_panel_layout, transport_factory=mock_transports)
        assert grid.map_window_to_grid(25, 15) == GridPosition(1, 0, 1)
        assert grid.map_window_to_grid(0, 0) == GridPosition(0, 0, 0)
        assert grid.map_window_to_grid(19, 19) == GridPosition(0, 1, 1)

    def test_outside_every_panel(self, two_panel_layout, mock_transports):
        """Points outside all panels map to None."""
        grid = GridState(two_panel_layout, transport_factory=mock_transports)
        assert grid.map_window_to_grid(40, 0) is None
        assert grid.map_window_to_grid(5, 20) is None
        assert grid.map_window_to_grid(-1, 5) is None

    def test_local_coordinate_is_clamped(self, mock_transports):
        """A panel wider than grid_size * pixel_size clamps to the last LED."""
        layout = single_panel_layout(width=25, height=25)
        grid = GridState(layout, transport_factory=mock_transports)
        assert grid.map_window_to_grid(24, 24) == GridPosition(0, 1, 1)

    def test_first_matching_panel_wins(self, mock_transports):
        """Overlapping panels resolve to the first in layout order."""
        layout = LayoutDescriptor(panels=(make_panel("A"), make_panel("B")))
        grid = GridState(layout, transport_factory=mock_transports)
        assert grid.map_window_to_grid(5, 5).panel_index == 0

    def test_set_color_updates_exactly_one_cell(self, two_panel_layout, mock_transports):
        """Painting a window point changes a single cell of a single panel."""
        grid = GridState(two_panel_layout, transport_factory=mock_transports)
        grid.set_color(25, 15, A)

        cells = [
            (p, x, y)
            for p in range(grid.panel_count)
            for x in range(2)
            for y in range(2)
            if grid.get_color(p, x, y) is not None
        ]
        assert cells == [(1, 0, 1)]
        assert grid.get_color(1, 0, 1) == A

    def test_set_color_outside_is_noop(self, two_panel_layout, mock_transports):
        """Painting outside every panel changes nothing."""
        grid = GridState(two_panel_layout, transport_factory=mock_transports)
        grid.set_color(100, 100, A)
        assert grid.frame(0) == bytes(12)
        assert grid.frame(1) == bytes(12)


@pytest.mark.unit
class TestBuffers:
    """Test direct buffer access."""

    def test_set_panel_color_out_of_range_is_noop(self, two_panel_layout, mock_transports):
        """Bad indices and coordinates are ignored."""
        grid = GridState(two_panel_layout, transport_factory=mock_transports)
        grid.set_panel_color(5, 0, 0, A)
        grid.set_panel_color(0, 2, 0, A)
        grid.set_panel_color(0, 0, -1, A)
        assert grid.frame(0) == bytes(12)
        assert grid.get_color(5, 0, 0) is None

    def test_set_panel_color_by_id(self, two_panel_layout, mock_transports):
        """Panels can be addressed by id."""
        grid = GridState(two_panel_layout, transport_factory=mock_transports)
        grid.set_panel_color_by_id("Right", 1, 0, B)
        grid.set_panel_color_by_id("Missing", 1, 0, B)
        assert grid.get_color(1, 1, 0) == B

    def test_clear(self, two_panel_layout, mock_transports):
        """clear() blacks out one panel; clear_all() every panel."""
        grid = GridState(two_panel_layout, transport_factory=mock_transports)
        grid.set_panel_color(0, 0, 0, A)
        grid.set_panel_color(1, 0, 0, A)

        grid.clear(0)
        assert grid.get_color(0, 0, 0) == Color.off()
        assert grid.get_color(1, 0, 0) == A

        grid.clear_all()
        assert grid.get_color(1, 0, 0) == Color.off()


@pytest.mark.unit
class TestFrameLayout:
    """Test flattening of buffers into wire order."""

    def test_row_major_top_left_first(self, mock_transports):
        """A 2x2 panel flattens to [A, B, C, D] row by row."""
        grid = GridState(single_panel_layout(), transport_factory=mock_transports)
        grid.set_panel_color(0, 0, 0, A)
        grid.set_panel_color(0, 1, 0, B)
        grid.set_panel_color(0, 0, 1, C)
        grid.set_panel_color(0, 1, 1, D)

        assert grid.frame(0) == bytes([1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12])

    @pytest.mark.parametrize("panel_id", ["Grid01", "grid01", "GRID01"])
    def test_flip_panel_mirrors_x_only(self, mock_transports, panel_id):
        """The mirrored panel reverses each row; row order is unchanged."""
        grid = GridState(single_panel_layout(panel_id), transport_factory=mock_transports)
        grid.set_panel_color(0, 0, 0, A)
        grid.set_panel_color(0, 1, 0, B)
        grid.set_panel_color(0, 0, 1, C)
        grid.set_panel_color(0, 1, 1, D)

        assert grid.frame(0) == bytes([4, 5, 6, 1, 2, 3, 10, 11, 12, 7, 8, 9])

    def test_flip_disabled_by_config(self, mock_transports):
        """flip_panel_id=None turns mirroring off."""
        config = AppConfig(flip_panel_id=None)
        grid = GridState(single_panel_layout("Grid01"), config, transport_factory=mock_transports)
        grid.set_panel_color(0, 0, 0, A)
        assert grid.frame(0)[:3] == bytes([1, 2, 3])

    def test_tuples_are_clamped(self, mock_transports):
        """Plain tuples are accepted and clamped to a byte."""
        grid = GridState(single_panel_layout(), transport_factory=mock_transports)
        grid.set_panel_color(0, 0, 0, (300, -5, 7))
        assert grid.frame(0)[:3] == bytes([255, 0, 7])


@pytest.mark.unit
class TestDispatch:
    """Test sending buffers to transports."""

    def test_dispatch_sends_each_panel_frame(self, two_panel_layout, mock_transports):
        """Each transport receives its own panel's frame."""
        grid = GridState(two_panel_layout, transport_factory=mock_transports)
        grid.set_panel_color(1, 0, 0, A)

        assert grid.dispatch() is True
        left, right = mock_transports.created
        left.send_frame.assert_called_once_with(bytes(12))
        right.send_frame.assert_called_once_with(bytes([1, 2, 3]) + bytes(9))

    def test_failing_panel_does_not_block_others(self, two_panel_layout, mock_transports):
        """One failure makes dispatch() False but the other panel is still sent."""
        grid = GridState(two_panel_layout, transport_factory=mock_transports)
        left, right = mock_transports.created
        left.send_frame.return_value = SendResult.failure(FailureReason.IO_ERROR, "down")

        results = grid.dispatch_results()
        assert [r.ok for r in results] == [False, True]
        right.send_frame.assert_called_once()
        assert grid.dispatch() is False

    def test_transport_exceptions_become_results(self, two_panel_layout, mock_transports):
        """Typed transport errors are reported per panel."""
        grid = GridState(two_panel_layout, transport_factory=mock_transports)
        left, right = mock_transports.created
        left.send_frame.side_effect = TransportNotConnectedError("10.0.0.1")
        right.send_frame.side_effect = FrameSizeError(12, 3, "10.0.0.2")

        results = grid.dispatch_results()
        assert results[0].reason is FailureReason.NOT_CONNECTED
        assert results[1].reason is FailureReason.INVALID_FRAME

    def test_malformed_cells_are_ignored(self, two_panel_layout, mock_transports):
        """Cells that are not a Color or an int 3-tuple never reach the buffer."""
        grid = GridState(two_panel_layout, transport_factory=mock_transports)
        grid.set_panel_color(0, 0, 0, (255, 0))
        grid.set_panel_color(0, 1, 0, "red")
        grid.set_color(25, 15, (1.5, 2, 3))

        assert grid.get_color(0, 0, 0) is None
        assert grid.get_color(0, 1, 0) is None
        assert grid.get_color(1, 0, 1) is None
        assert grid.dispatch() is True
        for transport in mock_transports.created:
            transport.send_frame.assert_called_once_with(bytes(12))

    def test_unexpected_exception_does_not_block_others(self, two_panel_layout, mock_transports):
        """A non-ledgrid exception from one transport still lets later panels send."""
        grid = GridState(two_panel_layout, transport_factory=mock_transports)
        left, right = mock_transports.created
        left.send_frame.side_effect = RuntimeError("driver bug")

        results = grid.dispatch_results()
        assert results[0].reason is FailureReason.IO_ERROR
        assert "driver bug" in results[0].detail
        assert results[1].ok
        right.send_frame.assert_called_once()

    def test_skipped_frames_count_as_success(self, two_panel_layout, mock_transports):
        """Rate-gated skips do not fail the dispatch."""
        grid = GridState(two_panel_layout, transport_factory=mock_transports)
        for transport in mock_transports.created:
            transport.send_frame.return_value = SendResult.skipped_frame()
        assert grid.dispatch() is True


@pytest.mark.unit
class TestLifecycle:
    """Test transport ownership and shutdown."""

    def test_transports_opened_with_panel_index(self, two_panel_layout):
        """The factory is called once per panel with its index, then opened."""
        calls = []

        def factory(panel, index, config, logger):
            calls.append((panel.id, index))
            return Mock()

        grid = GridState(two_panel_layout, transport_factory=factory)
        assert calls == [("Left", 0), ("Right", 1)]
        for index in range(2):
            grid.get_transport(index).open.assert_called_once()

    def test_close_closes_every_transport(self, two_panel_layout, mock_transports):
        """Leaving the context closes every transport."""
        with GridState(two_panel_layout, transport_factory=mock_transports):
            pass
        for transport in mock_transports.created:
            transport.close.assert_called_once()

    def test_close_blacks_out_artnet_first(self, two_panel_layout):
        """Art-Net transports run their blackout before closing."""
        transport = Mock(spec=LightingControlClient)
        transport.is_open = True
        grid = GridState(two_panel_layout, transport_factory=lambda *args: transport)
        grid.close()

        assert transport.turn_off.call_count == 2
        assert transport.close.call_count == 2

    def test_close_skips_blackout_after_turn_off_all(self, two_panel_layout):
        """Panels already turned off are not blacked out a second time on close."""
        transports = [Mock(spec=LightingControlClient), Mock(spec=LightingControlClient)]
        for transport in transports:
            transport.is_open = True
            transport.turn_off.return_value = SendResult.success()
            transport.send_frame.return_value = SendResult.success()
        created = iter(transports)

        with GridState(two_panel_layout, transport_factory=lambda *args: next(created)) as grid:
            assert grid.turn_off_all() is True

        for transport in transports:
            transport.turn_off.assert_called_once()
            transport.close.assert_called_once()

    def test_dispatch_after_turn_off_restores_blackout_on_close(self, two_panel_layout):
        """Sending a frame after turn_off_all makes close() black out again."""
        transport = Mock(spec=LightingControlClient)
        transport.is_open = True
        transport.turn_off.return_value = SendResult.success()
        transport.send_frame.return_value = SendResult.success()
        grid = GridState(two_panel_layout, transport_factory=lambda *args: transport)

        grid.turn_off_all()
        grid.dispatch()
        grid.close()
        assert transport.turn_off.call_count == 4

    def test_failed_construction_closes_opened_transports(self, two_panel_layout):
        """If a later transport fails to open, earlier ones are closed."""
        first = Mock()
        second = Mock()
        second.open.side_effect = OSError("no sockets")
        transports = iter([first, second])

        with pytest.raises(OSError):
            GridState(two_panel_layout, transport_factory=lambda *args: next(transports))
        first.close.assert_called_once()

    def test_turn_off_all(self, two_panel_layout, mock_transports):
        """turn_off_all asks every transport and reports the combined outcome."""
        grid = GridState(two_panel_layout, transport_factory=mock_transports)
        assert grid.turn_off_all() is True

        mock_transports.created[0].turn_off.side_effect = TransportNotConnectedError("10.0.0.1")
        assert grid.turn_off_all() is False
        assert mock_transports.created[1].turn_off.call_count == 2

    def test_default_factory_uses_configured_transport(self, two_panel_layout):
        """Without a factory, the registered transport for config.transport is used."""
        config = AppConfig(transport=TransportKind.DDP, ddp_port=4050)
        with patch("ledgrid.transports.ddp.socket.socket"):
            grid = GridState(two_panel_layout, config)
            transport = grid.get_transport("Right")
            assert isinstance(transport, PixelStreamClient)
            assert transport.port == 4050
            assert transport.address == "10.0.0.2"
            grid.close()


@pytest.mark.unit
class TestAccessors:
    """Test GridState accessors."""

    def test_accessors(self, two_panel_layout, mock_transports):
        grid = GridState(two_panel_layout, transport_factory=mock_transports)
        assert grid.panel_count == 2
        assert grid.grid_size == 2
        assert grid.pixel_size == 10
        assert (grid.window_width, grid.window_height) == (40, 20)
        assert grid.get_panel("Right").origin_x == 20
        assert grid.get_panel(0).id == "Left"
        assert grid.get_panel(7) is None
        assert grid.get_transport("Nope") is None

    def test_empty_layout(self, mock_transports):
        """An empty layout has zero sizes and dispatches trivially."""
        grid = GridState(LayoutDescriptor(), transport_factory=mock_transports)
        assert grid.grid_size == 0
        assert grid.pixel_size == 0
        assert grid.dispatch() is True
