"""
Unified color buffer for every panel in a layout.

GridState is the renderer-facing API. Renderers paint window coordinates
(or panel-local LED coordinates) with set_color() and friends, then call
dispatch() once per frame to push every panel's buffer to its device.

Frame Layout
============

Each panel's buffer is ``grid_size x grid_size`` cells addressed
``[x][y]`` with x left to right and y top to bottom. dispatch() flattens
it row by row, top-left LED first::

    y=0:  (0,0) (1,0) (2,0) ...
    y=1:  (0,1) (1,1) (2,1) ...

One panel in a layout may be wired mirrored left-to-right; for that panel
the x sampling order is reversed within each row. Empty cells are sent
as black.

Usage Example
-------------

.. code-block:: python

    layout = load_layout("living_room.json")
    with GridState(layout, config) as grid:
        grid.set_color(100, 50, Color(r=255, g=0, b=0))
        grid.dispatch()
"""

import logging
from typing import Optional, Union

from ledgrid.exceptions import (
    ErrorContext,
    FrameSizeError,
    TransportError,
    TransportNotConnectedError,
    collect_errors,
)
from ledgrid.models import (
    AppConfig,
    Color,
    FailureReason,
    LayoutDescriptor,
    PanelDescriptor,
    clamp_channel,
)
from ledgrid.transports import (
    DeviceTransport,
    LightingControlClient,
    SendResult,
    TransportFactory,
    create_transport,
)

from .mapper import GridPosition, is_flipped, map_window_to_grid


CellColor = Union[Color, tuple[int, int, int]]
PanelKey = Union[int, str]


class GridState:
    """Owns one transport and one color buffer per panel."""

    def __init__(
        self,
        layout: LayoutDescriptor,
        config: Optional[AppConfig] = None,
        transport_factory: Optional[TransportFactory] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Create buffers and open a transport for every panel.

        Args:
            layout: Window size and panels
            config: Application config (defaults to AppConfig())
            transport_factory: Builds each panel's transport; defaults to the
                registered factory for config.transport
            logger: Logger to use (defaults to this module's logger)
        """
        self.layout = layout
        self.config = config or AppConfig()
        self._log = logger or logging.getLogger(__name__)
        self._panels: tuple[PanelDescriptor, ...] = layout.panels
        self._buffers: list[list[list[Optional[CellColor]]]] = [
            _empty_buffer(panel.grid_size) for panel in self._panels
        ]

        self._transports: list[DeviceTransport] = []
        self._dark: set[int] = set()
        try:
            for index, panel in enumerate(self._panels):
                with ErrorContext(f"open transport for panel {panel.id}", self._log):
                    if transport_factory is not None:
                        transport = transport_factory(panel, index, self.config, self._log)
                    else:
                        transport = create_transport(
                            self.config.transport, panel, index, self.config, self._log
                        )
                    transport.open()
                self._transports.append(transport)
        except Exception:
            self._close_transports()
            raise

        self._log.info(
            f"GridState ready: {len(self._panels)} panel(s), transport {self.config.transport.value}"
        )

    # =================================================================
    # Painting
    # =================================================================

    def set_color(self, window_x: int, window_y: int, color: CellColor) -> None:
        """Paint the LED under a window coordinate. No-op outside every panel."""
        if not _is_cell(color):
            return
        position = self.map_window_to_grid(window_x, window_y)
        if position is not None:
            self._buffers[position.panel_index][position.x][position.y] = color

    def set_panel_color(self, panel_index: int, x: int, y: int, color: CellColor) -> None:
        """Paint an LED by panel index and local coordinate. Out of range is a no-op."""
        if not _is_cell(color):
            return
        if not 0 <= panel_index < len(self._panels):
            return
        size = self._panels[panel_index].grid_size
        if 0 <= x < size and 0 <= y < size:
            self._buffers[panel_index][x][y] = color

    def set_panel_color_by_id(self, panel_id: str, x: int, y: int, color: CellColor) -> None:
        """Paint an LED on the first panel with the given id."""
        index = self.layout.index_of(panel_id)
        if index is not None:
            self.set_panel_color(index, x, y, color)

    def get_color(self, panel_index: int, x: int, y: int) -> Optional[CellColor]:
        """Read a buffer cell; None when empty or out of range."""
        if not 0 <= panel_index < len(self._panels):
            return None
        size = self._panels[panel_index].grid_size
        if 0 <= x < size and 0 <= y < size:
            return self._buffers[panel_index][x][y]
        return None

    def clear(self, panel_index: int) -> None:
        """Reset one panel to black."""
        if 0 <= panel_index < len(self._panels):
            self._buffers[panel_index] = _empty_buffer(
                self._panels[panel_index].grid_size, Color.off()
            )

    def clear_all(self) -> None:
        """Reset every panel to black."""
        for index in range(len(self._panels)):
            self.clear(index)

    def map_window_to_grid(self, window_x: int, window_y: int) -> Optional[GridPosition]:
        """Find the panel and LED under a window coordinate."""
        return map_window_to_grid(self._panels, window_x, window_y)

    # =================================================================
    # Dispatch
    # =================================================================

    def frame(self, panel_index: int) -> bytes:
        """Flatten one panel's buffer into the RGB bytes dispatch() would send."""
        panel = self._panels[panel_index]
        buffer = self._buffers[panel_index]
        size = panel.grid_size
        flip = is_flipped(panel, self.config.flip_panel_id)

        out = bytearray(size * size * 3)
        offset = 0
        for y in range(size):
            for x in range(size):
                cell = buffer[size - 1 - x if flip else x][y]
                if cell is not None:
                    r, g, b = _rgb(cell)
                    out[offset] = clamp_channel(r)
                    out[offset + 1] = clamp_channel(g)
                    out[offset + 2] = clamp_channel(b)
                offset += 3
        return bytes(out)

    def dispatch_results(self) -> list[SendResult]:
        """
        Send every panel's current buffer to its device.

        A panel that fails is logged and reported in its result; the
        remaining panels are still sent.

        Returns:
            One SendResult per panel, in layout order
        """
        self._dark.clear()
        results = []
        for index, (panel, transport) in enumerate(zip(self._panels, self._transports)):
            try:
                result = transport.send_frame(self.frame(index))
            except TransportNotConnectedError as e:
                result = SendResult.failure(FailureReason.NOT_CONNECTED, e.technical_message)
            except FrameSizeError as e:
                result = SendResult.failure(FailureReason.INVALID_FRAME, e.technical_message)
            except TransportError as e:
                result = SendResult.failure(FailureReason.IO_ERROR, e.technical_message)
            except Exception as e:
                self._log.error(f"Unexpected error sending to panel {panel.id}: {e}", exc_info=True)
                results.append(SendResult.failure(FailureReason.IO_ERROR, str(e)))
                continue

            if not result:
                self._log.error(f"Error sending to panel {panel.id}: {result}")
            results.append(result)
        return results

    def dispatch(self) -> bool:
        """Send every panel; True only if every panel succeeded."""
        return all(self.dispatch_results())

    # =================================================================
    # Lifecycle
    # =================================================================

    def turn_off_all(self) -> bool:
        """
        Ask every device to black out or power off.

        Returns:
            True if every device acknowledged
        """
        collector = collect_errors("turn off panels")
        all_ok = True
        for index, (panel, transport) in enumerate(zip(self._panels, self._transports)):
            with collector.try_operation(f"turn off {panel.id}"):
                result = transport.turn_off()
                if result:
                    self._dark.add(index)
                else:
                    all_ok = False
                    self._log.warning(f"Panel {panel.id} did not turn off: {result}")

        if collector.has_errors:
            self._log.error(collector.get_summary())
            return False
        return all_ok

    def close(self) -> None:
        """Black out Art-Net panels not already turned off, then release every transport."""
        for index, transport in enumerate(self._transports):
            if index in self._dark:
                continue
            if isinstance(transport, LightingControlClient) and transport.is_open:
                transport.turn_off()
        self._close_transports()
        self._log.info("GridState closed")

    def _close_transports(self) -> None:
        collector = collect_errors("close transports")
        for transport in self._transports:
            with collector.try_operation(f"close {transport.address}"):
                transport.close()
        if collector.has_errors:
            self._log.warning(collector.get_summary())
        self._transports = []
        self._dark.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # =================================================================
    # Accessors
    # =================================================================

    @property
    def panel_count(self) -> int:
        return len(self._panels)

    @property
    def grid_size(self) -> int:
        """Grid size of the first panel, 0 when the layout is empty."""
        return self._panels[0].grid_size if self._panels else 0

    @property
    def pixel_size(self) -> int:
        """Pixel size of the first panel, 0 when the layout is empty."""
        return self._panels[0].pixel_size if self._panels else 0

    @property
    def window_width(self) -> int:
        return self.layout.window_width

    @property
    def window_height(self) -> int:
        return self.layout.window_height

    @property
    def panels(self) -> tuple[PanelDescriptor, ...]:
        return self._panels

    def get_panel(self, key: PanelKey) -> Optional[PanelDescriptor]:
        """Look up a panel by index or id."""
        index = self._resolve(key)
        return self._panels[index] if index is not None else None

    def get_transport(self, key: PanelKey) -> Optional[DeviceTransport]:
        """Look up a panel's transport by index or id."""
        index = self._resolve(key)
        if index is None or index >= len(self._transports):
            return None
        return self._transports[index]

    def _resolve(self, key: PanelKey) -> Optional[int]:
        if isinstance(key, str):
            return self.layout.index_of(key)
        if 0 <= key < len(self._panels):
            return key
        return None


def _empty_buffer(size: int, fill: Optional[CellColor] = None) -> list[list[Optional[CellColor]]]:
    return [[fill] * size for _ in range(size)]


def _is_cell(value) -> bool:
    if isinstance(value, Color):
        return True
    return (
        isinstance(value, tuple)
        and len(value) == 3
        and all(isinstance(c, int) for c in value)
    )


def _rgb(cell: CellColor) -> tuple[int, int, int]:
    if isinstance(cell, Color):
        return cell.to_rgb_tuple()
    return cell[0], cell[1], cell[2]
