"""Window-to-panel coordinate mapping."""

from typing import NamedTuple, Optional, Sequence

from ledgrid.models import PanelDescriptor


class GridPosition(NamedTuple):
    """An LED cell: which panel, and where on it."""

    panel_index: int
    x: int  # column, 0 = left
    y: int  # row, 0 = top


def to_local(panel: PanelDescriptor, window_x: int, window_y: int) -> tuple[int, int]:
    """
    Convert a window coordinate to LED coordinates on a panel.

    The result is clamped to the panel's grid, so points on the far edge of
    a panel whose width is not an exact multiple of pixel_size still land
    on the last LED.
    """
    last = panel.grid_size - 1
    local_x = (window_x - panel.origin_x) // panel.pixel_size
    local_y = (window_y - panel.origin_y) // panel.pixel_size
    return max(0, min(last, local_x)), max(0, min(last, local_y))


def map_window_to_grid(
    panels: Sequence[PanelDescriptor], window_x: int, window_y: int
) -> Optional[GridPosition]:
    """
    Find the LED under a window coordinate.

    Panels are tested in layout order and the first one containing the
    point wins.

    Returns:
        GridPosition, or None if no panel covers the point
    """
    for index, panel in enumerate(panels):
        if panel.contains(window_x, window_y):
            x, y = to_local(panel, window_x, window_y)
            return GridPosition(index, x, y)
    return None


def is_flipped(panel: PanelDescriptor, flip_panel_id: Optional[str]) -> bool:
    """Check whether a panel is wired mirrored left-to-right."""
    return flip_panel_id is not None and panel.id.lower() == flip_panel_id.lower()
