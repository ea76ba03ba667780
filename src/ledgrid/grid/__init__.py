"""Panel color buffers and window coordinate mapping."""

from .mapper import GridPosition, is_flipped, map_window_to_grid, to_local
from .state import CellColor, GridState

__all__ = [
    "CellColor",
    "GridPosition",
    "GridState",
    "is_flipped",
    "map_window_to_grid",
    "to_local",
]
