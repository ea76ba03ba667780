"""Layout file loading."""

from .loader import list_layouts, load_layout, resolve_layout_path, save_layout

__all__ = [
    "list_layouts",
    "load_layout",
    "resolve_layout_path",
    "save_layout",
]
