"""JSON layout files.

A layout file looks like::

    {
      "name": "Living room",
      "title": "LedFx",
      "windowWidth": 500,
      "windowHeight": 400,
      "grids": [
        {"id": "Grid01", "deviceIp": "192.168.1.50", "ledCount": 256,
         "x": 0, "y": 0, "width": 240, "height": 240,
         "gridSize": 16, "pixelSize": 15, "colorMapping": "GBR"}
      ]
    }

Snake-case keys (``window_width``, ``panels``, ``device_address``, ...)
are accepted too. Missing values fall back to the model defaults.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ledgrid.models import AppConfig, LayoutDescriptor
from ledgrid.utils import PydanticPersistence

logger = logging.getLogger(__name__)

LAYOUT_SUFFIX = ".json"


def resolve_layout_path(path_or_name: Union[str, Path], config: Optional[AppConfig] = None) -> Path:
    """
    Turn a path or a bare layout name into a file path.

    An existing path is used as is. Otherwise the name is looked up in
    ``config.layouts_dir``, with ``.json`` appended if it has no suffix.

    Raises:
        FileNotFoundError: If neither location exists
    """
    path = Path(path_or_name).expanduser()
    if path.exists():
        return path

    config = config or AppConfig()
    candidate = config.layouts_dir / path.name
    if not candidate.suffix:
        candidate = candidate.with_suffix(LAYOUT_SUFFIX)
    if candidate.exists():
        return candidate

    raise FileNotFoundError(f"Layout not found: {path_or_name} (also looked in {config.layouts_dir})")


def load_layout(path_or_name: Union[str, Path], config: Optional[AppConfig] = None) -> LayoutDescriptor:
    """
    Load and validate a layout file.

    Args:
        path_or_name: File path, or a layout name inside config.layouts_dir
        config: Application config (for layouts_dir)

    Raises:
        FileNotFoundError: If the layout cannot be found
        ConfigFileInvalidError: If the file is not valid JSON
        ConfigValidationError: If values fail validation (e.g. duplicate panel ids)
    """
    path = resolve_layout_path(path_or_name, config)
    layout = PydanticPersistence.load_json(path, LayoutDescriptor)
    logger.info(f"Loaded layout '{layout.name}' with {layout.panel_count} panel(s) from {path}")
    return layout


def save_layout(layout: LayoutDescriptor, path: Path) -> None:
    """Write a layout to disk (snake-case keys), keeping a .bak of any previous file."""
    PydanticPersistence.save_json(layout, path)


def list_layouts(config: Optional[AppConfig] = None) -> list[Path]:
    """Layout files in config.layouts_dir, sorted by name."""
    config = config or AppConfig()
    if not config.layouts_dir.is_dir():
        return []
    return sorted(config.layouts_dir.glob(f"*{LAYOUT_SUFFIX}"))
