"""Panel and layout descriptors.

A layout is a window of a given size with any number of LED panels placed
on it. Each panel covers a rectangle of window pixels and owns a square
grid of LEDs; one LED spans ``pixel_size`` window pixels in each direction.

Field names accept the camelCase attribute names used by older layout
files (``deviceIp``, ``x``, ``gridSize``, ...) as well as the snake_case
names used here.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .channel_order import ChannelOrder


class PanelDescriptor(BaseModel):
    """
    Static configuration of one physical LED panel.

    ``led_count == grid_size ** 2`` and ``width == height == grid_size * pixel_size``
    are assumed by the rest of the system but not enforced here.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default="grid", min_length=1, description="Panel id, unique within a layout")
    device_address: str = Field(
        default="192.168.1.100",
        min_length=1,
        validation_alias=AliasChoices("device_address", "deviceAddress", "deviceIp"),
        description="Host name or IP of the LED controller",
    )
    led_count: int = Field(
        default=256,
        ge=0,
        validation_alias=AliasChoices("led_count", "ledCount"),
        description="Number of LEDs the controller drives",
    )
    origin_x: int = Field(
        default=0,
        validation_alias=AliasChoices("origin_x", "originX", "x"),
        description="Left edge of the panel in window pixels",
    )
    origin_y: int = Field(
        default=0,
        validation_alias=AliasChoices("origin_y", "originY", "y"),
        description="Top edge of the panel in window pixels",
    )
    width: int = Field(default=240, ge=0, description="Panel width in window pixels")
    height: int = Field(default=240, ge=0, description="Panel height in window pixels")
    grid_size: int = Field(
        default=16,
        gt=0,
        validation_alias=AliasChoices("grid_size", "gridSize"),
        description="LEDs per side (16 for a 16x16 panel)",
    )
    pixel_size: int = Field(
        default=15,
        gt=0,
        validation_alias=AliasChoices("pixel_size", "pixelSize"),
        description="Window pixels per LED",
    )
    channel_order: ChannelOrder = Field(
        default=ChannelOrder.GBR,
        validation_alias=AliasChoices("channel_order", "channelOrder", "colorMapping"),
        description="Byte order the controller expects",
    )

    @field_validator("channel_order", mode="before")
    @classmethod
    def parse_channel_order(cls, v):
        """Accept 'GBR', 'gbr' or 'green,blue,red'."""
        if isinstance(v, str):
            return ChannelOrder.parse(v)
        return v

    def contains(self, window_x: int, window_y: int) -> bool:
        """Check whether a window coordinate falls inside this panel's rectangle."""
        return (
            self.origin_x <= window_x < self.origin_x + self.width
            and self.origin_y <= window_y < self.origin_y + self.height
        )

    def __str__(self) -> str:
        return (
            f"Panel '{self.id}' ({self.device_address}): {self.grid_size}x{self.grid_size} "
            f"at ({self.origin_x}, {self.origin_y}), {self.width}x{self.height}px, "
            f"{self.led_count} LEDs, {self.channel_order.name}"
        )


class LayoutDescriptor(BaseModel):
    """Window size plus the ordered list of panels placed on it."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(default="Unnamed", description="Layout name")
    title: str = Field(default="LedFx", description="Window title")
    window_width: int = Field(
        default=500,
        ge=0,
        validation_alias=AliasChoices("window_width", "windowWidth"),
    )
    window_height: int = Field(
        default=400,
        ge=0,
        validation_alias=AliasChoices("window_height", "windowHeight"),
    )
    panels: tuple[PanelDescriptor, ...] = Field(
        default_factory=tuple,
        validation_alias=AliasChoices("panels", "grids"),
        description="Panels in dispatch order",
    )

    @model_validator(mode="after")
    def check_unique_ids(self) -> "LayoutDescriptor":
        """Reject layouts where two panels share an id."""
        seen: set[str] = set()
        for panel in self.panels:
            if panel.id in seen:
                raise ValueError(f"Duplicate panel id '{panel.id}'")
            seen.add(panel.id)
        return self

    @property
    def panel_count(self) -> int:
        """Number of panels in the layout."""
        return len(self.panels)

    def get_panel(self, panel_id: str) -> Optional[PanelDescriptor]:
        """Return the first panel with the given id, or None."""
        return next((p for p in self.panels if p.id == panel_id), None)

    def index_of(self, panel_id: str) -> Optional[int]:
        """Return the index of the first panel with the given id, or None."""
        for index, panel in enumerate(self.panels):
            if panel.id == panel_id:
                return index
        return None

    def __str__(self) -> str:
        return (
            f"Layout '{self.name}' ({self.title}): window {self.window_width}x{self.window_height}, "
            f"{self.panel_count} panel(s)"
        )
