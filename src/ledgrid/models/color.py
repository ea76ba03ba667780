"""Color model for LED control."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Color(BaseModel):
    """Standard 8-bit RGB color model.

    The model is frozen so colors can be shared freely between buffer
    cells and used as dict keys.
    """

    model_config = ConfigDict(frozen=True)

    r: int = Field(ge=0, le=255, description="Red (0-255)")
    g: int = Field(ge=0, le=255, description="Green (0-255)")
    b: int = Field(ge=0, le=255, description="Blue (0-255)")

    @field_validator("r", "g", "b")
    @classmethod
    def validate_rgb(cls, v: int) -> int:
        """Ensure RGB values are in valid range."""
        if not 0 <= v <= 255:
            raise ValueError("RGB values must be between 0 and 255")
        return v

    @classmethod
    def off(cls) -> "Color":
        """Create off (black) color."""
        return cls(r=0, g=0, b=0)

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> "Color":
        """Create a color from channel values, clamping each to 0-255."""
        return cls(r=clamp_channel(r), g=clamp_channel(g), b=clamp_channel(b))

    def to_rgb_tuple(self) -> tuple[int, int, int]:
        """Convert to RGB tuple."""
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        """Convert to CSS hex color string (e.g., '#FF0000')."""
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    def to_hex_digits(self) -> str:
        """Convert to the bare six-digit form used by the REST API (e.g., 'FF0000')."""
        return f"{self.r:02X}{self.g:02X}{self.b:02X}"


def clamp_channel(value: int) -> int:
    """Clamp a single channel value into the 0-255 byte range."""
    return max(0, min(255, int(value)))
