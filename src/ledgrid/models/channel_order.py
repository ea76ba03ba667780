"""Color channel orders for LED data mapping."""

from enum import Enum
from typing import Sequence

from .color import clamp_channel


class ChannelOrder(str, Enum):
    """Byte order of the red, green and blue channels a device expects."""

    RGB = "rgb"
    BGR = "bgr"
    GRB = "grb"
    RBG = "rbg"
    BRG = "brg"
    GBR = "gbr"

    @property
    def indices(self) -> tuple[int, int, int]:
        """Source offsets read for logical channels 0 (R), 1 (G) and 2 (B)."""
        return _CHANNEL_INDICES[self]

    @property
    def description(self) -> str:
        """Human-readable order, e.g. 'Green, Blue, Red'."""
        names = {"r": "Red", "g": "Green", "b": "Blue"}
        return ", ".join(names[c] for c in self.value)

    @classmethod
    def parse(cls, name: str) -> "ChannelOrder":
        """
        Parse a channel order name.

        Accepts the short form ("GBR", "gbr") and the spelled-out form
        ("green,blue,red", "Green, Blue, Red").

        Raises:
            ValueError: If the name is not one of the six orders
        """
        text = name.strip().lower()
        if "," in text:
            text = "".join(part.strip()[:1] for part in text.split(","))
        try:
            return cls(text)
        except ValueError:
            raise ValueError(
                f"Unknown channel order '{name}'. "
                f"Valid orders: {', '.join(o.name for o in cls)}"
            ) from None

    def map_channel(self, base_index: int, channel: int, source: Sequence[int]) -> int:
        """
        Read one output channel for the LED starting at base_index.

        Args:
            base_index: Index of the LED's first value in source (led * 3)
            channel: Output channel to produce: 0, 1 or 2
            source: Flat RGB values laid out as [R, G, B, R, G, B, ...]

        Returns:
            The clamped source value, or 0 if the source index is out of range
        """
        offset = self.indices[channel] if 0 <= channel <= 2 else 0
        index = base_index + offset
        if 0 <= index < len(source):
            return clamp_channel(source[index])
        return 0

    def remap(self, rgb: Sequence[int], num_leds: int) -> bytes:
        """Remap num_leds LEDs of a flat RGB frame into this order."""
        out = bytearray(num_leds * 3)
        for led in range(num_leds):
            base = led * 3
            out[base] = self.map_channel(base, 0, rgb)
            out[base + 1] = self.map_channel(base, 1, rgb)
            out[base + 2] = self.map_channel(base, 2, rgb)
        return bytes(out)


_CHANNEL_INDICES: dict[ChannelOrder, tuple[int, int, int]] = {
    ChannelOrder.RGB: (0, 1, 2),
    ChannelOrder.BGR: (2, 1, 0),
    ChannelOrder.GRB: (1, 0, 2),
    ChannelOrder.RBG: (0, 2, 1),
    ChannelOrder.BRG: (2, 0, 1),
    ChannelOrder.GBR: (1, 2, 0),
}
