"""Records for devices found on the network."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class DiscoveredDevice:
    """Identity and power state a device reported during discovery."""

    address: str
    name: str = "Unnamed"
    firmware_version: str = "Unknown"
    led_count: int = -1
    uptime_seconds: int = 0
    is_powered_on: Optional[bool] = None

    @classmethod
    def from_info(cls, address: str, info: dict[str, Any]) -> "DiscoveredDevice":
        """
        Build a record from a ``/json/info`` document.

        Missing fields fall back to the defaults above.
        """
        leds = info.get("leds")
        led_count = leds.get("count", -1) if isinstance(leds, dict) else -1
        return cls(
            address=address,
            name=str(info.get("name", "Unnamed")),
            firmware_version=str(info.get("ver", "Unknown")),
            led_count=_as_int(led_count, -1),
            uptime_seconds=_as_int(info.get("uptime", 0), 0),
        )

    @property
    def power_label(self) -> str:
        if self.is_powered_on is None:
            return "UNKNOWN"
        return "ON" if self.is_powered_on else "OFF"

    def __str__(self) -> str:
        return (
            f"'{self.name}' ({self.address}) - version {self.firmware_version}, "
            f"{self.led_count} LEDs, uptime {self.uptime_seconds}s, Power: {self.power_label}"
        )


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
