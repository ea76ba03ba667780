"""Finding LED controllers on the network and tracking their power state."""

from .power import PowerStateMonitor, fetch_power_state
from .scanner import DeviceDiscovery, detect_local_subnet, validate_subnet

__all__ = [
    "DeviceDiscovery",
    "PowerStateMonitor",
    "detect_local_subnet",
    "fetch_power_state",
    "validate_subnet",
]
