"""Network discovery exceptions."""

from .base import LedGridError


class DiscoveryError(LedGridError):
    """Device discovery could not run."""
    pass


class SubnetDetectionError(DiscoveryError):
    """No usable IPv4 interface was found, or a subnet string is malformed."""

    def __init__(self, detail: str):
        super().__init__(
            user_message="Could not determine local subnet",
            technical_message=f"Subnet detection failed: {detail}",
            recoverable=True,
            recovery_hint="Pass the subnet explicitly, e.g. 'ledgrid discover --subnet 192.168.1'"
        )
        self.detail = detail
