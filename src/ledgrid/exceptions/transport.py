"""Device transport exceptions.

These cover misuse of a transport (sending on a closed socket, handing
over a frame that is too short). Transient network failures are not
raised; transports report them as a failed SendResult.
"""

from typing import Optional

from .base import LedGridError


class TransportError(LedGridError):
    """Base class for transport errors."""

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        address: Optional[str] = None,
        **kwargs
    ):
        super().__init__(user_message, technical_message, **kwargs)
        self.address = address


class TransportNotConnectedError(TransportError):
    """A send was attempted on a transport whose socket is not open."""

    def __init__(self, address: Optional[str] = None):
        super().__init__(
            user_message="Client not connected. Call connect() first.",
            technical_message=f"Send attempted on disconnected transport for {address}",
            address=address,
            recoverable=True,
            recovery_hint="Open the transport with connect() or use it as a context manager"
        )


class FrameSizeError(TransportError):
    """RGB frame is smaller than the number of LEDs requires."""

    def __init__(self, required: int, actual: int, address: Optional[str] = None):
        super().__init__(
            user_message=f"RGB data array too small. Need at least {required} elements",
            technical_message=(
                f"Frame for {address} has {actual} channel values, {required} required"
            ),
            address=address
        )
        self.required = required
        self.actual = actual
