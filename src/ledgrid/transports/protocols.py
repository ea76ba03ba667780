"""Transport protocol and send results.

Every panel is reached through a DeviceTransport: something that can take
a flat RGB frame (``[R, G, B, R, G, B, ...]``, top-left LED first) and
deliver it to one device. The three implementations differ only in wire
format; callers never need to know which one they hold.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Union, runtime_checkable

from ledgrid.models import FailureReason

RgbFrame = Union[bytes, bytearray, Sequence[int]]


@dataclass(frozen=True)
class SendResult:
    """
    Outcome of one transport call.

    A result is truthy when the frame was delivered or deliberately
    skipped by a rate gate; it is falsy only on failure.
    """

    ok: bool
    skipped: bool = False
    reason: Optional[FailureReason] = None
    detail: str = ""

    @classmethod
    def success(cls) -> SendResult:
        return cls(ok=True)

    @classmethod
    def skipped_frame(cls) -> SendResult:
        """Frame dropped by the rate gate. Counts as success."""
        return cls(ok=True, skipped=True)

    @classmethod
    def failure(cls, reason: FailureReason, detail: str = "") -> SendResult:
        return cls(ok=False, reason=reason, detail=detail)

    def __bool__(self) -> bool:
        return self.ok

    def __str__(self) -> str:
        if self.ok:
            return "skipped" if self.skipped else "ok"
        return f"failed ({self.reason.value if self.reason else 'unknown'}): {self.detail}"


@runtime_checkable
class DeviceTransport(Protocol):
    """Protocol for delivering RGB frames to one LED device."""

    @property
    def address(self) -> str:
        """Host name or IP of the device."""
        ...

    def open(self) -> None:
        """Acquire the socket or session. Safe to call twice."""
        ...

    def close(self) -> None:
        """Release the socket or session. Safe to call twice."""
        ...

    def send_frame(self, rgb: RgbFrame) -> SendResult:
        """
        Deliver one frame.

        Args:
            rgb: Flat RGB values, 3 per LED, top-left LED first

        Returns:
            SendResult describing delivery, a rate-gated skip, or a failure
        """
        ...

    def turn_off(self) -> SendResult:
        """Black out or power off the device."""
        ...
