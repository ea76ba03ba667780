"""Frame-rate gate shared by the rate-limited transports."""

import threading
import time
from typing import Callable


class FrameGate:
    """
    Lets at most one send through per minimum interval.

    The gate keeps the timestamp of the last accepted send. A caller reads
    it, and if the interval has passed, tries to swap in the current time;
    only the caller whose swap succeeds may send. Callers arriving early,
    or losing the swap to another thread, are told to skip the frame.
    """

    def __init__(self, min_interval: float, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            min_interval: Minimum seconds between accepted sends
            clock: Monotonic time source (injectable for tests)
        """
        self.min_interval = min_interval
        self._clock = clock
        self._last = float("-inf")
        self._lock = threading.Lock()

    def try_acquire(self) -> bool:
        """Return True if the caller may send now."""
        now = self._clock()
        last = self._last
        if now - last < self.min_interval:
            return False
        return self._compare_and_set(last, now)

    def reset(self) -> None:
        """Forget the last send so the next call is always accepted."""
        with self._lock:
            self._last = float("-inf")

    def _compare_and_set(self, expected: float, value: float) -> bool:
        with self._lock:
            if self._last != expected:
                return False
            self._last = value
            return True
