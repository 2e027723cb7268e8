"""Time sources for typing sessions.

The typing engine never reads time on its own. Callers take ``now_ms`` from
one of these clocks and pass it into every call.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Anything that reports a monotonic time in milliseconds."""

    def now_ms(self) -> int:
        ...


class MonotonicClock:
    """Clock backed by ``time.monotonic``."""

    def now_ms(self) -> int:
        """Milliseconds since an arbitrary fixed point."""
        return int(time.monotonic() * 1000)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start_ms: int = 0):
        self._now_ms = int(start_ms)

    def now_ms(self) -> int:
        """Current time as last set or advanced."""
        return self._now_ms

    def advance(self, ms: int) -> int:
        """Move the clock forward by ``ms`` and return the new time."""
        self._now_ms += int(ms)
        return self._now_ms

    def set(self, ms: int) -> None:
        """Jump to ``ms``, forwards or backwards."""
        self._now_ms = int(ms)
