"""Time sources."""

import time
from typing import Protocol


class Clock(Protocol):
    """Anything that reports the current time in seconds."""

    def now(self) -> float:
        ...


class SystemClock:
    """Wall-clock time."""

    def now(self) -> float:
        return time.time()
