"""Time sources.

Cooldowns and debounce windows compare against an injectable Clock so
tests can advance time deterministically. Production uses the monotonic
clock; wall-clock time is only used for response timestamps.
"""

import time
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def __call__(self) -> float:
        """Return the current time in seconds."""
        ...


class MonotonicClock:
    def __call__(self) -> float:
        return time.monotonic()


def ms_to_seconds(ms: int) -> float:
    return ms / 1000.0


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)
