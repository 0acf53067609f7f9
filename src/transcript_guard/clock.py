"""Injectable time source for synthesized timestamps and id fallbacks."""

from __future__ import annotations

import time
from typing import Callable

# Returns milliseconds since the epoch
Clock = Callable[[], int]


def system_clock() -> int:
    """Wall-clock time in milliseconds."""
    return time.time_ns() // 1_000_000
