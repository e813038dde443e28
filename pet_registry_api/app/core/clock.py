"""Time source used to stamp records.

Timestamps are integer nanoseconds since the Unix epoch.  The service
takes any zero-argument callable returning such an integer, which lets
tests substitute a deterministic clock.
"""

import time
from typing import Callable

Clock = Callable[[], int]


def system_clock() -> int:
    """Return the current wall-clock time in nanoseconds."""
    return time.time_ns()
