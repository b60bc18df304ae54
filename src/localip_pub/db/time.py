"""Time utilities for records and tokens."""

import time


def now_ms() -> int:
    """Return the current UNIX time in whole milliseconds."""
    return time.time_ns() // 1_000_000
