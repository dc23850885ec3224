# src/devicekey_auth/db/time.py
"""Time utilities for database models."""

import time


def now_millis() -> int:
    """Return the current time as epoch milliseconds."""
    return time.time_ns() // 1_000_000
