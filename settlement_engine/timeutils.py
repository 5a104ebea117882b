"""
Single source for "now" time. Supports deterministic mode for tests via
SETTLEMENT_DETERMINISTIC_TIME_MS (epoch milliseconds, e.g. 1767225600000).
"""

from __future__ import annotations

import os
import time


def now_ms() -> int:
    """
    Return current epoch time in milliseconds.
    If env SETTLEMENT_DETERMINISTIC_TIME_MS is set, return that value instead.
    """
    fixed = os.environ.get("SETTLEMENT_DETERMINISTIC_TIME_MS", "").strip()
    if fixed:
        return int(fixed)
    return int(time.time() * 1000)
