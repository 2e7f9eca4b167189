from __future__ import annotations

import time

from ..core.constants import MS_PER_HOUR


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds.

    Services take a `clock` callable defaulting to this one.
    """
    return int(time.time() * 1000)


def format_duration(ms: int) -> str:
    """Render milliseconds as HH:MM:SS (hours may exceed 24)."""
    total_seconds = max(int(ms), 0) // 1000
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def ms_to_hours(ms: int, *, digits: int = 2) -> float:
    return round(ms / MS_PER_HOUR, digits)
