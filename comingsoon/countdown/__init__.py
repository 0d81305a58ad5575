"""
comingsoon/countdown/__init__.py

Countdown engine for the coming-soon page.

Provides:
- A pure days/hours/minutes/seconds calculation
- The launch target, pinned by configuration or derived from startup
- A once-per-second asyncio ticker with guaranteed cancellation
"""

from .countdown import (
    LaunchTarget,
    TimeRemaining,
    compute_time_remaining,
    format_remaining,
    now_ms,
    parse_datetime,
    to_epoch_ms,
)
from .ticker import CountdownTicker

__all__ = [
    "CountdownTicker",
    "LaunchTarget",
    "TimeRemaining",
    "compute_time_remaining",
    "format_remaining",
    "now_ms",
    "parse_datetime",
    "to_epoch_ms",
]
