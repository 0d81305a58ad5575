"""
comingsoon/countdown/countdown.py

Countdown model and datetime parsing utilities.

Provides:
- TimeRemaining breakdown and the pure calculation behind it
- LaunchTarget, the fixed point in time the page counts down to
- Datetime parsing for configured launch dates
- Human-readable time formatting
"""

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


# =============================================================================
# Datetime Parsing
# =============================================================================

# "in 30 days", "in 2 weeks", "30 days"
RELATIVE_PATTERN = r"(?:in\s+)?(\d+)\s+(second|minute|hour|day|week)s?$"

# Patterns for absolute datetime parsing
DATETIME_PATTERNS = [
    # "2025-12-01 20:00" or "2025-12-01 20:00:00"
    (r"(\d{4})-(\d{2})-(\d{2})\s+(\d{1,2}):(\d{2})(?::(\d{2}))?$", "datetime"),
    # "2025-12-01T20:00:00"
    (r"(\d{4})-(\d{2})-(\d{2})T(\d{1,2}):(\d{2})(?::(\d{2}))?$", "datetime_iso"),
    # "12/01/2025 20:00" (US format)
    (r"(\d{1,2})/(\d{1,2})/(\d{4})\s+(\d{1,2}):(\d{2})$", "datetime_us"),
    # "2025-12-01" (midnight)
    (r"(\d{4})-(\d{2})-(\d{2})$", "date"),
]

# Time unit multipliers (in seconds)
TIME_UNITS = {
    "second": 1,
    "minute": 60,
    "hour": 3600,
    "day": 86400,
    "week": 604800,
}

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_datetime(time_str: str, now: Optional[datetime] = None) -> datetime:
    """
    Parse a launch date string into a datetime object.

    Supported formats:
    - "2025-12-01 20:00" or "2025-12-01 20:00:00"
    - "2025-12-01T20:00:00" and any ISO-8601 string with an offset
    - "12/01/2025 20:00" (US format: MM/DD/YYYY)
    - "2025-12-01" (midnight)
    - "in 30 days", "in 2 weeks", "12 hours"

    Times without an explicit offset are treated as UTC.

    Args:
        time_str: String representing a point in time.
        now: Reference time for relative formats (defaults to current UTC).

    Returns:
        Timezone-aware datetime in UTC.

    Raises:
        ValueError: If format not recognized or time is invalid.
    """
    text = time_str.strip()
    lowered = text.lower()

    match = re.match(RELATIVE_PATTERN, lowered)
    if match:
        if now is None:
            now = datetime.now(timezone.utc)
        seconds = int(match.group(1)) * TIME_UNITS[match.group(2)]
        return now + timedelta(seconds=seconds)

    for pattern, pattern_type in DATETIME_PATTERNS:
        match = re.match(pattern, text)
        if not match:
            continue
        groups = match.groups()

        if pattern_type in ("datetime", "datetime_iso"):
            year, month, day, hour, minute = (int(g) for g in groups[:5])
            second = int(groups[5]) if groups[5] else 0
        elif pattern_type == "datetime_us":
            month, day, year, hour, minute = (int(g) for g in groups)
            second = 0
        else:
            year, month, day = (int(g) for g in groups)
            hour = minute = second = 0

        try:
            return datetime(
                year, month, day, hour, minute, second,
                tzinfo=timezone.utc
            )
        except ValueError as e:
            raise ValueError(f"Invalid date/time values: {e}")

    # Offsets and fractional seconds
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(
            f"Couldn't parse '{time_str}'. "
            "Try: '2025-12-01 20:00', '2025-12-01T20:00:00+02:00', or 'in 30 days'"
        )
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_remaining(delta: timedelta) -> str:
    """
    Format a timedelta as a human-readable string.

    Args:
        delta: The time difference to format.

    Returns:
        Human-readable time string.
    """
    if delta.total_seconds() <= 0:
        return "time's up!"

    remaining = breakdown(int(delta.total_seconds()))
    days, hours, minutes, seconds = (
        remaining.days, remaining.hours, remaining.minutes, remaining.seconds
    )

    parts = []
    if days > 0:
        parts.append(f"{days} day{'s' if days != 1 else ''}")
    if hours > 0:
        parts.append(f"{hours} hour{'s' if hours != 1 else ''}")
    if minutes > 0:
        parts.append(f"{minutes} minute{'s' if minutes != 1 else ''}")
    if not parts:
        if seconds > 0:
            parts.append(f"{seconds} second{'s' if seconds != 1 else ''}")
        else:
            parts.append("less than a second")
    return ", ".join(parts)


# =============================================================================
# Time Remaining
# =============================================================================

def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def to_epoch_ms(moment: datetime) -> int:
    """Convert a datetime to milliseconds since the epoch (naive = UTC)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - EPOCH) // timedelta(milliseconds=1)


@dataclass(frozen=True)
class TimeRemaining:
    """
    Days/hours/minutes/seconds left until a target.

    All fields are non-negative; hours is within 0-23 and minutes and
    seconds within 0-59.
    """

    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    LABELS = ("Days", "Hours", "Minutes", "Seconds")

    @property
    def total_seconds(self) -> int:
        return (
            self.days * SECONDS_PER_DAY
            + self.hours * SECONDS_PER_HOUR
            + self.minutes * SECONDS_PER_MINUTE
            + self.seconds
        )

    @property
    def is_zero(self) -> bool:
        return self.total_seconds == 0

    def cells(self) -> List[Tuple[str, str]]:
        """Label and two-digit value for each display cell."""
        values = (self.days, self.hours, self.minutes, self.seconds)
        return [(label, f"{value:02d}") for label, value in zip(self.LABELS, values)]


def breakdown(total_seconds: int) -> TimeRemaining:
    """Split a non-negative number of whole seconds into a TimeRemaining."""
    total_seconds = max(0, total_seconds)
    return TimeRemaining(
        days=total_seconds // SECONDS_PER_DAY,
        hours=(total_seconds % SECONDS_PER_DAY) // SECONDS_PER_HOUR,
        minutes=(total_seconds % SECONDS_PER_HOUR) // SECONDS_PER_MINUTE,
        seconds=total_seconds % SECONDS_PER_MINUTE,
    )


def compute_time_remaining(target_ms: int, now: int) -> TimeRemaining:
    """
    Time left between ``now`` and ``target_ms``, both epoch milliseconds.

    Saturates at zero once the target has been reached.
    """
    diff_ms = max(0, target_ms - now)
    return breakdown(diff_ms // 1000)


# =============================================================================
# Launch Target
# =============================================================================

@dataclass(frozen=True)
class LaunchTarget:
    """
    The fixed point in time the countdown counts down to.

    Attributes:
        target_time: Launch moment (UTC).
        pinned: True when it came from a configured launch date, False
            when it was derived from the startup time.
    """

    target_time: datetime
    pinned: bool = False

    @classmethod
    def resolve(
        cls,
        launch_date: Optional[str] = None,
        default_days: int = 30,
        now: Optional[datetime] = None,
    ) -> "LaunchTarget":
        """
        Build the target from configuration.

        A configured ``launch_date`` pins the deadline. Without one the
        target is ``default_days`` from ``now``, which resets on every
        start.

        Raises:
            ValueError: If ``launch_date`` cannot be parsed.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        if launch_date:
            target = cls(target_time=parse_datetime(launch_date, now=now), pinned=True)
            logger.info(f"Launch date pinned to {target.target_time.isoformat()}")
            return target

        logger.warning(
            f"No launch_date configured; counting down {default_days} days "
            "from startup (the deadline moves on every restart)"
        )
        return cls(target_time=now + timedelta(days=default_days), pinned=False)

    @property
    def target_ms(self) -> int:
        return to_epoch_ms(self.target_time)

    def remaining(self, now: Optional[int] = None) -> TimeRemaining:
        """Time left at ``now`` (epoch ms, defaults to the current time)."""
        return compute_time_remaining(self.target_ms, now_ms() if now is None else now)

    def is_expired(self, now: Optional[int] = None) -> bool:
        return (now_ms() if now is None else now) >= self.target_ms

    def describe(self, now: Optional[int] = None) -> str:
        """Human-readable time left, e.g. '29 days, 23 hours, 59 minutes'."""
        return format_remaining(timedelta(seconds=self.remaining(now).total_seconds))
