"""Clock-time / minute / axis-position conversions.

All day axes span 24h (1440 minutes). Positions are linear projections onto
an axis of arbitrary length (percent by default, pixels if the caller passes
a pixel width).
"""
import math
import re

from ..errors import InvalidFormatError, OutOfRangeError

DAY_MINUTES = 24 * 60
MAX_MINUTE = DAY_MINUTES - 1
DEFAULT_AXIS_LENGTH = 100.0

_CLOCK_RE = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")


def time_to_minutes(value: str) -> int:
    """Parse ``HH:MM`` into minutes since midnight (0..1439)."""
    if not isinstance(value, str):
        raise InvalidFormatError(f"expected HH:MM string, got {type(value).__name__}")
    m = _CLOCK_RE.match(value.strip())
    if not m:
        raise InvalidFormatError(f"invalid time {value!r}, expected HH:MM")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidFormatError(f"invalid time {value!r}, out of clock range")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    if minutes < 0 or minutes > MAX_MINUTE:
        raise OutOfRangeError(f"minutes {minutes} outside [0, {MAX_MINUTE}]")
    minutes = int(minutes)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minutes_to_position(minutes: float, total_minutes: int = DAY_MINUTES, axis_length: float = DEFAULT_AXIS_LENGTH) -> float:
    return minutes / total_minutes * axis_length


def position_to_minutes(offset: float, axis_length: float = DEFAULT_AXIS_LENGTH, total_minutes: int = DAY_MINUTES) -> float:
    if axis_length <= 0:
        raise OutOfRangeError("axis length must be positive")
    return offset / axis_length * total_minutes


def snap_minutes(raw: float, step: int) -> int:
    """Nearest multiple of ``step``; halves round up (09:07:30 -> 09:15 on a 15 grid)."""
    return int(math.floor(raw / step + 0.5)) * step


def clamp_minutes(value: int, low: int = 0, high: int = MAX_MINUTE) -> int:
    return max(low, min(high, value))


def duration_label(start_minutes: int, end_minutes: int) -> str:
    duration = end_minutes - start_minutes
    if duration <= 0:
        return ""
    hours, minutes = divmod(duration, 60)
    if hours == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"


def format_clock_12h(value: str) -> str:
    total = time_to_minutes(value)
    hour, minute = divmod(total, 60)
    suffix = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {suffix}"
