"""Clock-time arithmetic on minute-of-day values.

All arithmetic is done in integer minutes within a 24-hour day. Conversion
to hours happens only at the reporting boundary (``rest_hours``), without
rounding; callers round for display.
"""

from datetime import time
from typing import Union

from rosterguard.errors import TimeFormatError

MINUTES_PER_DAY = 1440
MINUTES_PER_HOUR = 60


def to_minutes(value: Union[str, time]) -> int:
    """Convert a clock time to minutes after midnight.

    Args:
        value: A ``datetime.time`` or a string in ``HH:MM`` or ``HH:MM:SS``
            form (database ``time`` columns carry seconds).

    Returns:
        Minute of day in the range 0-1439.

    Raises:
        TimeFormatError: If the value is not a valid clock time.
    """
    if isinstance(value, time):
        return value.hour * MINUTES_PER_HOUR + value.minute

    if not isinstance(value, str):
        raise TimeFormatError(f"Unsupported clock time: {value!r}")

    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise TimeFormatError(f"Expected HH:MM, got {value!r}")
    try:
        hours, minutes = int(parts[0]), int(parts[1])
        seconds = int(parts[2]) if len(parts) == 3 else 0
    except ValueError:
        raise TimeFormatError(f"Expected HH:MM, got {value!r}") from None

    if not (0 <= hours < 24 and 0 <= minutes < 60 and 0 <= seconds < 60):
        raise TimeFormatError(f"Clock time out of range: {value!r}")
    return hours * MINUTES_PER_HOUR + minutes


def format_minutes(minute: int) -> str:
    """Format a minute-of-day as ``HH:MM``."""
    hours, mins = divmod(minute % MINUTES_PER_DAY, MINUTES_PER_HOUR)
    return f"{hours:02d}:{mins:02d}"


def span_minutes(start: int, end: int) -> int:
    """Duration of a clock span, wrapping past midnight when end < start."""
    if end < start:
        return MINUTES_PER_DAY - start + end
    return end - start


def segments(start: int, end: int) -> list[tuple[int, int]]:
    """Decompose a clock span into half-open intervals inside one day.

    A span that crosses midnight occupies ``[start, 1440)`` and ``[0, end)``.
    The empty tail of a span ending exactly at midnight is dropped.
    """
    if end < start:
        parts = [(start, MINUTES_PER_DAY)]
        if end > 0:
            parts.append((0, end))
        return parts
    return [(start, end)]


def intervals_overlap(a: tuple[int, int], b: tuple[int, int]) -> bool:
    """Half-open interval overlap test."""
    return a[0] < b[1] and b[0] < a[1]


def within_span(
    inner_start: int,
    inner_end: int,
    outer_start: int,
    outer_end: int,
) -> bool:
    """Check that one clock span lies inside another, wrap-aware.

    Both spans are unrolled onto a linear axis starting at ``outer_start``
    so a meal after midnight inside an overnight frame is handled.
    """
    outer_len = span_minutes(outer_start, outer_end)
    offset = (inner_start - outer_start) % MINUTES_PER_DAY
    inner_len = span_minutes(inner_start, inner_end)
    return offset + inner_len <= outer_len


def rest_minutes(end_a: int, start_b: int, crosses_day: bool) -> int:
    """Gap in minutes between the end of one shift and the start of the next.

    Args:
        end_a: Minute of day when the earlier shift ends.
        start_b: Minute of day when the later shift starts.
        crosses_day: True when ``end_a`` is on the previous day and
            ``start_b`` on the following one.

    Same-day gaps wrap modulo 24 hours. Cross-day gaps are always the time
    remaining until midnight plus the time after it.
    """
    if crosses_day:
        return (MINUTES_PER_DAY - end_a) + start_b
    return (start_b - end_a) % MINUTES_PER_DAY


def rest_hours(end_a: int, start_b: int, crosses_day: bool) -> float:
    """``rest_minutes`` expressed in hours, unrounded."""
    return rest_minutes(end_a, start_b, crosses_day) / MINUTES_PER_HOUR
