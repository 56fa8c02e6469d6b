"""Overlap and rest-time engine.

Shifts are compared in minute-of-day space. Every time-frame is decomposed
into half-open segments inside one day, so the four midnight cases (neither
frame spans, only one spans, both span) reduce to plain interval tests.

Overlap and rest are separate passes. A pair of shifts can overlap (a hard
error, rest counted as zero) or merely leave too short a gap (a soft
warning); the two results are never folded into one boolean.
"""

from dataclasses import dataclass

from rosterguard.domain.clock import (
    MINUTES_PER_DAY,
    MINUTES_PER_HOUR,
    intervals_overlap,
    rest_hours,
    rest_minutes,
    segments,
)
from rosterguard.domain.models import Shift, TenantScheduleConfig, TimeFrame

Segment = tuple[int, int]


def frame_segments(frame: TimeFrame) -> list[Segment]:
    """All minute-of-day segments occupied by a frame."""
    return segments(frame.start, frame.end)


def frames_overlap(a: TimeFrame, b: TimeFrame) -> bool:
    """Check whether two frames share any minute of the day."""
    return any(
        intervals_overlap(sa, sb)
        for sa in frame_segments(a)
        for sb in frame_segments(b)
    )


def all_segments(shift: Shift) -> list[Segment]:
    return [seg for tf in shift.time_frames for seg in frame_segments(tf)]


def day_segments(shift: Shift) -> list[Segment]:
    """Segments of a shift that fall on the day it is assigned to.

    Frames are walked in order; a midnight-crossing frame contributes its
    part up to midnight and every later frame belongs to the next day.
    """
    result = []
    for tf in shift.time_frames:
        if tf.spans_midnight:
            result.append((tf.start, MINUTES_PER_DAY))
            break
        result.append((tf.start, tf.end))
    return result


def overflow_segments(shift: Shift) -> list[Segment]:
    """Segments of a shift that spill over into the following day."""
    result = []
    crossed = False
    for tf in shift.time_frames:
        if crossed:
            if tf.spans_midnight:
                # A second crossing lands two days later
                result.append((tf.start, MINUTES_PER_DAY))
                break
            result.append((tf.start, tf.end))
        elif tf.spans_midnight:
            crossed = True
            if tf.end > 0:
                result.append((0, tf.end))
    return result


def shifts_overlap(shift_a: Shift, shift_b: Shift, b_is_overflow: bool = False) -> bool:
    """Check whether two shifts are active at the same time.

    Args:
        shift_a: A shift assigned to the day under inspection.
        shift_b: The other shift.
        b_is_overflow: If True, ``shift_b`` was assigned to the previous day
            and only its spill-over past midnight is compared, against the
            part of ``shift_a`` that lies on its own day.

    Returns:
        True if any pair of time-frames overlaps.
    """
    if b_is_overflow:
        a_segs = day_segments(shift_a)
        b_segs = overflow_segments(shift_b)
    else:
        a_segs = all_segments(shift_a)
        b_segs = all_segments(shift_b)
    return any(intervals_overlap(sa, sb) for sa in a_segs for sb in b_segs)


def check_rest(prev_shift_end: int, next_shift_start: int, crosses_day: bool) -> float:
    """Rest hours between two shifts; see ``clock.rest_hours``."""
    return rest_hours(prev_shift_end, next_shift_start, crosses_day)


def is_rest_violation(actual_rest_hours: float, config: TenantScheduleConfig) -> bool:
    """A gap is a violation only when strictly below the tenant minimum."""
    return actual_rest_hours < config.min_hours_between_shifts


@dataclass(frozen=True)
class PairCheck:
    """Outcome of comparing a shift with the one that follows it.

    Attributes:
        overlaps: True if the two shifts are active at the same time.
        rest_minutes: Gap between them; zero when they overlap.
    """

    overlaps: bool
    rest_minutes: int

    @property
    def rest_hours(self) -> float:
        return self.rest_minutes / MINUTES_PER_HOUR


def compare_consecutive(earlier: Shift, later: Shift, next_day: bool) -> PairCheck:
    """Compare a shift with the shift that follows it.

    Args:
        earlier: The shift that starts first.
        later: The shift that follows.
        next_day: True when ``later`` is assigned to the day after
            ``earlier``'s day.

    A same-day-ending shift followed by a next-day shift uses the
    cross-day gap. An overnight shift already ends on the next day, so its
    gap to a next-day shift is measured as a same-day gap after checking
    its spill-over for overlap.
    """
    if not next_day:
        if shifts_overlap(earlier, later):
            return PairCheck(overlaps=True, rest_minutes=0)
        gap = rest_minutes(earlier.effective_end, later.effective_start, crosses_day=False)
        return PairCheck(overlaps=False, rest_minutes=gap)

    if earlier.spans_midnight:
        if shifts_overlap(later, earlier, b_is_overflow=True):
            return PairCheck(overlaps=True, rest_minutes=0)
        gap = rest_minutes(earlier.effective_end, later.effective_start, crosses_day=False)
        return PairCheck(overlaps=False, rest_minutes=gap)

    gap = rest_minutes(earlier.effective_end, later.effective_start, crosses_day=True)
    return PairCheck(overlaps=False, rest_minutes=gap)
