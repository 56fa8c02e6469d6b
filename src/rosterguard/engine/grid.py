"""Pattern grid model: day sequencing, overflow derivation and placement.

A pattern is read as one linear sequence of day cells: row 1 in weekday
order starting at the pattern's start weekday, then row 2, and so on. In
continuous mode the sequence wraps, so the cell after the last row's last
day is row 1's first day. In specify mode the sequence is bounded.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from rosterguard.domain.models import (
    AssignmentRef,
    CellRef,
    PatternRow,
    RosterPattern,
    Shift,
    Weekday,
)
from rosterguard.domain.policies import DefaultPlacementPolicy, PlacementPolicy
from rosterguard.engine.overlap import overflow_segments, shifts_overlap

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


def ordered_days(start_weekday: Weekday = Weekday.MONDAY) -> list[Weekday]:
    """Weekdays rotated to begin at ``start_weekday``."""
    return [Weekday((int(start_weekday) + i) % DAYS_PER_WEEK) for i in range(DAYS_PER_WEEK)]


def day_sequence(pattern: RosterPattern) -> list[CellRef]:
    """Every cell of the pattern in calendar order."""
    days = ordered_days(pattern.start_weekday)
    return [CellRef(row_index, day) for row_index in range(pattern.weeks) for day in days]


def _position(pattern: RosterPattern, ref: CellRef) -> int:
    days = ordered_days(pattern.start_weekday)
    return ref.row_index * DAYS_PER_WEEK + days.index(ref.day)


def _cell_at(pattern: RosterPattern, position: int) -> CellRef:
    days = ordered_days(pattern.start_weekday)
    row_index, offset = divmod(position, DAYS_PER_WEEK)
    return CellRef(row_index, days[offset])


def previous_cell(pattern: RosterPattern, ref: CellRef) -> Optional[CellRef]:
    """The day before ``ref``, wrapping only in continuous mode."""
    position = _position(pattern, ref) - 1
    if position < 0:
        if not pattern.is_continuous:
            return None
        position = pattern.weeks * DAYS_PER_WEEK - 1
    return _cell_at(pattern, position)


def next_cell(pattern: RosterPattern, ref: CellRef) -> Optional[CellRef]:
    """The day after ``ref``, wrapping only in continuous mode."""
    position = _position(pattern, ref) + 1
    if position >= pattern.weeks * DAYS_PER_WEEK:
        if not pattern.is_continuous:
            return None
        position = 0
    return _cell_at(pattern, position)


def is_first_cell(pattern: RosterPattern, ref: CellRef) -> bool:
    return _position(pattern, ref) == 0


def is_last_cell(pattern: RosterPattern, ref: CellRef) -> bool:
    return _position(pattern, ref) == pattern.weeks * DAYS_PER_WEEK - 1


def cell_shifts(pattern: RosterPattern, row_index: int, day: Weekday) -> list[Shift]:
    return pattern.rows[row_index].shifts(day)


def derive_overflow(pattern: RosterPattern, row_index: int, day: Weekday) -> list[Shift]:
    """Overnight shifts from the previous day that spill into this cell.

    The previous day is the same row's previous weekday, the previous
    row's last day, or (continuous mode, row 1) the last row's last day.
    The very first cell of a specify-mode pattern has no predecessor.
    """
    prev = previous_cell(pattern, CellRef(row_index, day))
    if prev is None:
        return []
    return [s for s in cell_shifts(pattern, prev.row_index, prev.day) if s.spans_midnight]


@dataclass(frozen=True)
class DisplayShift:
    """A shift as drawn in a cell.

    Attributes:
        shift: The underlying shift; never modified for display.
        start: Minute of day the bar starts.
        end: Minute of day the bar ends.
        slot: Position in the cell list, or None for incoming overflow.
        is_overflow: True for the spill-over of the previous day's shift.
        cut_off: True when an overnight shift is truncated at midnight.
    """

    shift: Shift
    start: int
    end: int
    slot: Optional[int] = None
    is_overflow: bool = False
    cut_off: bool = False


@dataclass
class CellView:
    """Display data for one cell."""

    ref: CellRef
    shifts: list[DisplayShift] = field(default_factory=list)
    overflow: list[DisplayShift] = field(default_factory=list)


def cell_view(pattern: RosterPattern, row_index: int, day: Weekday) -> CellView:
    """Build display data for a cell.

    In specify mode the overnight shifts of the very last cell are shown
    ending at 00:00 with ``cut_off`` set; nothing follows them.
    """
    ref = CellRef(row_index, day)
    view = CellView(ref=ref)
    truncate = not pattern.is_continuous and is_last_cell(pattern, ref)

    for slot, shift in enumerate(cell_shifts(pattern, row_index, day)):
        if truncate and shift.spans_midnight:
            view.shifts.append(
                DisplayShift(shift, shift.effective_start, 0, slot=slot, cut_off=True)
            )
        else:
            view.shifts.append(
                DisplayShift(shift, shift.effective_start, shift.effective_end, slot=slot)
            )

    for shift in derive_overflow(pattern, row_index, day):
        spill = overflow_segments(shift)
        # A shift ending exactly at 00:00 spills nothing into this day
        if not spill:
            continue
        view.overflow.append(DisplayShift(shift, 0, spill[-1][1], is_overflow=True))

    return view


def check_placement(
    pattern: RosterPattern,
    row_index: int,
    day: Weekday,
    shift: Shift,
    policy: Optional[PlacementPolicy] = None,
) -> Optional[str]:
    """Explain why a shift cannot be placed in a cell.

    Args:
        pattern: Pattern being edited.
        row_index: Zero-based row of the target cell.
        day: Weekday of the target cell.
        shift: Shift to place.
        policy: Placement policy; defaults to one full shift per day.

    Returns:
        A human-readable reason, or None if the placement is allowed.
    """
    policy = policy or DefaultPlacementPolicy()
    ref = CellRef(row_index, day)
    existing = cell_shifts(pattern, row_index, day)

    if not policy.can_add(existing, shift):
        full = next(s for s in existing if not s.spans_midnight)
        return (
            f"{shift.code} cannot be added to {ref}: it already has a full shift "
            f"{full.describe()}"
        )

    for other in existing:
        if shifts_overlap(shift, other):
            return f"{shift.describe()} overlaps {other.describe()} in {ref}"

    prev = previous_cell(pattern, ref)
    for other in derive_overflow(pattern, row_index, day):
        if shifts_overlap(shift, other, b_is_overflow=True):
            return (
                f"{shift.describe()} overlaps overnight shift {other.describe()} "
                f"carried over from {prev}"
            )

    if shift.spans_midnight:
        nxt = next_cell(pattern, ref)
        if nxt is not None:
            for other in cell_shifts(pattern, nxt.row_index, nxt.day):
                if shifts_overlap(other, shift, b_is_overflow=True):
                    return (
                        f"Overnight part of {shift.describe()} overlaps "
                        f"{other.describe()} in {nxt}"
                    )

    return None


class ConflictKind(Enum):
    """Structural problems that make a grid illegal."""

    CAP_EXCEEDED = "cap_exceeded"
    CELL_OVERLAP = "cell_overlap"
    OVERFLOW_OVERLAP = "overflow_overlap"


@dataclass(frozen=True)
class GridConflict:
    """A structural conflict attached to one assignment.

    Attributes:
        ref: The assignment at fault.
        kind: Which rule it breaks.
        message: Human-readable description naming the shifts.
        shift: The shift at ``ref``.
        other: The shift it collides with, if any.
    """

    ref: AssignmentRef
    kind: ConflictKind
    message: str
    shift: Optional[Shift] = None
    other: Optional[Shift] = None


def find_conflicts(
    pattern: RosterPattern,
    policy: Optional[PlacementPolicy] = None,
) -> list[GridConflict]:
    """List every structural conflict in a pattern.

    The editor never creates these, but a saved pattern can acquire them
    when a referenced work schedule changes its time-frames.
    """
    policy = policy or DefaultPlacementPolicy()
    conflicts = []

    for ref in day_sequence(pattern):
        shifts = cell_shifts(pattern, ref.row_index, ref.day)
        overflow = derive_overflow(pattern, ref.row_index, ref.day)

        full_seen = 0
        for slot, shift in enumerate(shifts):
            aref = AssignmentRef(ref.row_index, ref.day, slot)
            if not shift.spans_midnight:
                full_seen += 1
                if full_seen > policy.max_full_shifts_per_day():
                    conflicts.append(GridConflict(
                        aref,
                        ConflictKind.CAP_EXCEEDED,
                        f"{ref} has more than {policy.max_full_shifts_per_day()} full shift(s)",
                        shift=shift,
                    ))

            for other in shifts[:slot]:
                if shifts_overlap(shift, other):
                    conflicts.append(GridConflict(
                        aref,
                        ConflictKind.CELL_OVERLAP,
                        f"{shift.describe()} overlaps {other.describe()} in {ref}",
                        shift=shift,
                        other=other,
                    ))

            for other in overflow:
                if shifts_overlap(shift, other, b_is_overflow=True):
                    conflicts.append(GridConflict(
                        aref,
                        ConflictKind.OVERFLOW_OVERLAP,
                        f"{shift.describe()} overlaps overnight shift {other.describe()} "
                        f"from the previous day",
                        shift=shift,
                        other=other,
                    ))

    return conflicts


def _conflict_key(conflict: GridConflict) -> tuple:
    return (
        conflict.kind,
        conflict.shift.id if conflict.shift else None,
        conflict.other.id if conflict.other else None,
    )


def new_conflicts(
    before: RosterPattern,
    after: RosterPattern,
    policy: Optional[PlacementPolicy] = None,
) -> list[GridConflict]:
    """Conflicts in ``after`` that ``before`` does not already have.

    Conflicts are matched by kind and the shifts involved rather than by
    position, so a conflict that only moved to another row is not new.
    """
    remaining = Counter(_conflict_key(c) for c in find_conflicts(before, policy))
    added = []
    for conflict in find_conflicts(after, policy):
        key = _conflict_key(conflict)
        if remaining[key]:
            remaining[key] -= 1
        else:
            added.append(conflict)
    return added


Clipboard = list[tuple[Shift, ...]]


def copy_cells(pattern: RosterPattern, refs: Iterable[CellRef]) -> Clipboard:
    """Copy the shifts of several cells, in the order given."""
    return [tuple(cell_shifts(pattern, ref.row_index, ref.day)) for ref in refs]


@dataclass(frozen=True)
class ResizeImpact:
    """What changing the number of weeks would do.

    Attributes:
        current_weeks: Rows in the pattern now.
        target_weeks: Rows requested.
        removed_weeks: Week numbers that would be dropped.
        non_empty_weeks: Dropped weeks that hold assignments.
        overflow_weeks: Dropped weeks that receive an overnight spill-over.
        conflicts: Overlaps the resized pattern would newly contain, such as
            the last day's overnight shift wrapping onto week 1's first shift.
    """

    current_weeks: int
    target_weeks: int
    removed_weeks: tuple[int, ...] = ()
    non_empty_weeks: tuple[int, ...] = ()
    overflow_weeks: tuple[int, ...] = ()
    conflicts: tuple[GridConflict, ...] = ()

    @property
    def requires_confirmation(self) -> bool:
        return bool(self.non_empty_weeks or self.overflow_weeks)

    @property
    def is_blocked(self) -> bool:
        """True if the resize cannot be applied even with confirmation."""
        return bool(self.conflicts)


def _resized(pattern: RosterPattern, weeks: int) -> RosterPattern:
    rows = list(pattern.rows[:weeks])
    while len(rows) < weeks:
        rows.append(PatternRow.empty(len(rows) + 1))
    return pattern.with_rows(rows)


def _receives_spill(pattern: RosterPattern, row_index: int) -> bool:
    return any(
        overflow_segments(shift)
        for day in ordered_days(pattern.start_weekday)
        for shift in derive_overflow(pattern, row_index, day)
    )


def compute_resize_impact(
    pattern: RosterPattern,
    weeks: int,
    policy: Optional[PlacementPolicy] = None,
) -> ResizeImpact:
    """Describe a resize without applying it."""
    if weeks < 1:
        raise ValueError(f"A pattern needs at least one week, got {weeks}")

    removed = tuple(range(weeks + 1, pattern.weeks + 1))
    non_empty = tuple(w for w in removed if not pattern.rows[w - 1].is_empty)
    overflow = tuple(w for w in removed if _receives_spill(pattern, w - 1))
    return ResizeImpact(
        current_weeks=pattern.weeks,
        target_weeks=weeks,
        removed_weeks=removed,
        non_empty_weeks=non_empty,
        overflow_weeks=overflow,
        conflicts=tuple(new_conflicts(pattern, _resized(pattern, weeks), policy)),
    )


def apply_resize_if_confirmed(
    pattern: RosterPattern,
    impact: ResizeImpact,
    confirmed: bool = False,
) -> RosterPattern:
    """Apply a resize computed by ``compute_resize_impact``.

    Returns the input pattern unchanged when the resize would create an
    overlap, or when the shrink needs confirmation and none was given.
    """
    if impact.is_blocked:
        logger.debug(
            "Resize of %s to %d weeks refused: %d new conflict(s)",
            pattern.display_name, impact.target_weeks, len(impact.conflicts),
        )
        return pattern
    if impact.requires_confirmation and not confirmed:
        logger.debug(
            "Resize of %s to %d weeks not confirmed; weeks %s kept",
            pattern.display_name, impact.target_weeks, impact.removed_weeks,
        )
        return pattern

    return _resized(pattern, impact.target_weeks)
