"""Tests for the pattern grid model."""

import pytest

from rosterguard.domain.models import (
    CellRef,
    EndDateMode,
    PatternRow,
    RosterPattern,
    Shift,
    ShiftAssignment,
    TimeFrame,
    Weekday,
)
from rosterguard.domain.policies import DefaultPlacementPolicy
from rosterguard.engine.grid import (
    ConflictKind,
    apply_resize_if_confirmed,
    cell_view,
    check_placement,
    compute_resize_impact,
    copy_cells,
    day_sequence,
    derive_overflow,
    find_conflicts,
    is_first_cell,
    is_last_cell,
    next_cell,
    ordered_days,
    previous_cell,
)


def make_shift(shift_id, *spans):
    frames = tuple(TimeFrame.from_times(s, e, order=i) for i, (s, e) in enumerate(spans))
    return Shift(id=shift_id, time_frames=frames)


def make_pattern(cells, weeks=1, mode=EndDateMode.CONTINUOUS, start=Weekday.MONDAY):
    """Build a pattern from ``{(row_index, day): [shift, ...]}``."""
    rows = [PatternRow.empty(i + 1) for i in range(weeks)]
    for (row_index, day), shifts in cells.items():
        rows[row_index] = rows[row_index].with_cell(day, [ShiftAssignment(s) for s in shifts])
    return RosterPattern(id="p", rows=rows, end_date_mode=mode, start_weekday=start)


@pytest.fixture
def night():
    return make_shift("N", ("22:00", "06:00"))


@pytest.fixture
def day_shift():
    return make_shift("D", ("08:00", "16:00"))


@pytest.fixture
def early():
    return make_shift("E", ("05:00", "13:00"))


class TestDaySequence:
    """Tests for weekday rotation and neighbouring cells."""

    def test_ordered_days_default(self):
        assert ordered_days()[0] is Weekday.MONDAY
        assert ordered_days()[-1] is Weekday.SUNDAY

    def test_ordered_days_rotated(self):
        days = ordered_days(Weekday.WEDNESDAY)
        assert days[0] is Weekday.WEDNESDAY
        assert days[-1] is Weekday.TUESDAY
        assert len(days) == 7

    def test_sequence_covers_every_cell(self):
        pattern = make_pattern({}, weeks=2)
        sequence = day_sequence(pattern)
        assert len(sequence) == 14
        assert sequence[7] == CellRef(1, Weekday.MONDAY)

    def test_next_cell_moves_to_next_row(self):
        pattern = make_pattern({}, weeks=2)
        assert next_cell(pattern, CellRef(0, Weekday.SUNDAY)) == CellRef(1, Weekday.MONDAY)

    def test_continuous_wraps_both_ways(self):
        pattern = make_pattern({}, weeks=2)
        assert next_cell(pattern, CellRef(1, Weekday.SUNDAY)) == CellRef(0, Weekday.MONDAY)
        assert previous_cell(pattern, CellRef(0, Weekday.MONDAY)) == CellRef(1, Weekday.SUNDAY)

    def test_specify_does_not_wrap(self):
        pattern = make_pattern({}, weeks=2, mode=EndDateMode.SPECIFY)
        assert next_cell(pattern, CellRef(1, Weekday.SUNDAY)) is None
        assert previous_cell(pattern, CellRef(0, Weekday.MONDAY)) is None

    def test_rotated_start_wraps_at_rotated_end(self):
        pattern = make_pattern({}, start=Weekday.THURSDAY)
        assert next_cell(pattern, CellRef(0, Weekday.WEDNESDAY)) == CellRef(0, Weekday.THURSDAY)
        assert is_first_cell(pattern, CellRef(0, Weekday.THURSDAY))
        assert is_last_cell(pattern, CellRef(0, Weekday.WEDNESDAY))


class TestDeriveOverflow:
    """Tests for overnight spill-over derivation."""

    def test_same_row_previous_day(self, night):
        pattern = make_pattern({(0, Weekday.MONDAY): [night]})
        assert derive_overflow(pattern, 0, Weekday.TUESDAY) == [night]
        assert derive_overflow(pattern, 0, Weekday.WEDNESDAY) == []

    def test_only_overnight_shifts_spill(self, day_shift):
        pattern = make_pattern({(0, Weekday.MONDAY): [day_shift]})
        assert derive_overflow(pattern, 0, Weekday.TUESDAY) == []

    def test_previous_row_last_day(self, night):
        pattern = make_pattern({(0, Weekday.SUNDAY): [night]}, weeks=2)
        assert derive_overflow(pattern, 1, Weekday.MONDAY) == [night]

    def test_single_row_wraparound(self, night):
        """Sunday's night shift lands on Monday of the same row."""
        pattern = make_pattern({(0, Weekday.SUNDAY): [night]})
        assert derive_overflow(pattern, 0, Weekday.MONDAY) == [night]

    def test_specify_first_cell_has_no_overflow(self, night):
        pattern = make_pattern({(0, Weekday.SUNDAY): [night]}, mode=EndDateMode.SPECIFY)
        assert derive_overflow(pattern, 0, Weekday.MONDAY) == []


class TestCellView:
    """Tests for display data."""

    def test_overflow_shown_until_spill_end(self, night):
        pattern = make_pattern({(0, Weekday.MONDAY): [night]})
        view = cell_view(pattern, 0, Weekday.TUESDAY)
        assert len(view.overflow) == 1
        assert view.overflow[0].is_overflow
        assert (view.overflow[0].start, view.overflow[0].end) == (0, 360)

    def test_shift_ending_at_midnight_shows_no_overflow(self):
        late = make_shift("M", ("16:00", "00:00"))
        pattern = make_pattern({(0, Weekday.MONDAY): [late]})
        assert cell_view(pattern, 0, Weekday.TUESDAY).overflow == []
        assert cell_view(pattern, 0, Weekday.MONDAY).shifts[0].end == 0

    def test_specify_last_cell_truncated_for_display_only(self, night):
        pattern = make_pattern({(0, Weekday.SUNDAY): [night]}, mode=EndDateMode.SPECIFY)
        view = cell_view(pattern, 0, Weekday.SUNDAY)
        shown = view.shifts[0]
        assert shown.cut_off is True
        assert shown.end == 0
        assert shown.shift.effective_end == 360
        assert pattern.cell(0, Weekday.SUNDAY)[0].shift.time_frames[0].end == 360

    def test_continuous_last_cell_not_truncated(self, night):
        pattern = make_pattern({(0, Weekday.SUNDAY): [night]})
        shown = cell_view(pattern, 0, Weekday.SUNDAY).shifts[0]
        assert shown.cut_off is False
        assert shown.end == 360


class TestCheckPlacement:
    """Tests for placement rules."""

    def test_empty_cell_accepts(self, day_shift):
        assert check_placement(make_pattern({}), 0, Weekday.MONDAY, day_shift) is None

    def test_second_full_shift_rejected(self, day_shift):
        pattern = make_pattern({(0, Weekday.MONDAY): [day_shift]})
        evening = make_shift("L", ("17:00", "21:00"))
        reason = check_placement(pattern, 0, Weekday.MONDAY, evening)
        assert reason is not None
        assert "full shift" in reason

    def test_overnight_shift_bypasses_cap(self, day_shift, night):
        pattern = make_pattern({(0, Weekday.MONDAY): [day_shift]})
        assert check_placement(pattern, 0, Weekday.MONDAY, night) is None

    def test_overnight_overlapping_full_shift_rejected(self, night):
        late = make_shift("L", ("15:00", "23:00"))
        pattern = make_pattern({(0, Weekday.MONDAY): [late]})
        assert "overlaps" in check_placement(pattern, 0, Weekday.MONDAY, night)

    def test_custom_cap(self, day_shift):
        pattern = make_pattern({(0, Weekday.MONDAY): [day_shift]})
        evening = make_shift("L", ("17:00", "21:00"))
        policy = DefaultPlacementPolicy(max_full_shifts=2)
        assert check_placement(pattern, 0, Weekday.MONDAY, evening, policy) is None

    def test_incoming_overflow_rejects(self, night, early):
        pattern = make_pattern({(0, Weekday.MONDAY): [night]})
        reason = check_placement(pattern, 0, Weekday.TUESDAY, early)
        assert "carried over" in reason

    def test_outgoing_overflow_rejects(self, night, early):
        pattern = make_pattern({(0, Weekday.TUESDAY): [early]})
        reason = check_placement(pattern, 0, Weekday.MONDAY, night)
        assert reason.startswith("Overnight part")

    def test_specify_last_cell_has_no_next_day(self, night, early):
        pattern = make_pattern({(0, Weekday.MONDAY): [early]}, mode=EndDateMode.SPECIFY)
        assert check_placement(pattern, 0, Weekday.SUNDAY, night) is None


class TestFindConflicts:
    """Tests for structural conflicts."""

    def test_clean_pattern(self, night, day_shift):
        pattern = make_pattern({
            (0, Weekday.MONDAY): [day_shift],
            (0, Weekday.TUESDAY): [night],
        })
        assert find_conflicts(pattern) == []

    def test_cap_and_cell_overlap(self, day_shift):
        overlapping = make_shift("X", ("12:00", "18:00"))
        pattern = make_pattern({(0, Weekday.MONDAY): [day_shift, overlapping]})
        kinds = {c.kind for c in find_conflicts(pattern)}
        assert kinds == {ConflictKind.CAP_EXCEEDED, ConflictKind.CELL_OVERLAP}

    def test_overflow_overlap(self, night, early):
        pattern = make_pattern({
            (0, Weekday.MONDAY): [night],
            (0, Weekday.TUESDAY): [early],
        })
        conflicts = find_conflicts(pattern)
        assert [c.kind for c in conflicts] == [ConflictKind.OVERFLOW_OVERLAP]
        assert conflicts[0].ref.cell == CellRef(0, Weekday.TUESDAY)


class TestClipboardAndResize:
    """Tests for copy and resize helpers."""

    def test_copy_cells_in_given_order(self, night, day_shift):
        pattern = make_pattern({
            (0, Weekday.MONDAY): [day_shift],
            (0, Weekday.FRIDAY): [night],
        })
        clipboard = copy_cells(pattern, [CellRef(0, Weekday.FRIDAY), CellRef(0, Weekday.MONDAY)])
        assert clipboard == [(night,), (day_shift,)]

    def test_growing_needs_no_confirmation(self):
        pattern = make_pattern({})
        impact = compute_resize_impact(pattern, 3)
        assert impact.requires_confirmation is False
        assert apply_resize_if_confirmed(pattern, impact).weeks == 3

    def test_shrinking_empty_weeks(self):
        pattern = make_pattern({}, weeks=3)
        impact = compute_resize_impact(pattern, 1)
        assert impact.removed_weeks == (2, 3)
        assert impact.requires_confirmation is False

    def test_shrinking_assigned_week_needs_confirmation(self, day_shift):
        pattern = make_pattern({(1, Weekday.MONDAY): [day_shift]}, weeks=2)
        impact = compute_resize_impact(pattern, 1)
        assert impact.non_empty_weeks == (2,)
        assert apply_resize_if_confirmed(pattern, impact) is pattern
        assert apply_resize_if_confirmed(pattern, impact, confirmed=True).weeks == 1

    def test_week_receiving_overflow_needs_confirmation(self, night):
        pattern = make_pattern({(0, Weekday.SUNDAY): [night]}, weeks=2)
        impact = compute_resize_impact(pattern, 1)
        assert impact.non_empty_weeks == ()
        assert impact.overflow_weeks == (2,)
        assert impact.requires_confirmation is True

    def test_week_after_midnight_end_needs_no_confirmation(self):
        """A shift ending at 00:00 spills nothing into the dropped week."""
        late = make_shift("M", ("16:00", "00:00"))
        pattern = make_pattern({(0, Weekday.SUNDAY): [late]}, weeks=2)
        impact = compute_resize_impact(pattern, 1)
        assert impact.overflow_weeks == ()
        assert impact.requires_confirmation is False

    def test_shrink_reports_wraparound_overlap(self, night, early):
        pattern = make_pattern(
            {(0, Weekday.MONDAY): [early], (0, Weekday.SUNDAY): [night]}, weeks=2
        )
        impact = compute_resize_impact(pattern, 1)
        assert impact.is_blocked
        assert [c.kind for c in impact.conflicts] == [ConflictKind.OVERFLOW_OVERLAP]
        assert impact.conflicts[0].ref.cell == CellRef(0, Weekday.MONDAY)
        assert impact.conflicts[0].other == night
        assert apply_resize_if_confirmed(pattern, impact, confirmed=True) is pattern

    def test_specify_shrink_does_not_wrap(self, night, early):
        pattern = make_pattern(
            {(0, Weekday.MONDAY): [early], (0, Weekday.SUNDAY): [night]},
            weeks=2,
            mode=EndDateMode.SPECIFY,
        )
        impact = compute_resize_impact(pattern, 1)
        assert not impact.is_blocked
        assert apply_resize_if_confirmed(pattern, impact, confirmed=True).weeks == 1

    def test_zero_weeks_rejected(self):
        with pytest.raises(ValueError):
            compute_resize_impact(make_pattern({}), 0)
