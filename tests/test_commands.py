"""Tests for grid edit commands."""

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
from rosterguard.engine.commands import (
    AddRow,
    AddShift,
    ClearCell,
    PasteInto,
    RemoveRow,
    ReorderRow,
    ResizeWeeks,
    SetCell,
    apply_grid_command,
)


def make_shift(shift_id, *spans):
    frames = tuple(TimeFrame.from_times(s, e, order=i) for i, (s, e) in enumerate(spans))
    return Shift(id=shift_id, time_frames=frames)


DAY = make_shift("D", ("08:00", "16:00"))
LATE = make_shift("L", ("14:00", "22:00"))
NIGHT = make_shift("N", ("22:00", "06:00"))
EARLY = make_shift("E", ("05:00", "13:00"))


@pytest.fixture
def pattern():
    """Two-week continuous pattern with a day shift on week 1 Monday."""
    row = PatternRow.empty(1).with_cell(Weekday.MONDAY, [ShiftAssignment(DAY)])
    return RosterPattern(id="p", name="Test", rows=[row, PatternRow.empty(2)])


class TestRowCommands:
    """Tests for adding, removing and reordering rows."""

    def test_add_row(self, pattern):
        outcome = apply_grid_command(pattern, AddRow())
        assert outcome.accepted
        assert outcome.pattern.weeks == 3
        assert outcome.pattern.rows[2].week_number == 3
        assert pattern.weeks == 2

    def test_remove_row_renumbers(self, pattern):
        outcome = apply_grid_command(pattern, RemoveRow(0))
        assert outcome.accepted
        assert outcome.pattern.weeks == 1
        assert outcome.pattern.rows[0].week_number == 1
        assert outcome.pattern.rows[0].is_empty

    def test_last_row_cannot_be_removed(self):
        outcome = apply_grid_command(RosterPattern(id="p"), RemoveRow(0))
        assert not outcome.accepted
        assert outcome.pattern.weeks == 1

    def test_remove_missing_row(self, pattern):
        outcome = apply_grid_command(pattern, RemoveRow(5))
        assert not outcome.accepted
        assert outcome.pattern is pattern

    def test_reorder_continuous(self, pattern):
        outcome = apply_grid_command(pattern, ReorderRow(0, 1))
        assert outcome.accepted
        assert outcome.pattern.rows[0].is_empty
        assert outcome.pattern.rows[1].shifts(Weekday.MONDAY) == [DAY]
        assert [r.week_number for r in outcome.pattern.rows] == [1, 2]

    def test_reorder_rejected_in_specify_mode(self, pattern):
        specify = RosterPattern(id="p", rows=pattern.rows, end_date_mode=EndDateMode.SPECIFY)
        outcome = apply_grid_command(specify, ReorderRow(0, 1))
        assert not outcome.accepted
        assert outcome.pattern is specify


class TestRowEditsKeepGridLegal:
    """Row moves must not slide an overnight shift onto the next morning."""

    @pytest.fixture
    def spaced(self):
        """Week 1 Sunday night, empty week 2, week 3 Monday early."""
        first = PatternRow.empty(1).with_cell(Weekday.SUNDAY, [ShiftAssignment(NIGHT)])
        third = PatternRow.empty(3).with_cell(Weekday.MONDAY, [ShiftAssignment(EARLY)])
        return RosterPattern(id="p", rows=[first, PatternRow.empty(2), third])

    def test_remove_row_creating_overlap_rejected(self, spaced):
        outcome = apply_grid_command(spaced, RemoveRow(1))
        assert not outcome.accepted
        assert outcome.pattern is spaced
        rejection = outcome.rejections[0]
        assert rejection.cell == CellRef(1, Weekday.MONDAY)
        assert rejection.shift == EARLY
        assert "E (05:00-13:00)" in rejection.reason
        assert "N (22:00-06:00)" in rejection.reason

    def test_reorder_creating_overlap_rejected(self, spaced):
        outcome = apply_grid_command(spaced, ReorderRow(2, 1))
        assert not outcome.accepted
        assert outcome.pattern is spaced
        assert outcome.rejections[0].cell == CellRef(1, Weekday.MONDAY)

    def test_remove_other_row_still_allowed(self, spaced):
        outcome = apply_grid_command(spaced, RemoveRow(2))
        assert outcome.accepted
        assert outcome.pattern.weeks == 2

    def test_existing_conflict_does_not_block_reorder(self):
        """A conflict that only moves to another week is not a new one."""
        clash = (
            PatternRow.empty(1)
            .with_cell(Weekday.MONDAY, [ShiftAssignment(NIGHT)])
            .with_cell(Weekday.TUESDAY, [ShiftAssignment(EARLY)])
        )
        pattern = RosterPattern(id="p", rows=[clash, PatternRow.empty(2)])
        outcome = apply_grid_command(pattern, ReorderRow(0, 1))
        assert outcome.accepted
        assert outcome.pattern.rows[1].shifts(Weekday.TUESDAY) == [EARLY]


class TestCellCommands:
    """Tests for cell edits."""

    def test_add_shift(self, pattern):
        outcome = apply_grid_command(pattern, AddShift(0, Weekday.TUESDAY, LATE))
        assert outcome.accepted
        assert outcome.pattern.rows[0].shifts(Weekday.TUESDAY) == [LATE]

    def test_add_shift_rejected_by_cap(self, pattern):
        outcome = apply_grid_command(pattern, AddShift(0, Weekday.MONDAY, LATE))
        assert not outcome.accepted
        assert outcome.rejections[0].cell == CellRef(0, Weekday.MONDAY)
        assert outcome.rejections[0].shift == LATE
        assert outcome.pattern.rows[0].shifts(Weekday.MONDAY) == [DAY]

    def test_add_night_next_to_day_shift(self, pattern):
        outcome = apply_grid_command(pattern, AddShift(0, Weekday.MONDAY, NIGHT))
        assert outcome.accepted
        assert outcome.pattern.rows[0].shifts(Weekday.MONDAY) == [DAY, NIGHT]

    def test_add_shift_rejected_by_overflow(self, pattern):
        with_night = apply_grid_command(pattern, AddShift(0, Weekday.WEDNESDAY, NIGHT)).pattern
        outcome = apply_grid_command(with_night, AddShift(0, Weekday.THURSDAY, EARLY))
        assert not outcome.accepted
        assert outcome.pattern.rows[0].shifts(Weekday.THURSDAY) == []

    def test_set_cell_replaces_contents(self, pattern):
        outcome = apply_grid_command(pattern, SetCell(0, Weekday.MONDAY, (LATE,)))
        assert outcome.accepted
        assert outcome.pattern.rows[0].shifts(Weekday.MONDAY) == [LATE]

    def test_set_cell_reports_each_rejection(self, pattern):
        outcome = apply_grid_command(pattern, SetCell(0, Weekday.FRIDAY, (DAY, LATE)))
        assert len(outcome.rejections) == 1
        assert outcome.pattern.rows[0].shifts(Weekday.FRIDAY) == [DAY]

    def test_clear_cell(self, pattern):
        outcome = apply_grid_command(pattern, ClearCell(0, Weekday.MONDAY))
        assert outcome.pattern.rows[0].is_empty


class TestPaste:
    """Tests for pasting copied cells."""

    def test_single_cell_broadcast(self, pattern):
        targets = (CellRef(0, Weekday.TUESDAY), CellRef(0, Weekday.WEDNESDAY))
        outcome = apply_grid_command(pattern, PasteInto(targets, [(DAY,)]))
        assert outcome.accepted
        assert outcome.pattern.rows[0].shifts(Weekday.TUESDAY) == [DAY]
        assert outcome.pattern.rows[0].shifts(Weekday.WEDNESDAY) == [DAY]

    def test_paired_paste(self, pattern):
        targets = (CellRef(1, Weekday.MONDAY), CellRef(1, Weekday.TUESDAY))
        outcome = apply_grid_command(pattern, PasteInto(targets, [(DAY,), (LATE,)]))
        assert outcome.pattern.rows[1].shifts(Weekday.MONDAY) == [DAY]
        assert outcome.pattern.rows[1].shifts(Weekday.TUESDAY) == [LATE]

    def test_size_mismatch_rejected(self, pattern):
        targets = (CellRef(1, Weekday.MONDAY),) * 3
        outcome = apply_grid_command(pattern, PasteInto(targets, [(DAY,), (LATE,)]))
        assert not outcome.accepted
        assert outcome.pattern is pattern

    def test_partial_paste_keeps_accepted_cells(self, pattern):
        """A rejected target does not undo the targets that were accepted."""
        targets = (CellRef(0, Weekday.MONDAY), CellRef(0, Weekday.TUESDAY))
        outcome = apply_grid_command(pattern, PasteInto(targets, [(LATE,)]))
        assert len(outcome.rejections) == 1
        assert outcome.rejections[0].cell == CellRef(0, Weekday.MONDAY)
        assert outcome.pattern.rows[0].shifts(Weekday.TUESDAY) == [LATE]


class TestResize:
    """Tests for the resize command."""

    def test_shrink_with_content_needs_confirmation(self, pattern):
        moved = apply_grid_command(pattern, ReorderRow(0, 1)).pattern
        outcome = apply_grid_command(moved, ResizeWeeks(1))
        assert not outcome.accepted
        assert outcome.pattern.weeks == 2

    def test_confirmed_shrink(self, pattern):
        moved = apply_grid_command(pattern, ReorderRow(0, 1)).pattern
        outcome = apply_grid_command(moved, ResizeWeeks(1, confirmed=True))
        assert outcome.accepted
        assert outcome.pattern.weeks == 1

    def test_zero_weeks_rejected(self, pattern):
        assert not apply_grid_command(pattern, ResizeWeeks(0)).accepted

    def test_confirmed_shrink_creating_wraparound_overlap_rejected(self):
        """Dropping week 2 wraps Sunday's night shift onto Monday's early shift."""
        row = (
            PatternRow.empty(1)
            .with_cell(Weekday.MONDAY, [ShiftAssignment(EARLY)])
            .with_cell(Weekday.SUNDAY, [ShiftAssignment(NIGHT)])
        )
        pattern = RosterPattern(id="p", rows=[row, PatternRow.empty(2)])
        outcome = apply_grid_command(pattern, ResizeWeeks(1, confirmed=True))
        assert not outcome.accepted
        assert outcome.pattern is pattern
        assert outcome.rejections[0].cell == CellRef(0, Weekday.MONDAY)
        assert outcome.rejections[0].shift == EARLY


def test_unknown_command_raises(pattern):
    with pytest.raises(TypeError):
        apply_grid_command(pattern, "add row")
