"""Domain models for roster pattern validation.

This module contains the core data structures shared by the engine and the
validators: time-frames and shifts (work schedules), the weekday ordinal,
roster pattern rows and patterns, cell references, and the tenant schedule
configuration.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum, IntEnum
from typing import Iterable, Iterator, Optional, Union

from rosterguard.domain.clock import (
    MINUTES_PER_HOUR,
    format_minutes,
    span_minutes,
    to_minutes,
)
from rosterguard.errors import ConfigError


class Weekday(IntEnum):
    """Day of week as an ordinal, matching ``date.weekday()``."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def label(self) -> str:
        """Display label, e.g. "Monday"."""
        return self.name.capitalize()

    @property
    def short(self) -> str:
        """Three-letter label, e.g. "Mon"."""
        return self.label[:3]

    @classmethod
    def from_label(cls, text: str) -> "Weekday":
        """Parse a weekday from a full or three-letter name (case-insensitive)."""
        key = text.strip().lower()
        for day in cls:
            if key in (day.name.lower(), day.short.lower()):
                return day
        raise ValueError(f"Unknown weekday: {text!r}")


class MealType(Enum):
    """Whether a meal break inside a time-frame is paid."""

    PAID = "paid"
    UNPAID = "unpaid"
    NONE = "none"


class ShiftClassification(Enum):
    """Column placement of a shift in the editor."""

    CONTINUOUS = "continuous"
    SPLIT = "split"


class EndDateMode(Enum):
    """How a roster pattern ends."""

    CONTINUOUS = "continuous"  # Repeats; last day wraps to the first
    SPECIFY = "specify"  # Bounded by an end date; no wraparound


@dataclass(frozen=True)
class TimeFrame:
    """One contiguous clock span within a shift.

    Attributes:
        start: Minute of day when the frame starts (0-1439).
        end: Minute of day when the frame ends (0-1439). ``end < start``
            means the frame crosses midnight.
        meal_type: Whether the meal break is paid.
        meal_start: Minute of day when the meal starts, if any.
        meal_end: Minute of day when the meal ends, if any.
        order: Position of the frame within its shift.
    """

    start: int
    end: int
    meal_type: MealType = MealType.NONE
    meal_start: Optional[int] = None
    meal_end: Optional[int] = None
    order: int = 0

    @classmethod
    def from_times(
        cls,
        start: str,
        end: str,
        meal_type: MealType = MealType.NONE,
        meal_start: Optional[str] = None,
        meal_end: Optional[str] = None,
        order: int = 0,
    ) -> "TimeFrame":
        """Create a time-frame from ``HH:MM`` strings."""
        return cls(
            start=to_minutes(start),
            end=to_minutes(end),
            meal_type=meal_type,
            meal_start=to_minutes(meal_start) if meal_start else None,
            meal_end=to_minutes(meal_end) if meal_end else None,
            order=order,
        )

    @property
    def spans_midnight(self) -> bool:
        """True when the frame ends on the following day."""
        return self.end < self.start

    @property
    def has_meal(self) -> bool:
        return self.meal_start is not None and self.meal_end is not None

    @property
    def duration_minutes(self) -> int:
        """Frame length in minutes, including any meal."""
        return span_minutes(self.start, self.end)

    @property
    def meal_minutes(self) -> int:
        if not self.has_meal:
            return 0
        return span_minutes(self.meal_start, self.meal_end)

    @property
    def paid_minutes(self) -> int:
        """Frame length less an unpaid meal."""
        if self.meal_type is MealType.UNPAID:
            return max(0, self.duration_minutes - self.meal_minutes)
        return self.duration_minutes

    def __str__(self) -> str:
        return f"{format_minutes(self.start)}-{format_minutes(self.end)}"


@dataclass(frozen=True)
class Shift:
    """A work schedule: one or more ordered time-frames.

    Attributes:
        id: Unique identifier of the work schedule record.
        code: Human shift identifier shown in the grid (e.g. "N1").
        shift_type: Tenant shift-type label.
        time_frames: Frames, kept sorted by their ``order`` field.
    """

    id: str
    code: str = ""
    shift_type: str = ""
    time_frames: tuple[TimeFrame, ...] = ()

    def __post_init__(self):
        ordered = tuple(sorted(self.time_frames, key=lambda tf: tf.order))
        object.__setattr__(self, "time_frames", ordered)
        if not self.code:
            object.__setattr__(self, "code", self.id)

    @property
    def spans_midnight(self) -> bool:
        """True if any frame crosses midnight."""
        return any(tf.spans_midnight for tf in self.time_frames)

    @property
    def effective_start(self) -> int:
        """Start of the first frame."""
        if not self.time_frames:
            raise ValueError(f"Shift {self.id} has no time-frames")
        return self.time_frames[0].start

    @property
    def effective_end(self) -> int:
        """End of the last frame."""
        if not self.time_frames:
            raise ValueError(f"Shift {self.id} has no time-frames")
        return self.time_frames[-1].end

    @property
    def total_minutes(self) -> int:
        return sum(tf.duration_minutes for tf in self.time_frames)

    @property
    def paid_minutes(self) -> int:
        return sum(tf.paid_minutes for tf in self.time_frames)

    def classification(self, split_label: str) -> ShiftClassification:
        """Classify as split only when the type equals the tenant's split label."""
        if self.shift_type and self.shift_type == split_label:
            return ShiftClassification.SPLIT
        return ShiftClassification.CONTINUOUS

    def with_time_frames(self, frames: Iterable[TimeFrame]) -> "Shift":
        """Copy of this shift with its time-frames replaced."""
        return replace(self, time_frames=tuple(frames))

    def describe(self) -> str:
        """Short label such as ``N1 (22:00-06:00)``."""
        frames = ", ".join(str(tf) for tf in self.time_frames)
        return f"{self.code} ({frames})"


def spans_midnight(shift: Shift) -> bool:
    return shift.spans_midnight


def effective_start(shift: Shift) -> int:
    return shift.effective_start


def effective_end(shift: Shift) -> int:
    return shift.effective_end


def count_full_shifts(shifts: Iterable[Shift]) -> int:
    """Count shifts that stay within one day.

    Overnight shifts are not counted; the "one full shift per day" cap only
    applies to shifts that do not spill into the next day.
    """
    return sum(1 for shift in shifts if not shift.spans_midnight)


@dataclass(frozen=True)
class ShiftAssignment:
    """A shift placed in a pattern cell.

    The pattern keeps a denormalized copy of the work schedule for display;
    ``schedule_id`` is the reference back to the work schedule record.
    """

    shift: Shift

    @property
    def schedule_id(self) -> str:
        return self.shift.id


@dataclass(frozen=True)
class CellRef:
    """Position of a day cell in a pattern (zero-based row index)."""

    row_index: int
    day: Weekday

    def __str__(self) -> str:
        return f"week {self.row_index + 1} {self.day.short}"


@dataclass(frozen=True)
class AssignmentRef:
    """Identity of one assignment: its cell and its slot in the cell list."""

    row_index: int
    day: Weekday
    slot: int

    @property
    def cell(self) -> CellRef:
        return CellRef(self.row_index, self.day)

    def __str__(self) -> str:
        return f"{self.cell} #{self.slot + 1}"


@dataclass
class PatternRow:
    """One week of a roster pattern.

    Attributes:
        week_number: 1-based position of the row in the pattern.
        days: Assignments per weekday; missing days are empty.
    """

    week_number: int
    days: dict[Weekday, list[ShiftAssignment]] = field(default_factory=dict)

    @classmethod
    def empty(cls, week_number: int) -> "PatternRow":
        return cls(week_number=week_number)

    def cell(self, day: Weekday) -> list[ShiftAssignment]:
        return self.days.get(day, [])

    def shifts(self, day: Weekday) -> list[Shift]:
        return [a.shift for a in self.cell(day)]

    def with_cell(self, day: Weekday, assignments: Iterable[ShiftAssignment]) -> "PatternRow":
        """Copy of this row with one cell replaced."""
        days = {d: list(cell) for d, cell in self.days.items()}
        days[day] = list(assignments)
        return PatternRow(week_number=self.week_number, days=days)

    def renumbered(self, week_number: int) -> "PatternRow":
        return PatternRow(
            week_number=week_number,
            days={d: list(cell) for d, cell in self.days.items()},
        )

    @property
    def is_empty(self) -> bool:
        return not any(self.days.values())

    def iter_assignments(self) -> Iterator[tuple[Weekday, int, ShiftAssignment]]:
        for day in Weekday:
            for slot, assignment in enumerate(self.cell(day)):
                yield day, slot, assignment


@dataclass
class RosterPattern:
    """A repeating week-by-weekday grid of shift assignments.

    Attributes:
        id: Unique identifier of the pattern record.
        name: Pattern identifier shown to users.
        rows: Week rows, in order.
        start_weekday: Weekday of the first column.
        end_date_mode: Continuous (wraps) or specify (bounded).
        start_date: First date the pattern applies to.
        end_date: Last date, for specify mode.
        start_pattern_week: Row the pattern starts on for multi-week cycles.
    """

    id: str
    name: str = ""
    rows: list[PatternRow] = field(default_factory=lambda: [PatternRow.empty(1)])
    start_weekday: Weekday = Weekday.MONDAY
    end_date_mode: EndDateMode = EndDateMode.CONTINUOUS
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_pattern_week: int = 1

    @property
    def weeks(self) -> int:
        return len(self.rows)

    @property
    def is_continuous(self) -> bool:
        return self.end_date_mode is EndDateMode.CONTINUOUS

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def cell(self, row_index: int, day: Weekday) -> list[ShiftAssignment]:
        return self.rows[row_index].cell(day)

    def references(self, schedule_id: str) -> bool:
        """True if any cell assigns the given work schedule."""
        return any(
            assignment.schedule_id == schedule_id
            for row in self.rows
            for _, _, assignment in row.iter_assignments()
        )

    def with_rows(self, rows: Iterable[PatternRow]) -> "RosterPattern":
        """Copy of this pattern with rows replaced and renumbered from 1."""
        renumbered = [row.renumbered(i + 1) for i, row in enumerate(rows)]
        return replace(self, rows=renumbered)


@dataclass
class TenantScheduleConfig:
    """Tenant settings consumed by the validators.

    Attributes:
        min_hours_between_shifts: Minimum rest between consecutive shifts,
            0-23 hours in quarter-hour steps.
        split_shift_label: Shift-type label that marks a split shift.
    """

    min_hours_between_shifts: float = 0.0
    split_shift_label: str = "Split"

    def __post_init__(self):
        hours = self.min_hours_between_shifts
        if hours is None or not 0 <= hours <= 23:
            raise ConfigError(
                f"min_hours_between_shifts must be between 0 and 23, got {hours!r}"
            )
        if (hours * 4) != int(hours * 4):
            raise ConfigError(
                f"min_hours_between_shifts must be in quarter hours, got {hours!r}"
            )

    @property
    def min_rest_minutes(self) -> int:
        return int(self.min_hours_between_shifts * MINUTES_PER_HOUR)

    @classmethod
    def from_record(cls, record: dict) -> "TenantScheduleConfig":
        """Build from a ``tenant_config`` row.

        ``shift_types`` may be a mapping with a ``split`` key, or a list of
        ``{"name": ..., "is_split": bool}`` entries.
        """
        hours: Union[int, float, None] = record.get("min_hours_between_shifts")
        split_label = cls.split_shift_label
        shift_types = record.get("shift_types")
        if isinstance(shift_types, dict) and shift_types.get("split"):
            split_label = shift_types["split"]
        elif isinstance(shift_types, list):
            for entry in shift_types:
                if isinstance(entry, dict) and entry.get("is_split"):
                    split_label = entry.get("name", split_label)
                    break
        return cls(
            min_hours_between_shifts=float(hours) if hours is not None else 0.0,
            split_shift_label=split_label,
        )
