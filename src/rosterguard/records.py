"""Conversion from persisted records to domain objects.

Records use the row shapes of the hosted database: ``work_schedules`` rows
with nested ``work_schedule_timeframes``, ``roster_patterns`` rows whose
``pattern_rows`` column holds the grid as JSON, and ``tenant_config`` rows.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Optional, Union

from rosterguard.domain.clock import to_minutes
from rosterguard.domain.models import (
    EndDateMode,
    MealType,
    PatternRow,
    RosterPattern,
    Shift,
    ShiftAssignment,
    TenantScheduleConfig,
    TimeFrame,
    Weekday,
)
from rosterguard.errors import RecordError, TimeFormatError

logger = logging.getLogger(__name__)


def _clock(value, field_name: str, record_id) -> Optional[int]:
    if value in (None, "", ":"):
        return None
    try:
        return to_minutes(value)
    except TimeFormatError as e:
        raise RecordError(f"Invalid {field_name}: {e}", record_id) from e


def time_frame_from_record(record: dict, record_id=None) -> TimeFrame:
    """Build a TimeFrame from a ``work_schedule_timeframes`` row."""
    start = _clock(record.get("start_time"), "start_time", record_id)
    end = _clock(record.get("end_time"), "end_time", record_id)
    if start is None or end is None:
        raise RecordError("Time-frame needs start_time and end_time", record_id)

    meal_start = _clock(record.get("meal_start"), "meal_start", record_id)
    meal_end = _clock(record.get("meal_end"), "meal_end", record_id)
    meal_type = MealType.NONE
    if meal_start is not None or meal_end is not None:
        try:
            meal_type = MealType(record.get("meal_type") or "paid")
        except ValueError:
            raise RecordError(
                f"Unknown meal_type {record.get('meal_type')!r}", record_id
            ) from None

    return TimeFrame(
        start=start,
        end=end,
        meal_type=meal_type,
        meal_start=meal_start,
        meal_end=meal_end,
        order=int(record.get("frame_order") or 0),
    )


def shift_from_record(record: dict) -> Shift:
    """Build a Shift from a ``work_schedules`` row with its time-frames."""
    record_id = record.get("id")
    if not record_id:
        raise RecordError("Work schedule record has no id")
    frames = record.get("work_schedule_timeframes") or record.get("timeframes") or []
    return Shift(
        id=str(record_id),
        code=record.get("shift_id") or "",
        shift_type=record.get("shift_type") or "",
        time_frames=tuple(time_frame_from_record(tf, record_id) for tf in frames),
    )


def _assignment(entry: dict, schedules: dict[str, Shift], pattern_id) -> ShiftAssignment:
    """Resolve a cell entry against the current work schedules.

    Entries hold a denormalized copy of the work schedule. The current
    record wins when it is known; the copy is used otherwise.
    """
    schedule_id = entry.get("work_schedule_id") or entry.get("id")
    if not schedule_id:
        raise RecordError("Pattern cell entry has no work schedule id", pattern_id)
    schedule_id = str(schedule_id)

    if schedule_id in schedules:
        return ShiftAssignment(schedules[schedule_id])
    if entry.get("work_schedule_timeframes") or entry.get("timeframes"):
        return ShiftAssignment(shift_from_record({**entry, "id": schedule_id}))
    raise RecordError(f"Unknown work schedule {schedule_id}", pattern_id)


def _weekday(value, pattern_id) -> Weekday:
    if value in (None, ""):
        return Weekday.MONDAY
    try:
        if isinstance(value, int):
            return Weekday(value)
        return Weekday.from_label(str(value))
    except ValueError as e:
        raise RecordError(str(e), pattern_id) from e


def _date(value, field_name: str, pattern_id) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise RecordError(f"Invalid {field_name}: {value!r}", pattern_id) from None


def pattern_from_record(
    record: dict,
    schedules: Optional[dict[str, Shift]] = None,
) -> RosterPattern:
    """Build a RosterPattern from a ``roster_patterns`` row.

    Args:
        record: The row, with ``pattern_rows`` as a list or JSON text.
        schedules: Current work schedules by id, used to resolve cells.
    """
    schedules = schedules or {}
    pattern_id = record.get("id")
    if not pattern_id:
        raise RecordError("Roster pattern record has no id")

    raw_rows = record.get("pattern_rows") or []
    if isinstance(raw_rows, str):
        try:
            raw_rows = json.loads(raw_rows)
        except json.JSONDecodeError as e:
            raise RecordError(f"pattern_rows is not valid JSON: {e}", pattern_id) from e

    rows = []
    for raw in sorted(raw_rows, key=lambda r: int(r.get("number") or 0)):
        days = {}
        for day in Weekday:
            entries = raw.get(day.name.lower()) or []
            days[day] = [_assignment(e, schedules, pattern_id) for e in entries]
        rows.append(PatternRow(week_number=len(rows) + 1, days=days))
    if not rows:
        rows.append(PatternRow.empty(1))

    try:
        mode = EndDateMode(record.get("end_date_type") or "continuous")
    except ValueError:
        raise RecordError(
            f"Unknown end_date_type {record.get('end_date_type')!r}", pattern_id
        ) from None

    pattern = RosterPattern(
        id=str(pattern_id),
        name=record.get("shift_id") or record.get("name") or "",
        rows=rows,
        start_weekday=_weekday(record.get("start_day"), pattern_id),
        end_date_mode=mode,
        start_date=_date(record.get("start_date"), "start_date", pattern_id),
        end_date=_date(record.get("end_date"), "end_date", pattern_id),
        start_pattern_week=int(record.get("start_pattern_week") or 1),
    )
    logger.debug("Loaded pattern %s with %d week(s)", pattern.display_name, pattern.weeks)
    return pattern


@dataclass
class RecordBundle:
    """Everything needed to validate a tenant's patterns."""

    config: TenantScheduleConfig
    schedules: dict[str, Shift] = field(default_factory=dict)
    patterns: list[RosterPattern] = field(default_factory=list)

    def patterns_referencing(self, schedule_id: str) -> list[RosterPattern]:
        return [p for p in self.patterns if p.references(schedule_id)]


def bundle_from_dict(data: dict) -> RecordBundle:
    """Build a bundle from ``tenant_config``, ``work_schedules`` and ``roster_patterns``."""
    config = TenantScheduleConfig.from_record(data.get("tenant_config") or {})
    schedules = {}
    for record in data.get("work_schedules") or []:
        shift = shift_from_record(record)
        schedules[shift.id] = shift
    patterns = [pattern_from_record(r, schedules) for r in data.get("roster_patterns") or []]
    logger.info(
        "Loaded %d work schedule(s) and %d pattern(s)", len(schedules), len(patterns)
    )
    return RecordBundle(config=config, schedules=schedules, patterns=patterns)


def load_bundle(path: Union[str, Path]) -> RecordBundle:
    """Read a bundle from a JSON file."""
    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as e:
        raise RecordError(f"{path} is not valid JSON: {e}") from e
    return bundle_from_dict(data)
