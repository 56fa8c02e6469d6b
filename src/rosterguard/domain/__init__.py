"""Domain models and business rules for roster patterns."""

from rosterguard.domain.clock import (
    format_minutes,
    rest_hours,
    rest_minutes,
    to_minutes,
)
from rosterguard.domain.models import (
    AssignmentRef,
    CellRef,
    EndDateMode,
    MealType,
    PatternRow,
    RosterPattern,
    Shift,
    ShiftAssignment,
    ShiftClassification,
    TenantScheduleConfig,
    TimeFrame,
    Weekday,
    count_full_shifts,
    effective_end,
    effective_start,
    spans_midnight,
)
from rosterguard.domain.policies import DefaultPlacementPolicy, PlacementPolicy

__all__ = [
    # Clock arithmetic
    "format_minutes",
    "rest_hours",
    "rest_minutes",
    "to_minutes",
    # Models
    "AssignmentRef",
    "CellRef",
    "EndDateMode",
    "MealType",
    "PatternRow",
    "RosterPattern",
    "Shift",
    "ShiftAssignment",
    "ShiftClassification",
    "TenantScheduleConfig",
    "TimeFrame",
    "Weekday",
    "count_full_shifts",
    "effective_end",
    "effective_start",
    "spans_midnight",
    # Policies
    "DefaultPlacementPolicy",
    "PlacementPolicy",
]
