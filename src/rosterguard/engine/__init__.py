"""Overlap math and the pattern grid model."""

from rosterguard.engine.commands import (
    AddRow,
    AddShift,
    ClearCell,
    CommandOutcome,
    PasteInto,
    Rejection,
    RemoveRow,
    ReorderRow,
    ResizeWeeks,
    SetCell,
    apply_grid_command,
)
from rosterguard.engine.grid import (
    CellView,
    ConflictKind,
    DisplayShift,
    GridConflict,
    ResizeImpact,
    apply_resize_if_confirmed,
    cell_shifts,
    cell_view,
    check_placement,
    compute_resize_impact,
    copy_cells,
    day_sequence,
    derive_overflow,
    find_conflicts,
    new_conflicts,
    next_cell,
    ordered_days,
    previous_cell,
)
from rosterguard.engine.overlap import (
    PairCheck,
    check_rest,
    compare_consecutive,
    frames_overlap,
    is_rest_violation,
    shifts_overlap,
)

__all__ = [
    # Overlap & rest
    "PairCheck",
    "check_rest",
    "compare_consecutive",
    "frames_overlap",
    "is_rest_violation",
    "shifts_overlap",
    # Grid model
    "CellView",
    "ConflictKind",
    "DisplayShift",
    "GridConflict",
    "ResizeImpact",
    "apply_resize_if_confirmed",
    "cell_shifts",
    "cell_view",
    "check_placement",
    "compute_resize_impact",
    "copy_cells",
    "day_sequence",
    "derive_overflow",
    "find_conflicts",
    "new_conflicts",
    "next_cell",
    "ordered_days",
    "previous_cell",
    # Commands
    "AddRow",
    "AddShift",
    "ClearCell",
    "CommandOutcome",
    "PasteInto",
    "Rejection",
    "RemoveRow",
    "ReorderRow",
    "ResizeWeeks",
    "SetCell",
    "apply_grid_command",
]
