"""Grid edit commands and the reducer that applies them.

Every edit of a pattern is a command value. ``apply_grid_command`` never
mutates its input; it returns a ``CommandOutcome`` carrying the new pattern
and any rejections. A rejected placement leaves its cell untouched and is
always reported, never dropped or merged.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from rosterguard.domain.models import (
    CellRef,
    PatternRow,
    RosterPattern,
    Shift,
    ShiftAssignment,
    Weekday,
)
from rosterguard.domain.policies import DefaultPlacementPolicy, PlacementPolicy
from rosterguard.engine.grid import (
    Clipboard,
    GridConflict,
    apply_resize_if_confirmed,
    check_placement,
    compute_resize_impact,
    new_conflicts,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddRow:
    """Append an empty week row."""


@dataclass(frozen=True)
class RemoveRow:
    """Remove a row and renumber the rows after it."""

    row_index: int


@dataclass(frozen=True)
class SetCell:
    """Replace the contents of a cell, checking each shift in turn."""

    row_index: int
    day: Weekday
    shifts: tuple[Shift, ...]


@dataclass(frozen=True)
class AddShift:
    """Drop one shift into a cell."""

    row_index: int
    day: Weekday
    shift: Shift


@dataclass(frozen=True)
class ClearCell:
    row_index: int
    day: Weekday


@dataclass(frozen=True)
class ReorderRow:
    """Move a row to a new position (continuous patterns only)."""

    from_index: int
    to_index: int


@dataclass(frozen=True)
class PasteInto:
    """Paste copied cells into target cells.

    A single-cell clipboard is pasted into every target; otherwise clipboard
    entries are paired with targets in order.
    """

    targets: tuple[CellRef, ...]
    clipboard: Clipboard


@dataclass(frozen=True)
class ResizeWeeks:
    """Change the number of week rows."""

    weeks: int
    confirmed: bool = False


GridCommand = Union[AddRow, RemoveRow, SetCell, AddShift, ClearCell, ReorderRow, PasteInto, ResizeWeeks]


@dataclass(frozen=True)
class Rejection:
    """A part of a command that was not applied."""

    reason: str
    cell: Optional[CellRef] = None
    shift: Optional[Shift] = None

    def __str__(self) -> str:
        if self.cell is not None:
            return f"{self.cell}: {self.reason}"
        return self.reason


@dataclass
class CommandOutcome:
    """Result of applying a command."""

    pattern: RosterPattern
    rejections: list[Rejection] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return not self.rejections


def _replace_cell(
    pattern: RosterPattern,
    row_index: int,
    day: Weekday,
    shifts: list[Shift],
) -> RosterPattern:
    rows = list(pattern.rows)
    rows[row_index] = rows[row_index].with_cell(day, [ShiftAssignment(s) for s in shifts])
    return pattern.with_rows(rows)


def _place(
    pattern: RosterPattern,
    row_index: int,
    day: Weekday,
    shifts: tuple[Shift, ...],
    policy: PlacementPolicy,
    outcome: CommandOutcome,
) -> RosterPattern:
    """Add shifts to a cell one at a time, recording each rejection."""
    ref = CellRef(row_index, day)
    for shift in shifts:
        reason = check_placement(pattern, row_index, day, shift, policy)
        if reason is not None:
            logger.debug("Rejected %s in %s: %s", shift.code, ref, reason)
            outcome.rejections.append(Rejection(reason, cell=ref, shift=shift))
            continue
        current = list(pattern.rows[row_index].shifts(day))
        pattern = _replace_cell(pattern, row_index, day, current + [shift])
    return pattern


def _conflict_rejection(conflict: GridConflict) -> Rejection:
    return Rejection(conflict.message, cell=conflict.ref.cell, shift=conflict.shift)


def _keep_if_clean(
    pattern: RosterPattern,
    changed: RosterPattern,
    policy: PlacementPolicy,
    outcome: CommandOutcome,
) -> RosterPattern:
    """Return ``changed`` unless it holds an overlap ``pattern`` did not have.

    Row moves change which day follows which, so an overnight shift can
    land on the next morning's shift without any cell being edited.
    """
    added = new_conflicts(pattern, changed, policy)
    for conflict in added:
        logger.debug("Rejected row edit of %s: %s", pattern.display_name, conflict.message)
        outcome.rejections.append(_conflict_rejection(conflict))
    return pattern if added else changed


def _check_row(pattern: RosterPattern, row_index: int) -> Optional[str]:
    if not 0 <= row_index < pattern.weeks:
        return f"Week {row_index + 1} does not exist"
    return None


def apply_grid_command(
    pattern: RosterPattern,
    command: GridCommand,
    policy: Optional[PlacementPolicy] = None,
) -> CommandOutcome:
    """Apply one edit command to a pattern.

    Args:
        pattern: Pattern being edited; not modified.
        command: The edit to apply.
        policy: Placement policy; defaults to one full shift per day.

    Returns:
        CommandOutcome with the resulting pattern and any rejections. When
        a command is rejected outright the outcome holds the input pattern.
    """
    policy = policy or DefaultPlacementPolicy()
    outcome = CommandOutcome(pattern=pattern)

    if isinstance(command, AddRow):
        rows = list(pattern.rows) + [PatternRow.empty(pattern.weeks + 1)]
        outcome.pattern = pattern.with_rows(rows)

    elif isinstance(command, RemoveRow):
        error = _check_row(pattern, command.row_index)
        if error:
            outcome.rejections.append(Rejection(error))
        elif pattern.weeks == 1:
            outcome.rejections.append(Rejection("A pattern must keep at least one week"))
        else:
            rows = [r for i, r in enumerate(pattern.rows) if i != command.row_index]
            outcome.pattern = _keep_if_clean(pattern, pattern.with_rows(rows), policy, outcome)

    elif isinstance(command, ClearCell):
        error = _check_row(pattern, command.row_index)
        if error:
            outcome.rejections.append(Rejection(error))
        else:
            outcome.pattern = _replace_cell(pattern, command.row_index, command.day, [])

    elif isinstance(command, SetCell):
        error = _check_row(pattern, command.row_index)
        if error:
            outcome.rejections.append(Rejection(error))
        else:
            cleared = _replace_cell(pattern, command.row_index, command.day, [])
            outcome.pattern = _place(
                cleared, command.row_index, command.day, command.shifts, policy, outcome
            )

    elif isinstance(command, AddShift):
        error = _check_row(pattern, command.row_index)
        if error:
            outcome.rejections.append(Rejection(error))
        else:
            outcome.pattern = _place(
                pattern, command.row_index, command.day, (command.shift,), policy, outcome
            )

    elif isinstance(command, ReorderRow):
        if not pattern.is_continuous:
            outcome.rejections.append(
                Rejection("Rows can only be reordered in continuous patterns")
            )
        else:
            error = _check_row(pattern, command.from_index) or _check_row(pattern, command.to_index)
            if error:
                outcome.rejections.append(Rejection(error))
            else:
                rows = list(pattern.rows)
                rows.insert(command.to_index, rows.pop(command.from_index))
                outcome.pattern = _keep_if_clean(
                    pattern, pattern.with_rows(rows), policy, outcome
                )

    elif isinstance(command, PasteInto):
        clipboard = list(command.clipboard)
        if len(clipboard) == 1:
            clipboard = clipboard * len(command.targets)
        if len(clipboard) != len(command.targets):
            outcome.rejections.append(Rejection(
                f"Copied {len(command.clipboard)} cells but selected "
                f"{len(command.targets)} targets"
            ))
        else:
            current = pattern
            for target, shifts in zip(command.targets, clipboard):
                error = _check_row(current, target.row_index)
                if error:
                    outcome.rejections.append(Rejection(error, cell=target))
                    continue
                current = _place(current, target.row_index, target.day, shifts, policy, outcome)
            outcome.pattern = current

    elif isinstance(command, ResizeWeeks):
        if command.weeks < 1:
            outcome.rejections.append(Rejection("A pattern must keep at least one week"))
        else:
            impact = compute_resize_impact(pattern, command.weeks, policy)
            if impact.is_blocked:
                outcome.rejections.extend(_conflict_rejection(c) for c in impact.conflicts)
            elif impact.requires_confirmation and not command.confirmed:
                outcome.rejections.append(Rejection(
                    f"Removing weeks {', '.join(map(str, impact.removed_weeks))} "
                    f"discards assigned shifts; confirmation required"
                ))
            else:
                outcome.pattern = apply_resize_if_confirmed(pattern, impact, command.confirmed)

    else:
        raise TypeError(f"Unknown grid command: {command!r}")

    return outcome
