"""Rest-time and overlap validation for roster patterns.

This module walks every day cell of a pattern and compares each shift with
its neighbours: the overnight spill-over arriving from the previous day,
the previous day's last shift, the other shifts of the same day, and the
next day's first shift. The result is a ``ViolationMap`` that the editor
renders as one indicator per shift.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from rosterguard.domain.clock import format_minutes
from rosterguard.domain.models import (
    AssignmentRef,
    CellRef,
    RosterPattern,
    Shift,
    TenantScheduleConfig,
)
from rosterguard.domain.policies import DefaultPlacementPolicy, PlacementPolicy
from rosterguard.engine.grid import (
    GridConflict,
    day_sequence,
    find_conflicts,
    next_cell,
    previous_cell,
)
from rosterguard.engine.overlap import (
    compare_consecutive,
    is_rest_violation,
    shifts_overlap,
)

logger = logging.getLogger(__name__)


class ViolationKind(Enum):
    """Severity class of a violation."""

    OVERLAP = "overlap"  # Hard: two shifts active at once
    REST = "rest"  # Soft: gap below the tenant minimum


class ViolationCheck(Enum):
    """The check that produced a violation, in precedence order."""

    OVERFLOW_OVERLAP = 1
    INCOMING_REST = 2
    SAME_DAY = 3
    FORWARD = 4


@dataclass(frozen=True)
class ShiftViolation:
    """A violation attached to one shift assignment.

    Attributes:
        ref: The flagged assignment.
        kind: Overlap or rest shortfall.
        check: Which of the four checks found it.
        actual_rest_hours: Rest actually available (0 for overlaps).
        required_hours: Tenant minimum at validation time.
        other: The assignment on the other side of the comparison.
        message: Human-readable description.
    """

    ref: AssignmentRef
    kind: ViolationKind
    check: ViolationCheck
    actual_rest_hours: float
    required_hours: float
    other: Optional[AssignmentRef] = None
    message: str = ""

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.ref}: {self.message}"


@dataclass
class ViolationMap:
    """Validation result for a whole pattern.

    Attributes:
        violations: The indicator per flagged assignment; when several checks
            flag the same shift the one earliest in precedence wins.
        cells: True for every cell holding a flagged assignment.
        findings: Every violation computed, in precedence order.
    """

    violations: dict[AssignmentRef, ShiftViolation] = field(default_factory=dict)
    cells: dict[CellRef, bool] = field(default_factory=dict)
    findings: list[ShiftViolation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def overlaps(self) -> list[ShiftViolation]:
        return [v for v in self.findings if v.kind is ViolationKind.OVERLAP]

    @property
    def rest_shortfalls(self) -> list[ShiftViolation]:
        return [v for v in self.findings if v.kind is ViolationKind.REST]

    def violation_for(self, ref: AssignmentRef) -> Optional[ShiftViolation]:
        return self.violations.get(ref)

    def is_cell_flagged(self, ref: CellRef) -> bool:
        return self.cells.get(ref, False)

    def cell_kind(self, ref: CellRef) -> Optional[ViolationKind]:
        """Kind of the highest-precedence indicator in a cell, if any."""
        in_cell = [v for v in self.violations.values() if v.ref.cell == ref]
        if not in_cell:
            return None
        return min(in_cell, key=lambda v: v.check.value).kind


def _ordered_cell(pattern: RosterPattern, ref: CellRef) -> list[tuple[int, Shift]]:
    """Cell assignments with their slots, ordered by start time."""
    entries = [
        (slot, assignment.shift)
        for slot, assignment in enumerate(pattern.cell(ref.row_index, ref.day))
        if assignment.shift.time_frames
    ]
    return sorted(entries, key=lambda e: (e[1].effective_start, e[0]))


class PatternValidator:
    """Validates a roster pattern against the tenant's minimum rest.

    Example:
        >>> validator = PatternValidator()
        >>> result = validator.validate(pattern, TenantScheduleConfig(11))
        >>> for violation in result.violations.values():
        ...     print(violation)
    """

    def __init__(self, placement_policy: Optional[PlacementPolicy] = None):
        self.placement_policy = placement_policy or DefaultPlacementPolicy()

    def conflicts(self, pattern: RosterPattern) -> list[GridConflict]:
        """Structural conflicts (cap, same-cell and spill-over overlaps)."""
        return find_conflicts(pattern, self.placement_policy)

    def validate(
        self,
        pattern: RosterPattern,
        config: TenantScheduleConfig,
    ) -> ViolationMap:
        """Validate every cell of a pattern.

        Args:
            pattern: Pattern to validate; not modified.
            config: Tenant schedule configuration.

        Returns:
            ViolationMap with one indicator per flagged shift.

        Raises:
            ValueError: If no configuration is given.
        """
        if config is None:
            raise ValueError("A tenant schedule configuration is required")

        findings: list[ShiftViolation] = []
        cells = {}
        for ref in day_sequence(pattern):
            cells[ref] = False
            self._validate_cell(pattern, ref, config, findings)

        findings.sort(key=lambda v: v.check.value)
        result = ViolationMap(cells=cells, findings=findings)
        for violation in findings:
            result.violations.setdefault(violation.ref, violation)
            result.cells[violation.ref.cell] = True

        logger.debug(
            "Validated %s: %d cells, %d violations (%d findings)",
            pattern.display_name, len(cells), len(result.violations), len(findings),
        )
        return result

    def _validate_cell(
        self,
        pattern: RosterPattern,
        ref: CellRef,
        config: TenantScheduleConfig,
        findings: list[ShiftViolation],
    ) -> None:
        """Run the four checks for one cell."""
        own = _ordered_cell(pattern, ref)
        if not own:
            return

        required = config.min_hours_between_shifts
        prev = previous_cell(pattern, ref)
        nxt = next_cell(pattern, ref)

        prev_own = _ordered_cell(pattern, prev) if prev else []
        overflow = [(slot, s) for slot, s in prev_own if s.spans_midnight]

        # 1. Incoming overflow against this day's shifts
        for slot, shift in own:
            for ovf_slot, ovf in overflow:
                if shifts_overlap(shift, ovf, b_is_overflow=True):
                    findings.append(ShiftViolation(
                        ref=AssignmentRef(ref.row_index, ref.day, slot),
                        kind=ViolationKind.OVERLAP,
                        check=ViolationCheck.OVERFLOW_OVERLAP,
                        actual_rest_hours=0.0,
                        required_hours=required,
                        other=AssignmentRef(prev.row_index, prev.day, ovf_slot),
                        message=(
                            f"{shift.describe()} overlaps overnight shift "
                            f"{ovf.describe()} from {prev}"
                        ),
                    ))

        # 2. Previous day's last shift, when nothing spills over
        if not overflow and prev_own:
            prev_slot, prev_last = prev_own[-1]
            first_slot, first = own[0]
            pair = compare_consecutive(prev_last, first, next_day=True)
            if is_rest_violation(pair.rest_hours, config):
                findings.append(self._rest_violation(
                    AssignmentRef(prev.row_index, prev.day, prev_slot),
                    AssignmentRef(ref.row_index, ref.day, first_slot),
                    prev_last, first, pair.rest_hours, required,
                    ViolationCheck.INCOMING_REST,
                ))

        # 3. Consecutive shifts within the day
        for (slot_a, a), (slot_b, b) in zip(own, own[1:]):
            pair = compare_consecutive(a, b, next_day=False)
            ref_a = AssignmentRef(ref.row_index, ref.day, slot_a)
            ref_b = AssignmentRef(ref.row_index, ref.day, slot_b)
            if pair.overlaps:
                findings.append(ShiftViolation(
                    ref=ref_a,
                    kind=ViolationKind.OVERLAP,
                    check=ViolationCheck.SAME_DAY,
                    actual_rest_hours=0.0,
                    required_hours=required,
                    other=ref_b,
                    message=f"{a.describe()} overlaps {b.describe()} on the same day",
                ))
            elif is_rest_violation(pair.rest_hours, config):
                findings.append(self._rest_violation(
                    ref_a, ref_b, a, b, pair.rest_hours, required, ViolationCheck.SAME_DAY,
                ))

        # 4. This day's last shift against the next day's first shift
        next_own = _ordered_cell(pattern, nxt) if nxt else []
        if next_own:
            last_slot, last = own[-1]
            next_slot, next_first = next_own[0]
            ref_last = AssignmentRef(ref.row_index, ref.day, last_slot)
            ref_next = AssignmentRef(nxt.row_index, nxt.day, next_slot)
            pair = compare_consecutive(last, next_first, next_day=True)
            if pair.overlaps:
                findings.append(ShiftViolation(
                    ref=ref_last,
                    kind=ViolationKind.OVERLAP,
                    check=ViolationCheck.FORWARD,
                    actual_rest_hours=0.0,
                    required_hours=required,
                    other=ref_next,
                    message=(
                        f"Overnight part of {last.describe()} overlaps "
                        f"{next_first.describe()} in {nxt}"
                    ),
                ))
            elif is_rest_violation(pair.rest_hours, config):
                findings.append(self._rest_violation(
                    ref_last, ref_next, last, next_first, pair.rest_hours, required,
                    ViolationCheck.FORWARD,
                ))

    @staticmethod
    def _rest_violation(
        ref: AssignmentRef,
        other: AssignmentRef,
        earlier: Shift,
        later: Shift,
        actual: float,
        required: float,
        check: ViolationCheck,
    ) -> ShiftViolation:
        return ShiftViolation(
            ref=ref,
            kind=ViolationKind.REST,
            check=check,
            actual_rest_hours=actual,
            required_hours=required,
            other=other,
            message=(
                f"{earlier.code} ends {format_minutes(earlier.effective_end)}, "
                f"{later.code} starts {format_minutes(later.effective_start)} in {other.cell}: "
                f"{actual:.2f}h rest, {required:g}h required"
            ),
        )


def validate_pattern(
    pattern: RosterPattern,
    config: TenantScheduleConfig,
) -> ViolationMap:
    """Validate a pattern with the default placement policy."""
    return PatternValidator().validate(pattern, config)
