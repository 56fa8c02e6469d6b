"""Impact of editing a work schedule on the roster patterns that use it.

Editing the time-frames of a shared work schedule changes every pattern
that assigns it. The analyzer validates each referencing pattern twice,
with the original and with the candidate frames, and reports only what the
edit makes worse:

- hard errors: overlaps or grid conflicts that did not exist before; they
  block the save;
- soft warnings: new rest shortfalls; the save may go ahead once the
  caller confirms.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from rosterguard.domain.models import (
    AssignmentRef,
    CellRef,
    PatternRow,
    RosterPattern,
    Shift,
    ShiftAssignment,
    TenantScheduleConfig,
    TimeFrame,
)
from rosterguard.validation.validator import (
    PatternValidator,
    ShiftViolation,
    ViolationKind,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternViolation:
    """A violation an edit would introduce into one pattern."""

    pattern_id: str
    pattern_name: str
    ref: AssignmentRef
    kind: str
    description: str
    actual_rest_hours: Optional[float] = None
    required_hours: Optional[float] = None

    @property
    def cell(self) -> CellRef:
        return self.ref.cell

    def __str__(self) -> str:
        return f"{self.pattern_name} ({self.cell}): {self.description}"


@dataclass
class EditImpact:
    """Result of checking a proposed work schedule edit.

    Attributes:
        schedule_id: The work schedule being edited.
        hard_errors: New overlaps or conflicts; these block the save.
        soft_warnings: New rest shortfalls; these need confirmation.
        patterns_checked: IDs of the patterns that reference the schedule.
    """

    schedule_id: str
    hard_errors: list[PatternViolation] = field(default_factory=list)
    soft_warnings: list[PatternViolation] = field(default_factory=list)
    patterns_checked: list[str] = field(default_factory=list)

    @property
    def blocks_save(self) -> bool:
        return bool(self.hard_errors)

    @property
    def requires_confirmation(self) -> bool:
        return not self.hard_errors and bool(self.soft_warnings)

    @property
    def affected_patterns(self) -> list[str]:
        ids = {v.pattern_id for v in self.hard_errors + self.soft_warnings}
        return sorted(ids)


@dataclass(frozen=True)
class EditDecision:
    """Outcome of ``apply_edit_if_confirmed``.

    Attributes:
        saved: True if the candidate frames were accepted.
        shift: The work schedule to persist; the original when not saved.
        reason: Why the edit was not saved, if it was not.
    """

    saved: bool
    shift: Shift
    reason: str = ""


def _map_shifts(pattern: RosterPattern, schedule_id: str, make) -> RosterPattern:
    rows = []
    for row in pattern.rows:
        days = {}
        for day, cell in row.days.items():
            days[day] = [
                ShiftAssignment(make(a.shift)) if a.schedule_id == schedule_id else a
                for a in cell
            ]
        rows.append(PatternRow(week_number=row.week_number, days=days))
    return pattern.with_rows(rows)


def substitute_time_frames(
    pattern: RosterPattern,
    schedule_id: str,
    frames: Iterable[TimeFrame],
) -> RosterPattern:
    """Copy of a pattern with one work schedule's frames replaced."""
    frames = tuple(frames)
    return _map_shifts(pattern, schedule_id, lambda s: s.with_time_frames(frames))


def refresh_pattern(pattern: RosterPattern, shift: Shift) -> RosterPattern:
    """Copy of a pattern whose denormalized copies of ``shift`` are current."""
    return _map_shifts(pattern, shift.id, lambda s: shift)


def _hard_keys(violations: list[ShiftViolation], conflicts) -> dict:
    keys = {}
    for v in violations:
        if v.kind is ViolationKind.OVERLAP:
            keys.setdefault((v.ref, ViolationKind.OVERLAP.value), v)
    for c in conflicts:
        keys.setdefault((c.ref, c.kind.value), c)
    return keys


def _soft_keys(violations: list[ShiftViolation]) -> dict:
    keys = {}
    for v in violations:
        if v.kind is ViolationKind.REST:
            keys.setdefault((v.ref, ViolationKind.REST.value), v)
    return keys


class ImpactAnalyzer:
    """Diffs pattern validation before and after a work schedule edit.

    Example:
        >>> analyzer = ImpactAnalyzer()
        >>> impact = analyzer.check("ws-1", new_frames, patterns, config)
        >>> if impact.blocks_save:
        ...     for error in impact.hard_errors:
        ...         print(error)
    """

    def __init__(self, validator: Optional[PatternValidator] = None):
        self.validator = validator or PatternValidator()

    def check(
        self,
        schedule_id: str,
        candidate_frames: Iterable[TimeFrame],
        patterns: Iterable[RosterPattern],
        config: TenantScheduleConfig,
    ) -> EditImpact:
        """Check a candidate edit against every pattern using the schedule.

        Args:
            schedule_id: ID of the work schedule being edited.
            candidate_frames: Proposed replacement time-frames.
            patterns: Saved patterns; those not referencing the schedule
                are skipped. None of them is modified.
            config: Tenant schedule configuration.

        Returns:
            EditImpact with the hard errors and soft warnings introduced.
        """
        if config is None:
            raise ValueError("A tenant schedule configuration is required")

        candidate_frames = tuple(candidate_frames)
        impact = EditImpact(schedule_id=schedule_id)

        for pattern in patterns:
            if not pattern.references(schedule_id):
                continue
            impact.patterns_checked.append(pattern.id)

            edited = substitute_time_frames(pattern, schedule_id, candidate_frames)
            before = self.validator.validate(pattern, config)
            after = self.validator.validate(edited, config)

            hard_before = _hard_keys(before.findings, self.validator.conflicts(pattern))
            hard_after = _hard_keys(after.findings, self.validator.conflicts(edited))
            for key, item in hard_after.items():
                if key not in hard_before:
                    impact.hard_errors.append(self._to_violation(pattern, item))

            soft_before = _soft_keys(before.findings)
            for key, item in _soft_keys(after.findings).items():
                if key not in soft_before:
                    impact.soft_warnings.append(self._to_violation(pattern, item))

        logger.info(
            "Edit of schedule %s checked against %d pattern(s): %d hard, %d soft",
            schedule_id, len(impact.patterns_checked),
            len(impact.hard_errors), len(impact.soft_warnings),
        )
        return impact

    @staticmethod
    def _to_violation(pattern: RosterPattern, item) -> PatternViolation:
        if isinstance(item, ShiftViolation):
            return PatternViolation(
                pattern_id=pattern.id,
                pattern_name=pattern.display_name,
                ref=item.ref,
                kind=item.kind.value,
                description=item.message,
                actual_rest_hours=item.actual_rest_hours,
                required_hours=item.required_hours,
            )
        return PatternViolation(
            pattern_id=pattern.id,
            pattern_name=pattern.display_name,
            ref=item.ref,
            kind=item.kind.value,
            description=item.message,
        )


def check_edit_impact(
    schedule_id: str,
    candidate_frames: Iterable[TimeFrame],
    patterns: Iterable[RosterPattern],
    config: TenantScheduleConfig,
) -> EditImpact:
    """Check a work schedule edit with the default validator."""
    return ImpactAnalyzer().check(schedule_id, candidate_frames, patterns, config)


def apply_edit_if_confirmed(
    shift: Shift,
    candidate_frames: Iterable[TimeFrame],
    impact: EditImpact,
    confirmed: bool = False,
) -> EditDecision:
    """Decide whether an edit checked by ``check_edit_impact`` is saved.

    Hard errors always block. Soft warnings block unless ``confirmed``.
    When the edit is not saved the original frames are kept.
    """
    if impact.schedule_id != shift.id:
        raise ValueError(
            f"Impact was computed for {impact.schedule_id}, not {shift.id}"
        )

    if impact.blocks_save:
        names = ", ".join(sorted({v.pattern_name for v in impact.hard_errors}))
        return EditDecision(
            saved=False,
            shift=shift,
            reason=f"Edit would create overlapping shifts in: {names}",
        )

    if impact.soft_warnings and not confirmed:
        return EditDecision(
            saved=False,
            shift=shift,
            reason=(
                f"Edit leaves {len(impact.soft_warnings)} rest-time warning(s); "
                f"not confirmed"
            ),
        )

    return EditDecision(saved=True, shift=shift.with_time_frames(candidate_frames))
