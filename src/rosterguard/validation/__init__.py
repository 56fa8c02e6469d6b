"""Validation of roster patterns, work schedule shapes and edit impact."""

from rosterguard.validation.impact import (
    EditDecision,
    EditImpact,
    ImpactAnalyzer,
    PatternViolation,
    apply_edit_if_confirmed,
    check_edit_impact,
    refresh_pattern,
    substitute_time_frames,
)
from rosterguard.validation.shape import (
    ValidationError,
    ValidationErrorType,
    ValidationResult,
    validate_shift_shape,
)
from rosterguard.validation.validator import (
    PatternValidator,
    ShiftViolation,
    ViolationCheck,
    ViolationKind,
    ViolationMap,
    validate_pattern,
)

__all__ = [
    "PatternValidator",
    "ShiftViolation",
    "ViolationCheck",
    "ViolationKind",
    "ViolationMap",
    "validate_pattern",
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
    "validate_shift_shape",
    "EditDecision",
    "EditImpact",
    "ImpactAnalyzer",
    "PatternViolation",
    "apply_edit_if_confirmed",
    "check_edit_impact",
    "refresh_pattern",
    "substitute_time_frames",
]
