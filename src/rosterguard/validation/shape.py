"""Shape checks for work schedules.

The pattern engine assumes well-formed shifts: frames in chronological
order that do not overlap each other, and meals inside their frame. This
module checks those assumptions when a work schedule is created or edited.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from rosterguard.domain.clock import MINUTES_PER_DAY, format_minutes, within_span
from rosterguard.domain.models import MealType, Shift, TimeFrame


class ValidationErrorType(Enum):
    """Types of shape errors."""

    NO_TIME_FRAMES = "no_time_frames"
    TIME_OUT_OF_RANGE = "time_out_of_range"
    ZERO_LENGTH_FRAME = "zero_length_frame"
    MEAL_INCOMPLETE = "meal_incomplete"
    MEAL_OUTSIDE_FRAME = "meal_outside_frame"
    ZERO_LENGTH_MEAL = "zero_length_meal"
    FRAMES_OUT_OF_ORDER = "frames_out_of_order"
    FRAMES_OVERLAP = "frames_overlap"


@dataclass
class ValidationError:
    """A single shape error."""

    error_type: ValidationErrorType
    message: str
    schedule_id: Optional[str] = None
    frame_index: Optional[int] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.schedule_id:
            parts.append(f"Schedule {self.schedule_id}:")
        parts.append(self.message)
        if self.frame_index is not None:
            parts.append(f"(frame {self.frame_index + 1})")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a work schedule."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)


def _in_range(minute: Optional[int]) -> bool:
    return minute is None or 0 <= minute < MINUTES_PER_DAY


def _validate_frame(
    frame: TimeFrame,
    index: int,
    schedule_id: str,
    result: ValidationResult,
) -> None:
    for name in ("start", "end", "meal_start", "meal_end"):
        value = getattr(frame, name)
        if not _in_range(value):
            result.add_error(ValidationError(
                error_type=ValidationErrorType.TIME_OUT_OF_RANGE,
                message=f"{name} {value} is outside 0-1439",
                schedule_id=schedule_id,
                frame_index=index,
            ))

    if frame.start == frame.end:
        result.add_error(ValidationError(
            error_type=ValidationErrorType.ZERO_LENGTH_FRAME,
            message=f"Frame starts and ends at {format_minutes(frame.start)}",
            schedule_id=schedule_id,
            frame_index=index,
        ))

    if (frame.meal_start is None) != (frame.meal_end is None):
        result.add_error(ValidationError(
            error_type=ValidationErrorType.MEAL_INCOMPLETE,
            message="Both meal start and end are required if one is provided",
            schedule_id=schedule_id,
            frame_index=index,
        ))
        return

    if not frame.has_meal:
        if frame.meal_type is MealType.UNPAID:
            result.add_warning(
                f"Schedule {schedule_id} frame {index + 1}: unpaid meal without meal times"
            )
        return

    if frame.meal_start == frame.meal_end:
        result.add_error(ValidationError(
            error_type=ValidationErrorType.ZERO_LENGTH_MEAL,
            message=f"Meal starts and ends at {format_minutes(frame.meal_start)}",
            schedule_id=schedule_id,
            frame_index=index,
        ))
    elif not within_span(frame.meal_start, frame.meal_end, frame.start, frame.end):
        result.add_error(ValidationError(
            error_type=ValidationErrorType.MEAL_OUTSIDE_FRAME,
            message=(
                f"Meal {format_minutes(frame.meal_start)}-{format_minutes(frame.meal_end)} "
                f"is not inside frame {frame}"
            ),
            schedule_id=schedule_id,
            frame_index=index,
        ))


def validate_shift_shape(shift: Shift) -> ValidationResult:
    """Check that a work schedule is well formed.

    Frames are laid out on a linear axis in their stored order; a frame
    that crosses midnight moves every later frame to the next day. A frame
    that starts before the previous one ends is either out of order or
    overlapping.
    """
    result = ValidationResult(is_valid=True)

    if not shift.time_frames:
        result.add_error(ValidationError(
            error_type=ValidationErrorType.NO_TIME_FRAMES,
            message="A work schedule needs at least one time-frame",
            schedule_id=shift.id,
        ))
        return result

    base = 0
    prev_start = prev_end = None
    for index, frame in enumerate(shift.time_frames):
        _validate_frame(frame, index, shift.id, result)

        start = frame.start + base
        end = frame.end + base
        if frame.spans_midnight:
            end += MINUTES_PER_DAY
            base += MINUTES_PER_DAY

        if prev_end is not None and start < prev_end:
            error_type = (
                ValidationErrorType.FRAMES_OUT_OF_ORDER
                if start < prev_start
                else ValidationErrorType.FRAMES_OVERLAP
            )
            result.add_error(ValidationError(
                error_type=error_type,
                message=f"Frame {frame} starts before the previous frame ends",
                schedule_id=shift.id,
                frame_index=index,
            ))
        prev_start, prev_end = start, end

    return result
