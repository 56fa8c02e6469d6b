"""Command-line interface for the roster pattern validator."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from rosterguard.domain.models import RosterPattern, TimeFrame
from rosterguard.errors import RosterGuardError
from rosterguard.output.pdf_generator import PatternPDFGenerator
from rosterguard.output.text_report import TextReportGenerator
from rosterguard.records import RecordBundle, bundle_from_dict, load_bundle
from rosterguard.validation.impact import apply_edit_if_confirmed, check_edit_impact
from rosterguard.validation.shape import validate_shift_shape
from rosterguard.validation.validator import ViolationMap, validate_pattern

logger = logging.getLogger(__name__)


def create_sample_bundle_data(min_hours: float = 10.0) -> dict:
    """Create a sample tenant with three patterns for demos and testing.

    The patterns cover the usual situations:
    - "Days" is a clean one-week day rotation
    - "Nights" runs overnight and wraps from Sunday into Monday
    - "Mixed" puts a late shift before an early one and overlaps a
      night shift with the next morning
    """
    schedules = [
        {
            "id": "ws-day",
            "shift_id": "DAY",
            "shift_type": "Regular",
            "work_schedule_timeframes": [
                {"start_time": "08:00", "end_time": "16:30", "frame_order": 0,
                 "meal_type": "unpaid", "meal_start": "12:00", "meal_end": "12:30"},
            ],
        },
        {
            "id": "ws-late",
            "shift_id": "LATE",
            "shift_type": "Regular",
            "work_schedule_timeframes": [
                {"start_time": "14:00", "end_time": "22:00", "frame_order": 0},
            ],
        },
        {
            "id": "ws-early",
            "shift_id": "EARLY",
            "shift_type": "Regular",
            "work_schedule_timeframes": [
                {"start_time": "05:00", "end_time": "13:00", "frame_order": 0},
            ],
        },
        {
            "id": "ws-night",
            "shift_id": "NIGHT",
            "shift_type": "Regular",
            "work_schedule_timeframes": [
                {"start_time": "22:00", "end_time": "06:00", "frame_order": 0},
            ],
        },
        {
            "id": "ws-split",
            "shift_id": "SPLIT",
            "shift_type": "Split",
            "work_schedule_timeframes": [
                {"start_time": "07:00", "end_time": "11:00", "frame_order": 0},
                {"start_time": "16:00", "end_time": "20:00", "frame_order": 1},
            ],
        },
    ]

    def cell(schedule_id):
        return [{"work_schedule_id": schedule_id}]

    patterns = [
        {
            "id": "rp-days",
            "shift_id": "Days",
            "end_date_type": "continuous",
            "start_day": "monday",
            "pattern_rows": [
                {"number": 1, "monday": cell("ws-day"), "tuesday": cell("ws-day"),
                 "wednesday": cell("ws-day"), "thursday": cell("ws-split"),
                 "friday": cell("ws-day")},
            ],
        },
        {
            "id": "rp-nights",
            "shift_id": "Nights",
            "end_date_type": "continuous",
            "start_day": "monday",
            "pattern_rows": [
                {"number": 1, "friday": cell("ws-night"), "saturday": cell("ws-night"),
                 "sunday": cell("ws-night")},
                {"number": 2, "monday": cell("ws-night"), "tuesday": cell("ws-night")},
            ],
        },
        {
            "id": "rp-mixed",
            "shift_id": "Mixed",
            "end_date_type": "specify",
            "start_date": "2024-01-01",
            "end_date": "2024-03-31",
            "start_day": "monday",
            "pattern_rows": [
                {"number": 1, "monday": cell("ws-late"), "tuesday": cell("ws-early"),
                 "wednesday": cell("ws-night"), "thursday": cell("ws-early"),
                 "sunday": cell("ws-night")},
            ],
        },
    ]

    return {
        "tenant_config": {"min_hours_between_shifts": min_hours},
        "work_schedules": schedules,
        "roster_patterns": patterns,
    }


def parse_frames(text: str) -> list[TimeFrame]:
    """Parse ``08:00-12:00,13:00-17:00`` into ordered time-frames."""
    frames = []
    for order, part in enumerate(p.strip() for p in text.split(",") if p.strip()):
        start, sep, end = part.partition("-")
        if not sep:
            raise ValueError(f"Expected START-END, got {part!r}")
        frames.append(TimeFrame.from_times(start.strip(), end.strip(), order=order))
    if not frames:
        raise ValueError("At least one time-frame is required")
    return frames


def print_pattern_result(pattern: RosterPattern, result: ViolationMap) -> None:
    status = "PASSED" if result.is_valid else f"FAILED ({len(result.violations)} flagged)"
    print(f"  {pattern.display_name} ({pattern.weeks} week(s), "
          f"{pattern.end_date_mode.value}): {status}")
    for violation in list(result.violations.values())[:5]:
        print(f"    - {violation}")
    if len(result.violations) > 5:
        print(f"    ... and {len(result.violations) - 5} more")


def validate_bundle(
    bundle: RecordBundle,
    pdf_path: Optional[str] = None,
    report_path: Optional[str] = None,
) -> bool:
    """Validate every pattern in a bundle; returns True if all are clean."""
    config = bundle.config
    print(f"Minimum rest between shifts: {config.min_hours_between_shifts:g}h")

    for shift in bundle.schedules.values():
        shape = validate_shift_shape(shift)
        for error in shape.errors:
            print(f"  ! {error}")
        for warning in shape.warnings:
            logger.warning(warning)

    results = []
    print(f"\nValidating {len(bundle.patterns)} pattern(s)")
    for pattern in bundle.patterns:
        result = validate_pattern(pattern, config)
        results.append((pattern, result))
        print_pattern_result(pattern, result)

    if report_path:
        generator = TextReportGenerator()
        content = "\n\n".join(generator.generate_to_string(p, r) for p, r in results)
        Path(report_path).write_text(content)
        print(f"\nText report written to {report_path}")

    if pdf_path:
        print(f"\nGenerating PDF: {pdf_path}")
        PatternPDFGenerator().generate(results, pdf_path)
        print("  PDF created successfully!")

    return all(r.is_valid for _, r in results)


def run_impact(
    bundle: RecordBundle,
    schedule_id: str,
    frames_text: str,
    confirm: bool = False,
) -> bool:
    """Check a work schedule edit; returns True if it would be saved."""
    shift = bundle.schedules.get(schedule_id)
    if shift is None:
        raise RosterGuardError(f"Unknown work schedule {schedule_id}")

    frames = parse_frames(frames_text)
    impact = check_edit_impact(schedule_id, frames, bundle.patterns, bundle.config)

    print(f"Editing {shift.describe()}")
    print(f"  Proposed: {', '.join(str(f) for f in frames)}")
    print(f"  Patterns using this schedule: {len(impact.patterns_checked)}")

    if impact.hard_errors:
        print(f"\n  Overlaps ({len(impact.hard_errors)}):")
        for error in impact.hard_errors:
            print(f"    - {error}")
    if impact.soft_warnings:
        print(f"\n  Rest warnings ({len(impact.soft_warnings)}):")
        for warning in impact.soft_warnings:
            print(f"    - {warning} "
                  f"(actual {warning.actual_rest_hours:.2f}h, "
                  f"required {warning.required_hours:g}h)")

    decision = apply_edit_if_confirmed(shift, frames, impact, confirmed=confirm)
    if decision.saved:
        print("\n  Edit accepted")
    else:
        print(f"\n  Edit rejected: {decision.reason}")
    return decision.saved


def run_demo(output_path: Optional[str] = None, min_hours: float = 10.0) -> bool:
    """Validate the sample tenant and try one edit against it."""
    print(f"Validating sample patterns with {min_hours:g}h minimum rest...\n")
    bundle = bundle_from_dict(create_sample_bundle_data(min_hours))
    all_valid = validate_bundle(bundle, pdf_path=output_path)

    print("\nTrying to move the night shift to 23:00-07:00")
    run_impact(bundle, "ws-night", "23:00-07:00")
    return all_valid


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="RosterGuard - Roster Pattern Validation Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo                                 Validate the sample patterns
  %(prog)s demo --output patterns.pdf           Also generate a PDF

  %(prog)s validate tenant.json                 Validate every pattern in a bundle
  %(prog)s validate tenant.json --pdf out.pdf   Render the patterns to PDF
  %(prog)s validate tenant.json --report out.txt

  %(prog)s impact tenant.json --schedule ws-1 --frames 08:00-16:00
  %(prog)s impact tenant.json --schedule ws-1 --frames 07:00-11:00,15:00-19:00 --confirm
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a bundle of patterns")
    validate_parser.add_argument("bundle", type=str, help="Path to the JSON bundle")
    validate_parser.add_argument("--pdf", type=str, help="Output PDF file path")
    validate_parser.add_argument("--report", type=str, help="Output text report path")

    # Impact command
    impact_parser = subparsers.add_parser(
        "impact",
        help="Check the impact of editing a work schedule"
    )
    impact_parser.add_argument("bundle", type=str, help="Path to the JSON bundle")
    impact_parser.add_argument(
        "--schedule", "-s",
        type=str,
        required=True,
        help="ID of the work schedule to edit",
    )
    impact_parser.add_argument(
        "--frames", "-f",
        type=str,
        required=True,
        help="Proposed time-frames, e.g. 08:00-12:00,13:00-17:00",
    )
    impact_parser.add_argument(
        "--confirm",
        action="store_true",
        help="Accept the edit despite rest-time warnings",
    )

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Validate the sample patterns")
    demo_parser.add_argument(
        "--output", "-o",
        type=str,
        help="Output PDF file path",
    )
    demo_parser.add_argument(
        "--min-hours", "-m",
        type=float,
        default=10.0,
        help="Minimum rest between shifts in hours (default: 10)",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "validate":
            return 0 if validate_bundle(load_bundle(args.bundle), args.pdf, args.report) else 1
        elif args.command == "impact":
            saved = run_impact(load_bundle(args.bundle), args.schedule, args.frames, args.confirm)
            return 0 if saved else 1
        elif args.command == "demo":
            run_demo(args.output, args.min_hours)
            return 0
        else:
            parser.print_help()
            return 1
    except (RosterGuardError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
