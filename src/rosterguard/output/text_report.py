"""Plain-text report of a pattern and its violations.

The report shows:
- The pattern grid, week by week, with overflow and cut-off markers
- Per-shift violation indicators with actual vs. required rest
- Summary counts by violation kind
"""

from collections import defaultdict
from pathlib import Path
from typing import Union

from rosterguard.domain.clock import format_minutes
from rosterguard.domain.models import AssignmentRef, RosterPattern
from rosterguard.engine.grid import cell_view, ordered_days
from rosterguard.validation.validator import ViolationKind, ViolationMap

CELL_WIDTH = 20


class TextReportGenerator:
    """Generates a text report for one validated pattern.

    Example:
        >>> report = TextReportGenerator().generate_to_string(pattern, violations)
        >>> print(report)
    """

    def generate(
        self,
        pattern: RosterPattern,
        violations: ViolationMap,
        output_path: Union[str, Path],
    ) -> str:
        """Generate the report and save it to a file.

        Returns:
            The generated text content.
        """
        content = self._generate_content(pattern, violations)
        Path(output_path).write_text(content)
        return content

    def generate_to_string(self, pattern: RosterPattern, violations: ViolationMap) -> str:
        return self._generate_content(pattern, violations)

    def _generate_content(self, pattern: RosterPattern, violations: ViolationMap) -> str:
        """Generate the full report content."""
        lines = []
        days = ordered_days(pattern.start_weekday)

        # Header
        lines.append("=" * 80)
        lines.append(f"ROSTER PATTERN - {pattern.display_name}")
        lines.append("=" * 80)
        lines.append(f"Weeks: {pattern.weeks}")
        lines.append(f"End date: {pattern.end_date_mode.value}"
                     + (f" ({pattern.end_date})" if pattern.end_date else ""))
        if pattern.start_date:
            lines.append(f"Start date: {pattern.start_date}")
        lines.append("")

        # Grid
        lines.append("-" * 80)
        lines.append("PATTERN GRID  (~ overflow from previous day, > cut off, ! violation)")
        lines.append("-" * 80)
        header = f"{'No':>3} " + "".join(f"{d.short:<{CELL_WIDTH}}" for d in days)
        lines.append(header)

        for row_index in range(pattern.weeks):
            views = [cell_view(pattern, row_index, day) for day in days]
            height = max((len(v.overflow) + len(v.shifts) for v in views), default=0)
            height = max(height, 1)
            for line_no in range(height):
                label = f"{row_index + 1:>3} " if line_no == 0 else "    "
                cells = []
                for view in views:
                    entries = self._cell_entries(view, violations)
                    text = entries[line_no] if line_no < len(entries) else ""
                    cells.append(f"{text:<{CELL_WIDTH}}")
                lines.append(label + "".join(cells).rstrip())
        lines.append("")

        # Violations
        lines.append("-" * 80)
        lines.append("VIOLATIONS")
        lines.append("-" * 80)
        if not violations.violations:
            lines.append("None")
        for ref in sorted(violations.violations, key=self._ref_key(pattern)):
            violation = violations.violations[ref]
            lines.append(
                f"! {ref}: {violation.message} "
                f"[actual {violation.actual_rest_hours:.2f}h / "
                f"required {violation.required_hours:g}h]"
            )
        lines.append("")

        # Summary
        counts = defaultdict(int)
        for violation in violations.violations.values():
            counts[violation.kind] += 1
        lines.append("-" * 80)
        lines.append("SUMMARY")
        lines.append("-" * 80)
        lines.append(f"Overlaps (hard): {counts[ViolationKind.OVERLAP]}")
        lines.append(f"Rest shortfalls (soft): {counts[ViolationKind.REST]}")
        lines.append(f"Flagged cells: {sum(1 for flagged in violations.cells.values() if flagged)}")
        lines.append("=" * 80)

        return "\n".join(lines)

    @staticmethod
    def _cell_entries(view, violations: ViolationMap) -> list[str]:
        entries = []
        for item in view.overflow:
            entries.append(f"~{item.shift.code} {format_minutes(item.start)}-{format_minutes(item.end)}")
        for item in view.shifts:
            ref = AssignmentRef(view.ref.row_index, view.ref.day, item.slot)
            mark = "!" if ref in violations.violations else ""
            cut = ">" if item.cut_off else ""
            entries.append(
                f"{mark}{item.shift.code} {format_minutes(item.start)}-{format_minutes(item.end)}{cut}"
            )
        return [e[: CELL_WIDTH - 1] for e in entries]

    @staticmethod
    def _ref_key(pattern: RosterPattern):
        days = ordered_days(pattern.start_weekday)
        return lambda ref: (ref.row_index, days.index(ref.day), ref.slot)
