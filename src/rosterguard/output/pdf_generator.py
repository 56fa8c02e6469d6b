"""PDF generation for roster patterns.

This module creates printable PDFs showing:
- One grid page per pattern, each cell a 24-hour timeline of its shifts
- Overnight spill-over, cut-off and violation markers
- A summary page with violation counts per pattern
"""

from io import BytesIO
from pathlib import Path
from typing import Iterable, Union

from rosterguard.domain.clock import MINUTES_PER_DAY, format_minutes
from rosterguard.domain.models import AssignmentRef, RosterPattern
from rosterguard.engine.grid import CellView, DisplayShift, cell_view, ordered_days
from rosterguard.validation.validator import ViolationKind, ViolationMap

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    "shift": (0.4, 0.6, 0.8),  # Blue
    "overflow": (0.75, 0.85, 0.95),  # Pale blue
    "cut_off": (0.6, 0.6, 0.6),  # Gray
    ViolationKind.OVERLAP: (0.85, 0.3, 0.3),  # Red
    ViolationKind.REST: (0.95, 0.7, 0.3),  # Orange
    "empty": (0.97, 0.97, 0.97),  # Light gray
}

PatternResult = tuple[RosterPattern, ViolationMap]


def _require_reportlab():
    try:
        from reportlab.lib.pagesizes import landscape, letter
        from reportlab.pdfgen import canvas
    except ImportError:
        raise ImportError(
            "reportlab is required for PDF generation. "
            "Install with: pip install reportlab"
        )
    return canvas, landscape(letter)


class PatternPDFGenerator:
    """Generates printable PDFs of validated roster patterns.

    Example:
        >>> generator = PatternPDFGenerator()
        >>> generator.generate([(pattern, validate_pattern(pattern, config))], "patterns.pdf")
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def generate(
        self,
        results: Iterable[PatternResult],
        output_path: Union[str, Path],
        include_summary: bool = True,
    ) -> None:
        """Generate the PDF and save it to a file.

        Args:
            results: Pairs of pattern and its validation result.
            output_path: Path to save the PDF.
            include_summary: Whether to include the summary page.
        """
        canvas, pagesize = _require_reportlab()
        c = canvas.Canvas(str(output_path), pagesize=pagesize)
        self._draw(c, list(results), include_summary)
        c.save()

    def generate_to_buffer(
        self,
        results: Iterable[PatternResult],
        include_summary: bool = True,
    ) -> BytesIO:
        """Generate the PDF and return it as a bytes buffer."""
        canvas, pagesize = _require_reportlab()
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=pagesize)
        self._draw(c, list(results), include_summary)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw(self, c, results: list[PatternResult], include_summary: bool) -> None:
        for pattern, violations in results:
            self._draw_pattern_pages(c, pattern, violations)
        if include_summary:
            self._draw_summary_page(c, results)

    def _draw_pattern_pages(self, c, pattern: RosterPattern, violations: ViolationMap) -> None:
        """Draw the grid of one pattern, paging by week rows."""
        days = ordered_days(pattern.start_weekday)
        header_height = 60
        footer_height = 40
        label_width = 40
        row_height = 80
        usable_height = self.page_height - 2 * self.margin - header_height - footer_height
        rows_per_page = max(1, int(usable_height / row_height))
        col_width = (self.page_width - 2 * self.margin - label_width) / len(days)
        total_pages = (pattern.weeks + rows_per_page - 1) // rows_per_page

        for page_start in range(0, pattern.weeks, rows_per_page):
            self._draw_header(c, pattern, violations)

            top = self.page_height - self.margin - header_height
            c.setFont("Helvetica-Bold", 9)
            c.setFillColorRGB(0, 0, 0)
            for i, day in enumerate(days):
                x = self.margin + label_width + i * col_width
                c.drawCentredString(x + col_width / 2, top + 5, day.label)

            y = top
            for row_index in range(page_start, min(page_start + rows_per_page, pattern.weeks)):
                y -= row_height
                c.setFont("Helvetica-Bold", 10)
                c.setFillColorRGB(0, 0, 0)
                c.drawString(self.margin, y + row_height / 2, f"Wk {row_index + 1}")
                for i, day in enumerate(days):
                    x = self.margin + label_width + i * col_width
                    view = cell_view(pattern, row_index, day)
                    self._draw_cell(c, view, violations, x, y, col_width - 2, row_height - 4)

            self._draw_legend(c, self.margin, self.margin + 10)

            page_num = page_start // rows_per_page + 1
            c.setFont("Helvetica", 9)
            c.setFillColorRGB(0, 0, 0)
            c.drawCentredString(
                self.page_width / 2,
                self.margin - 10,
                f"{pattern.display_name} - Page {page_num} of {total_pages}",
            )
            c.showPage()

    def _draw_header(self, c, pattern: RosterPattern, violations: ViolationMap) -> None:
        """Draw page header with pattern name and status."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Roster Pattern - {pattern.display_name}",
        )

        mode = pattern.end_date_mode.value
        if pattern.end_date:
            mode = f"{mode} until {pattern.end_date.isoformat()}"
        status = "valid" if violations.is_valid else f"{len(violations.violations)} flagged shift(s)"
        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"Weeks: {pattern.weeks}   End date: {mode}   Status: {status}",
        )

    def _draw_cell(
        self,
        c,
        view: CellView,
        violations: ViolationMap,
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        """Draw one day cell as a stack of 24-hour timeline bars."""
        border = self._border_color(view, violations)
        c.setFillColorRGB(*COLORS["empty"])
        if border is not None:
            c.setStrokeColorRGB(*border)
            c.setLineWidth(1.5)
        else:
            c.setStrokeColorRGB(0.7, 0.7, 0.7)
            c.setLineWidth(0.5)
        c.rect(x, y, width, height, fill=1, stroke=1)

        items = view.overflow + view.shifts
        if not items:
            return
        bar_height = min(14, (height - 4) / len(items))
        bar_y = y + height - 2 - bar_height
        for item in items:
            color = self._bar_color(view, item, violations)
            self._draw_bar(c, item, color, x, bar_y, width, bar_height)
            bar_y -= bar_height

    def _border_color(self, view: CellView, violations: ViolationMap):
        """Color of the cell's leading violation, or None for a clean cell."""
        if not violations.is_cell_flagged(view.ref):
            return None
        kind = violations.cell_kind(view.ref)
        return COLORS[kind or ViolationKind.OVERLAP]

    def _bar_color(self, view: CellView, item: DisplayShift, violations: ViolationMap):
        if item.is_overflow:
            return COLORS["overflow"]
        violation = violations.violation_for(
            AssignmentRef(view.ref.row_index, view.ref.day, item.slot)
        )
        if violation is not None:
            return COLORS[violation.kind]
        if item.cut_off:
            return COLORS["cut_off"]
        return COLORS["shift"]

    def _draw_bar(self, c, item: DisplayShift, color, x, y, width, height) -> None:
        """Draw a shift bar; a bar running past midnight is drawn to the cell edge."""
        scale = width / MINUTES_PER_DAY
        start = item.start
        end = item.end if item.end > item.start else MINUTES_PER_DAY
        c.setFillColorRGB(*color)
        c.rect(x + start * scale, y, max(1, (end - start) * scale), height - 1, fill=1, stroke=0)

        label = f"{item.shift.code} {format_minutes(item.start)}-{format_minutes(item.end)}"
        if item.cut_off:
            label += " >"
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica", 6)
        c.drawString(x + 2, y + 3, label[:28])

    def _draw_legend(self, c, x: float, y: float) -> None:
        """Draw legend for colors."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 8)
        c.drawString(x, y, "Legend:")

        items = [
            ("shift", "Shift"),
            ("overflow", "Overnight spill-over"),
            ("cut_off", "Cut off at end date"),
            (ViolationKind.OVERLAP, "Overlap"),
            (ViolationKind.REST, "Insufficient rest"),
        ]

        c.setFont("Helvetica", 7)
        current_x = x + 45
        for key, label in items:
            c.setFillColorRGB(*COLORS[key])
            c.rect(current_x, y - 2, 12, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(current_x + 15, y, label)
            current_x += 100

    def _draw_summary_page(self, c, results: list[PatternResult]) -> None:
        """Draw summary page with violation counts per pattern."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(self.margin, self.page_height - self.margin - 20, "Validation Summary")

        y = self.page_height - self.margin - 60
        c.setFont("Helvetica-Bold", 10)
        c.drawString(self.margin, y, "Pattern")
        c.drawString(self.margin + 260, y, "Weeks")
        c.drawString(self.margin + 320, y, "Overlaps")
        c.drawString(self.margin + 400, y, "Rest")
        c.drawString(self.margin + 460, y, "Status")
        y -= 18

        c.setFont("Helvetica", 10)
        for pattern, violations in results:
            if y < self.margin + 20:
                c.showPage()
                c.setFont("Helvetica", 10)
                y = self.page_height - self.margin - 20
            kinds = [v.kind for v in violations.violations.values()]
            c.drawString(self.margin, y, pattern.display_name[:45])
            c.drawString(self.margin + 260, y, str(pattern.weeks))
            c.drawString(self.margin + 320, y, str(kinds.count(ViolationKind.OVERLAP)))
            c.drawString(self.margin + 400, y, str(kinds.count(ViolationKind.REST)))
            c.drawString(self.margin + 460, y, "OK" if violations.is_valid else "FLAGGED")
            y -= 15

        c.showPage()
