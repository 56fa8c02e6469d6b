"""Output generation for roster patterns."""

from rosterguard.output.pdf_generator import PatternPDFGenerator
from rosterguard.output.text_report import TextReportGenerator

__all__ = [
    "PatternPDFGenerator",
    "TextReportGenerator",
]
