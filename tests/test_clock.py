"""Tests for clock-time arithmetic."""

from datetime import time

import pytest

from rosterguard.domain.clock import (
    format_minutes,
    rest_hours,
    rest_minutes,
    segments,
    span_minutes,
    to_minutes,
    within_span,
)
from rosterguard.errors import RosterGuardError, TimeFormatError


class TestToMinutes:
    """Tests for parsing clock times."""

    def test_parses_hh_mm(self):
        assert to_minutes("08:30") == 510

    def test_parses_database_seconds(self):
        """Time columns carry seconds, which are dropped."""
        assert to_minutes("22:00:00") == 1320

    def test_accepts_time_objects(self):
        assert to_minutes(time(6, 15)) == 375

    def test_midnight_is_zero(self):
        assert to_minutes("00:00") == 0

    def test_last_minute_of_day(self):
        assert to_minutes("23:59") == 1439

    @pytest.mark.parametrize("value", ["24:00", "12:60", "8", "ab:cd", "", "1:2:3:4"])
    def test_rejects_invalid_strings(self, value):
        with pytest.raises(TimeFormatError):
            to_minutes(value)

    def test_rejects_non_strings(self):
        with pytest.raises(TimeFormatError):
            to_minutes(480)

    def test_error_is_a_value_error(self):
        """Callers catching ValueError or the package base both work."""
        with pytest.raises(ValueError):
            to_minutes("25:00")
        with pytest.raises(RosterGuardError):
            to_minutes("25:00")


class TestFormatting:
    """Tests for format_minutes and span helpers."""

    def test_format_pads(self):
        assert format_minutes(65) == "01:05"

    def test_format_wraps_full_day(self):
        assert format_minutes(1440) == "00:00"

    def test_span_same_day(self):
        assert span_minutes(480, 960) == 480

    def test_span_across_midnight(self):
        assert span_minutes(1320, 360) == 480

    def test_segments_same_day(self):
        assert segments(480, 960) == [(480, 960)]

    def test_segments_across_midnight(self):
        assert segments(1320, 360) == [(1320, 1440), (0, 360)]

    def test_segments_ending_at_midnight_has_no_tail(self):
        assert segments(1320, 0) == [(1320, 1440)]


class TestWithinSpan:
    """Tests for wrap-aware containment."""

    def test_meal_inside_day_frame(self):
        assert within_span(720, 750, 480, 1020) is True

    def test_meal_outside_day_frame(self):
        assert within_span(1030, 1060, 480, 1020) is False

    def test_meal_after_midnight_inside_overnight_frame(self):
        assert within_span(120, 150, 1320, 360) is True

    def test_meal_before_frame_start(self):
        assert within_span(1260, 1290, 1320, 360) is False


class TestRest:
    """Tests for rest arithmetic."""

    def test_overnight_gap_is_eight_hours(self):
        """Shift ends 23:00, next day's shift starts 07:00."""
        assert rest_hours(1380, 420, crosses_day=True) == 8.0

    def test_cross_day_formula(self):
        for end, start in [(0, 0), (1020, 360), (1439, 1), (600, 900)]:
            expected = (1440 - end) / 60 + start / 60
            assert rest_hours(end, start, crosses_day=True) == pytest.approx(expected)

    def test_same_day_gap(self):
        assert rest_minutes(720, 780, crosses_day=False) == 60

    def test_back_to_back_is_zero(self):
        assert rest_hours(960, 960, crosses_day=False) == 0.0

    def test_same_day_gap_wraps(self):
        """Overnight end 06:00 to a 22:00 start is 16 hours."""
        assert rest_hours(360, 1320, crosses_day=False) == 16.0

    def test_same_day_gap_below_a_day_when_start_precedes_end(self):
        assert rest_hours(900, 600, crosses_day=False) < 24

    def test_rest_hours_not_rounded(self):
        assert rest_hours(0, 10, crosses_day=False) == pytest.approx(10 / 60)
