"""Unit tests for parse_date_range."""

from datetime import date, datetime, time

import pytest

from apitools.business_logic import (
    InvalidDateError,
    InvalidRangeError,
    parse_date_range,
)

TODAY = date(2024, 3, 15)


class TestStartDate:
    def test_empty_pair_is_today_single_day(self):
        result = parse_date_range("", "", today=TODAY)

        assert result.start.date() == TODAY
        assert result.start.time() == time(0, 0, 0)
        assert result.end.date() == TODAY
        assert result.end.time() == time(23, 59, 59)
        assert result.label == "2024-03-15"

    def test_today_keyword_is_case_insensitive_and_trimmed(self):
        result = parse_date_range("  ToDaY ", "", today=TODAY)

        assert result.start.date() == TODAY

    def test_literal_start_date(self):
        result = parse_date_range("2024-01-01", "", today=TODAY)

        assert result.start.date() == date(2024, 1, 1)
        assert result.start.time() == time(0, 0, 0)
        assert result.end.date() == date(2024, 1, 1)
        assert result.label == "2024-01-01"

    @pytest.mark.parametrize(
        "value", ["2024/01/01", "yesterday", "2024-13-01", "2024-1-5", "2024-01-5", "24-01-05"]
    )
    def test_unparsable_start_raises(self, value):
        with pytest.raises(InvalidDateError):
            parse_date_range(value, "", today=TODAY)


class TestEndDate:
    def test_today_end_spans_multiple_days(self):
        result = parse_date_range("2024-01-01", "today", today=TODAY)

        assert result.end.date() == TODAY
        assert result.end.time() == time(23, 59, 59)
        assert "to" in result.label
        assert result.label == "2024-01-01 to 2024-03-15"

    def test_literal_end_is_end_of_day(self):
        result = parse_date_range("2024-01-01", "2024-01-03", today=TODAY)

        assert result.end == datetime(2024, 1, 3, 23, 59, 59).astimezone()
        assert result.label == "2024-01-01 to 2024-01-03"

    def test_same_literal_day_keeps_single_label(self):
        result = parse_date_range("2024-01-01", "2024-01-01", today=TODAY)

        assert result.label == "2024-01-01"

    def test_unparsable_end_raises(self):
        with pytest.raises(InvalidDateError):
            parse_date_range("2024-01-01", "01-02-2024", today=TODAY)

    def test_unpadded_end_raises(self):
        with pytest.raises(InvalidDateError):
            parse_date_range("2024-01-01", "2024-1-31", today=TODAY)

    def test_end_before_start_raises(self):
        with pytest.raises(InvalidRangeError):
            parse_date_range("2024-02-01", "2024-01-01", today=TODAY)

    def test_today_end_before_future_start_raises(self):
        with pytest.raises(InvalidRangeError):
            parse_date_range("2024-04-01", "today", today=TODAY)


class TestBounds:
    def test_bounds_are_timezone_aware(self):
        result = parse_date_range("", "", today=TODAY)

        assert result.start.tzinfo is not None
        assert result.end.tzinfo is not None

    def test_defaults_to_real_today(self):
        result = parse_date_range("", "")

        assert result.start.date() == date.today()

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            parse_date_range("nope", "")
