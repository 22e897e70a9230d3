from datetime import UTC, datetime

from portfolio_dashboard.display_policy import (
    SENTINEL,
    alignment_key,
    format_currency,
    format_long_timestamp,
    format_percent,
    format_short_date,
    parse_timestamp,
)


def test_naive_timestamps_are_read_as_utc():
    assert parse_timestamp("2026-10-16T13:30:00") == datetime(2026, 10, 16, 13, 30, tzinfo=UTC)


def test_alignment_key_truncates_fractional_seconds_and_normalises_offset():
    assert alignment_key("2026-10-16T13:30:00.987654Z") == alignment_key("2026-10-16T09:30:00-04:00")
    assert alignment_key("2026-10-16T13:30:01Z") != alignment_key("2026-10-16T13:30:00Z")


def test_formats_follow_eastern_daylight_and_standard_time():
    summer = parse_timestamp("2026-07-01T20:05:00Z")
    winter = parse_timestamp("2026-12-01T05:00:00Z")

    assert format_short_date(summer) == "Jul 1"
    assert format_long_timestamp(summer) == "Jul 1, 2026, 4:05 PM EDT"
    assert format_short_date(winter) == "Dec 1"
    assert format_long_timestamp(winter) == "Dec 1, 2026, 12:00 AM EST"


def test_currency_and_percent_formatting():
    assert format_currency(1234567.891) == "$1,234,567.89"
    assert format_currency(-50.0, signed=True) == "-$50.00"
    assert format_currency(None) == SENTINEL
    assert format_percent(5.0) == "+5.00%"
    assert format_percent(-1.234) == "-1.23%"
    assert format_percent(20.0, signed=False) == "20.00%"
    assert format_percent(None) == SENTINEL
