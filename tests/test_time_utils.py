"""Tests for time utilities."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from beetbell.utils.time_utils import (
    format_minutes,
    format_number,
    format_time,
    from_epoch_ms,
    to_epoch_ms,
    to_ms,
    truncate_ms,
)


def test_epoch_ms_conversion():
    """Test conversion to and from epoch milliseconds."""
    dt = datetime(2026, 3, 1, 12, 0, 0, 123000, tzinfo=ZoneInfo("UTC"))
    ms = to_epoch_ms(dt)

    assert ms == 1772366400123
    assert from_epoch_ms(ms) == dt


def test_epoch_ms_naive_is_utc():
    """Naive datetimes are treated as UTC."""
    naive = datetime(1970, 1, 1, 0, 0, 1)
    assert to_epoch_ms(naive) == 1000


def test_truncate_ms():
    """Sub-millisecond precision is dropped."""
    dt = datetime(2026, 3, 1, 12, 0, 0, 123456, tzinfo=ZoneInfo("UTC"))
    assert truncate_ms(dt).microsecond == 123000
    assert from_epoch_ms(to_epoch_ms(truncate_ms(dt))) == truncate_ms(dt)


def test_to_ms():
    assert to_ms(timedelta(hours=1)) == 3_600_000
    assert to_ms(timedelta(0)) == 0


def test_format_time():
    """Test countdown formatting."""
    assert format_time(timedelta(hours=3, minutes=5, seconds=9)) == "3h 5m 9s"
    assert format_time(timedelta(hours=10)) == "10h 0m 0s"
    assert format_time(timedelta(minutes=5)) == "5m 0s"
    assert format_time(timedelta(seconds=42)) == "42s"
    assert format_time(timedelta(seconds=42, milliseconds=900)) == "42s"
    assert format_time(timedelta(0)) == "0s"


def test_format_time_negative_is_zero():
    assert format_time(timedelta(seconds=-5)) == "0s"


def test_format_number_and_minutes():
    """Test settings value formatting."""
    assert format_number(10.0) == "10"
    assert format_number(1.5) == "1.5"
    assert format_minutes(1) == "1 minute"
    assert format_minutes(30.0) == "30 minutes"
    assert format_minutes(0) == "0 minutes"
