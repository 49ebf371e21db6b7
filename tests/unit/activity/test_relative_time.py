"""Tests for relative time labels."""

from datetime import UTC, datetime, timedelta

import pytest

from src.activity.relative_time import format_relative_time

NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        (timedelta(seconds=0), "just now"),
        (timedelta(seconds=59), "just now"),
        (timedelta(seconds=60), "1 minute ago"),
        (timedelta(minutes=59, seconds=59), "59 minutes ago"),
        (timedelta(hours=1), "1 hour ago"),
        (timedelta(hours=5), "5 hours ago"),
        (timedelta(hours=23, minutes=59), "23 hours ago"),
        (timedelta(days=1), "1 day ago"),
        (timedelta(days=6), "6 days ago"),
        (timedelta(days=7), "1 week ago"),
        (timedelta(days=27), "3 weeks ago"),
        (timedelta(days=28), "0 months ago"),
        (timedelta(days=30), "1 month ago"),
        (timedelta(days=75), "2 months ago"),
    ],
)
def test_thresholds(delta, expected):
    """Labels follow the minute/hour/day/week/month thresholds."""
    assert format_relative_time(NOW - delta, NOW) == expected


def test_future_timestamp_is_just_now():
    """A timestamp after now reads as just now."""
    assert format_relative_time(NOW + timedelta(hours=2), NOW) == "just now"


def test_fractional_seconds_floor():
    """Partial seconds never round up into the next unit."""
    assert format_relative_time(NOW - timedelta(seconds=59.9), NOW) == "just now"
