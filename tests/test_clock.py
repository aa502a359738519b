"""Tests for the fixed-offset clock helpers."""

from datetime import datetime, timezone

import pytest

from app.core.exceptions import InvalidFormat
from app.services.clock import (format_minutes, local_date, month_label,
                                parse_shift_boundary, to_local_minutes)


def test_local_minutes_applies_fixed_offset():
    """03:30 UTC is 09:00 at +05:30."""
    assert to_local_minutes(datetime(2024, 6, 10, 3, 30, tzinfo=timezone.utc)) == 540


def test_local_minutes_wraps_at_local_midnight():
    assert to_local_minutes(datetime(2024, 6, 10, 18, 30, tzinfo=timezone.utc)) == 0
    assert to_local_minutes(datetime(2024, 6, 10, 18, 29, tzinfo=timezone.utc)) == 1439


def test_naive_timestamps_are_treated_as_utc():
    assert to_local_minutes(datetime(2024, 6, 10, 3, 30)) == 540


def test_local_date_rolls_over_before_utc_does():
    """19:00 UTC on the 10th is already the 11th locally."""
    assert local_date(datetime(2024, 6, 10, 19, 0, tzinfo=timezone.utc)) == "2024-06-11"


def test_month_label_uses_local_zone():
    assert month_label(datetime(2024, 5, 31, 19, 0, tzinfo=timezone.utc)) == "2024-06"
    assert month_label(datetime(2024, 5, 31, 18, 0, tzinfo=timezone.utc)) == "2024-05"


def test_no_daylight_saving_adjustment():
    winter = datetime(2024, 1, 15, 3, 30, tzinfo=timezone.utc)
    summer = datetime(2024, 7, 15, 3, 30, tzinfo=timezone.utc)
    assert to_local_minutes(winter) == to_local_minutes(summer) == 540


@pytest.mark.parametrize(
    "text,expected",
    [("00:00", 0), ("09:00", 540), ("10:30", 630), ("23:59", 1439), ("7:05", 425)],
)
def test_parse_shift_boundary(text, expected):
    assert parse_shift_boundary(text) == expected


@pytest.mark.parametrize(
    "text",
    ["", "0900", "9", "24:00", "12:60", "12:-1", "ab:cd", "10:00:00", None,
     "9:5", "+9:00", " 9:00", "-0:00", "09:00\n", "09 :00"],
)
def test_parse_shift_boundary_rejects_bad_input(text):
    with pytest.raises(InvalidFormat):
        parse_shift_boundary(text)


def test_format_minutes():
    assert format_minutes(1053) == "17:33"
    assert format_minutes(567) == "09:27"
