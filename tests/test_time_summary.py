import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from billing_errors import ParseError
from billing_models import TimeEntry
from time_summary import build_summary, parse_timestamp


def test_build_summary():
    entries = [
        TimeEntry("2022-01-01T00:00:00+00:00", "2022-01-01T00:10:00+00:00"),
        TimeEntry("2022-01-01T10:00:00+00:00", "2022-01-01T11:10:00+00:00"),
        TimeEntry("2022-02-01T15:00:00+00:00", "2022-02-01T15:52:00+00:00"),
    ]

    assert build_summary(entries) == {"2022-01-01": 80, "2022-02-01": 52}


def test_build_summary_order_independent():
    entries = [
        TimeEntry("2022-02-01T15:00:00+00:00", "2022-02-01T15:52:00+00:00"),
        TimeEntry("2022-01-01T10:00:00+00:00", "2022-01-01T11:10:00+00:00"),
        TimeEntry("2022-01-01T00:00:00+00:00", "2022-01-01T00:10:00+00:00"),
    ]

    assert build_summary(entries) == {"2022-01-01": 80, "2022-02-01": 52}


def test_day_key_uses_entry_offset_not_utc():
    """+09:00 の 00:30 開始は UTC では前日だが、エントリ側の日付で集計する"""
    entries = [TimeEntry("2022-03-02T00:30:00+09:00", "2022-03-02T01:30:00+09:00")]

    assert build_summary(entries) == {"2022-03-02": 60}


def test_entry_crossing_midnight_counts_on_start_day():
    entries = [TimeEntry("2022-01-01T23:30:00+01:00", "2022-01-02T00:45:00+01:00")]

    assert build_summary(entries) == {"2022-01-01": 75}


def test_partial_minutes_are_floored():
    entries = [TimeEntry("2022-01-01T10:00:00+00:00", "2022-01-01T10:10:59+00:00")]

    assert build_summary(entries) == {"2022-01-01": 10}


def test_negative_duration_is_not_clamped():
    """終了が開始より前のエントリはその日の合計から差し引かれる（現状の挙動）"""
    entries = [
        TimeEntry("2022-01-01T10:00:00+00:00", "2022-01-01T11:00:00+00:00"),
        TimeEntry("2022-01-01T12:00:00+00:00", "2022-01-01T11:45:00+00:00"),
    ]

    assert build_summary(entries) == {"2022-01-01": 45}


def test_negative_partial_minute_is_floored_not_truncated():
    """-90秒は -1 ではなく -2 分として扱う"""
    entries = [TimeEntry("2022-01-01T10:00:00+00:00", "2022-01-01T09:58:30+00:00")]

    assert build_summary(entries) == {"2022-01-01": -2}


def test_utc_designator_is_accepted():
    entries = [TimeEntry("2022-01-01T10:00:00Z", "2022-01-01T10:30:00Z")]

    assert build_summary(entries) == {"2022-01-01": 30}


def test_empty_entries():
    assert build_summary([]) == {}


def test_invalid_start_date():
    entries = [TimeEntry("this string is not a date", "2022-01-01T00:10:00+00:00")]

    with pytest.raises(ParseError) as exc_info:
        build_summary(entries)

    assert exc_info.value.field == "start"
    assert exc_info.value.raw_value == "this string is not a date"
    assert str(exc_info.value) == "Failed to parse start date: this string is not a date"


def test_invalid_end_date():
    entries = [TimeEntry("2022-01-01T00:10:00+00:00", "this string is not a date")]

    with pytest.raises(ParseError) as exc_info:
        build_summary(entries)

    assert exc_info.value.field == "end"
    assert str(exc_info.value) == "Failed to parse end date: this string is not a date"


def test_one_bad_entry_fails_whole_summary():
    entries = [
        TimeEntry("2022-01-01T10:00:00+00:00", "2022-01-01T11:00:00+00:00"),
        TimeEntry("2022-01-02T10:00:00+00:00", None),
    ]

    with pytest.raises(ParseError) as exc_info:
        build_summary(entries)

    assert exc_info.value.field == "end"
    assert exc_info.value.raw_value is None


def test_timestamp_without_offset_is_rejected():
    with pytest.raises(ParseError):
        parse_timestamp("start", "2022-01-01T10:00:00")


def test_lowercase_separators_are_accepted():
    assert parse_timestamp("start", "2022-01-01t10:00:00z") == parse_timestamp("start", "2022-01-01T10:00:00Z")


@pytest.mark.parametrize("value", [
    "20220101T100000+0100",
    "2022-01-01 10:30+01:00",
    "2022-01-01T10:30:00+0100",
    "2022-01-01",
    "2022-01-01T10:30:00+01:00\n",
])
def test_non_rfc3339_forms_are_rejected(value):
    """ISO 8601 でも RFC 3339 の date-time でない形式は受け付けない"""
    with pytest.raises(ParseError) as exc_info:
        build_summary([TimeEntry(value, "2022-01-01T11:00:00+01:00")])

    assert exc_info.value.field == "start"
    assert exc_info.value.raw_value == value
