from datetime import date, datetime

import pytest

from worktrack.services import clock


def test_seconds_between_truncates_sub_second_remainder():
    start = datetime(2026, 10, 14, 9, 0, 0)
    end = datetime(2026, 10, 14, 9, 0, 59, 999999)
    assert clock.seconds_between(start, end) == 59


def test_work_days_monday_to_following_sunday():
    assert clock.count_work_days(date(2026, 10, 12), date(2026, 10, 18)) == 5


@pytest.mark.parametrize(
    "start, end, expected",
    [
        (date(2026, 10, 17), date(2026, 10, 18), 0),  # Sat-Sun
        (date(2026, 10, 16), date(2026, 10, 19), 2),  # Fri-Mon
        (date(2026, 10, 14), date(2026, 10, 14), 1),
        (date(2026, 10, 1), date(2026, 10, 31), 22),
        (date(2026, 10, 14), date(2026, 10, 13), 0),
    ],
)
def test_count_work_days(start, end, expected):
    assert clock.count_work_days(start, end) == expected


def test_parse_instant_normalises_to_naive_utc():
    assert clock.parse_instant("2026-10-14T09:30:00Z") == datetime(2026, 10, 14, 9, 30)
    assert clock.parse_instant("2026-10-14T11:30:00+02:00") == datetime(2026, 10, 14, 9, 30)
    assert clock.parse_instant("2026-10-14T09:30:00") == datetime(2026, 10, 14, 9, 30)


@pytest.mark.parametrize("value", ["", "yesterday", "2026-13-40T00:00:00Z"])
def test_parse_instant_rejects_garbage(value):
    with pytest.raises(ValueError):
        clock.parse_instant(value)


def test_parse_day_accepts_date_or_instant():
    assert clock.parse_day("2026-10-14") == date(2026, 10, 14)
    assert clock.parse_day("2026-10-14T23:30:00Z") == date(2026, 10, 14)
    assert clock.parse_day("2026-10-15T01:30:00+02:00") == date(2026, 10, 14)


@pytest.mark.parametrize("value", ["2026-10-12garbage", "14/10/2026", "2026-10-12 junk", ""])
def test_parse_day_rejects_trailing_junk(value):
    with pytest.raises(ValueError):
        clock.parse_day(value)


def test_to_iso_uses_z_suffix():
    assert clock.to_iso(datetime(2026, 10, 14, 9, 30)) == "2026-10-14T09:30:00Z"
    assert clock.to_iso(None) is None


def test_day_window_is_half_open_midnight_to_midnight():
    start, end = clock.day_window(date(2026, 10, 14))
    assert start == datetime(2026, 10, 14)
    assert end == datetime(2026, 10, 15)


def test_last_day_of_interval_ending_at_midnight():
    start = datetime(2026, 10, 14, 22, 0)
    assert clock.last_day_of(start, datetime(2026, 10, 15, 0, 0)) == date(2026, 10, 14)
    assert clock.last_day_of(start, datetime(2026, 10, 15, 0, 1)) == date(2026, 10, 15)


def test_yesterday_relative_to_now():
    assert clock.yesterday(datetime(2026, 10, 1, 0, 5)) == date(2026, 9, 30)
