from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from gitrewrite.errors import InvalidTimestamp
from gitrewrite.git.timecodec import EngineTime, format_offset, from_engine_time, to_engine_time


def _tz(minutes: int) -> timezone:
    return timezone(timedelta(minutes=minutes))


@pytest.mark.parametrize("offset_minutes", [0, 540, -300, 330])
def test_round_trip_keeps_instant_and_offset(offset_minutes: int) -> None:
    date = datetime(2024, 3, 1, 12, 30, 45, tzinfo=_tz(offset_minutes))

    engine_time = to_engine_time(date)
    restored = from_engine_time(engine_time)

    assert engine_time.offset_minutes == offset_minutes
    assert restored == date
    assert restored.utcoffset() == timedelta(minutes=offset_minutes)


def test_to_engine_time_uses_epoch_seconds_and_minutes_east() -> None:
    date = datetime(1970, 1, 1, 9, 0, 0, tzinfo=_tz(540))

    assert to_engine_time(date) == EngineTime(seconds=0, offset_minutes=540)


def test_same_instant_in_two_timezones_stays_distinct() -> None:
    tokyo = datetime(2024, 1, 1, 21, 0, tzinfo=_tz(540))
    new_york = datetime(2024, 1, 1, 7, 0, tzinfo=_tz(-300))
    assert tokyo == new_york

    tokyo_time = to_engine_time(tokyo)
    new_york_time = to_engine_time(new_york)

    assert tokyo_time.seconds == new_york_time.seconds
    assert tokyo_time != new_york_time
    assert from_engine_time(tokyo_time).utcoffset() != from_engine_time(new_york_time).utcoffset()


def test_sub_second_precision_is_dropped() -> None:
    date = datetime(2024, 3, 1, 12, 0, 0, 999999, tzinfo=timezone.utc)

    assert from_engine_time(to_engine_time(date)) == date.replace(microsecond=0)


def test_from_altz_converts_west_seconds_to_east_minutes() -> None:
    assert EngineTime.from_altz(100, -19800) == EngineTime(100, 330)
    assert EngineTime.from_altz(100, 18000) == EngineTime(100, -300)
    assert EngineTime.from_altz(100, 0) == EngineTime(100, 0)


def test_git_date_format() -> None:
    assert EngineTime(1700000000, 540).to_git_date() == "1700000000 +0900"
    assert EngineTime(1700000000, -330).to_git_date() == "1700000000 -0530"
    assert format_offset(0) == "+0000"


def test_naive_datetime_is_rejected() -> None:
    with pytest.raises(InvalidTimestamp):
        to_engine_time(datetime(2024, 1, 1))


def test_offset_out_of_range_is_rejected() -> None:
    with pytest.raises(InvalidTimestamp):
        from_engine_time(EngineTime(0, 24 * 60))


def test_unrepresentable_seconds_are_rejected() -> None:
    with pytest.raises(InvalidTimestamp):
        from_engine_time(EngineTime(10**15, 0))
