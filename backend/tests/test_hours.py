from datetime import datetime, timedelta, timezone

import pytest

from backend.services.hours import (
    dangling_punch,
    format_duration,
    pair_intervals,
    pair_worked_duration,
)


def _at(hh: int, mm: int = 0, ss: int = 0) -> datetime:
    return datetime(2024, 3, 10, hh, mm, ss, tzinfo=timezone.utc)


def test_full_day_pairs_entries_with_exits():
    stamps = [_at(8), _at(12), _at(13), _at(17)]

    assert pair_intervals(stamps) == [(_at(8), _at(12)), (_at(13), _at(17))]
    assert pair_worked_duration(stamps) == timedelta(hours=8)


@pytest.mark.parametrize(
    "stamps, expected",
    [
        ([], timedelta(0)),
        ([_at(9)], timedelta(0)),
        ([_at(9), _at(12), _at(14)], timedelta(hours=3)),
        ([_at(9), _at(12), _at(14), _at(15, 30), _at(16)], timedelta(hours=4, minutes=30)),
    ],
)
def test_trailing_unpaired_punch_is_ignored(stamps, expected):
    assert pair_worked_duration(stamps) == expected


def test_total_matches_sum_of_pairwise_differences():
    stamps = [_at(7, 3, 11), _at(7, 59, 2), _at(8, 0, 0), _at(11, 45, 59), _at(12, 0, 1), _at(18, 30, 0), _at(23)]

    expected = sum(
        (stamps[2 * k + 1] - stamps[2 * k] for k in range(len(stamps) // 2)),
        timedelta(0),
    )
    assert pair_worked_duration(stamps) == expected


def test_equal_timestamps_pair_to_zero():
    assert pair_worked_duration([_at(8), _at(8)]) == timedelta(0)


def test_dangling_punch():
    assert dangling_punch([_at(9), _at(12), _at(14)]) == _at(14)
    assert dangling_punch([_at(9), _at(12)]) is None
    assert dangling_punch([]) is None


def test_format_whole_hours():
    formatted = format_duration(timedelta(hours=8))
    assert formatted.display == "8h 0m"
    assert formatted.total_seconds == "28800"


def test_format_truncates_instead_of_rounding():
    formatted = format_duration(timedelta(hours=1, minutes=59, seconds=59, milliseconds=999))
    assert formatted.display == "1h 59m"
    assert formatted.total_seconds == "7199"


def test_format_with_seconds():
    formatted = format_duration(timedelta(hours=3, minutes=35, seconds=30), include_seconds=True)
    assert formatted.display == "3h 35m 30s"


def test_format_past_a_day_keeps_counting_hours():
    assert format_duration(timedelta(hours=25, minutes=5)).display == "25h 5m"


def test_format_zero():
    formatted = format_duration(timedelta(0), include_seconds=True)
    assert formatted.display == "0h 0m 0s"
    assert formatted.total_seconds == "0"
