from datetime import date, datetime

import pytest

from rumb.engine.calendar import (
    day_key,
    day_range,
    days_between,
    is_in_cron_window,
    is_week_key,
    normalize_day_key,
    week_key,
    week_range,
    weeks_between,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (date(2025, 1, 1), "2025-W01"),
        (date(2024, 12, 30), "2025-W01"),
        (date(2021, 1, 3), "2020-W53"),
        (date(2025, 3, 10), "2025-W11"),
    ],
)
def test_iso_week_keys(value: date, expected: str) -> None:
    assert week_key(value) == expected
    assert is_week_key(expected)


def test_day_keys() -> None:
    assert day_key(date(2025, 2, 3)) == "2025-02-03"
    assert day_range(date(2024, 12, 31), 3) == ["2024-12-31", "2025-01-01", "2025-01-02"]
    assert days_between(date(2025, 1, 30), date(2025, 2, 2)) == [
        "2025-01-30", "2025-01-31", "2025-02-01", "2025-02-02",
    ]
    assert days_between(date(2025, 2, 2), date(2025, 1, 30)) == []


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2025-03-04", "2025-03-04"),
        (" 2025-03-04 ", "2025-03-04"),
        ("2025-03-04T10:20:00", "2025-03-04"),
        ("2025-01-01T00:00:00Z", "2025-01-01"),
        ("2025-03-04T23:30:00.000z", "2025-03-04"),
        ("2025-03-04T23:30:00+01:00", "2025-03-04"),
        ("2025-02-30", None),
        ("yesterday", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_day_key(value, expected) -> None:
    assert normalize_day_key(value) == expected


def test_week_ranges() -> None:
    assert week_range(date(2025, 1, 1), 3) == ["2025-W01", "2025-W02", "2025-W03"]
    assert weeks_between(date(2025, 1, 1), date(2025, 1, 20)) == [
        "2025-W01", "2025-W02", "2025-W03", "2025-W04",
    ]
    assert weeks_between(date(2025, 1, 6), date(2025, 1, 7)) == ["2025-W02"]
    assert not is_week_key("2025-01-01")


def test_cron_window() -> None:
    assert is_in_cron_window(datetime(2025, 1, 1, 0, 0), 5)
    assert is_in_cron_window(datetime(2025, 1, 1, 0, 4, 59), 5)
    assert not is_in_cron_window(datetime(2025, 1, 1, 0, 5), 5)
    assert not is_in_cron_window(datetime(2025, 1, 1, 23, 59), 5)
