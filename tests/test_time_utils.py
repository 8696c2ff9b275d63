#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

import pytest

from auditsched.time_utils import (
    DateRange,
    add_months,
    as_date,
    day_in_month,
    js_weekday,
    last_day_of_month,
    next_weekday_on_or_after,
    nth_weekday_of_month,
)


def test_js_weekday_starts_on_sunday():
    sunday = datetime.date(2025, 1, 5)
    assert js_weekday(sunday) == 0
    assert js_weekday(sunday + datetime.timedelta(days=1)) == 1
    assert js_weekday(sunday + datetime.timedelta(days=6)) == 6


def test_as_date():
    assert as_date(datetime.datetime(2025, 3, 4, 17, 45)) == datetime.date(2025, 3, 4)
    assert as_date(datetime.date(2025, 3, 4)) == datetime.date(2025, 3, 4)


@pytest.mark.parametrize(
    "d, expected",
    [
        (datetime.date(2025, 2, 10), datetime.date(2025, 2, 28)),
        (datetime.date(2024, 2, 10), datetime.date(2024, 2, 29)),  # leap year
        (datetime.date(2025, 4, 30), datetime.date(2025, 4, 30)),
        (datetime.date(2025, 12, 1), datetime.date(2025, 12, 31)),
    ],
)
def test_last_day_of_month(d: datetime.date, expected: datetime.date):
    assert last_day_of_month(d) == expected


@pytest.mark.parametrize(
    "d, day, expected",
    [
        (datetime.date(2025, 1, 1), 15, datetime.date(2025, 1, 15)),
        (datetime.date(2025, 2, 1), 31, datetime.date(2025, 2, 28)),
        (datetime.date(2025, 2, 1), 30, datetime.date(2025, 2, 28)),
        (datetime.date(2025, 4, 1), 31, datetime.date(2025, 4, 30)),
        (datetime.date(2025, 4, 1), -1, datetime.date(2025, 4, 30)),
    ],
)
def test_day_in_month_never_rolls_over(
    d: datetime.date, day: int, expected: datetime.date
):
    assert day_in_month(d, day) == expected


def test_next_weekday_on_or_after():
    tuesday = datetime.date(2025, 1, 7)
    assert next_weekday_on_or_after(tuesday, 2) == tuesday
    assert next_weekday_on_or_after(tuesday, 3) == datetime.date(2025, 1, 8)
    assert next_weekday_on_or_after(tuesday, 1) == datetime.date(2025, 1, 13)
    assert next_weekday_on_or_after(tuesday, 0) == datetime.date(2025, 1, 12)


@pytest.mark.parametrize(
    "day_of_week, week_of_month, expected",
    [
        (0, 1, datetime.date(2025, 6, 1)),  # the month starts on a Sunday
        (0, 2, datetime.date(2025, 6, 8)),
        (1, 1, datetime.date(2025, 6, 2)),
        (1, 4, datetime.date(2025, 6, 23)),
        (1, -1, datetime.date(2025, 6, 30)),
        (0, -1, datetime.date(2025, 6, 29)),
    ],
)
def test_nth_weekday_of_month(
    day_of_week: int, week_of_month: int, expected: datetime.date
):
    assert (
        nth_weekday_of_month(datetime.date(2025, 6, 18), day_of_week, week_of_month)
        == expected
    )


def test_add_months_clamps_to_month_end():
    assert add_months(datetime.date(2025, 1, 31), 1) == datetime.date(2025, 2, 28)
    assert add_months(datetime.date(2025, 1, 31), 2) == datetime.date(2025, 3, 31)
    assert add_months(datetime.date(2025, 11, 15), 3) == datetime.date(2026, 2, 15)


def test_date_range():
    span = DateRange(datetime.date(2025, 1, 1), datetime.date(2025, 1, 31))
    assert span.contains(datetime.date(2025, 1, 1))
    assert span.contains(datetime.date(2025, 1, 31))
    assert not span.contains(datetime.date(2025, 2, 1))
    assert not span.is_empty
    assert span.clamp_end(None) == span
    assert span.clamp_end(datetime.date(2025, 3, 1)) == span
    clamped = span.clamp_end(datetime.date(2024, 12, 1))
    assert clamped.end == datetime.date(2024, 12, 1)
    assert clamped.is_empty
