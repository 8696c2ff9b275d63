#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""A light wrapper around the `datetime` library, containing the calendar
arithmetic needed to place recurring audits on concrete dates.

Weekdays follow the audit calendar convention where 0 is Sunday and 6 is
Saturday, which differs from `datetime.date.weekday()` (0 is Monday)."""

import calendar
import datetime
from typing import NamedTuple, Self

from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

from auditsched.constants import DAYS_IN_WEEK, LAST_DAY_OF_MONTH, LAST_WEEK_OF_MONTH

# indexed by the audit calendar weekday (0 = Sunday)
_RELATIVE_WEEKDAYS = (SU, MO, TU, WE, TH, FR, SA)

WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


class DateRange(NamedTuple):
    """Represents the inclusive span between two specific dates."""

    start: datetime.date
    end: datetime.date

    def contains(self, d: datetime.date) -> bool:
        """Check if a given date falls within this range, bounds included."""
        return self.start <= d <= self.end

    @property
    def is_empty(self) -> bool:
        return self.end < self.start

    def clamp_end(self, end: datetime.date | None) -> Self:
        """Return a range whose end is the earliest of `self.end` and `end`."""
        if end is None or end >= self.end:
            return self
        return self._replace(end=end)


def as_date(value: datetime.date | datetime.datetime) -> datetime.date:
    """Drop the time of day, if any."""
    if isinstance(value, datetime.datetime):
        return value.date()
    return value


def js_weekday(d: datetime.date) -> int:
    """Get an integer in the range [0, 6] representing the weekday of `d`,
    with 0 for Sunday."""
    return (d.weekday() + 1) % DAYS_IN_WEEK


def days_in_month(d: datetime.date) -> int:
    return calendar.monthrange(d.year, d.month)[1]


def last_day_of_month(d: datetime.date) -> datetime.date:
    return d.replace(day=days_in_month(d))


def day_in_month(d: datetime.date, day: int) -> datetime.date:
    """Return the `day`-th day of the month `d` falls in.

    Parameters
    ----------
    d
        Any date in the target month.
    day
        A day of the month in [1, 31], or `LAST_DAY_OF_MONTH`.

    Notes
    -----
    1. When the month is shorter than `day` (eg, day 31 in February) the last day
    of that month is returned. The result never rolls into the following month.
    """
    if day == LAST_DAY_OF_MONTH:
        return last_day_of_month(d)
    return d.replace(day=min(day, days_in_month(d)))


def next_weekday_on_or_after(d: datetime.date, day_of_week: int) -> datetime.date:
    """Return the first date on or after `d` that falls on `day_of_week`
    (0 = Sunday). Returns `d` itself when it already falls on that day."""
    days_ahead = (day_of_week - js_weekday(d) + DAYS_IN_WEEK) % DAYS_IN_WEEK
    return d + datetime.timedelta(days=days_ahead)


def nth_weekday_of_month(
    d: datetime.date, day_of_week: int, week_of_month: int
) -> datetime.date:
    """Return the date of the `week_of_month`-th `day_of_week` in the month `d`
    falls in, eg the first Monday or the last Friday.

    Parameters
    ----------
    week_of_month
        1 to 4 for the first to fourth occurrence, `LAST_WEEK_OF_MONTH` for the last.
    """
    weekday = _RELATIVE_WEEKDAYS[day_of_week]
    if week_of_month == LAST_WEEK_OF_MONTH:
        return d + relativedelta(day=31, weekday=weekday(-1))
    return d + relativedelta(day=1, weekday=weekday(+week_of_month))


def add_months(d: datetime.date, months: int) -> datetime.date:
    """Offset `d` by a number of calendar months. The day of the month is kept,
    or clamped to the last day of shorter months."""
    return d + relativedelta(months=months)


def add_days(d: datetime.date, days: int) -> datetime.date:
    return d + datetime.timedelta(days=days)
