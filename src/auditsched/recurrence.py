#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Expansion of recurring audit rules into the calendar dates on which the audits
should take place."""

import datetime
import logging
import re
from collections.abc import Iterator, Mapping
from enum import StrEnum
from typing import Any, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from auditsched.constants import (
    DEFAULT_HORIZON_DAYS,
    LAST_DAY_OF_MONTH,
    LAST_WEEK_OF_MONTH,
)
from auditsched.exceptions import InvalidRuleError
from auditsched.time_utils import (
    WEEKDAY_NAMES,
    DateRange,
    add_days,
    add_months,
    as_date,
    day_in_month,
    next_weekday_on_or_after,
    nth_weekday_of_month,
)

logger = logging.getLogger(__name__)


class Frequency(StrEnum):
    Weekly = "Weekly"
    BiWeekly = "BiWeekly"
    Monthly = "Monthly"
    Quarterly = "Quarterly"

    @classmethod
    def parse(cls, value: Any) -> Self:
        """Resolve a stored frequency string, ignoring case and separators
        (eg, "bi-weekly" resolves to `BiWeekly`)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = re.sub(r"[\s_-]", "", value).lower()
            for member in cls:
                if member.value.lower() == key:
                    return member
        raise InvalidRuleError(
            f"Unsupported frequency {value!r}, expected one of {[f.value for f in cls]}"
        )

    @property
    def is_weekly_family(self) -> bool:
        return self in (Frequency.Weekly, Frequency.BiWeekly)

    @property
    def step(self) -> int:
        """Cursor increment: days for weekly frequencies, calendar months otherwise."""
        return _STEPS[self]


_STEPS = {
    Frequency.Weekly: 7,
    Frequency.BiWeekly: 14,
    Frequency.Monthly: 1,
    Frequency.Quarterly: 3,
}
_ORDINALS = {1: "first", 2: "second", 3: "third", 4: "fourth"}


def none_if_blank(v: Any) -> Any:
    """Stored records hold empty strings for missing values."""
    if isinstance(v, str) and not v.strip():
        return None
    return v


class RecurrenceRule(BaseModel):
    """A compact description of a repeating audit schedule.

    Parameters
    ----------
    frequency
        How often the audit recurs.
    day_of_week
        Day on which a weekly or bi-weekly audit takes place (0 = Sunday). When
        not set, the weekday of the start date is kept. Also selects the weekday
        for monthly rules that set `week_of_month`.
    day_of_month
        Day on which a monthly or quarterly audit takes place, in [1, 31], or -1
        for the last day of the month. Months shorter than the requested day
        fall back to their last day.
    week_of_month
        For monthly and quarterly rules, schedules the audit on the first to
        fourth (1-4) or last (-1) `day_of_week` of the month. Takes precedence
        over `day_of_month`.
    start_date
        First date considered, inclusive.
    end_date
        Last date considered, inclusive. Open-ended when not set.

    Notes
    -----
    Fields irrelevant to the frequency (eg, `day_of_month` on a weekly rule) are
    accepted and ignored.
    """

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel
    )

    frequency: Frequency
    day_of_week: int | None = None
    day_of_month: int | None = None
    week_of_month: int | None = None
    start_date: datetime.date
    end_date: datetime.date | None = None

    @field_validator(
        "day_of_week", "day_of_month", "week_of_month", "end_date", mode="before"
    )
    @classmethod
    def blank_as_missing(cls, v: Any) -> Any:
        return none_if_blank(v)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def drop_time_of_day(cls, v: Any) -> Any:
        if isinstance(v, datetime.datetime):
            return v.date()
        return v

    @field_validator("frequency", mode="before")
    @classmethod
    def validate_frequency(cls, v: Any) -> Frequency:
        return Frequency.parse(v)

    @field_validator("day_of_week")
    @classmethod
    def validate_day_of_week(cls, v: int | None) -> int | None:
        if v is not None and not 0 <= v <= 6:
            raise InvalidRuleError(f"day_of_week must be in [0, 6], got {v}")
        return v

    @field_validator("day_of_month")
    @classmethod
    def validate_day_of_month(cls, v: int | None) -> int | None:
        if v is not None and v != LAST_DAY_OF_MONTH and not 1 <= v <= 31:
            raise InvalidRuleError(f"day_of_month must be in [1, 31] or -1, got {v}")
        return v

    @field_validator("week_of_month")
    @classmethod
    def validate_week_of_month(cls, v: int | None) -> int | None:
        if v is not None and v != LAST_WEEK_OF_MONTH and not 1 <= v <= 4:
            raise InvalidRuleError(f"week_of_month must be in [1, 4] or -1, got {v}")
        return v

    @model_validator(mode="after")
    def check_week_of_month_has_weekday(self) -> Self:
        if (
            not self.frequency.is_weekly_family
            and self.week_of_month is not None
            and self.day_of_week is None
        ):
            raise InvalidRuleError("week_of_month requires day_of_week to be set")
        return self

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Self:
        """Build a rule from a stored record, with camelCase or snake_case keys.

        Raises
        ------
        InvalidRuleError
            If the record does not describe a valid rule.
        """
        try:
            return cls.model_validate(record)
        except ValidationError as e:
            raise InvalidRuleError(str(e)) from e

    def window(self, horizon_days: int, reference_now: datetime.date) -> DateRange:
        """The inclusive range of dates an expansion may produce."""
        horizon = DateRange(self.start_date, add_days(reference_now, horizon_days))
        return horizon.clamp_end(self.end_date)

    def target_in_month(self, cursor: datetime.date) -> datetime.date:
        if self.week_of_month is not None and self.day_of_week is not None:
            return nth_weekday_of_month(cursor, self.day_of_week, self.week_of_month)
        if self.day_of_month is not None:
            return day_in_month(cursor, self.day_of_month)
        return cursor

    def target_in_week(self, cursor: datetime.date) -> datetime.date:
        if self.day_of_week is None:
            return cursor
        return next_weekday_on_or_after(cursor, self.day_of_week)

    @property
    def summary(self) -> str:
        """A human-readable description of the rule, eg
        "Monthly on the last day from 2025-01-01"."""
        if self.frequency.is_weekly_family:
            anchor = (
                f" on {WEEKDAY_NAMES[self.day_of_week]}"
                if self.day_of_week is not None
                else ""
            )
        elif self.week_of_month is not None and self.day_of_week is not None:
            if self.week_of_month == LAST_WEEK_OF_MONTH:
                which = "last"
            else:
                which = _ORDINALS[self.week_of_month]
            anchor = f" on the {which} {WEEKDAY_NAMES[self.day_of_week]}"
        elif self.day_of_month == LAST_DAY_OF_MONTH:
            anchor = " on the last day"
        elif self.day_of_month is not None:
            anchor = f" on day {self.day_of_month}"
        else:
            anchor = ""
        until = f" until {self.end_date}" if self.end_date else ""
        return f"{self.frequency.value}{anchor} from {self.start_date}{until}"


def _weekly_targets(rule: RecurrenceRule, window: DateRange) -> Iterator[datetime.date]:
    cursor = window.start
    while cursor <= window.end:
        yield rule.target_in_week(cursor)
        cursor = add_days(cursor, rule.frequency.step)


def _monthly_targets(
    rule: RecurrenceRule, window: DateRange
) -> Iterator[datetime.date]:
    # offsets are taken from the start date so that clamping in a short month
    # does not carry over to the following ones
    n_steps = 0
    cursor = window.start
    while cursor <= window.end:
        yield rule.target_in_month(cursor)
        n_steps += 1
        cursor = add_months(window.start, n_steps * rule.frequency.step)


def expand(
    rule: RecurrenceRule | Mapping[str, Any],
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    reference_now: datetime.date | datetime.datetime | None = None,
) -> list[datetime.date]:
    """Expand a recurrence rule into the dates on which the audit occurs.

    Parameters
    ----------
    rule
        The rule to expand. Mappings are converted with `RecurrenceRule.from_record`.
    horizon_days
        How many days past `reference_now` dates may be produced, regardless of
        the rule's own end date.
    reference_now
        The date the horizon is counted from. Defaults to the current date; pass
        it explicitly for reproducible results.

    Returns
    -------
    dates
        Strictly ascending, duplicate-free dates in
        [start_date, min(end_date, reference_now + horizon_days)]. Empty when the
        rule ends before it starts or when `horizon_days` is 0.

    Raises
    ------
    InvalidRuleError
        If `rule` is a mapping that does not describe a valid rule.
    ValueError
        If `horizon_days` is negative.
    """
    if not isinstance(rule, RecurrenceRule):
        rule = RecurrenceRule.from_record(rule)
    if horizon_days < 0:
        raise ValueError(f"horizon_days must be non-negative, got {horizon_days}")
    if reference_now is None:
        reference_now = datetime.date.today()
    window = rule.window(horizon_days, as_date(reference_now))
    if horizon_days == 0 or window.is_empty:
        logger.debug(f"Nothing to expand for '{rule.summary}' in {window}")
        return []

    if rule.frequency.is_weekly_family:
        targets = _weekly_targets(rule, window)
    else:
        targets = _monthly_targets(rule, window)

    dates = []
    for target in targets:
        # targets near the window bounds may fall outside of it
        if window.contains(target) and (not dates or target > dates[-1]):
            dates.append(target)
    logger.debug(
        f"Expanded '{rule.summary}' to {len(dates)} dates between "
        f"{window.start} and {window.end}"
    )
    return dates
