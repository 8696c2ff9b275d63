#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Recurring audit rules as stored by the audit calendar, and the scheduled audit
entries generated from them."""

import datetime
import logging
from collections.abc import Iterable, Mapping
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

from auditsched.constants import DEFAULT_HORIZON_DAYS
from auditsched.exceptions import InvalidRuleError
from auditsched.recurrence import (
    Frequency,
    RecurrenceRule,
    expand,
    none_if_blank,
)

logger = logging.getLogger(__name__)

RECURRENCE_FIELDS = (
    "frequency",
    "day_of_week",
    "day_of_month",
    "week_of_month",
    "start_date",
    "end_date",
)


class Priority(StrEnum):
    Normal = "Normal"
    Urgent = "Urgent"
    FollowUp = "Follow-up"


class AuditStatus(StrEnum):
    Scheduled = "Scheduled"
    InProgress = "InProgress"
    Completed = "Completed"
    Cancelled = "Cancelled"
    Missed = "Missed"


# calendar colours, see `color_code`
STATUS_COLORS = {
    AuditStatus.Completed: "#10b981",
    AuditStatus.InProgress: "#f59e0b",
    AuditStatus.Cancelled: "#6b7280",
    AuditStatus.Missed: "#ef4444",
}
OVERDUE_COLOR = "#ef4444"
PRIORITY_COLORS = {
    Priority.Urgent: "#f97316",
    Priority.FollowUp: "#8b5cf6",
}
DEFAULT_COLOR = "#3b82f6"


class ScheduledAudit(BaseModel):
    """An audit planned for a given store on a given date."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    store_id: int
    store_name: str | None = None
    checklist_schema_id: int | None = None
    checklist_name: str | None = None
    auditor_user_id: int | None = None
    auditor_name: str | None = None
    scheduled_date: datetime.date
    scheduled_time: datetime.time | None = None
    priority: Priority = Priority.Normal
    status: AuditStatus = AuditStatus.Scheduled
    notes: str | None = None
    recurring_rule_id: int | None = None

    @field_validator(
        "store_name",
        "checklist_schema_id",
        "checklist_name",
        "auditor_user_id",
        "auditor_name",
        "scheduled_time",
        "notes",
        "recurring_rule_id",
        mode="before",
    )
    @classmethod
    def blank_as_missing(cls, v: Any) -> Any:
        return none_if_blank(v)

    @property
    def starts_at(self) -> datetime.datetime | None:
        if self.scheduled_time is None:
            return None
        return datetime.datetime.combine(self.scheduled_date, self.scheduled_time)

    def is_overdue(self, today: datetime.date) -> bool:
        return self.status == AuditStatus.Scheduled and self.scheduled_date < today

    def color_code(self, today: datetime.date) -> str:
        """The colour the audit is shown with on the calendar.

        Terminal and in-progress statuses take precedence, followed by overdue
        audits and then by priority.
        """
        if self.status in STATUS_COLORS:
            return STATUS_COLORS[self.status]
        if self.is_overdue(today):
            return OVERDUE_COLOR
        return PRIORITY_COLORS.get(self.priority, DEFAULT_COLOR)


class RecurringAuditRule(BaseModel):
    """A stored rule from which scheduled audits are generated periodically.

    Parameters
    ----------
    id
        Identifier of the stored rule, attached to the generated audits.
    auditor_user_id
        The auditor assigned to all generated audits. When not set, the audits
        are generated unassigned.
    preferred_time
        Time of day attached to each generated audit.
    is_active
        Inactive rules generate nothing.
    last_generated_date
        The latest date audits were generated for. Later expansions only
        produce dates after it.

    Notes
    -----
    See `RecurrenceRule` for the meaning of the recurrence fields.
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    id: int | None = None
    store_id: int
    store_name: str | None = None
    checklist_schema_id: int | None = None
    checklist_name: str | None = None
    auditor_user_id: int | None = None
    auditor_name: str | None = None
    frequency: Frequency
    day_of_week: int | None = None
    day_of_month: int | None = None
    week_of_month: int | None = None
    preferred_time: datetime.time | None = None
    priority: Priority = Priority.Normal
    notes: str | None = None
    start_date: datetime.date
    end_date: datetime.date | None = None
    is_active: bool = True
    last_generated_date: datetime.date | None = None

    @field_validator(
        "id",
        "store_name",
        "checklist_schema_id",
        "checklist_name",
        "auditor_user_id",
        "auditor_name",
        "day_of_week",
        "day_of_month",
        "week_of_month",
        "preferred_time",
        "notes",
        "end_date",
        "last_generated_date",
        mode="before",
    )
    @classmethod
    def blank_as_missing(cls, v: Any) -> Any:
        return none_if_blank(v)

    @field_validator("frequency", mode="before")
    @classmethod
    def validate_frequency(cls, v: Any) -> Frequency:
        return Frequency.parse(v)

    @model_validator(mode="after")
    def check_recurrence(self) -> Self:
        # raises InvalidRuleError for anchors out of range
        _ = self.recurrence
        return self

    @property
    def recurrence(self) -> RecurrenceRule:
        return RecurrenceRule.from_record(
            {field: getattr(self, field) for field in RECURRENCE_FIELDS}
        )

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Self:
        """Build a rule from a stored record.

        Raises
        ------
        InvalidRuleError
            If the record does not describe a valid rule.
        """
        try:
            rule = cls.model_validate(record)
        except ValidationError as e:
            raise InvalidRuleError(str(e)) from e
        return rule


def generate_scheduled_audits(
    rule: RecurringAuditRule,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    reference_now: datetime.date | datetime.datetime | None = None,
    existing: Iterable[datetime.date] = (),
) -> list[ScheduledAudit]:
    """Create the audits `rule` schedules within the horizon that have not been
    generated yet.

    Parameters
    ----------
    existing
        Dates already scheduled for this rule. No audit is generated for them.

    Returns
    -------
    audits
        New audits in date order, not yet persisted.
    """
    if not rule.is_active:
        logger.debug(f"Rule {rule.id} is inactive, nothing to generate")
        return []
    skip = set(existing)
    audits = []
    for date in expand(rule.recurrence, horizon_days, reference_now):
        if rule.last_generated_date is not None and date <= rule.last_generated_date:
            continue
        if date in skip:
            continue
        audits.append(
            ScheduledAudit(
                store_id=rule.store_id,
                store_name=rule.store_name,
                checklist_schema_id=rule.checklist_schema_id,
                checklist_name=rule.checklist_name,
                auditor_user_id=rule.auditor_user_id,
                auditor_name=rule.auditor_name,
                scheduled_date=date,
                scheduled_time=rule.preferred_time,
                priority=rule.priority,
                notes=rule.notes,
                recurring_rule_id=rule.id,
            )
        )
    logger.debug(f"Generated {len(audits)} audits for rule {rule.id}")
    return audits


def mark_generated(
    rule: RecurringAuditRule, audits: Iterable[ScheduledAudit]
) -> RecurringAuditRule:
    """Return a copy of `rule` whose `last_generated_date` covers `audits`."""
    dates = [a.scheduled_date for a in audits]
    if not dates:
        return rule
    latest = max(dates)
    if rule.last_generated_date is not None:
        latest = max(latest, rule.last_generated_date)
    return rule.model_copy(update={"last_generated_date": latest})
