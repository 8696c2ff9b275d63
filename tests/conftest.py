#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
from typing import Any

import pytest

from auditsched.schedule import Priority, RecurringAuditRule


@pytest.fixture
def reference_now() -> datetime.date:
    return datetime.date(2025, 1, 1)  # Wednesday


@pytest.fixture
def weekly_record() -> dict[str, Any]:
    """A stored rule auditing a store every Tuesday in January 2025."""
    return {
        "id": 7,
        "store_id": 12,
        "store_name": "Main Street",
        "checklist_schema_id": 3,
        "checklist_name": "Kitchen hygiene",
        "auditor_user_id": 5,
        "auditor_name": "Sam Lee",
        "frequency": "Weekly",
        "day_of_week": 2,
        "preferred_time": "09:30",
        "priority": "Urgent",
        "notes": "Check the walk-in fridge",
        "start_date": "2025-01-01",
        "end_date": "2025-01-31",
    }


@pytest.fixture
def monthly_record() -> dict[str, Any]:
    """A stored rule auditing a store on the last day of each month, open-ended."""
    return {
        "id": 8,
        "store_id": 14,
        "store_name": "Harbour View",
        "frequency": "Monthly",
        "day_of_month": -1,
        "start_date": "2025-01-01",
    }


@pytest.fixture
def weekly_rule(weekly_record: dict[str, Any]) -> RecurringAuditRule:
    return RecurringAuditRule.from_record(weekly_record)


@pytest.fixture
def unassigned_rule() -> RecurringAuditRule:
    return RecurringAuditRule(
        id=9,
        store_id=20,
        frequency="BiWeekly",
        start_date=datetime.date(2025, 1, 6),
        priority=Priority.FollowUp,
    )
