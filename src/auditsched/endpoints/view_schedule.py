#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
from __future__ import annotations

import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from auditsched.constants import SCHEDULE_DATE_FORMAT, SCHEDULE_TIME_FORMAT
from auditsched.readers import load_schedule
from auditsched.schedule import ScheduledAudit

NOTES_COL_WIDTH = 40


def _or_dash(value: object | None) -> str:
    return "-" if value is None else str(value)


def schedule_table(audits: list[ScheduledAudit], today: datetime.date) -> Table:
    table = Table(show_header=True, header_style="bold magenta", show_lines=False)
    table.add_column("Date", justify="right", style="cyan", no_wrap=True)
    table.add_column("Time", justify="right", no_wrap=True)
    table.add_column("Store")
    table.add_column("Checklist")
    table.add_column("Auditor")
    table.add_column("Priority", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Notes", style="dim", max_width=NOTES_COL_WIDTH)
    for audit in sorted(audits, key=lambda a: (a.scheduled_date, a.store_id)):
        table.add_row(
            audit.scheduled_date.strftime(SCHEDULE_DATE_FORMAT),
            (
                audit.scheduled_time.strftime(SCHEDULE_TIME_FORMAT)
                if audit.scheduled_time
                else "-"
            ),
            audit.store_name or str(audit.store_id),
            _or_dash(audit.checklist_name),
            audit.auditor_name or "unassigned",
            audit.priority.value,
            audit.status.value,
            _or_dash(audit.notes),
            style=audit.color_code(today),
        )
    return table


@click.command()
@click.argument("p", type=Path)
@click.option(
    "--today",
    type=click.DateTime(formats=[SCHEDULE_DATE_FORMAT]),
    default=None,
    help="Date used to flag overdue audits, defaults to the current date.",
)
@click.option("--store", type=int, default=None, help="Only show audits of a store.")
def view_schedule(
    p: Path, today: datetime.datetime | None = None, store: int | None = None
) -> None:
    console = Console()
    audits = load_schedule(p)
    if store is not None:
        audits = [a for a in audits if a.store_id == store]
    if not audits:
        console.print(f"No audits scheduled in {p}")
        return
    today_ = today.date() if today else datetime.date.today()
    console.print(schedule_table(audits, today_), width=None)
    console.print(f"{len(audits)} audits", markup=False)


if __name__ == "__main__":
    view_schedule()
