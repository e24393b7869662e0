"""Timesheet status rules.

Everything here is a pure function of its arguments: callers pass the
entries in, and get new Timesheet copies back. Nothing is read from or
written to storage.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date, datetime, time
from decimal import Decimal

from models import EXPECTED_HOURS, StatusReport, StatusSummary, Timesheet, TimesheetEntry, TimesheetStatus


def calculate_status(total_hours: Decimal) -> TimesheetStatus:
    """Classify a week by its total hours.

    - MISSING: 0 hours
    - COMPLETED: >= 40 hours
    - INCOMPLETE: anything in between
    """
    if total_hours == 0:
        return TimesheetStatus.MISSING
    if total_hours >= EXPECTED_HOURS:
        return TimesheetStatus.COMPLETED
    return TimesheetStatus.INCOMPLETE


def calculate_total_hours(entries: Iterable[TimesheetEntry]) -> Decimal:
    return sum((entry.hours for entry in entries), Decimal("0"))


def get_timesheet_entries(
    timesheet_id: str, all_entries: Iterable[TimesheetEntry]
) -> list[TimesheetEntry]:
    return [entry for entry in all_entries if entry.timesheet_id == timesheet_id]


def apply_total_hours(timesheet: Timesheet, total_hours: Decimal) -> Timesheet:
    """Return a copy of ``timesheet`` carrying ``total_hours`` and the matching status."""
    updated = replace(timesheet)
    # Derived fields are init=False on the frozen dataclass; this is their only writer.
    object.__setattr__(updated, "total_hours", total_hours)
    object.__setattr__(updated, "status", calculate_status(total_hours))
    return updated


def update_timesheet_status(
    timesheet: Timesheet, all_entries: Iterable[TimesheetEntry]
) -> Timesheet:
    """Recompute total hours and status for one timesheet from the entry collection."""
    entries = get_timesheet_entries(timesheet.id, all_entries)
    return apply_total_hours(timesheet, calculate_total_hours(entries))


def get_timesheet_status_summary(
    timesheets: Sequence[Timesheet], all_entries: Iterable[TimesheetEntry]
) -> StatusReport:
    """Recompute every timesheet and count how many fall into each status."""
    entries = list(all_entries)
    updated = [update_timesheet_status(ts, entries) for ts in timesheets]

    summary = StatusSummary(total=len(updated))
    for ts in updated:
        if ts.status == TimesheetStatus.COMPLETED:
            summary.completed += 1
        elif ts.status == TimesheetStatus.INCOMPLETE:
            summary.incomplete += 1
        else:
            summary.missing += 1

    return StatusReport(timesheets=updated, summary=summary)


def can_submit_timesheet(status: TimesheetStatus) -> bool:
    return status == TimesheetStatus.COMPLETED


def get_hours_needed(total_hours: Decimal) -> Decimal:
    return max(Decimal("0"), EXPECTED_HOURS - total_hours)


def progress_percentage(total_hours: Decimal, expected_hours: Decimal = EXPECTED_HOURS) -> Decimal:
    """Share of the expected week logged so far, capped at 100."""
    if expected_hours <= 0:
        return Decimal("100")
    return min(total_hours / expected_hours * 100, Decimal("100"))


def is_overdue(end_date: date, now: datetime | None = None) -> bool:
    """True once the start of ``end_date`` has passed."""
    if now is None:
        now = datetime.now()
    end = datetime.combine(end_date, time.min, tzinfo=now.tzinfo)
    return end < now
