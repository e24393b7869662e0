"""Custom widgets for the timesheet application."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from textual.widgets import Static
from rich.text import Text

from models import Timesheet, TimesheetStatus
from status import get_hours_needed, is_overdue, progress_percentage
from utils import format_hours

STATUS_STYLES = {
    TimesheetStatus.COMPLETED: "bold green",
    TimesheetStatus.INCOMPLETE: "bold yellow",
    TimesheetStatus.MISSING: "bold red",
}

ACTION_LABELS = {
    TimesheetStatus.COMPLETED: "View",
    TimesheetStatus.INCOMPLETE: "Update",
    TimesheetStatus.MISSING: "Create",
}

STATUS_FILTERS = [
    ("all", "All statuses"),
    (TimesheetStatus.COMPLETED.value, "Completed"),
    (TimesheetStatus.INCOMPLETE.value, "Incomplete"),
    (TimesheetStatus.MISSING.value, "Missing"),
]


def status_badge(status: TimesheetStatus) -> Text:
    return Text(f" {status.value} ", style=STATUS_STYLES.get(status, ""))


def action_label(status: TimesheetStatus) -> str:
    return ACTION_LABELS.get(status, "View")


def progress_bar(percentage: Decimal, width: int = 20) -> str:
    filled = int(percentage * width / 100)
    return "█" * filled + "░" * (width - filled)


class ListHeader(Static):
    """Title line of the timesheet list with the active filters and page."""

    def update_display(self, user_name: str, status_filter: str, range_label: str, page: int, total_pages: int):
        text = Text()
        text.append("Your Timesheets", style="bold")
        text.append(f"   {user_name}")
        status_label = dict(STATUS_FILTERS).get(status_filter, status_filter)
        text.append(f"   [{status_label}] [{range_label}]   page {page}/{total_pages}")
        self.update(text)


class SummaryLine(Static):
    """Counts per status for the listed weeks."""

    def update_display(self, completed: int, incomplete: int, missing: int, total: int):
        text = Text()
        text.append(f"{total} weeks  ")
        text.append(f"{completed} completed  ", style=STATUS_STYLES[TimesheetStatus.COMPLETED])
        text.append(f"{incomplete} incomplete  ", style=STATUS_STYLES[TimesheetStatus.INCOMPLETE])
        # Zero missing weeks is the good case; dim it
        text.append(f"{missing} missing", style=STATUS_STYLES[TimesheetStatus.MISSING] if missing else "dim")
        self.update(text)


class WeekProgress(Static):
    """Shows a week's date range, logged hours and progress towards the target."""

    def update_display(self, timesheet: Timesheet, now: datetime | None = None):
        pct = progress_percentage(timesheet.total_hours, timesheet.expected_hours)
        needed = get_hours_needed(timesheet.total_hours)

        text = Text()
        text.append(f"Week {timesheet.week_number}: {timesheet.date_range}\n", style="bold")
        text.append(
            f"{format_hours(timesheet.total_hours)}/{format_hours(timesheet.expected_hours)} hrs  "
        )
        text.append(progress_bar(pct))
        text.append(f"  {pct:.0f}%  ")
        text.append_text(status_badge(timesheet.status))
        if needed > 0:
            text.append(f"\n{format_hours(needed)}h still needed", style="dim")
            if is_overdue(timesheet.end_date, now):
                text.append("  OVERDUE", style="bold red")
        self.update(text)
