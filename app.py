#!/usr/bin/env python3
"""Timesheet TUI application."""

from __future__ import annotations

import logging
from datetime import date

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.coordinate import Coordinate
from textual.widgets import DataTable, Footer

from client import ApiError, TimesheetClient
from config import configure_logging, load_settings
from models import StatusSummary, Timesheet, User
from screens import LoginScreen, TimesheetScreen
from utils import DATE_RANGE_PRESETS, date_range_for_preset, format_hours, paginate
from widgets import STATUS_FILTERS, ListHeader, SummaryLine, action_label, status_badge

logger = logging.getLogger(__name__)

PER_PAGE = 5
LIST_ACTIONS = {"cycle_status", "cycle_range", "prev_page", "next_page", "open_timesheet", "logout"}


class TimesheetApp(App):
    """Main timesheet application: the list of the signed-in user's weeks."""

    CSS = """
    Screen {
        background: $surface;
    }

    #list-header {
        height: auto;
        background: $primary;
        color: $text;
        padding: 0 1;
    }

    #timesheet-table {
        height: 1fr;
        margin: 1 2;
    }

    #summary-line {
        height: auto;
        padding: 1 2;
        color: $text;
    }

    DataTable {
        height: 100%;
    }

    DataTable > .datatable--cursor {
        background: $secondary;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("s", "cycle_status", "Status"),
        Binding("r", "cycle_range", "Dates"),
        Binding("p", "prev_page", "◀ Page"),
        Binding("n", "next_page", "Page ▶"),
        Binding("o", "open_timesheet", "Open"),
        Binding("L", "logout", "Logout"),
    ]

    def __init__(self, client: TimesheetClient, per_page: int = PER_PAGE, today: date | None = None):
        super().__init__()
        self.client = client
        self.per_page = per_page
        self.today = today or date.today()
        self.user: User | None = None

        self.status_filter = STATUS_FILTERS[0][0]
        self.range_preset = DATE_RANGE_PRESETS[0][0]
        self.page = 1
        self.timesheets: list[Timesheet] = []
        self.summary = StatusSummary()

    def compose(self) -> ComposeResult:
        yield ListHeader(id="list-header")
        yield Container(DataTable(id="timesheet-table"), id="timesheet-table-container")
        yield SummaryLine(id="summary-line")
        yield Footer()

    def on_mount(self):
        table = self.query_one("#timesheet-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Week", width=6)
        table.add_column("Date", width=36)
        table.add_column("Status", width=12)
        table.add_column("Hours", width=8)
        table.add_column("Action", width=8)
        self._show_login()

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        """List actions only apply while the list itself is showing."""
        if action in LIST_ACTIONS:
            return self.user is not None and len(self.screen_stack) == 1
        return True

    def _show_login(self) -> None:
        self.push_screen(LoginScreen(self.client), self._on_login)

    def _on_login(self, user: User | None) -> None:
        if user is None:
            self.exit()
            return
        self.user = user
        logger.info(f"Signed in as {user.email}")
        self.page = 1
        self._load_timesheets()
        self.query_one("#timesheet-table", DataTable).focus()

    # --- Data ---

    def _load_timesheets(self) -> None:
        """Fetch the weeks for the active date preset from the API."""
        date_range = date_range_for_preset(self.range_preset, self.today)
        start, end = date_range if date_range else (None, None)
        try:
            report = self.client.list_timesheets(start, end)
        except ApiError as e:
            self.notify(f"Failed to load timesheets: {e.message}", severity="error")
            self.timesheets, self.summary = [], StatusSummary()
        else:
            self.timesheets, self.summary = report.timesheets, report.summary
        self._refresh_display()

    def filtered_timesheets(self) -> list[Timesheet]:
        if self.status_filter == "all":
            return list(self.timesheets)
        return [ts for ts in self.timesheets if ts.status.value == self.status_filter]

    def current_page(self) -> tuple[list[Timesheet], int]:
        rows, total_pages = paginate(self.filtered_timesheets(), self.page, self.per_page)
        self.page = min(max(self.page, 1), total_pages)
        return rows, total_pages

    def _refresh_display(self) -> None:
        rows, total_pages = self.current_page()

        table = self.query_one("#timesheet-table", DataTable)
        table.clear()
        for ts in rows:
            table.add_row(
                str(ts.week_number),
                ts.date_range,
                status_badge(ts.status),
                f"{format_hours(ts.total_hours)}/{format_hours(ts.expected_hours)}",
                action_label(ts.status),
                key=ts.id,
            )

        range_label = dict(DATE_RANGE_PRESETS)[self.range_preset]
        user_name = self.user.name if self.user else ""
        self.query_one("#list-header", ListHeader).update_display(
            user_name, self.status_filter, range_label, self.page, total_pages
        )
        self.query_one("#summary-line", SummaryLine).update_display(
            self.summary.completed, self.summary.incomplete, self.summary.missing, self.summary.total
        )

    def _get_selected_timesheet(self) -> Timesheet | None:
        table = self.query_one("#timesheet-table", DataTable)
        if table.row_count == 0:
            return None
        row_key = table.coordinate_to_cell_key(Coordinate(table.cursor_row, 0)).row_key
        timesheet_id = str(row_key.value) if row_key else None
        return next((ts for ts in self.timesheets if ts.id == timesheet_id), None)

    # --- Actions ---

    def action_cycle_status(self):
        keys = [key for key, _ in STATUS_FILTERS]
        self.status_filter = keys[(keys.index(self.status_filter) + 1) % len(keys)]
        self.page = 1
        self._refresh_display()

    def action_cycle_range(self):
        keys = [key for key, _ in DATE_RANGE_PRESETS]
        self.range_preset = keys[(keys.index(self.range_preset) + 1) % len(keys)]
        self.page = 1
        self._load_timesheets()

    def action_prev_page(self):
        if self.page > 1:
            self.page -= 1
            self._refresh_display()

    def action_next_page(self):
        _, total_pages = self.current_page()
        if self.page < total_pages:
            self.page += 1
            self._refresh_display()

    def action_open_timesheet(self):
        timesheet = self._get_selected_timesheet()
        if not timesheet:
            return
        self.push_screen(TimesheetScreen(self.client, timesheet), lambda _: self._load_timesheets())

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.data_table.id == "timesheet-table":
            self.action_open_timesheet()

    def action_logout(self):
        try:
            self.client.logout()
        except ApiError as e:
            logger.warning(f"Logout failed: {e.message}")
        self.user = None
        self.timesheets, self.summary = [], StatusSummary()
        self._refresh_display()
        self._show_login()


def main():
    settings = load_settings()
    configure_logging(settings, log_file=settings.log_file or "timesheet.log")

    client = TimesheetClient(settings.api_url)
    app = TimesheetApp(client)
    try:
        app.run()
    finally:
        client.close()


if __name__ == "__main__":
    main()
