"""Screens for the timesheet application."""

from __future__ import annotations

from datetime import date

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.coordinate import Coordinate
from textual.widgets import Button, Checkbox, DataTable, Footer, Input, Label, Select, Static
from textual.screen import ModalScreen, Screen

from client import ApiError, TimesheetClient
from models import Timesheet, TimesheetEntry, User
from utils import format_hours, group_by_date
from validation import EntryForm, LoginForm
from widgets import WeekProgress


def _select_value(value: object) -> str:
    """Selects report a sentinel, not a string, when nothing is chosen."""
    return value if isinstance(value, str) else ""


class ConfirmScreen(ModalScreen[bool]):
    """Simple confirmation dialog."""

    CSS = """
    ConfirmScreen {
        align: center middle;
    }

    #confirm-dialog {
        width: 50;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $warning;
    }

    #confirm-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
    }

    #confirm-buttons Button {
        width: 1fr;
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
    ]

    def __init__(self, message: str):
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Label(self.message)
            with Horizontal(id="confirm-buttons"):
                yield Button("Yes (Y)", variant="warning", id="yes")
                yield Button("No (N)", variant="default", id="no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


FORM_CSS = """
.field-group {
    width: 100%;
    height: auto;
    margin-bottom: 1;
}

.field-label {
    height: 1;
    margin-bottom: 0;
    color: $text-muted;
}

.field-error {
    height: auto;
    color: $error;
}

.field-group Input, .field-group Select {
    width: 100%;
}
"""


class LoginScreen(Screen[User | None]):
    """Email/password sign-in. Dismisses with the signed-in user."""

    CSS = FORM_CSS + """
    LoginScreen {
        align: center middle;
    }

    #login-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    #login-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    #login-error {
        color: $error;
        height: auto;
    }

    #login-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }
    """

    BINDINGS = [
        Binding("escape", "quit", "Quit"),
    ]

    FIELD_ORDER = ["email", "password"]

    def __init__(self, client: TimesheetClient, remember_required: bool = False):
        super().__init__()
        self.client = client
        self.form = LoginForm(remember_required=remember_required)

    def compose(self) -> ComposeResult:
        with Vertical(id="login-dialog"):
            yield Label("Welcome back", id="login-title")
            with Vertical(classes="field-group"):
                yield Label("Email", classes="field-label")
                yield Input(placeholder="name@example.com", id="email")
                yield Static("", id="email-error", classes="field-error")
            with Vertical(classes="field-group"):
                yield Label("Password", classes="field-label")
                yield Input(placeholder="••••••••", password=True, id="password")
                yield Static("", id="password-error", classes="field-error")
            with Vertical(classes="field-group"):
                yield Checkbox("Remember me", id="remember_me")
                yield Static("", id="remember_me-error", classes="field-error")
            yield Static("", id="login-error")
            with Horizontal(id="login-buttons"):
                yield Button("Sign in", variant="primary", id="sign-in")

    def on_mount(self) -> None:
        self.query_one("#email", Input).focus()

    def _show_errors(self) -> None:
        for name in self.form.fields:
            self.query_one(f"#{name}-error", Static).update(self.form.message(name) or "")

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id in self.form.fields:
            self.form.change(event.input.id, event.value)
            self._show_errors()

    def on_input_blurred(self, event: Input.Blurred) -> None:
        if event.input.id in self.form.fields:
            self.form.blur(event.input.id)
            self._show_errors()

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        if event.checkbox.id == "remember_me":
            self.form.change("remember_me", event.value)
            self._show_errors()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Move to the password on Enter, or sign in from the last field."""
        current_id = event.input.id
        if current_id in self.FIELD_ORDER[:-1]:
            next_id = self.FIELD_ORDER[self.FIELD_ORDER.index(current_id) + 1]
            self.query_one(f"#{next_id}", Input).focus()
        else:
            self._sign_in()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "sign-in":
            self._sign_in()

    def action_quit(self) -> None:
        self.dismiss(None)

    def _sign_in(self) -> None:
        error_label = self.query_one("#login-error", Static)
        error_label.update("")
        credentials = self.form.submit()
        self._show_errors()
        if credentials is None:
            return

        try:
            user = self.client.login(
                credentials["email"], credentials["password"], credentials["remember_me"]
            )
        except ApiError as e:
            error_label.update(e.message if e.status_code else "An error occurred. Please try again.")
            return
        self.dismiss(user)


class EntryScreen(ModalScreen[dict | None]):
    """Modal form for adding or editing a time entry.

    Dismisses with the validated payload; the caller persists it.
    """

    CSS = FORM_CSS + """
    EntryScreen {
        align: center middle;
    }

    #entry-dialog {
        width: 70;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    #entry-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    #hours-row {
        width: 30;
        height: auto;
    }

    #hours-row Button {
        min-width: 5;
        width: 5;
    }

    #hours {
        width: 1fr;
    }

    #entry-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    #entry-buttons Button {
        width: auto;
        min-width: 12;
        margin: 0 2;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("ctrl+s", "save", "Save"),
    ]

    def __init__(
        self,
        client: TimesheetClient,
        entry: TimesheetEntry | None = None,
        initial_date: date | None = None,
    ):
        super().__init__()
        self.client = client
        self.entry = entry
        self.form = EntryForm(entry, initial_date)
        self.projects: list[str] = []
        self.work_types: list[str] = []

    def compose(self) -> ComposeResult:
        title = "Edit Entry" if self.form.is_edit else "Add New Entry"
        with Vertical(id="entry-dialog"):
            yield Label(title, id="entry-title")

            if not self.form.is_edit:
                with Vertical(classes="field-group"):
                    yield Label("Date (YYYY-MM-DD) *", classes="field-label")
                    yield Input(value=self.form.value("date"), placeholder="2024-01-22", id="date")
                    yield Static("", id="date-error", classes="field-error")

            with Vertical(classes="field-group"):
                yield Label("Select Project *", classes="field-label")
                yield Select([], prompt="Project Name", id="project_name")
                yield Static("", id="project_name-error", classes="field-error")

            with Vertical(classes="field-group"):
                yield Label("Type of Work *", classes="field-label")
                yield Select([], prompt="Select work type", id="type_of_work")
                yield Static("", id="type_of_work-error", classes="field-error")

            with Vertical(classes="field-group"):
                yield Label("Task description *", classes="field-label")
                yield Input(
                    value=self.form.value("description"),
                    placeholder="Write text here ...",
                    id="description",
                )
                yield Static("", id="description-error", classes="field-error")

            with Vertical(classes="field-group"):
                yield Label("Hours *", classes="field-label")
                with Horizontal(id="hours-row"):
                    yield Button("−", id="hours-down")
                    yield Input(value=self.form.value("hours"), id="hours")
                    yield Button("+", id="hours-up")
                yield Static("", id="hours-error", classes="field-error")

            with Horizontal(id="entry-buttons"):
                yield Button("Update entry" if self.form.is_edit else "Add entry", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        self._load_options()
        self._update_stepper()
        first = "#project_name" if self.form.is_edit else "#date"
        self.query_one(first).focus()

    def _load_options(self) -> None:
        try:
            self.projects, self.work_types = self.client.get_options()
        except ApiError as e:
            self.app.notify(f"Failed to load projects: {e.message}", severity="error")
            return

        # Keep an edited entry's values selectable even if retired from the lists
        if self.entry:
            if self.entry.project_name not in self.projects:
                self.projects.append(self.entry.project_name)
            if self.entry.type_of_work not in self.work_types:
                self.work_types.append(self.entry.type_of_work)

        for select_id, options in (("project_name", self.projects), ("type_of_work", self.work_types)):
            select = self.query_one(f"#{select_id}", Select)
            select.set_options([(label, label) for label in options])
            if self.form.value(select_id) in options:
                select.value = self.form.value(select_id)

    def _show_errors(self) -> None:
        for name in self.form.fields:
            self.query_one(f"#{name}-error", Static).update(self.form.message(name) or "")

    def _update_stepper(self) -> None:
        self.query_one("#hours-down", Button).disabled = not self.form.can_decrement()
        self.query_one("#hours-up", Button).disabled = not self.form.can_increment()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id not in self.form.fields:
            return
        # The stepper writes the form first; its echo must not touch the field
        if event.input.id == "hours" and event.value == self.form.value("hours"):
            self._update_stepper()
            return
        self.form.change(event.input.id, event.value)
        self._show_errors()
        if event.input.id == "hours":
            self._update_stepper()

    def on_input_blurred(self, event: Input.Blurred) -> None:
        if event.input.id in self.form.fields:
            self.form.blur(event.input.id)
            self._show_errors()

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id in self.form.fields:
            self.form.change(event.select.id, _select_value(event.value))
            self._show_errors()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "hours-up":
            self.query_one("#hours", Input).value = self.form.increment_hours()
            self._update_stepper()
        elif button_id == "hours-down":
            self.query_one("#hours", Input).value = self.form.decrement_hours()
            self._update_stepper()
        elif button_id == "save":
            self.action_save()
        elif button_id == "cancel":
            self.action_cancel()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def action_save(self) -> None:
        payload = self.form.submit()
        self._show_errors()
        if payload is None:
            return
        self.dismiss(payload)


class TimesheetScreen(Screen[None]):
    """One week: its entries grouped by day, with add/edit/delete."""

    CSS = """
    #week-progress {
        height: auto;
        background: $primary;
        color: $text;
        padding: 0 1;
    }

    #entries-table {
        height: 1fr;
        margin: 1 2;
    }

    DataTable > .datatable--cursor {
        background: $secondary;
    }
    """

    BINDINGS = [
        Binding("escape", "back", "Back"),
        Binding("a", "add_entry", "Add"),
        Binding("e", "edit_entry", "Edit"),
        Binding("d", "delete_entry", "Delete"),
    ]

    def __init__(self, client: TimesheetClient, timesheet: Timesheet):
        super().__init__()
        self.client = client
        self.timesheet = timesheet
        self.entries: list[TimesheetEntry] = []

    def compose(self) -> ComposeResult:
        yield WeekProgress(id="week-progress")
        yield DataTable(id="entries-table")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#entries-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Day", width=4)
        table.add_column("Date", width=8)
        table.add_column("Project", width=22)
        table.add_column("Type of work", width=20)
        table.add_column("Description", width=40)
        table.add_column("Hours", width=6)
        self._reload()
        table.focus()

    def _reload(self) -> None:
        """Fetch the week and its entries, then redraw."""
        try:
            self.timesheet = self.client.get_timesheet(self.timesheet.id)
            self.entries = self.client.list_entries(self.timesheet.id)
        except ApiError as e:
            self.app.notify(f"Failed to load timesheet entries: {e.message}", severity="error")
        self._refresh_display()

    def _refresh_display(self) -> None:
        self.query_one("#week-progress", WeekProgress).update_display(self.timesheet)
        table = self.query_one("#entries-table", DataTable)
        table.clear()
        for day, entries in group_by_date(self.entries).items():
            for i, entry in enumerate(entries):
                table.add_row(
                    day.strftime("%a") if i == 0 else "",
                    day.strftime("%b %d") if i == 0 else "",
                    entry.project_name,
                    entry.type_of_work,
                    entry.description[:40],
                    format_hours(entry.hours),
                    key=entry.id,
                )

    def _get_selected_entry(self) -> TimesheetEntry | None:
        table = self.query_one("#entries-table", DataTable)
        if table.row_count == 0:
            return None
        row_key = table.coordinate_to_cell_key(Coordinate(table.cursor_row, 0)).row_key
        entry_id = str(row_key.value) if row_key else None
        return next((e for e in self.entries if e.id == entry_id), None)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self.action_edit_entry()

    def action_back(self) -> None:
        self.dismiss(None)

    def action_add_entry(self) -> None:
        selected = self._get_selected_entry()
        initial = selected.date if selected else self.timesheet.start_date
        self.app.push_screen(EntryScreen(self.client, initial_date=initial), self._on_entry_added)

    def action_edit_entry(self) -> None:
        entry = self._get_selected_entry()
        if not entry:
            self.app.notify("No entry selected", severity="warning")
            return
        self.app.push_screen(
            EntryScreen(self.client, entry),
            lambda payload: self._on_entry_edited(payload, entry),
        )

    def _on_entry_added(self, payload: dict | None) -> None:
        if not payload:
            return
        try:
            _, self.timesheet = self.client.create_entry(
                self.timesheet.id,
                payload["date"],
                payload["project_name"],
                payload["type_of_work"],
                payload["description"],
                payload["hours"],
            )
        except ApiError as e:
            self.app.notify(f"Failed to save entry: {e.message}", severity="error")
            return
        self.app.notify("Entry added")
        self._reload()

    def _on_entry_edited(self, payload: dict | None, entry: TimesheetEntry) -> None:
        if not payload:
            return
        try:
            _, self.timesheet = self.client.update_entry(
                self.timesheet.id,
                entry.id,
                payload["date"],
                payload["project_name"],
                payload["type_of_work"],
                payload["description"],
                payload["hours"],
            )
        except ApiError as e:
            self.app.notify(f"Failed to save entry: {e.message}", severity="error")
            return
        self.app.notify("Entry updated")
        self._reload()

    def action_delete_entry(self) -> None:
        entry = self._get_selected_entry()
        if not entry:
            self.app.notify("No entry selected", severity="warning")
            return
        self.app.push_screen(
            ConfirmScreen("Are you sure you want to delete this entry?"),
            lambda confirmed: self._on_delete_confirmed(confirmed, entry.id),
        )

    def _on_delete_confirmed(self, confirmed: bool | None, entry_id: str) -> None:
        if not confirmed:
            return
        try:
            self.timesheet = self.client.delete_entry(self.timesheet.id, entry_id)
        except ApiError as e:
            self.app.notify(f"Failed to delete entry: {e.message}", severity="error")
            return
        self.app.notify("Entry deleted")
        self._reload()
