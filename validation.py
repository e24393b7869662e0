"""Field validation for the login and time entry forms.

Each field owns an ordered list of Textual validators; the first one that
fails decides the message shown under the field. A field only shows its
message once it has been touched (changed or blurred) or once the form asks
for every message, typically on submit.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from textual.validation import ValidationResult, Validator

from models import TimesheetEntry
from utils import format_hours, parse_hours

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_MIN_LENGTH = 6
DESCRIPTION_MIN_LENGTH = 5
HOURS_MIN = Decimal("0.5")
HOURS_MAX = Decimal("24")
DEFAULT_HOURS = "1"


class Required(Validator):
    """Fails when the trimmed value is empty."""

    def __init__(self, label: str):
        super().__init__(failure_description=f"{label} is required")
        self.label = label

    def validate(self, value: str) -> ValidationResult:
        if not (value or "").strip():
            return self.failure(self.failure_description, value)
        return self.success()


class EmailAddress(Validator):
    def __init__(self):
        super().__init__(failure_description="Please enter a valid email address")

    def validate(self, value: str) -> ValidationResult:
        if value.strip() and not EMAIL_PATTERN.match(value):
            return self.failure(self.failure_description, value)
        return self.success()


class PasswordLength(Validator):
    def __init__(self, minimum: int = PASSWORD_MIN_LENGTH):
        super().__init__(failure_description=f"Password must be at least {minimum} characters")
        self.minimum = minimum

    def validate(self, value: str) -> ValidationResult:
        if value.strip() and len(value) < self.minimum:
            return self.failure(self.failure_description, value)
        return self.success()


class IsoDate(Validator):
    """Accepts empty values (Required covers those) and YYYY-MM-DD dates."""

    def __init__(self):
        super().__init__(failure_description="Date must be a valid date (YYYY-MM-DD)")

    def validate(self, value: str) -> ValidationResult:
        if not value.strip():
            return self.success()
        try:
            date.fromisoformat(value.strip())
        except ValueError:
            return self.failure(self.failure_description, value)
        return self.success()


class Selected(Validator):
    """Fails when nothing has been picked from a list of options."""

    def __init__(self, message: str):
        super().__init__(failure_description=message)

    def validate(self, value: str) -> ValidationResult:
        if not value:
            return self.failure(self.failure_description, value)
        return self.success()


class MinLength(Validator):
    def __init__(self, minimum: int, message: str):
        super().__init__(failure_description=message)
        self.minimum = minimum

    def validate(self, value: str) -> ValidationResult:
        if len((value or "").strip()) < self.minimum:
            return self.failure(self.failure_description, value)
        return self.success()


class HoursRange(Validator):
    def __init__(self, minimum: Decimal = HOURS_MIN, maximum: Decimal = HOURS_MAX):
        super().__init__(
            failure_description=f"Hours must be between {format_hours(minimum)} and {format_hours(maximum)}"
        )
        self.minimum = minimum
        self.maximum = maximum

    def validate(self, value: str) -> ValidationResult:
        hours = parse_hours(value)
        if hours is None or hours < self.minimum or hours > self.maximum:
            return self.failure(self.failure_description, value)
        return self.success()


class RememberMeAccepted(Validator):
    """Checkbox rule: fails when the box is required but unchecked."""

    def __init__(self, required: bool = False):
        super().__init__(failure_description="You must accept to remember your session")
        self.required = required

    def validate(self, value: Any) -> ValidationResult:
        if self.required and not value:
            return self.failure(self.failure_description, value)
        return self.success()


def run_rules(rules: Iterable[Validator], value: Any) -> ValidationResult:
    """Evaluate rules in order, stopping at the first failure."""
    for rule in rules:
        result = rule.validate(value)
        if not result.is_valid:
            return result
    return ValidationResult.success()


def text_rules(label: str, required: bool = True) -> list[Validator]:
    return [Required(label)] if required else []


def email_rules(label: str = "Email", required: bool = True) -> list[Validator]:
    return [*text_rules(label, required), EmailAddress()]


def password_rules(label: str = "Password", required: bool = True) -> list[Validator]:
    return [*text_rules(label, required), PasswordLength()]


def date_rules() -> list[Validator]:
    return [Required("Date"), IsoDate()]


def project_rules() -> list[Validator]:
    return [Selected("Project is required")]


def work_type_rules() -> list[Validator]:
    return [Selected("Type of work is required")]


def description_rules() -> list[Validator]:
    return [MinLength(DESCRIPTION_MIN_LENGTH, "Description must be at least 5 characters")]


def hours_rules() -> list[Validator]:
    return [HoursRange()]


class Touch(Enum):
    PRISTINE = "pristine"
    TOUCHED = "touched"


class FieldState:
    """Validation state of a single form field.

    Moves from PRISTINE to TOUCHED on the first change or blur and never
    moves back. The message is recomputed from the current value every time
    it is asked for.
    """

    def __init__(self, rules: Sequence[Validator], value: Any = ""):
        self.rules = list(rules)
        self.value = value
        self.touch = Touch.PRISTINE
        self.external_error: str | None = None

    @property
    def touched(self) -> bool:
        return self.touch is Touch.TOUCHED

    def change(self, value: Any, show_validation: bool = False) -> str | None:
        """User edited the field."""
        self.value = value
        self.touch = Touch.TOUCHED
        return self.message(show_validation)

    def blur(self, show_validation: bool = False) -> str | None:
        self.touch = Touch.TOUCHED
        return self.message(show_validation)

    def set_value(self, value: Any) -> None:
        """Programmatic update (e.g. the hours stepper); does not touch the field."""
        self.value = value

    def set_external_error(self, message: str | None) -> None:
        self.external_error = message

    def validate(self) -> ValidationResult:
        return run_rules(self.rules, self.value)

    @property
    def is_valid(self) -> bool:
        return self.validate().is_valid

    def local_error(self) -> str | None:
        result = self.validate()
        if result.is_valid:
            return None
        return result.failure_descriptions[0]

    def message(self, show_validation: bool = False) -> str | None:
        """The message to display right now, if any."""
        if self.external_error:
            return self.external_error
        if not (self.touched or show_validation):
            return None
        return self.local_error()


class Form:
    """A set of named fields validated together on submit."""

    def __init__(self, fields: dict[str, FieldState]):
        self.fields = fields
        self.show_validation = False

    def change(self, name: str, value: Any) -> str | None:
        return self.fields[name].change(value, self.show_validation)

    def blur(self, name: str) -> str | None:
        return self.fields[name].blur(self.show_validation)

    def value(self, name: str) -> Any:
        return self.fields[name].value

    def message(self, name: str) -> str | None:
        return self.fields[name].message(self.show_validation)

    def errors(self) -> dict[str, str]:
        """Messages currently on display, keyed by field name."""
        errors = {}
        for name, state in self.fields.items():
            message = state.message(self.show_validation)
            if message:
                errors[name] = message
        return errors

    def set_external_errors(self, errors: dict[str, str]) -> None:
        for name, state in self.fields.items():
            state.set_external_error(errors.get(name))

    def validate_all(self) -> bool:
        """Show every field's message and report whether the form can be submitted."""
        self.show_validation = True
        for state in self.fields.values():
            state.set_external_error(None)
        return all(state.is_valid for state in self.fields.values())


class LoginForm(Form):
    def __init__(self, remember_required: bool = False):
        super().__init__(
            {
                "email": FieldState(email_rules()),
                "password": FieldState(password_rules()),
                "remember_me": FieldState([RememberMeAccepted(remember_required)], value=False),
            }
        )

    def submit(self) -> dict | None:
        if not self.validate_all():
            return None
        return {
            "email": self.value("email").strip(),
            "password": self.value("password"),
            "remember_me": bool(self.value("remember_me")),
        }


def step_hours(value: str, delta: int) -> str:
    """Move an hours value by ``delta``, staying within [0.5, 24].

    At a bound the step is a no-op; otherwise the result is clamped, so
    stepping down from 1 lands on 0.5. Non-numeric input counts as 0.
    """
    current = parse_hours(value)
    if current is None:
        current = Decimal("0")
    if delta > 0 and current >= HOURS_MAX:
        return value
    if delta < 0 and current <= HOURS_MIN:
        return value
    stepped = min(max(current + delta, HOURS_MIN), HOURS_MAX)
    return format_hours(stepped)


class EntryForm(Form):
    """The add/edit time entry form.

    New entries carry a date field; edits keep the entry's own date.
    """

    def __init__(self, entry: TimesheetEntry | None = None, initial_date: date | None = None):
        self.entry = entry
        fields: dict[str, FieldState] = {}
        if entry is None:
            fields["date"] = FieldState(
                date_rules(), value=initial_date.isoformat() if initial_date else ""
            )
        fields["project_name"] = FieldState(project_rules(), value=entry.project_name if entry else "")
        fields["type_of_work"] = FieldState(work_type_rules(), value=entry.type_of_work if entry else "")
        fields["description"] = FieldState(description_rules(), value=entry.description if entry else "")
        fields["hours"] = FieldState(
            hours_rules(), value=format_hours(entry.hours) if entry else DEFAULT_HOURS
        )
        super().__init__(fields)

    @property
    def is_edit(self) -> bool:
        return self.entry is not None

    def can_increment(self) -> bool:
        hours = parse_hours(self.value("hours"))
        return hours is None or hours < HOURS_MAX

    def can_decrement(self) -> bool:
        hours = parse_hours(self.value("hours"))
        return hours is not None and hours > HOURS_MIN

    def increment_hours(self) -> str:
        self.fields["hours"].set_value(step_hours(self.value("hours"), 1))
        return self.value("hours")

    def decrement_hours(self) -> str:
        self.fields["hours"].set_value(step_hours(self.value("hours"), -1))
        return self.value("hours")

    def submit(self) -> dict | None:
        """Validate every field; the payload to persist, or None if anything fails."""
        if not self.validate_all():
            return None
        entry_date = self.entry.date if self.entry else date.fromisoformat(self.value("date").strip())
        return {
            "date": entry_date,
            "project_name": self.value("project_name"),
            "type_of_work": self.value("type_of_work"),
            "description": self.value("description").strip(),
            "hours": parse_hours(self.value("hours")),
        }
