from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

EXPECTED_HOURS = Decimal("40")


class TimesheetStatus(str, Enum):
    COMPLETED = "COMPLETED"
    INCOMPLETE = "INCOMPLETE"
    MISSING = "MISSING"


def _number(value: Decimal) -> int | float:
    """Render a Decimal the way the API emits numbers (40, not 40.0)."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


@dataclass
class User:
    id: str
    email: str
    name: str
    password_hash: str = ""
    salt: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "name": self.name}


@dataclass
class TimesheetEntry:
    id: str
    timesheet_id: str
    date: date
    project_name: str
    type_of_work: str
    description: str
    hours: Decimal

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timesheetId": self.timesheet_id,
            "date": self.date.isoformat(),
            "projectName": self.project_name,
            "typeOfWork": self.type_of_work,
            "description": self.description,
            "hours": _number(self.hours),
        }

    @classmethod
    def from_dict(cls, data: dict) -> TimesheetEntry:
        return cls(
            id=str(data["id"]),
            timesheet_id=str(data["timesheetId"]),
            date=date.fromisoformat(data["date"]),
            project_name=data["projectName"],
            type_of_work=data["typeOfWork"],
            description=data["description"],
            hours=Decimal(str(data["hours"])),
        )


@dataclass(frozen=True)
class Timesheet:
    """One calendar week of a user's work.

    ``total_hours`` and ``status`` are not constructor arguments: a fresh
    Timesheet reads as MISSING with no hours until ``status.update_timesheet_status``
    derives both from the week's entries.
    """

    id: str
    user_id: str
    week_number: int
    date_range: str
    start_date: date
    end_date: date
    expected_hours: Decimal = EXPECTED_HOURS
    total_hours: Decimal = field(default=Decimal("0"), init=False)
    status: TimesheetStatus = field(default=TimesheetStatus.MISSING, init=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "weekNumber": self.week_number,
            "dateRange": self.date_range,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "status": self.status.value,
            "totalHours": _number(self.total_hours),
            "expectedHours": _number(self.expected_hours),
        }


@dataclass
class StatusSummary:
    total: int = 0
    completed: int = 0
    incomplete: int = 0
    missing: int = 0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "completed": self.completed,
            "incomplete": self.incomplete,
            "missing": self.missing,
        }


@dataclass
class StatusReport:
    timesheets: list[Timesheet] = field(default_factory=list)
    summary: StatusSummary = field(default_factory=StatusSummary)

    def to_dict(self) -> dict:
        return {
            "timesheets": [ts.to_dict() for ts in self.timesheets],
            "summary": self.summary.to_dict(),
        }
