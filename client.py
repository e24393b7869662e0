"""HTTP client for the timesheet API, used by the terminal UI."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any

import httpx

from models import StatusReport, StatusSummary, Timesheet, TimesheetEntry, User
from status import apply_total_hours

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """The server answered with an error status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class TransportError(ApiError):
    """The request never got an answer (connection refused, timeout, ...)."""

    def __init__(self, message: str):
        super().__init__(0, message)


def timesheet_from_dict(data: dict) -> Timesheet:
    timesheet = Timesheet(
        id=str(data["id"]),
        user_id=str(data["userId"]),
        week_number=int(data["weekNumber"]),
        date_range=data["dateRange"],
        start_date=date.fromisoformat(data["startDate"]),
        end_date=date.fromisoformat(data["endDate"]),
        expected_hours=Decimal(str(data["expectedHours"])),
    )
    return apply_total_hours(timesheet, Decimal(str(data["totalHours"])))


def _entry_body(
    project_name: str, type_of_work: str, description: str, hours: Decimal
) -> dict[str, Any]:
    return {
        "projectName": project_name,
        "typeOfWork": type_of_work,
        "description": description,
        "hours": float(hours),
    }


class TimesheetClient:
    def __init__(self, base_url: str = "", http: httpx.Client | None = None, timeout: float = 10.0):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.user: User | None = None

    def close(self) -> None:
        self.http.close()

    @property
    def is_authenticated(self) -> bool:
        return "Authorization" in self.http.headers

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = self.http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise TransportError(str(e)) from e

        if response.is_error:
            try:
                message = response.json().get("detail", response.reason_phrase)
            except ValueError:
                message = response.reason_phrase
            logger.warning(f"{method} {path} -> {response.status_code}: {message}")
            raise ApiError(response.status_code, str(message))
        return response.json()

    # --- Session ---

    def login(self, email: str, password: str, remember_me: bool = False) -> User:
        data = self._request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password, "rememberMe": remember_me},
        )
        self.http.headers["Authorization"] = f"Bearer {data['token']}"
        user = data["user"]
        self.user = User(id=str(user["id"]), email=user["email"], name=user["name"])
        return self.user

    def logout(self) -> None:
        try:
            self._request("POST", "/auth/logout")
        finally:
            self.http.headers.pop("Authorization", None)
            self.user = None

    # --- Reads ---

    def get_options(self) -> tuple[list[str], list[str]]:
        """(projects, work types) for the entry form."""
        data = self._request("GET", "/projects")
        return list(data.get("projects", [])), list(data.get("workTypes", []))

    def list_timesheets(
        self, start_date: date | None = None, end_date: date | None = None
    ) -> StatusReport:
        params = {}
        if start_date and end_date:
            params = {"startDate": start_date.isoformat(), "endDate": end_date.isoformat()}
        data = self._request("GET", "/timesheets", params=params)
        return StatusReport(
            timesheets=[timesheet_from_dict(item) for item in data.get("timesheets", [])],
            summary=StatusSummary(**data.get("summary", {})),
        )

    def get_timesheet(self, timesheet_id: str) -> Timesheet:
        return timesheet_from_dict(self._request("GET", f"/timesheets/{timesheet_id}"))

    def list_entries(self, timesheet_id: str) -> list[TimesheetEntry]:
        data = self._request("GET", f"/timesheets/{timesheet_id}/entries")
        return [TimesheetEntry.from_dict(item) for item in data]

    # --- Writes ---

    def create_entry(
        self,
        timesheet_id: str,
        entry_date: date,
        project_name: str,
        type_of_work: str,
        description: str,
        hours: Decimal,
    ) -> tuple[TimesheetEntry, Timesheet]:
        body = {"date": entry_date.isoformat(), **_entry_body(project_name, type_of_work, description, hours)}
        data = self._request("POST", f"/timesheets/{timesheet_id}/entries", json=body)
        return TimesheetEntry.from_dict(data["entry"]), timesheet_from_dict(data["timesheet"])

    def update_entry(
        self,
        timesheet_id: str,
        entry_id: str,
        entry_date: date,
        project_name: str,
        type_of_work: str,
        description: str,
        hours: Decimal,
    ) -> tuple[TimesheetEntry, Timesheet]:
        body = {
            "entryId": entry_id,
            "date": entry_date.isoformat(),
            **_entry_body(project_name, type_of_work, description, hours),
        }
        data = self._request("PUT", f"/timesheets/{timesheet_id}/entries", json=body)
        return TimesheetEntry.from_dict(data["entry"]), timesheet_from_dict(data["timesheet"])

    def delete_entry(self, timesheet_id: str, entry_id: str) -> Timesheet:
        data = self._request(
            "DELETE", f"/timesheets/{timesheet_id}/entries", json={"entryId": entry_id}
        )
        return timesheet_from_dict(data["timesheet"])
