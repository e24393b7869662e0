"""Timesheet operations behind the API.

Every mutation of a week's entries is followed by a status recompute for
that week. The two steps run under a per-timesheet lock so concurrent
requests against the same week cannot interleave between them.
"""

from __future__ import annotations

import logging
import threading
from datetime import date
from decimal import Decimal

from auth import verify_password
from models import StatusReport, Timesheet, TimesheetEntry, User
from status import get_timesheet_status_summary, update_timesheet_status
from storage import Repository
from utils import ranges_overlap

logger = logging.getLogger(__name__)


class TimesheetError(Exception):
    """Base class for errors the API reports to the caller."""


class NotFoundError(TimesheetError):
    pass


class InvalidEntryError(TimesheetError):
    pass


def _clean_text(value: str | None, label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidEntryError(f"{label} is required")
    return text


def _clean_hours(hours: Decimal | None) -> Decimal:
    if hours is None or not hours.is_finite() or hours <= 0:
        raise InvalidEntryError("Hours must be greater than zero")
    return hours


class TimesheetService:
    def __init__(self, repository: Repository):
        self.repository = repository
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, timesheet_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(timesheet_id, threading.Lock())

    # --- Users ---

    def authenticate(self, email: str, password: str) -> User | None:
        user = self.repository.get_user_by_email(email or "")
        if user is None or not verify_password(user, password or ""):
            logger.warning(f"Failed login for {email!r}")
            return None
        return user

    # --- Options ---

    def get_options(self) -> dict[str, list[str]]:
        return {
            "projects": self.repository.get_options("project"),
            "workTypes": self.repository.get_options("work_type"),
        }

    # --- Timesheets ---

    def list_timesheets(
        self,
        user_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> StatusReport:
        """The user's weeks with fresh status; filtered only when both dates are given."""
        timesheets = self.repository.list_timesheets(user_id)
        if start_date and end_date:
            timesheets = [
                ts for ts in timesheets
                if ranges_overlap(ts.start_date, ts.end_date, start_date, end_date)
            ]
        return get_timesheet_status_summary(timesheets, self.repository.list_entries())

    def get_timesheet(self, user_id: str, timesheet_id: str) -> Timesheet:
        timesheet = self.repository.get_timesheet(timesheet_id)
        if timesheet is None or timesheet.user_id != user_id:
            logger.warning(f"Timesheet {timesheet_id} not found for user {user_id}")
            raise NotFoundError("Timesheet not found")
        return update_timesheet_status(timesheet, self.repository.list_entries(timesheet_id))

    def _recompute(self, timesheet_id: str) -> Timesheet:
        timesheet = self.repository.get_timesheet(timesheet_id)
        if timesheet is None:
            raise NotFoundError("Timesheet not found")
        updated = update_timesheet_status(timesheet, self.repository.list_entries(timesheet_id))
        self.repository.save_timesheet(updated)
        return updated

    # --- Entries ---

    def list_entries(self, user_id: str, timesheet_id: str) -> list[TimesheetEntry]:
        self.get_timesheet(user_id, timesheet_id)
        return self.repository.list_entries(timesheet_id)

    def create_entry(
        self,
        user_id: str,
        timesheet_id: str,
        entry_date: date,
        project_name: str,
        type_of_work: str,
        description: str,
        hours: Decimal,
    ) -> tuple[TimesheetEntry, Timesheet]:
        """Add an entry to a week and return it with the recomputed week."""
        self.get_timesheet(user_id, timesheet_id)
        if entry_date is None:
            raise InvalidEntryError("Date is required")
        project_name = _clean_text(project_name, "Project")
        type_of_work = _clean_text(type_of_work, "Type of work")
        description = _clean_text(description, "Description")
        hours = _clean_hours(hours)

        with self._lock_for(timesheet_id):
            entry = self.repository.insert_entry(
                timesheet_id, entry_date, project_name, type_of_work, description, hours
            )
            timesheet = self._recompute(timesheet_id)

        logger.info(
            f"Created entry {entry.id} in timesheet {timesheet_id}: "
            f"{timesheet.total_hours}h {timesheet.status.value}"
        )
        return entry, timesheet

    def update_entry(
        self,
        user_id: str,
        timesheet_id: str,
        entry_id: str,
        project_name: str,
        type_of_work: str,
        description: str,
        hours: Decimal,
        entry_date: date | None = None,
    ) -> tuple[TimesheetEntry, Timesheet]:
        """Replace an entry's fields. The date is kept unless a new one is given."""
        self.get_timesheet(user_id, timesheet_id)
        project_name = _clean_text(project_name, "Project")
        type_of_work = _clean_text(type_of_work, "Type of work")
        description = _clean_text(description, "Description")
        hours = _clean_hours(hours)

        with self._lock_for(timesheet_id):
            existing = self.repository.get_entry(timesheet_id, entry_id)
            if existing is None:
                logger.warning(f"Entry {entry_id} not found in timesheet {timesheet_id}")
                raise NotFoundError("Entry not found")
            entry = TimesheetEntry(
                id=existing.id,
                timesheet_id=existing.timesheet_id,
                date=entry_date or existing.date,
                project_name=project_name,
                type_of_work=type_of_work,
                description=description,
                hours=hours,
            )
            self.repository.update_entry(entry)
            timesheet = self._recompute(timesheet_id)

        logger.info(f"Updated entry {entry.id} in timesheet {timesheet_id}")
        return entry, timesheet

    def delete_entry(self, user_id: str, timesheet_id: str, entry_id: str) -> Timesheet:
        self.get_timesheet(user_id, timesheet_id)
        with self._lock_for(timesheet_id):
            if not self.repository.delete_entry(timesheet_id, entry_id):
                logger.warning(f"Entry {entry_id} not found in timesheet {timesheet_id}")
                raise NotFoundError("Entry not found")
            timesheet = self._recompute(timesheet_id)

        logger.info(f"Deleted entry {entry_id} from timesheet {timesheet_id}")
        return timesheet
