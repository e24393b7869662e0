#!/usr/bin/env python3
"""Bootstrap the database with users, timesheets, entries and form options."""

from __future__ import annotations

import json
import logging
from datetime import date
from decimal import Decimal
from pathlib import Path

from auth import hash_password
from config import configure_logging, load_settings
from models import Timesheet, TimesheetEntry, User
from status import update_timesheet_status
from storage import Repository
from utils import format_date_range

logger = logging.getLogger(__name__)


def parse_user(data: dict) -> User:
    password_hash, salt = hash_password(data["password"])
    return User(
        id=str(data["id"]),
        email=data["email"],
        name=data["name"],
        password_hash=password_hash,
        salt=salt,
    )


def parse_timesheet(data: dict) -> Timesheet:
    start = date.fromisoformat(data["startDate"])
    end = date.fromisoformat(data["endDate"])
    return Timesheet(
        id=str(data["id"]),
        user_id=str(data["userId"]),
        week_number=int(data["weekNumber"]),
        date_range=data.get("dateRange") or format_date_range(start, end),
        start_date=start,
        end_date=end,
    )


def seed_from_json(repository: Repository, json_path: Path) -> bool:
    """Load seed data into an empty database.

    Returns False without touching anything when users already exist.
    """
    with open(json_path, encoding="utf-8") as f:
        data = json.load(f)

    repository.init_db()
    if repository.count_users():
        logger.info(f"Database {repository.db_path} already seeded")
        return False

    for user_data in data.get("users", []):
        repository.save_user(parse_user(user_data))

    entries = [TimesheetEntry.from_dict(item) for item in data.get("entries", [])]
    timesheets = [parse_timesheet(item) for item in data.get("timesheets", [])]

    # Timesheets first: entries reference them.
    for timesheet in timesheets:
        repository.save_timesheet(update_timesheet_status(timesheet, entries))

    for entry in entries:
        repository.insert_entry(
            entry.timesheet_id,
            entry.date,
            entry.project_name,
            entry.type_of_work,
            entry.description,
            Decimal(entry.hours),
            entry_id=entry.id,
        )

    repository.save_options("project", list(data.get("projects", [])))
    repository.save_options("work_type", list(data.get("workTypes", [])))

    logger.info(
        f"Seeded {len(data.get('users', []))} users, "
        f"{len(timesheets)} timesheets, {len(entries)} entries"
    )
    return True


def main():
    import sys
    settings = load_settings()
    configure_logging(settings)
    repository = Repository(settings.db_path)

    if "--db-info" in sys.argv[1:]:
        from datetime import datetime
        db_path = settings.db_path
        print(f"Database: {db_path}")
        if db_path.exists():
            mtime = datetime.fromtimestamp(db_path.stat().st_mtime)
            size = db_path.stat().st_size
            print(f"Modified: {mtime.strftime('%Y-%m-%d %H:%M:%S')}")
            print(f"Size: {size:,} bytes")
        else:
            print("Status: Does not exist (will be created on first run)")
        return

    if "--reset" in sys.argv[1:]:
        repository.init_db()
        repository.reset()

    if seed_from_json(repository, settings.seed_path):
        print(f"Seeded {settings.db_path} from {settings.seed_path}")
    else:
        print(f"{settings.db_path} already has data; use --reset to reseed")


if __name__ == "__main__":
    main()
