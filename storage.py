from __future__ import annotations

import sqlite3
from datetime import date
from decimal import Decimal
from pathlib import Path

from models import Timesheet, TimesheetEntry, User
from status import apply_total_hours


class Repository:
    """sqlite-backed store for users, timesheets, entries and form options.

    Every call opens and closes its own connection, so one Repository can be
    shared between request threads.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)

    def get_connection(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def init_db(self):
        """Create tables if they don't exist."""
        conn = self.get_connection()
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL UNIQUE COLLATE NOCASE,
                name TEXT NOT NULL,
                password_hash TEXT NOT NULL,
                salt TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS timesheets (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                week_number INTEGER NOT NULL,
                date_range TEXT NOT NULL,
                start_date TEXT NOT NULL,
                end_date TEXT NOT NULL,
                expected_hours TEXT NOT NULL,
                total_hours TEXT NOT NULL DEFAULT '0',
                FOREIGN KEY (user_id) REFERENCES users(id)
            );

            CREATE TABLE IF NOT EXISTS entries (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timesheet_id TEXT NOT NULL,
                date TEXT NOT NULL,
                project_name TEXT NOT NULL,
                type_of_work TEXT NOT NULL,
                description TEXT NOT NULL,
                hours TEXT NOT NULL,
                FOREIGN KEY (timesheet_id) REFERENCES timesheets(id)
            );

            CREATE TABLE IF NOT EXISTS options (
                kind TEXT NOT NULL,
                position INTEGER NOT NULL,
                label TEXT NOT NULL,
                PRIMARY KEY (kind, label)
            );

            CREATE INDEX IF NOT EXISTS idx_timesheets_user ON timesheets(user_id);
            CREATE INDEX IF NOT EXISTS idx_entries_timesheet ON entries(timesheet_id);
        """)
        conn.commit()
        conn.close()

    def reset(self):
        """Drop all data, including the entry id sequence."""
        conn = self.get_connection()
        conn.executescript("""
            DELETE FROM entries;
            DELETE FROM timesheets;
            DELETE FROM users;
            DELETE FROM options;
            DELETE FROM sqlite_sequence WHERE name = 'entries';
        """)
        conn.commit()
        conn.close()

    # --- Users ---

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            name=row["name"],
            password_hash=row["password_hash"],
            salt=row["salt"],
        )

    def save_user(self, user: User) -> None:
        conn = self.get_connection()
        conn.execute(
            """
            INSERT OR REPLACE INTO users (id, email, name, password_hash, salt)
            VALUES (?, ?, ?, ?, ?)
            """,
            (user.id, user.email, user.name, user.password_hash, user.salt),
        )
        conn.commit()
        conn.close()

    def get_user(self, user_id: str) -> User | None:
        conn = self.get_connection()
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        conn.close()
        return self._row_to_user(row) if row else None

    def get_user_by_email(self, email: str) -> User | None:
        conn = self.get_connection()
        row = conn.execute(
            "SELECT * FROM users WHERE email = ?", (email.strip(),)
        ).fetchone()
        conn.close()
        return self._row_to_user(row) if row else None

    def count_users(self) -> int:
        conn = self.get_connection()
        count = conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]
        conn.close()
        return count

    # --- Timesheets ---

    def _row_to_timesheet(self, row: sqlite3.Row) -> Timesheet:
        timesheet = Timesheet(
            id=row["id"],
            user_id=row["user_id"],
            week_number=row["week_number"],
            date_range=row["date_range"],
            start_date=date.fromisoformat(row["start_date"]),
            end_date=date.fromisoformat(row["end_date"]),
            expected_hours=Decimal(row["expected_hours"]),
        )
        return apply_total_hours(timesheet, Decimal(row["total_hours"]))

    def save_timesheet(self, timesheet: Timesheet) -> None:
        """Insert or update a timesheet, including its last computed total."""
        conn = self.get_connection()
        conn.execute(
            """
            INSERT INTO timesheets
            (id, user_id, week_number, date_range, start_date, end_date, expected_hours, total_hours)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                user_id = excluded.user_id,
                week_number = excluded.week_number,
                date_range = excluded.date_range,
                start_date = excluded.start_date,
                end_date = excluded.end_date,
                expected_hours = excluded.expected_hours,
                total_hours = excluded.total_hours
            """,
            (
                timesheet.id,
                timesheet.user_id,
                timesheet.week_number,
                timesheet.date_range,
                timesheet.start_date.isoformat(),
                timesheet.end_date.isoformat(),
                str(timesheet.expected_hours),
                str(timesheet.total_hours),
            ),
        )
        conn.commit()
        conn.close()

    def get_timesheet(self, timesheet_id: str) -> Timesheet | None:
        conn = self.get_connection()
        row = conn.execute(
            "SELECT * FROM timesheets WHERE id = ?", (timesheet_id,)
        ).fetchone()
        conn.close()
        return self._row_to_timesheet(row) if row else None

    def list_timesheets(self, user_id: str | None = None) -> list[Timesheet]:
        """Timesheets ordered by start date, optionally for one user."""
        conn = self.get_connection()
        if user_id is None:
            rows = conn.execute("SELECT * FROM timesheets ORDER BY start_date").fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM timesheets WHERE user_id = ? ORDER BY start_date", (user_id,)
            ).fetchall()
        conn.close()
        return [self._row_to_timesheet(row) for row in rows]

    # --- Entries ---

    def _row_to_entry(self, row: sqlite3.Row) -> TimesheetEntry:
        return TimesheetEntry(
            id=str(row["id"]),
            timesheet_id=row["timesheet_id"],
            date=date.fromisoformat(row["date"]),
            project_name=row["project_name"],
            type_of_work=row["type_of_work"],
            description=row["description"],
            hours=Decimal(row["hours"]),
        )

    def list_entries(self, timesheet_id: str | None = None) -> list[TimesheetEntry]:
        """Entries in creation order, optionally for one timesheet."""
        conn = self.get_connection()
        if timesheet_id is None:
            rows = conn.execute("SELECT * FROM entries ORDER BY id").fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM entries WHERE timesheet_id = ? ORDER BY id", (timesheet_id,)
            ).fetchall()
        conn.close()
        return [self._row_to_entry(row) for row in rows]

    def get_entry(self, timesheet_id: str, entry_id: str) -> TimesheetEntry | None:
        """Get an entry only if it belongs to the given timesheet."""
        if not str(entry_id).isdigit():
            return None
        conn = self.get_connection()
        row = conn.execute(
            "SELECT * FROM entries WHERE id = ? AND timesheet_id = ?",
            (int(entry_id), timesheet_id),
        ).fetchone()
        conn.close()
        return self._row_to_entry(row) if row else None

    def insert_entry(
        self,
        timesheet_id: str,
        entry_date: date,
        project_name: str,
        type_of_work: str,
        description: str,
        hours: Decimal,
        entry_id: str | None = None,
    ) -> TimesheetEntry:
        """Insert an entry; the id comes from the table's sequence unless given."""
        conn = self.get_connection()
        cursor = conn.execute(
            """
            INSERT INTO entries (id, timesheet_id, date, project_name, type_of_work, description, hours)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                int(entry_id) if entry_id is not None else None,
                timesheet_id,
                entry_date.isoformat(),
                project_name,
                type_of_work,
                description,
                str(hours),
            ),
        )
        conn.commit()
        new_id = cursor.lastrowid
        conn.close()
        return TimesheetEntry(
            id=str(new_id),
            timesheet_id=timesheet_id,
            date=entry_date,
            project_name=project_name,
            type_of_work=type_of_work,
            description=description,
            hours=hours,
        )

    def update_entry(self, entry: TimesheetEntry) -> bool:
        conn = self.get_connection()
        cursor = conn.execute(
            """
            UPDATE entries
            SET date = ?, project_name = ?, type_of_work = ?, description = ?, hours = ?
            WHERE id = ? AND timesheet_id = ?
            """,
            (
                entry.date.isoformat(),
                entry.project_name,
                entry.type_of_work,
                entry.description,
                str(entry.hours),
                int(entry.id),
                entry.timesheet_id,
            ),
        )
        conn.commit()
        updated = cursor.rowcount > 0
        conn.close()
        return updated

    def delete_entry(self, timesheet_id: str, entry_id: str) -> bool:
        """Delete an entry. Returns True if a row was removed."""
        if not str(entry_id).isdigit():
            return False
        conn = self.get_connection()
        cursor = conn.execute(
            "DELETE FROM entries WHERE id = ? AND timesheet_id = ?",
            (int(entry_id), timesheet_id),
        )
        conn.commit()
        deleted = cursor.rowcount > 0
        conn.close()
        return deleted

    # --- Form options ---

    def save_options(self, kind: str, labels: list[str]) -> None:
        """Replace the option list of one kind ('project' or 'work_type')."""
        conn = self.get_connection()
        conn.execute("DELETE FROM options WHERE kind = ?", (kind,))
        conn.executemany(
            "INSERT INTO options (kind, position, label) VALUES (?, ?, ?)",
            [(kind, position, label) for position, label in enumerate(labels)],
        )
        conn.commit()
        conn.close()

    def get_options(self, kind: str) -> list[str]:
        conn = self.get_connection()
        rows = conn.execute(
            "SELECT label FROM options WHERE kind = ? ORDER BY position", (kind,)
        ).fetchall()
        conn.close()
        return [row["label"] for row in rows]
