"""Tests for storage.py - database operations."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

from models import TimesheetStatus, User
from status import apply_total_hours


class TestInitDb:
    """Tests for Repository.init_db."""

    def test_creates_tables(self, empty_repository):
        conn = empty_repository.get_connection()
        names = {
            row["name"]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
        conn.close()
        assert {"users", "timesheets", "entries", "options"} <= names

    def test_idempotent(self, empty_repository):
        empty_repository.init_db()
        assert empty_repository.count_users() == 0

    def test_creates_parent_directory(self, tmp_path):
        from storage import Repository

        repo = Repository(tmp_path / "nested" / "dir" / "t.db")
        repo.init_db()
        assert (tmp_path / "nested" / "dir" / "t.db").exists()


class TestUsers:
    """Tests for user storage."""

    def test_save_and_get(self, empty_repository):
        user = User(id="9", email="Jane@Example.com", name="Jane", password_hash="h", salt="s")
        empty_repository.save_user(user)
        assert empty_repository.get_user("9") == user

    def test_email_lookup_ignores_case(self, empty_repository):
        empty_repository.save_user(User(id="9", email="Jane@Example.com", name="Jane"))
        assert empty_repository.get_user_by_email("jane@example.com").id == "9"

    def test_missing_user(self, empty_repository):
        assert empty_repository.get_user("404") is None
        assert empty_repository.get_user_by_email("nobody@example.com") is None


class TestTimesheets:
    """Tests for timesheet storage."""

    def test_round_trip_keeps_cached_total(self, repository):
        timesheet = repository.get_timesheet("4")
        assert timesheet.total_hours == Decimal("40")
        assert timesheet.status == TimesheetStatus.COMPLETED

    def test_save_updates_total(self, repository):
        timesheet = apply_total_hours(repository.get_timesheet("1"), Decimal("12.5"))
        repository.save_timesheet(timesheet)
        loaded = repository.get_timesheet("1")
        assert loaded.total_hours == Decimal("12.5")
        assert loaded.status == TimesheetStatus.INCOMPLETE

    def test_list_ordered_by_start(self, repository):
        timesheets = repository.list_timesheets("1")
        starts = [ts.start_date for ts in timesheets]
        assert starts == sorted(starts)
        assert len(timesheets) == 8

    def test_list_other_user_empty(self, repository):
        assert repository.list_timesheets("2") == []

    def test_get_missing(self, repository):
        assert repository.get_timesheet("999") is None


class TestEntries:
    """Tests for entry storage."""

    def test_list_for_timesheet(self, repository):
        entries = repository.list_entries("3")
        assert [e.id for e in entries] == ["11", "12", "13", "14", "15"]

    def test_list_all(self, repository):
        assert len(repository.list_entries()) == 15

    def test_insert_continues_sequence(self, repository):
        entry = repository.insert_entry(
            "5", date(2024, 1, 29), "Mobile App", "Testing", "Smoke tests", Decimal("2")
        )
        assert entry.id == "16"
        assert repository.get_entry("5", "16").description == "Smoke tests"

    def test_ids_never_reused(self, repository):
        first = repository.insert_entry(
            "5", date(2024, 1, 29), "Mobile App", "Testing", "Smoke tests", Decimal("2")
        )
        repository.delete_entry("5", first.id)
        second = repository.insert_entry(
            "5", date(2024, 1, 29), "Mobile App", "Testing", "Smoke tests", Decimal("2")
        )
        assert int(second.id) > int(first.id)

    def test_get_entry_scoped_to_timesheet(self, repository):
        assert repository.get_entry("4", "11") is None
        assert repository.get_entry("3", "11") is not None

    def test_get_entry_bad_id(self, repository):
        assert repository.get_entry("3", "abc") is None

    def test_update(self, repository):
        entry = replace(repository.get_entry("3", "11"), hours=Decimal("7.5"))
        assert repository.update_entry(entry)
        assert repository.get_entry("3", "11").hours == Decimal("7.5")

    def test_delete(self, repository):
        assert repository.delete_entry("3", "11")
        assert not repository.delete_entry("3", "11")
        assert repository.get_entry("3", "11") is None


class TestOptions:
    """Tests for form option storage."""

    def test_order_preserved(self, repository):
        projects = repository.get_options("project")
        assert projects[0] == "Homepage Development"
        assert len(projects) == 6
        assert len(repository.get_options("work_type")) == 8

    def test_save_replaces(self, repository):
        repository.save_options("project", ["Only"])
        assert repository.get_options("project") == ["Only"]


class TestReset:
    """Tests for Repository.reset."""

    def test_reset_clears_everything(self, repository):
        repository.reset()
        assert repository.count_users() == 0
        assert repository.list_entries() == []
        assert repository.get_options("project") == []
        conn = repository.get_connection()
        row = conn.execute("SELECT seq FROM sqlite_sequence WHERE name = 'entries'").fetchone()
        conn.close()
        assert row is None
