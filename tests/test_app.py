"""Tests for the app module."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from models import StatusReport, StatusSummary
from status import apply_total_hours


@pytest.fixture
def app(sample_timesheet):
    from app import TimesheetApp

    with patch.object(TimesheetApp, 'run'):
        client = MagicMock()
        app = TimesheetApp(client, today=date(2024, 2, 15))
        hours = ["40", "28", "0", "0", "0", "0", "0"]
        app.timesheets = [
            apply_total_hours(replace(sample_timesheet, id=str(i + 1), week_number=i + 1), Decimal(h))
            for i, h in enumerate(hours)
        ]
        app._refresh_display = MagicMock()
        yield app


class TestAppState:
    """Tests for list state handling in TimesheetApp."""

    def test_initial_state(self, app):
        assert app.status_filter == "all"
        assert app.range_preset == "all"
        assert app.page == 1
        assert app.per_page == 5

    def test_filtered_timesheets(self, app):
        app.status_filter = "MISSING"
        assert [ts.id for ts in app.filtered_timesheets()] == ["3", "4", "5", "6", "7"]
        app.status_filter = "COMPLETED"
        assert [ts.id for ts in app.filtered_timesheets()] == ["1"]

    def test_current_page(self, app):
        rows, total_pages = app.current_page()
        assert total_pages == 2
        assert len(rows) == 5

    def test_cycle_status_resets_page(self, app):
        app.page = 2
        app.action_cycle_status()
        assert app.status_filter == "COMPLETED"
        assert app.page == 1
        for _ in range(3):
            app.action_cycle_status()
        assert app.status_filter == "all"

    def test_paging(self, app):
        app.action_next_page()
        assert app.page == 2
        app.action_next_page()
        assert app.page == 2
        app.action_prev_page()
        app.action_prev_page()
        assert app.page == 1

    def test_cycle_range_reloads_with_dates(self, app):
        app.client.list_timesheets.return_value = StatusReport(summary=StatusSummary())
        app.action_cycle_range()
        assert app.range_preset == "thisMonth"
        app.client.list_timesheets.assert_called_once_with(date(2024, 2, 1), date(2024, 2, 29))
        assert app.timesheets == []

    def test_all_range_is_unbounded(self, app):
        app.client.list_timesheets.return_value = StatusReport()
        app._load_timesheets()
        app.client.list_timesheets.assert_called_once_with(None, None)

    def test_load_failure_notifies(self, app):
        from client import TransportError

        app.client.list_timesheets.side_effect = TransportError("connection refused")
        app.notify = MagicMock()
        app._load_timesheets()
        app.notify.assert_called_once()
        assert app.notify.call_args.kwargs["severity"] == "error"
        assert app.timesheets == []


class TestMain:
    """Tests for the entry point."""

    def test_main_runs_app(self, monkeypatch, tmp_path):
        from app import TimesheetApp, main

        monkeypatch.setenv("TIMESHEET_API_URL", "http://timesheets.test/")
        monkeypatch.setenv("TIMESHEET_LOG_FILE", str(tmp_path / "tui.log"))
        with patch.object(TimesheetApp, 'run') as run:
            main()
        run.assert_called_once()


class TestCheckAction:
    """Tests for binding availability."""

    def test_list_actions_need_a_user(self, app):
        app.user = None
        assert app.check_action("cycle_status", ()) is False
        assert app.check_action("open_timesheet", ()) is False

    def test_quit_always_available(self, app):
        assert app.check_action("quit", ()) is True
