"""Shared fixtures for tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

SEED_PATH = Path(__file__).parent.parent / "data" / "seed.json"


@pytest.fixture
def repository(tmp_path):
    """A seeded Repository backed by a temporary sqlite file."""
    from seed import seed_from_json
    from storage import Repository

    repo = Repository(tmp_path / "test_timesheet.db")
    seed_from_json(repo, SEED_PATH)
    return repo


@pytest.fixture
def empty_repository(tmp_path):
    from storage import Repository

    repo = Repository(tmp_path / "empty.db")
    repo.init_db()
    return repo


@pytest.fixture
def service(repository):
    from service import TimesheetService

    return TimesheetService(repository)


@pytest.fixture
def api(service):
    """FastAPI TestClient over the seeded service."""
    from api import create_app

    return TestClient(create_app(service))


@pytest.fixture
def auth_headers(api):
    """Bearer headers for the seeded user john.doe@example.com."""
    response = api.post(
        "/auth/login", json={"email": "john.doe@example.com", "password": "password123"}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def client(api):
    """TimesheetClient talking to the in-process API."""
    from client import TimesheetClient

    return TimesheetClient(http=api)


@pytest.fixture
def sample_entry():
    """Create a sample TimesheetEntry for testing."""
    from models import TimesheetEntry

    return TimesheetEntry(
        id="101",
        timesheet_id="5",
        date=date(2024, 1, 30),
        project_name="Mobile App",
        type_of_work="Testing",
        description="Regression pass on login",
        hours=Decimal("7.5"),
    )


@pytest.fixture
def sample_timesheet():
    """Create a sample Timesheet (no hours yet) for testing."""
    from models import Timesheet

    return Timesheet(
        id="5",
        user_id="1",
        week_number=5,
        date_range="29 January - 2 February, 2024",
        start_date=date(2024, 1, 29),
        end_date=date(2024, 2, 2),
    )


@pytest.fixture
def make_entry():
    """Factory for entries that only differ in id, week and hours."""
    from models import TimesheetEntry

    def _make(entry_id: str, timesheet_id: str, hours: str, day: date = date(2024, 1, 30)):
        return TimesheetEntry(
            id=entry_id,
            timesheet_id=timesheet_id,
            date=day,
            project_name="Mobile App",
            type_of_work="Testing",
            description="Some testing work",
            hours=Decimal(hours),
        )

    return _make
