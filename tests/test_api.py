"""Tests for the REST API."""

from __future__ import annotations

import pytest


ENTRY = {
    "date": "2024-01-29",
    "projectName": "Mobile App",
    "typeOfWork": "Meeting",
    "description": "Sprint planning",
    "hours": 8,
}


class TestAuthRoutes:
    """Tests for /auth."""

    def test_login(self, api):
        response = api.post(
            "/auth/login", json={"email": "john.doe@example.com", "password": "password123"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["token"]
        assert data["user"] == {"id": "1", "email": "john.doe@example.com", "name": "John Doe"}
        assert "password" not in str(data["user"])

    def test_login_bad_password(self, api):
        response = api.post(
            "/auth/login", json={"email": "john.doe@example.com", "password": "wrong-one"}
        )
        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid email or password"}

    def test_login_missing_fields(self, api):
        response = api.post("/auth/login", json={"email": "john.doe@example.com"})
        assert response.status_code == 400
        assert response.json() == {"detail": "Missing required fields"}

    def test_session(self, api, auth_headers):
        response = api.get("/auth/session", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "john.doe@example.com"

    def test_logout_revokes_token(self, api, auth_headers):
        assert api.post("/auth/logout", headers=auth_headers).status_code == 200
        assert api.get("/timesheets", headers=auth_headers).status_code == 401


class TestUnauthorized:
    """Every route but login needs a bearer token."""

    @pytest.mark.parametrize(
        "method, path",
        [
            ("get", "/projects"),
            ("get", "/timesheets"),
            ("get", "/timesheets/4"),
            ("get", "/timesheets/4/entries"),
            ("post", "/timesheets/4/entries"),
            ("put", "/timesheets/4/entries"),
            ("delete", "/timesheets/4/entries"),
            ("get", "/auth/session"),
        ],
    )
    def test_no_token(self, api, method, path):
        response = api.request(method.upper(), path)
        assert response.status_code == 401
        assert response.json() == {"detail": "Unauthorized"}

    def test_bad_token(self, api):
        response = api.get("/timesheets", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401


class TestReadRoutes:
    """Tests for the read-only routes."""

    def test_projects(self, api, auth_headers):
        data = api.get("/projects", headers=auth_headers).json()
        assert len(data["projects"]) == 6
        assert len(data["workTypes"]) == 8

    def test_timesheets_with_summary(self, api, auth_headers):
        data = api.get("/timesheets", headers=auth_headers).json()
        assert data["summary"] == {"total": 8, "completed": 1, "incomplete": 1, "missing": 6}
        week4 = next(ts for ts in data["timesheets"] if ts["id"] == "4")
        assert week4["status"] == "COMPLETED"
        assert week4["totalHours"] == 40
        assert week4["dateRange"] == "22 - 26 January, 2024"

    def test_timesheets_date_filter(self, api, auth_headers):
        data = api.get(
            "/timesheets",
            params={"startDate": "2024-01-01", "endDate": "2024-01-31"},
            headers=auth_headers,
        ).json()
        assert [ts["weekNumber"] for ts in data["timesheets"]] == [1, 2, 3, 4, 5]

    def test_single_timesheet(self, api, auth_headers):
        data = api.get("/timesheets/3", headers=auth_headers).json()
        assert data["totalHours"] == 28
        assert data["status"] == "INCOMPLETE"

    def test_timesheets_bad_date_query(self, api, auth_headers):
        response = api.get(
            "/timesheets",
            params={"startDate": "not-a-date", "endDate": "2024-01-31"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid startDate:")

    def test_unknown_timesheet(self, api, auth_headers):
        response = api.get("/timesheets/999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"detail": "Timesheet not found"}

    def test_entries(self, api, auth_headers):
        data = api.get("/timesheets/3/entries", headers=auth_headers).json()
        assert [e["id"] for e in data] == ["11", "12", "13", "14", "15"]
        assert data[0]["projectName"] == "E-commerce Platform"

    def test_other_users_timesheet_hidden(self, api):
        token = api.post(
            "/auth/login", json={"email": "test@example.com", "password": "test123"}
        ).json()["token"]
        response = api.get("/timesheets/4", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 404


class TestEntryRoutes:
    """Tests for entry create/update/delete."""

    def test_create(self, api, auth_headers):
        response = api.post("/timesheets/5/entries", json=ENTRY, headers=auth_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["entry"]["id"] == "16"
        assert data["entry"]["hours"] == 8
        assert data["timesheet"]["status"] == "INCOMPLETE"
        assert data["timesheet"]["totalHours"] == 8

    def test_create_missing_field(self, api, auth_headers):
        body = {k: v for k, v in ENTRY.items() if k != "projectName"}
        response = api.post("/timesheets/5/entries", json=body, headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {"detail": "Missing required fields"}

    def test_create_negative_hours(self, api, auth_headers):
        response = api.post(
            "/timesheets/5/entries", json={**ENTRY, "hours": -1}, headers=auth_headers
        )
        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail != "Missing required fields"
        assert detail.startswith("Invalid hours:")

    def test_create_bad_date(self, api, auth_headers):
        response = api.post(
            "/timesheets/5/entries", json={**ENTRY, "date": "29/01/2024"}, headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid date:")

    def test_missing_field_wins_over_bad_value(self, api, auth_headers):
        body = {k: v for k, v in ENTRY.items() if k != "projectName"}
        body["hours"] = -1
        response = api.post("/timesheets/5/entries", json=body, headers=auth_headers)
        assert response.json() == {"detail": "Missing required fields"}

    def test_create_blank_description(self, api, auth_headers):
        response = api.post(
            "/timesheets/5/entries", json={**ENTRY, "description": "   "}, headers=auth_headers
        )
        assert response.status_code == 400

    def test_create_unknown_timesheet(self, api, auth_headers):
        response = api.post("/timesheets/999/entries", json=ENTRY, headers=auth_headers)
        assert response.status_code == 404

    def test_update(self, api, auth_headers):
        body = {**ENTRY, "entryId": "11", "hours": 20}
        data = api.put("/timesheets/3/entries", json=body, headers=auth_headers).json()
        assert data["entry"]["hours"] == 20
        assert data["timesheet"]["totalHours"] == 40
        assert data["timesheet"]["status"] == "COMPLETED"

    def test_update_keeps_date_when_omitted(self, api, auth_headers):
        body = {k: v for k, v in ENTRY.items() if k != "date"}
        body["entryId"] = 11
        data = api.put("/timesheets/3/entries", json=body, headers=auth_headers).json()
        assert data["entry"]["date"] == "2024-01-15"

    def test_update_unknown_entry(self, api, auth_headers):
        response = api.put(
            "/timesheets/3/entries", json={**ENTRY, "entryId": "999"}, headers=auth_headers
        )
        assert response.status_code == 404
        assert response.json() == {"detail": "Entry not found"}

    def test_delete(self, api, auth_headers):
        response = api.request(
            "DELETE", "/timesheets/4/entries", json={"entryId": "1"}, headers=auth_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Entry deleted successfully"
        assert data["timesheet"]["totalHours"] == 36
        assert data["timesheet"]["status"] == "INCOMPLETE"

    def test_delete_without_id(self, api, auth_headers):
        response = api.request("DELETE", "/timesheets/4/entries", json={}, headers=auth_headers)
        assert response.status_code == 400

    def test_delete_unknown(self, api, auth_headers):
        response = api.request(
            "DELETE", "/timesheets/4/entries", json={"entryId": "999"}, headers=auth_headers
        )
        assert response.status_code == 404


class TestDescribeValidationErrors:
    """Tests for the validation error message."""

    def test_only_missing(self):
        from api import _describe_validation_errors

        errors = [{"type": "missing", "loc": ("body", "hours"), "msg": "Field required"}]
        assert _describe_validation_errors(errors) == "Missing required fields"

    def test_bad_value_names_field(self):
        from api import _describe_validation_errors

        errors = [{"type": "greater_than", "loc": ("body", "hours"), "msg": "Input should be greater than 0"}]
        assert _describe_validation_errors(errors) == "Invalid hours: Input should be greater than 0"

    def test_unparseable_body(self):
        from api import _describe_validation_errors

        errors = [{"type": "json_invalid", "loc": ("body", 12), "msg": "JSON decode error"}]
        assert _describe_validation_errors(errors) == "Invalid request: JSON decode error"
