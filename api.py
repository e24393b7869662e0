#!/usr/bin/env python3
"""REST API for timesheets.

Every route except login requires a bearer token from ``POST /auth/login``.
Statuses are always recomputed from entries before a timesheet is returned.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from auth import Session, SessionStore, get_current_session, get_current_user
from config import configure_logging, load_settings
from models import User
from seed import seed_from_json
from service import InvalidEntryError, NotFoundError, TimesheetService
from storage import Repository

logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str
    remember_me: bool = Field(False, alias="rememberMe")


class EntryFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_name: str = Field(alias="projectName", min_length=1)
    type_of_work: str = Field(alias="typeOfWork", min_length=1)
    description: str = Field(min_length=1)
    hours: Decimal = Field(gt=0)


class EntryCreate(EntryFields):
    entry_date: date = Field(alias="date")


class EntryUpdate(EntryFields):
    entry_id: str | int = Field(alias="entryId")
    entry_date: date | None = Field(None, alias="date")


class EntryDelete(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    entry_id: str | int = Field(alias="entryId")


def get_service(request: Request) -> TimesheetService:
    return request.app.state.service


auth_router = APIRouter(prefix="/auth", tags=["auth"])
router = APIRouter(tags=["timesheets"], dependencies=[Depends(get_current_user)])


@auth_router.post("/login")
def login(body: LoginRequest, request: Request):
    service = get_service(request)
    user = service.authenticate(body.email, body.password)
    if user is None:
        return JSONResponse(status_code=401, content={"detail": "Invalid email or password"})
    session = request.app.state.sessions.create(user, remember_me=body.remember_me)
    logger.info(f"User {user.id} logged in")
    return {
        "token": session.token,
        "user": user.to_dict(),
        "expiresAt": session.expires_at.isoformat(),
    }


@auth_router.post("/logout")
def logout(request: Request, session: Session = Depends(get_current_session)):
    request.app.state.sessions.revoke(session.token)
    return {"message": "Logged out"}


@auth_router.get("/session")
def current_session(session: Session = Depends(get_current_session)):
    return {"user": session.user.to_dict(), "expiresAt": session.expires_at.isoformat()}


@router.get("/projects")
def get_projects(service: TimesheetService = Depends(get_service)):
    return service.get_options()


@router.get("/timesheets")
def list_timesheets(
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    user: User = Depends(get_current_user),
    service: TimesheetService = Depends(get_service),
):
    return service.list_timesheets(user.id, start_date, end_date).to_dict()


@router.get("/timesheets/{timesheet_id}")
def get_timesheet(
    timesheet_id: str,
    user: User = Depends(get_current_user),
    service: TimesheetService = Depends(get_service),
):
    return service.get_timesheet(user.id, timesheet_id).to_dict()


@router.get("/timesheets/{timesheet_id}/entries")
def list_entries(
    timesheet_id: str,
    user: User = Depends(get_current_user),
    service: TimesheetService = Depends(get_service),
):
    return [entry.to_dict() for entry in service.list_entries(user.id, timesheet_id)]


@router.post("/timesheets/{timesheet_id}/entries", status_code=201)
def create_entry(
    timesheet_id: str,
    body: EntryCreate,
    user: User = Depends(get_current_user),
    service: TimesheetService = Depends(get_service),
):
    entry, timesheet = service.create_entry(
        user.id,
        timesheet_id,
        body.entry_date,
        body.project_name,
        body.type_of_work,
        body.description,
        body.hours,
    )
    return {"entry": entry.to_dict(), "timesheet": timesheet.to_dict()}


@router.put("/timesheets/{timesheet_id}/entries")
def update_entry(
    timesheet_id: str,
    body: EntryUpdate,
    user: User = Depends(get_current_user),
    service: TimesheetService = Depends(get_service),
):
    entry, timesheet = service.update_entry(
        user.id,
        timesheet_id,
        str(body.entry_id),
        body.project_name,
        body.type_of_work,
        body.description,
        body.hours,
        entry_date=body.entry_date,
    )
    return {"entry": entry.to_dict(), "timesheet": timesheet.to_dict()}


@router.delete("/timesheets/{timesheet_id}/entries")
def delete_entry(
    timesheet_id: str,
    body: EntryDelete,
    user: User = Depends(get_current_user),
    service: TimesheetService = Depends(get_service),
):
    timesheet = service.delete_entry(user.id, timesheet_id, str(body.entry_id))
    return {"message": "Entry deleted successfully", "timesheet": timesheet.to_dict()}


def _describe_validation_errors(errors: list[dict]) -> str:
    """Turn pydantic errors into one message for the caller.

    Any absent field yields "Missing required fields"; otherwise the first
    offending field is named along with what is wrong with it.
    """
    if not errors or any(error.get("type") == "missing" for error in errors):
        return "Missing required fields"
    error = errors[0]
    field_name = ".".join(part for part in error.get("loc", ())[1:] if isinstance(part, str)) or "request"
    return f"Invalid {field_name}: {error.get('msg', 'invalid value')}"


async def _validation_error(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"detail": _describe_validation_errors(exc.errors())})


async def _not_found(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def _invalid_entry(request: Request, exc: InvalidEntryError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def create_app(service: TimesheetService, sessions: SessionStore | None = None) -> FastAPI:
    app = FastAPI(title="ticktock timesheets")
    app.state.service = service
    app.state.sessions = sessions or SessionStore()
    app.include_router(auth_router)
    app.include_router(router)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(InvalidEntryError, _invalid_entry)
    return app


def main():
    import uvicorn

    settings = load_settings()
    configure_logging(settings)
    repository = Repository(settings.db_path)
    repository.init_db()
    seed_from_json(repository, settings.seed_path)

    app = create_app(TimesheetService(repository))
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
