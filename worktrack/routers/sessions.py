from datetime import date

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..config import get_settings
from ..db import get_db
from ..errors import UnauthenticatedError, ValidationFailedError
from ..schemas.session import (
    BreakRunRequest,
    ManualEntryPayload,
    serialize_day_entry,
    serialize_session,
)
from ..services import break_scheduler, clock, day_view, tracker
from .auth import client_ip, require_admin, require_user

router = APIRouter(prefix="/api/time", tags=["time"])
settings = get_settings()


def _parse_day(value: str | None) -> date:
    if not value:
        return clock.today()
    try:
        return clock.parse_day(value)
    except ValueError:
        raise ValidationFailedError("Invalid date")


@router.post("/start")
async def start_tracking(request: Request, db: Session = Depends(get_db)):
    user = require_user(request)
    session = tracker.start_session(db, user["id"], ip_address=client_ip(request))
    return JSONResponse(
        {"message": "Time tracking started", "startTime": clock.to_iso(session.started_at)}
    )


@router.post("/stop")
async def stop_tracking(request: Request, db: Session = Depends(get_db)):
    user = require_user(request)
    session = tracker.stop_session(db, user["id"], ip_address=client_ip(request))
    return JSONResponse({"message": "Time tracking stopped", "session": serialize_session(session)})


@router.get("/current")
async def current_session(request: Request, db: Session = Depends(get_db)):
    user = require_user(request)
    session = tracker.get_open_session(db, user["id"])
    if not session:
        return JSONResponse({"currentSession": None})
    return JSONResponse({"currentSession": serialize_session(session, now=clock.utcnow())})


@router.get("/entries")
async def day_entries(
    request: Request,
    day: str | None = Query(default=None, alias="date"),
    db: Session = Depends(get_db),
):
    user = require_user(request)
    target_date = _parse_day(day)
    view = day_view.build_day_view(db, user["id"], target_date)
    return JSONResponse(
        {
            "date": target_date.isoformat(),
            "entries": [serialize_day_entry(entry, target_date) for entry in view.entries],
            "summary": {
                "workedSeconds": view.worked_seconds,
                "breakSeconds": view.break_seconds,
                "netSeconds": view.net_seconds,
            },
        }
    )


@router.post("/manual-entry")
async def manual_entry(
    request: Request,
    payload: ManualEntryPayload | None = Body(default=None),
    db: Session = Depends(get_db),
):
    user = require_user(request)
    if not payload or not payload.start_time or not payload.end_time:
        raise ValidationFailedError("Start time and end time are required")
    try:
        start = clock.parse_instant(payload.start_time)
        end = clock.parse_instant(payload.end_time)
    except ValueError:
        raise ValidationFailedError("Invalid timestamp")
    session = tracker.create_manual_session(db, user["id"], start, end, ip_address=client_ip(request))
    return JSONResponse({"message": "Manual time entry created", "timeEntry": serialize_session(session)})


@router.delete("/entries/{entry_id}")
async def delete_entry(entry_id: str, request: Request, db: Session = Depends(get_db)):
    user = require_user(request)
    if not entry_id.isdigit():
        raise ValidationFailedError("Invalid ID")
    tracker.delete_session(db, int(entry_id), user["id"], ip_address=client_ip(request))
    return JSONResponse({"message": "Time entry deleted successfully"})


@router.post("/auto-breaks")
def run_auto_breaks(
    request: Request,
    payload: BreakRunRequest | None = Body(default=None),
    db: Session = Depends(get_db),
):
    _authorize_break_run(request, db)
    target_date = _parse_day(payload.date) if payload and payload.date else clock.yesterday()
    summary = break_scheduler.process_breaks_for_date(db, target_date)
    return JSONResponse(summary.as_dict())


def _authorize_break_run(request: Request, db: Session) -> None:
    header = request.headers.get("authorization") or ""
    if settings.break_job_token and header.startswith("Bearer "):
        if header.split(" ", 1)[1] == settings.break_job_token:
            return
        raise UnauthenticatedError()
    require_admin(request, db)
