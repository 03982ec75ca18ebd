from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotFoundError, ValidationFailedError
from ..models import BreakRecord, User
from ..schemas.session import serialize_break
from ..schemas.vacation import VacationStatusUpdate, serialize_vacation
from ..services import break_scheduler, clock, vacation_ledger
from .auth import client_ip, require_admin

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _parse_id(value: str, label: str = "ID") -> int:
    if not value.isdigit():
        raise ValidationFailedError(f"Invalid {label}")
    return int(value)


@router.get("/vacation")
async def list_vacations(
    request: Request,
    status: str | None = None,
    user_id: str | None = Query(default=None, alias="userId"),
    db: Session = Depends(get_db),
):
    require_admin(request, db)
    vacations = vacation_ledger.list_requests(
        db,
        status=status or None,
        user_id=_parse_id(user_id, "user id") if user_id else None,
    )
    return JSONResponse({"vacations": [serialize_vacation(v, include_user=True) for v in vacations]})


@router.put("/vacation/{vacation_id}")
async def update_vacation_status(
    vacation_id: str,
    request: Request,
    payload: VacationStatusUpdate | None = Body(default=None),
    db: Session = Depends(get_db),
):
    admin = require_admin(request, db)
    vacation = vacation_ledger.transition(
        db,
        _parse_id(vacation_id),
        payload.status if payload else None,
        admin.id,
        ip_address=client_ip(request),
    )
    return JSONResponse({"vacation": serialize_vacation(vacation)})


@router.get("/breaks")
async def list_breaks(
    request: Request,
    day: str | None = Query(default=None, alias="date"),
    db: Session = Depends(get_db),
):
    require_admin(request, db)
    try:
        target_date = clock.parse_day(day) if day else clock.yesterday()
    except ValueError:
        raise ValidationFailedError("Invalid date")
    records = (
        db.query(BreakRecord)
        .filter(BreakRecord.date == target_date)
        .order_by(BreakRecord.user_id.asc())
        .all()
    )
    return JSONResponse({"date": target_date.isoformat(), "breaks": [serialize_break(r) for r in records]})


@router.get("/break-settings/{user_id}")
async def get_break_settings(user_id: str, request: Request, db: Session = Depends(get_db)):
    require_admin(request, db)
    user = db.query(User).filter(User.id == _parse_id(user_id, "user id")).one_or_none()
    if not user:
        raise NotFoundError("User not found")
    config = break_scheduler.break_config_for(user)
    return JSONResponse(
        {
            "breakSettings": {
                "userId": user.id,
                "breakDuration": config.break_minutes,
                "autoInsert": config.auto_insert,
            }
        }
    )
