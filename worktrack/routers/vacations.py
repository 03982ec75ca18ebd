from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas.vacation import VacationCreate, serialize_vacation
from ..services import vacation_ledger
from .auth import client_ip, require_user

router = APIRouter(prefix="/api/vacation", tags=["vacation"])


@router.post("")
async def create_vacation(
    request: Request,
    payload: VacationCreate | None = Body(default=None),
    db: Session = Depends(get_db),
):
    user = require_user(request)
    payload = payload or VacationCreate()
    vacation = vacation_ledger.request_vacation(
        db,
        user["id"],
        payload.start_date,
        payload.end_date,
        payload.description,
        ip_address=client_ip(request),
    )
    return JSONResponse({"vacation": serialize_vacation(vacation)})


@router.get("")
async def list_own_vacations(request: Request, db: Session = Depends(get_db)):
    user = require_user(request)
    balance = vacation_ledger.balance_for_user(db, user["id"])
    return JSONResponse(
        {
            "vacations": [serialize_vacation(vacation) for vacation in balance.requests],
            "totalDays": balance.total_days,
            "takenDays": balance.taken_days,
            "remainingDays": balance.remaining_days,
        }
    )
