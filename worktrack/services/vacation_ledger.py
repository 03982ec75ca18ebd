from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session, joinedload

from ..config import get_settings
from ..constants import (
    ACTION_CREATE,
    ACTION_UPDATE,
    ENTITY_VACATION,
    VACATION_APPROVED,
    VACATION_PENDING,
    VACATION_STATUSES,
)
from ..errors import ConflictError, NotFoundError, ValidationFailedError
from ..models import User, VacationRequest
from . import audit, clock

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class VacationBalance:
    requests: list[VacationRequest]
    total_days: int
    taken_days: int

    @property
    def remaining_days(self) -> int:
        # may go negative when over-allocated
        return self.total_days - self.taken_days


def balance_delta(previous_status: str, new_status: str, work_days: int) -> int:
    """Change to ``vacation_days_taken`` caused by one status transition."""
    if new_status == VACATION_APPROVED and previous_status != VACATION_APPROVED:
        return work_days
    if previous_status == VACATION_APPROVED and new_status != VACATION_APPROVED:
        return -work_days
    return 0


def request_vacation(
    db: Session,
    user_id: int,
    start_date: date | None,
    end_date: date | None,
    description: str | None = None,
    *,
    ip_address: str | None = None,
) -> VacationRequest:
    if not start_date or not end_date:
        raise ValidationFailedError("Start and end date are required")
    if end_date < start_date:
        raise ValidationFailedError("End date must not be before start date")

    vacation = VacationRequest(
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        work_days=clock.count_work_days(start_date, end_date),
        status=VACATION_PENDING,
        description=description,
    )
    db.add(vacation)
    db.flush()
    audit.record(
        db,
        user_id=user_id,
        action=ACTION_CREATE,
        entity=ENTITY_VACATION,
        entity_id=vacation.id,
        details={
            "startDate": start_date.isoformat(),
            "endDate": end_date.isoformat(),
            "days": vacation.work_days,
            "description": description,
        },
        ip_address=ip_address,
    )
    db.commit()
    logger.info("User %s requested %s vacation day(s) (request %s)", user_id, vacation.work_days, vacation.id)
    return vacation


def transition(
    db: Session,
    request_id: int,
    new_status: str,
    approver_id: int,
    *,
    ip_address: str | None = None,
) -> VacationRequest:
    if new_status not in VACATION_STATUSES:
        raise ValidationFailedError("Invalid status value")

    vacation = db.query(VacationRequest).populate_existing().filter(VacationRequest.id == request_id).one_or_none()
    if not vacation:
        raise NotFoundError("Vacation not found")

    previous_status = vacation.status
    if previous_status == new_status:
        return vacation

    # compare-and-set so a racing transition cannot apply the balance twice
    updated = (
        db.query(VacationRequest)
        .filter(VacationRequest.id == request_id, VacationRequest.status == previous_status)
        .update(
            {VacationRequest.status: new_status, VacationRequest.reviewed_by: approver_id},
            synchronize_session=False,
        )
    )
    if updated != 1:
        db.rollback()
        raise ConflictError("Vacation request was modified concurrently")

    delta = balance_delta(previous_status, new_status, vacation.work_days)
    if delta:
        db.query(User).filter(User.id == vacation.user_id).update(
            {User.vacation_days_taken: User.vacation_days_taken + delta},
            synchronize_session=False,
        )

    audit.record(
        db,
        user_id=approver_id,
        action=ACTION_UPDATE,
        entity=ENTITY_VACATION,
        entity_id=request_id,
        details={"oldStatus": previous_status, "newStatus": new_status, "balanceChange": delta},
        ip_address=ip_address,
    )
    db.commit()
    db.refresh(vacation)
    logger.info(
        "Vacation %s moved %s -> %s by user %s (balance %+d)",
        request_id,
        previous_status,
        new_status,
        approver_id,
        delta,
    )
    return vacation


def balance_for_user(db: Session, user_id: int) -> VacationBalance:
    requests = (
        db.query(VacationRequest)
        .filter(VacationRequest.user_id == user_id)
        .order_by(VacationRequest.start_date.desc(), VacationRequest.id.desc())
        .all()
    )
    user = db.query(User).populate_existing().filter(User.id == user_id).one_or_none()
    if not user:
        return VacationBalance(requests=requests, total_days=settings.default_vacation_days, taken_days=0)
    return VacationBalance(
        requests=requests,
        total_days=user.vacation_days_per_year,
        taken_days=user.vacation_days_taken,
    )


def list_requests(
    db: Session,
    *,
    status: str | None = None,
    user_id: int | None = None,
) -> list[VacationRequest]:
    if status and status not in VACATION_STATUSES:
        raise ValidationFailedError("Invalid status value")
    query = db.query(VacationRequest).options(joinedload(VacationRequest.user))
    if status:
        query = query.filter(VacationRequest.status == status)
    if user_id:
        query = query.filter(VacationRequest.user_id == user_id)
    return query.order_by(VacationRequest.start_date.desc(), VacationRequest.id.desc()).all()
