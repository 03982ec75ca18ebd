from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..constants import (
    ACTION_CREATE,
    ACTION_DELETE,
    ACTION_START_TRACKING,
    ACTION_STOP_TRACKING,
    ENTITY_TIME_ENTRY,
)
from ..errors import (
    ConflictError,
    ForbiddenError,
    NoActiveSessionError,
    NotFoundError,
    ValidationFailedError,
)
from ..models import WorkSession
from . import audit, clock

logger = logging.getLogger(__name__)
settings = get_settings()


def get_open_session(db: Session, user_id: int) -> WorkSession | None:
    return (
        db.query(WorkSession)
        .filter(WorkSession.user_id == user_id, WorkSession.ended_at.is_(None))
        .one_or_none()
    )


def start_session(
    db: Session,
    user_id: int,
    *,
    now: datetime | None = None,
    ip_address: str | None = None,
) -> WorkSession:
    now = now or clock.utcnow()
    session = WorkSession(user_id=user_id, started_at=now, ended_at=None, duration_seconds=0)
    db.add(session)
    try:
        # the partial unique index on open sessions arbitrates concurrent starts
        db.flush()
    except IntegrityError:
        db.rollback()
        logger.info("Rejected start for user %s: session already open", user_id)
        raise ConflictError("User already has an active tracking session")

    audit.record(
        db,
        user_id=user_id,
        action=ACTION_START_TRACKING,
        entity=ENTITY_TIME_ENTRY,
        entity_id=session.id,
        details={"message": "Time tracking started", "startTime": clock.to_iso(now)},
        ip_address=ip_address,
    )
    db.commit()
    logger.info("Started session %s for user %s", session.id, user_id)
    return session


def stop_session(
    db: Session,
    user_id: int,
    *,
    now: datetime | None = None,
    ip_address: str | None = None,
) -> WorkSession:
    now = now or clock.utcnow()
    open_session = get_open_session(db, user_id)
    if not open_session:
        raise NoActiveSessionError()

    duration = max(0, clock.seconds_between(open_session.started_at, now))
    updated = (
        db.query(WorkSession)
        .filter(WorkSession.id == open_session.id, WorkSession.ended_at.is_(None))
        .update(
            {WorkSession.ended_at: now, WorkSession.duration_seconds: duration},
            synchronize_session=False,
        )
    )
    if updated != 1:
        # another stop closed it between our read and write
        db.rollback()
        raise NoActiveSessionError()

    audit.record(
        db,
        user_id=user_id,
        action=ACTION_STOP_TRACKING,
        entity=ENTITY_TIME_ENTRY,
        entity_id=open_session.id,
        details={
            "message": "Time tracking stopped",
            "startTime": clock.to_iso(open_session.started_at),
            "endTime": clock.to_iso(now),
            "duration": duration,
        },
        ip_address=ip_address,
    )
    db.commit()
    db.refresh(open_session)
    logger.info("Stopped session %s for user %s after %ss", open_session.id, user_id, duration)
    return open_session


def create_manual_session(
    db: Session,
    user_id: int,
    start: datetime,
    end: datetime,
    *,
    now: datetime | None = None,
    ip_address: str | None = None,
) -> WorkSession:
    """Record an already finished session, back-dated at most a week."""
    now = now or clock.utcnow()
    if start >= end:
        raise ValidationFailedError("End time must be after start time")
    if start > now or end > now:
        raise ValidationFailedError("Time entries cannot be in the future")
    oldest_allowed = now - timedelta(days=settings.manual_entry_max_age_days)
    if start < oldest_allowed or end < oldest_allowed:
        raise ValidationFailedError(
            f"Time entries cannot be more than {settings.manual_entry_max_age_days} days in the past"
        )
    duration = clock.seconds_between(start, end)
    if duration <= 0:
        raise ValidationFailedError("End time must be after start time")

    session = WorkSession(user_id=user_id, started_at=start, ended_at=end, duration_seconds=duration)
    db.add(session)
    db.flush()
    audit.record(
        db,
        user_id=user_id,
        action=ACTION_CREATE,
        entity=ENTITY_TIME_ENTRY,
        entity_id=session.id,
        details={
            "message": "Manual time entry created",
            "startTime": clock.to_iso(start),
            "endTime": clock.to_iso(end),
            "duration": duration,
        },
        ip_address=ip_address,
    )
    db.commit()
    return session


def delete_session(
    db: Session,
    session_id: int,
    requester_id: int,
    *,
    ip_address: str | None = None,
) -> None:
    session = db.query(WorkSession).filter(WorkSession.id == session_id).one_or_none()
    if not session:
        raise NotFoundError("Time entry not found")
    if session.user_id != requester_id:
        raise ForbiddenError("You can only delete your own time entries")

    details = {
        "message": "Time entry deleted by user",
        "startTime": clock.to_iso(session.started_at),
        "endTime": clock.to_iso(session.ended_at),
        "duration": session.duration_seconds,
    }
    db.delete(session)
    audit.record(
        db,
        user_id=requester_id,
        action=ACTION_DELETE,
        entity=ENTITY_TIME_ENTRY,
        entity_id=session_id,
        details=details,
        ip_address=ip_address,
    )
    db.commit()
