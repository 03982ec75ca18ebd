from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..constants import ACTION_AUTO_BREAK_ADDED, ENTITY_BREAK
from ..models import BreakRecord, User
from . import audit, clock
from . import day_view as day_view_service

logger = logging.getLogger(__name__)
settings = get_settings()

SKIP_DISABLED = "disabled"
SKIP_NO_WORK = "no_work"
SKIP_EXISTS = "exists"
SKIP_DOES_NOT_FIT = "break_does_not_fit"


@dataclass(frozen=True)
class BreakConfig:
    break_minutes: int
    auto_insert: bool


@dataclass
class BreakOutcome:
    user_id: int
    user_name: str
    break_id: int
    break_start: datetime
    break_end: datetime
    break_minutes: int
    worked_seconds: int
    entries_processed: int


@dataclass
class BreakRunSummary:
    date: date
    breaks: list[BreakOutcome] = field(default_factory=list)
    skipped: list[dict] = field(default_factory=list)
    failures: list[dict] = field(default_factory=list)

    @property
    def processed_users(self) -> int:
        return len(self.breaks)

    def as_dict(self) -> dict:
        return {
            "success": not self.failures,
            "date": self.date.isoformat(),
            "processedUsers": self.processed_users,
            "breaks": [
                {
                    "userId": outcome.user_id,
                    "userName": outcome.user_name,
                    "breakId": outcome.break_id,
                    "breakStartTime": clock.to_iso(outcome.break_start),
                    "breakEndTime": clock.to_iso(outcome.break_end),
                    "breakDuration": outcome.break_minutes,
                    "workedSeconds": outcome.worked_seconds,
                    "entriesProcessed": outcome.entries_processed,
                }
                for outcome in self.breaks
            ],
            "skipped": list(self.skipped),
            "failures": list(self.failures),
        }


def break_config_for(user: User) -> BreakConfig:
    minutes = user.break_duration_minutes
    if minutes is None:
        minutes = settings.default_break_minutes
    auto_insert = True if user.auto_insert_breaks is None else bool(user.auto_insert_breaks)
    return BreakConfig(break_minutes=minutes, auto_insert=auto_insert)


def get_roster(db: Session) -> list[User]:
    return db.query(User).filter(User.is_active.is_(True)).order_by(User.id.asc()).all()


def place_break(span_start: datetime, span_end: datetime, minutes: int) -> tuple[datetime, datetime] | None:
    """Center a break of ``minutes`` inside the span, or None when it does not fit."""
    length = timedelta(minutes=minutes)
    if minutes <= 0 or span_end - span_start < length:
        return None
    middle = span_start + (span_end - span_start) / 2
    start = (middle - length / 2).replace(microsecond=0)
    return start, start + length


def process_breaks_for_date(db: Session, target_date: date) -> BreakRunSummary:
    """Insert at most one automatic break per active user for ``target_date``.

    Safe to re-run: a user who already has a break for the date is skipped,
    and the (user, date) unique constraint settles concurrent runs. A
    failure for one user is rolled back and recorded without stopping the
    others.
    """
    summary = BreakRunSummary(date=target_date)
    logger.info("Running automatic break distribution for %s", target_date.isoformat())
    for user in get_roster(db):
        user_id = user.id
        try:
            _process_user(db, user, target_date, summary)
        except Exception as exc:
            db.rollback()
            logger.exception("Break processing failed for user %s on %s", user_id, target_date)
            summary.failures.append({"userId": user_id, "error": str(exc) or exc.__class__.__name__})

    if summary.failures:
        logger.error(
            "Break processing for %s finished with %d failure(s)", target_date.isoformat(), len(summary.failures)
        )
    logger.info(
        "Processed breaks for %s: %d inserted, %d skipped",
        target_date.isoformat(),
        summary.processed_users,
        len(summary.skipped),
    )
    return summary


def _process_user(db: Session, user: User, target_date: date, summary: BreakRunSummary) -> None:
    config = break_config_for(user)
    if not config.auto_insert:
        summary.skipped.append({"userId": user.id, "reason": SKIP_DISABLED})
        return

    view = day_view_service.build_day_view(db, user.id, target_date)
    if view.break_record is not None:
        summary.skipped.append({"userId": user.id, "reason": SKIP_EXISTS})
        return
    if view.worked_seconds <= 0:
        summary.skipped.append({"userId": user.id, "reason": SKIP_NO_WORK})
        return

    span = day_view_service.work_span(view)
    placement = place_break(span[0], span[1], config.break_minutes) if span else None
    if placement is None:
        logger.warning(
            "Break doesn't fit for user %s on %s: %s minutes in span %s",
            user.id,
            target_date,
            config.break_minutes,
            span,
        )
        summary.skipped.append({"userId": user.id, "reason": SKIP_DOES_NOT_FIT})
        return

    break_start, break_end = placement
    record = BreakRecord(
        user_id=user.id,
        date=target_date,
        minutes=config.break_minutes,
        started_at=break_start,
        ended_at=break_end,
    )
    db.add(record)
    try:
        db.flush()
    except IntegrityError:
        # a concurrent run inserted it first
        db.rollback()
        summary.skipped.append({"userId": user.id, "reason": SKIP_EXISTS})
        return

    closed_entries = view.closed_entries()
    audit.record(
        db,
        user_id=user.id,
        action=ACTION_AUTO_BREAK_ADDED,
        entity=ENTITY_BREAK,
        entity_id=record.id,
        details={
            "date": target_date.isoformat(),
            "breakDuration": config.break_minutes,
            "breakStartTime": clock.to_iso(break_start),
            "breakEndTime": clock.to_iso(break_end),
            "workedSeconds": view.worked_seconds,
            "originalEntriesCount": len(closed_entries),
        },
    )
    db.commit()
    summary.breaks.append(
        BreakOutcome(
            user_id=user.id,
            user_name=user.full_name,
            break_id=record.id,
            break_start=break_start,
            break_end=break_end,
            break_minutes=config.break_minutes,
            worked_seconds=view.worked_seconds,
            entries_processed=len(closed_entries),
        )
    )
    logger.info("- User: %s, Break duration: %s minutes", user.full_name, config.break_minutes)

