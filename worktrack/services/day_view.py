"""Compose the sessions touching a UTC calendar day.

Sessions that cross midnight are apportioned to the day for display only;
the stored ``duration_seconds`` is never rewritten.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from ..models import BreakRecord, WorkSession
from . import clock


@dataclass(frozen=True)
class DayEntry:
    session: WorkSession
    day_seconds: int
    is_multi_day: bool
    is_start_day: bool
    is_end_day: bool

    @property
    def is_open(self) -> bool:
        return self.session.ended_at is None


@dataclass(frozen=True)
class DayView:
    user_id: int
    date: date
    entries: list[DayEntry]
    break_record: BreakRecord | None = None

    @property
    def worked_seconds(self) -> int:
        return sum(entry.day_seconds for entry in self.entries if not entry.is_open)

    @property
    def break_seconds(self) -> int:
        return self.break_record.seconds if self.break_record else 0

    @property
    def net_seconds(self) -> int:
        return max(0, self.worked_seconds - self.break_seconds)

    def closed_entries(self) -> list[DayEntry]:
        return [entry for entry in self.entries if not entry.is_open]


def sessions_for_day(db: Session, user_id: int, target_date: date) -> list[WorkSession]:
    window_start, window_end = clock.day_window(target_date)
    return (
        db.query(WorkSession)
        .filter(
            WorkSession.user_id == user_id,
            or_(
                # starts inside the day (open sessions only match here)
                and_(WorkSession.started_at >= window_start, WorkSession.started_at < window_end),
                # ends inside the day
                and_(WorkSession.ended_at > window_start, WorkSession.ended_at <= window_end),
                # spans the whole day
                and_(WorkSession.started_at < window_start, WorkSession.ended_at > window_end),
            ),
        )
        .order_by(WorkSession.started_at.asc(), WorkSession.id.asc())
        .all()
    )


def apportion(session: WorkSession, target_date: date) -> DayEntry:
    window_start, window_end = clock.day_window(target_date)
    started_at = session.started_at
    ended_at = session.ended_at
    is_start_day = window_start <= started_at < window_end

    if ended_at is None:
        return DayEntry(
            session=session,
            day_seconds=0,
            is_multi_day=False,
            is_start_day=is_start_day,
            is_end_day=False,
        )

    is_end_day = window_start < ended_at <= window_end
    is_multi_day = started_at.date() != clock.last_day_of(started_at, ended_at)
    if is_start_day and is_end_day:
        day_seconds = session.duration_seconds
    else:
        overlap_start = max(started_at, window_start)
        overlap_end = min(ended_at, window_end)
        day_seconds = max(0, clock.seconds_between(overlap_start, overlap_end))
    return DayEntry(
        session=session,
        day_seconds=day_seconds,
        is_multi_day=is_multi_day,
        is_start_day=is_start_day,
        is_end_day=is_end_day,
    )


def entries_for_day(db: Session, user_id: int, target_date: date) -> list[DayEntry]:
    return [apportion(session, target_date) for session in sessions_for_day(db, user_id, target_date)]


def build_day_view(db: Session, user_id: int, target_date: date) -> DayView:
    break_record = (
        db.query(BreakRecord)
        .filter(BreakRecord.user_id == user_id, BreakRecord.date == target_date)
        .one_or_none()
    )
    return DayView(
        user_id=user_id,
        date=target_date,
        entries=entries_for_day(db, user_id, target_date),
        break_record=break_record,
    )


def work_span(view: DayView) -> tuple[datetime, datetime] | None:
    """Earliest start and latest end of the day's closed sessions, clamped to the day."""
    closed = view.closed_entries()
    if not closed:
        return None
    window_start, window_end = clock.day_window(view.date)
    earliest = min(max(entry.session.started_at, window_start) for entry in closed)
    latest = max(min(entry.session.ended_at, window_end) for entry in closed)
    return earliest, latest
