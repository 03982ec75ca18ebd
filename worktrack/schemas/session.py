from pydantic import BaseModel, ConfigDict, Field

from ..services import clock


class ManualEntryPayload(BaseModel):
    start_time: str | None = Field(default=None, alias="startTime")
    end_time: str | None = Field(default=None, alias="endTime")

    model_config = ConfigDict(populate_by_name=True)


class BreakRunRequest(BaseModel):
    date: str | None = None


def serialize_session(session, *, now=None) -> dict:
    payload = {
        "id": session.id,
        "userId": session.user_id,
        "startTime": clock.to_iso(session.started_at),
        "endTime": clock.to_iso(session.ended_at),
        "duration": int(session.duration_seconds or 0),
    }
    if now is not None and session.ended_at is None:
        payload["elapsedSeconds"] = max(0, clock.seconds_between(session.started_at, now))
    return payload


def serialize_day_entry(entry, target_date) -> dict:
    payload = serialize_session(entry.session)
    payload.update(
        {
            "dayDuration": entry.day_seconds,
            "isMultiDay": entry.is_multi_day,
            "isStartDay": entry.is_start_day,
            "isEndDay": entry.is_end_day,
            "isOpen": entry.is_open,
            "displayDate": target_date.isoformat(),
        }
    )
    return payload


def serialize_break(record) -> dict:
    return {
        "id": record.id,
        "userId": record.user_id,
        "date": record.date.isoformat(),
        "breakDuration": record.minutes,
        "breakStartTime": clock.to_iso(record.started_at),
        "breakEndTime": clock.to_iso(record.ended_at),
    }
