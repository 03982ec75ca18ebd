from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class VacationCreate(BaseModel):
    start_date: date | None = Field(default=None, alias="startDate")
    end_date: date | None = Field(default=None, alias="endDate")
    description: str | None = Field(default=None, max_length=2000)

    model_config = ConfigDict(populate_by_name=True)


class VacationStatusUpdate(BaseModel):
    status: str | None = None


def serialize_vacation(vacation, *, include_user: bool = False) -> dict:
    payload = {
        "id": vacation.id,
        "userId": vacation.user_id,
        "startDate": vacation.start_date.isoformat(),
        "endDate": vacation.end_date.isoformat(),
        "days": vacation.work_days,
        "status": vacation.status,
        "description": vacation.description,
        "reviewedBy": vacation.reviewed_by,
    }
    if include_user and vacation.user is not None:
        payload["user"] = {
            "id": vacation.user.id,
            "name": vacation.user.full_name,
            "email": vacation.user.email,
            "vacationDaysPerYear": vacation.user.vacation_days_per_year,
            "vacationDaysTaken": vacation.user.vacation_days_taken,
        }
    return payload
