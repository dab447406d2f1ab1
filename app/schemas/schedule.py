import datetime as dt
from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional

from app.schemas.user import UserSummary


def reject_utc_offset(value: Optional[dt.time]) -> Optional[dt.time]:
    """Schedule times are wall-clock times of the day; an offset cannot be stored or compared."""
    if value is not None and value.tzinfo is not None:
        raise ValueError("time must not carry a UTC offset")
    return value


class ScheduleCreate(BaseModel):
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    service: Optional[str] = None
    user_id: Optional[int] = None  # defaults to the caller

    @field_validator("start_time", "end_time")
    @classmethod
    def naive_times(cls, value):
        return reject_utc_offset(value)


class ScheduleUpdate(BaseModel):
    date: Optional[dt.date] = None
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    service: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def naive_times(cls, value):
        return reject_utc_offset(value)


class ScheduleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    service: Optional[str] = None
    user: Optional[UserSummary] = None
