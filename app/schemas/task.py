from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime, timezone
from typing import Optional

from app.schemas.user import UserSummary


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Due dates are stored as naive UTC so they compare with utcnow-style values."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    user_id: int

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value):
        return to_naive_utc(value)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    is_completed: Optional[bool] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value):
        return to_naive_utc(value)


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    is_completed: bool
    created_at: Optional[datetime] = None
    user: Optional[UserSummary] = None
