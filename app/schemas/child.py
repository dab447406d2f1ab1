from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional

from app.models.child import Gender


class ChildCreate(BaseModel):
    name: str = Field(min_length=1)
    date_of_birth: date
    gender: Gender = Gender.MALE
    has_disability: bool = False


class ChildUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    has_disability: Optional[bool] = None


class ChildResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    date_of_birth: date
    gender: Gender
    has_disability: bool
    created_at: Optional[datetime] = None
