from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Optional
from datetime import date, datetime

from app.models.user import MaritalStatus, UserRole


class UserProfileBase(BaseModel):
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    nationality: Optional[str] = None
    cin_number: Optional[int] = Field(default=None, ge=1)
    cnss_number: Optional[int] = Field(default=None, ge=1)
    marital_status: MaritalStatus = MaritalStatus.SINGLE
    job_title: Optional[str] = None
    service: Optional[str] = None


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    nationality: Optional[str] = None
    cin_number: Optional[int] = Field(default=None, ge=1)
    cnss_number: Optional[int] = Field(default=None, ge=1)
    marital_status: Optional[MaritalStatus] = None
    job_title: Optional[str] = None
    service: Optional[str] = None


class RoleUpdate(BaseModel):
    role: UserRole


class UserResponse(UserProfileBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: EmailStr
    role: UserRole
    created_at: Optional[datetime] = None


class UserSummary(BaseModel):
    """Joined owner summary embedded in leave, schedule and task payloads."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    job_title: Optional[str] = None
    service: Optional[str] = None


class UserPage(BaseModel):
    items: List[UserResponse]
    total: int
    page: int
    limit: int
