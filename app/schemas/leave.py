from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import date, datetime
from typing import Optional

from app.models.leave_request import LeaveStatus
from app.models.leave_type import LeaveTypeCategory
from app.schemas.user import UserSummary


# --- Leave types ---

class LeaveTypeCreate(BaseModel):
    name: str = Field(min_length=2)
    description: Optional[str] = None
    type: LeaveTypeCategory = LeaveTypeCategory.OTHER


class LeaveTypeUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    description: Optional[str] = None
    type: Optional[LeaveTypeCategory] = None


class LeaveTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: LeaveTypeCategory
    name: str
    description: Optional[str] = None


# --- Leave balances ---

class LeaveBalanceCreate(BaseModel):
    user_id: int
    leave_type_id: int
    year: int = Field(ge=1900, le=9999)
    initial_balance: float = Field(ge=0)
    used_balance: float = Field(default=0, ge=0)
    remaining_balance: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def default_remaining(self):
        # Derived only when omitted; an explicit value is stored as given
        if self.remaining_balance is None:
            if self.used_balance > self.initial_balance:
                raise ValueError("used_balance cannot exceed initial_balance")
            self.remaining_balance = self.initial_balance - self.used_balance
        return self


class LeaveBalanceUpdate(BaseModel):
    year: Optional[int] = Field(default=None, ge=1900, le=9999)
    initial_balance: Optional[float] = Field(default=None, ge=0)
    used_balance: Optional[float] = Field(default=None, ge=0)
    remaining_balance: Optional[float] = Field(default=None, ge=0)


class LeaveBalanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    leave_type_id: int
    year: int
    initial_balance: float
    used_balance: float
    remaining_balance: float
    user: Optional[UserSummary] = None
    leave_type: Optional[LeaveTypeResponse] = None


# --- Leave requests ---

class LeaveRequestCreate(BaseModel):
    leave_type_id: int
    start_date: date
    end_date: date
    reason: Optional[str] = None
    comment: Optional[str] = None
    attachment_url: Optional[str] = Field(default=None, pattern=r"^https?://")


class LeaveRequestUpdate(BaseModel):
    leave_type_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = None
    comment: Optional[str] = None
    attachment_url: Optional[str] = Field(default=None, pattern=r"^https?://")
    status: Optional[LeaveStatus] = None


class LeaveReview(BaseModel):
    comment: Optional[str] = None


class LeaveRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    leave_type_id: int
    start_date: date
    end_date: date
    days: int
    status: LeaveStatus
    reason: Optional[str] = None
    comment: Optional[str] = None
    attachment_url: Optional[str] = None
    reviewed_by_id: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    user: Optional[UserSummary] = None
    leave_type: Optional[LeaveTypeResponse] = None
