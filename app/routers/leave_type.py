from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.core.schemas import ApiResponse
from app.database import commit_session, get_db
from app.models.leave_balance import LeaveBalance
from app.models.leave_request import LeaveRequest
from app.models.leave_type import LeaveType
from app.models.user import User
from app.routers.auth_deps import require_permission
from app.schemas.leave import LeaveTypeCreate, LeaveTypeResponse, LeaveTypeUpdate

router = APIRouter(prefix="/leave-type", tags=["leave-types"])


def _get_leave_type(db: Session, leave_type_id: int) -> LeaveType:
    leave_type = db.get(LeaveType, leave_type_id)
    if not leave_type:
        raise NotFoundError("Leave type not found")
    return leave_type


@router.post("/create", response_model=ApiResponse[LeaveTypeResponse], status_code=status.HTTP_201_CREATED)
def create_leave_type(
    data: LeaveTypeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("leave_type.manage")),
):
    leave_type = LeaveType(**data.model_dump())
    db.add(leave_type)
    commit_session(db)
    db.refresh(leave_type)
    return ApiResponse.ok("Leave type created", LeaveTypeResponse.model_validate(leave_type))


@router.put("/update/{leave_type_id}", response_model=ApiResponse[LeaveTypeResponse])
def update_leave_type(
    leave_type_id: int,
    data: LeaveTypeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("leave_type.manage")),
):
    leave_type = _get_leave_type(db, leave_type_id)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(leave_type, field, value)
    commit_session(db)
    db.refresh(leave_type)
    return ApiResponse.ok("Leave type updated", LeaveTypeResponse.model_validate(leave_type))


# Reference data: readable without a token
@router.get("/all", response_model=ApiResponse[List[LeaveTypeResponse]])
def list_leave_types(db: Session = Depends(get_db)):
    leave_types = db.query(LeaveType).order_by(LeaveType.name.asc()).all()
    return ApiResponse.ok("Leave types fetched", [LeaveTypeResponse.model_validate(t) for t in leave_types])


@router.get("/affiche/{leave_type_id}", response_model=ApiResponse[LeaveTypeResponse])
def get_leave_type(leave_type_id: int, db: Session = Depends(get_db)):
    return ApiResponse.ok("Leave type fetched", LeaveTypeResponse.model_validate(_get_leave_type(db, leave_type_id)))


@router.delete("/delete/{leave_type_id}", response_model=ApiResponse[None])
def delete_leave_type(
    leave_type_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("leave_type.manage")),
):
    leave_type = _get_leave_type(db, leave_type_id)
    in_use = (
        db.query(LeaveBalance.id).filter(LeaveBalance.leave_type_id == leave_type_id).first() is not None
        or db.query(LeaveRequest.id).filter(LeaveRequest.leave_type_id == leave_type_id).first() is not None
    )
    if in_use:
        raise ValidationError("Leave type is referenced by existing balances or requests")

    db.delete(leave_type)
    commit_session(db)
    return ApiResponse.ok("Leave type deleted")
