from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.schemas import ApiResponse
from app.database import get_db
from app.models.user import User
from app.routers.auth_deps import get_current_user, require_permission
from app.schemas.leave import LeaveBalanceCreate, LeaveBalanceResponse, LeaveBalanceUpdate
from app.services.leave_balance_service import LeaveBalanceService

router = APIRouter(prefix="/leave-balance", tags=["leave-balances"])


def get_leave_balance_service(db: Session = Depends(get_db)) -> LeaveBalanceService:
    return LeaveBalanceService(db)


def _out(balance) -> LeaveBalanceResponse:
    return LeaveBalanceResponse.model_validate(balance)


@router.post("/create", response_model=ApiResponse[LeaveBalanceResponse], status_code=status.HTTP_201_CREATED)
def create_leave_balance(
    data: LeaveBalanceCreate,
    service: LeaveBalanceService = Depends(get_leave_balance_service),
    current_user: User = Depends(require_permission("leave_balance.manage")),
):
    return ApiResponse.ok("Leave balance created", _out(service.create(data)))


@router.put("/update/{balance_id}", response_model=ApiResponse[LeaveBalanceResponse])
def update_leave_balance(
    balance_id: int,
    data: LeaveBalanceUpdate,
    service: LeaveBalanceService = Depends(get_leave_balance_service),
    current_user: User = Depends(require_permission("leave_balance.manage")),
):
    return ApiResponse.ok("Leave balance updated", _out(service.update(balance_id, data, current_user)))


@router.get("/all", response_model=ApiResponse[List[LeaveBalanceResponse]])
def list_leave_balances(
    service: LeaveBalanceService = Depends(get_leave_balance_service),
    current_user: User = Depends(require_permission("leave_balance.list_all")),
):
    return ApiResponse.ok("Leave balances fetched", [_out(b) for b in service.list_all()])


@router.get("/user", response_model=ApiResponse[List[LeaveBalanceResponse]])
def list_my_leave_balances(
    year: Optional[int] = Query(None, description="Defaults to the current year"),
    service: LeaveBalanceService = Depends(get_leave_balance_service),
    current_user: User = Depends(get_current_user),
):
    balances = service.list_for_user(current_user, user_id=current_user.id, year=year)
    return ApiResponse.ok("User leave balances fetched", [_out(b) for b in balances])


@router.get("/user/{user_id}", response_model=ApiResponse[List[LeaveBalanceResponse]])
def list_user_leave_balances(
    user_id: int,
    year: Optional[int] = Query(None, description="Defaults to the current year"),
    service: LeaveBalanceService = Depends(get_leave_balance_service),
    current_user: User = Depends(get_current_user),
):
    balances = service.list_for_user(current_user, user_id=user_id, year=year)
    return ApiResponse.ok("User leave balances fetched", [_out(b) for b in balances])


@router.get("/show/{balance_id}", response_model=ApiResponse[LeaveBalanceResponse])
def get_leave_balance(
    balance_id: int,
    service: LeaveBalanceService = Depends(get_leave_balance_service),
    current_user: User = Depends(get_current_user),
):
    return ApiResponse.ok("Leave balance found", _out(service.get_for(current_user, balance_id)))


@router.delete("/delete/{balance_id}", response_model=ApiResponse[None])
def delete_leave_balance(
    balance_id: int,
    service: LeaveBalanceService = Depends(get_leave_balance_service),
    current_user: User = Depends(require_permission("leave_balance.manage")),
):
    service.delete(balance_id)
    return ApiResponse.ok("Leave balance deleted")
