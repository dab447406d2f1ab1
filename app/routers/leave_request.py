from typing import List, Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from app.core.schemas import ApiResponse
from app.database import get_db
from app.models.leave_request import LeaveStatus
from app.models.user import User
from app.routers.auth_deps import get_current_user, require_permission
from app.schemas.leave import LeaveRequestCreate, LeaveRequestResponse, LeaveRequestUpdate, LeaveReview
from app.services.leave_request_service import LeaveRequestService

router = APIRouter(prefix="/leave-request", tags=["leave-requests"])


def get_leave_request_service(db: Session = Depends(get_db)) -> LeaveRequestService:
    return LeaveRequestService(db)


def _out(leave) -> LeaveRequestResponse:
    return LeaveRequestResponse.model_validate(leave)


@router.post("/create", response_model=ApiResponse[LeaveRequestResponse], status_code=status.HTTP_201_CREATED)
def create_leave_request(
    data: LeaveRequestCreate,
    service: LeaveRequestService = Depends(get_leave_request_service),
    current_user: User = Depends(get_current_user),
):
    return ApiResponse.ok("Leave request created", _out(service.create(current_user, data)))


@router.put("/update/{request_id}", response_model=ApiResponse[LeaveRequestResponse])
def update_leave_request(
    request_id: int,
    data: LeaveRequestUpdate,
    service: LeaveRequestService = Depends(get_leave_request_service),
    current_user: User = Depends(get_current_user),
):
    return ApiResponse.ok("Leave request updated", _out(service.update(current_user, request_id, data)))


@router.put("/approve/{request_id}", response_model=ApiResponse[LeaveRequestResponse])
def approve_leave_request(
    request_id: int,
    review: Optional[LeaveReview] = Body(None),
    service: LeaveRequestService = Depends(get_leave_request_service),
    current_user: User = Depends(require_permission("leave_request.review")),
):
    comment = review.comment if review else None
    leave = service.review(current_user, request_id, LeaveStatus.APPROVED, comment)
    return ApiResponse.ok("Leave request approved", _out(leave))


@router.put("/reject/{request_id}", response_model=ApiResponse[LeaveRequestResponse])
def reject_leave_request(
    request_id: int,
    review: Optional[LeaveReview] = Body(None),
    service: LeaveRequestService = Depends(get_leave_request_service),
    current_user: User = Depends(require_permission("leave_request.review")),
):
    comment = review.comment if review else None
    leave = service.review(current_user, request_id, LeaveStatus.REJECTED, comment)
    return ApiResponse.ok("Leave request rejected", _out(leave))


@router.get("/all", response_model=ApiResponse[List[LeaveRequestResponse]])
def list_leave_requests(
    status: Optional[LeaveStatus] = None,
    user_id: Optional[int] = None,
    service: LeaveRequestService = Depends(get_leave_request_service),
    current_user: User = Depends(require_permission("leave_request.view_any")),
):
    leaves = service.list_all(status=status, user_id=user_id)
    return ApiResponse.ok("Leave requests fetched", [_out(l) for l in leaves])


@router.get("/my", response_model=ApiResponse[List[LeaveRequestResponse]])
def list_my_leave_requests(
    status: Optional[LeaveStatus] = None,
    service: LeaveRequestService = Depends(get_leave_request_service),
    current_user: User = Depends(get_current_user),
):
    leaves = service.list_mine(current_user, status=status)
    return ApiResponse.ok("Leave requests fetched", [_out(l) for l in leaves])


@router.get("/show/{request_id}", response_model=ApiResponse[LeaveRequestResponse])
def get_leave_request(
    request_id: int,
    service: LeaveRequestService = Depends(get_leave_request_service),
    current_user: User = Depends(get_current_user),
):
    return ApiResponse.ok("Leave request fetched", _out(service.get_for(current_user, request_id)))


@router.delete("/delete/{request_id}", response_model=ApiResponse[None])
def delete_leave_request(
    request_id: int,
    service: LeaveRequestService = Depends(get_leave_request_service),
    current_user: User = Depends(get_current_user),
):
    service.delete(current_user, request_id)
    return ApiResponse.ok("Leave request deleted")
