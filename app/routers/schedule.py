import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.schemas import ApiResponse
from app.database import get_db
from app.models.user import User
from app.routers.auth_deps import get_current_user, require_permission
from app.schemas.schedule import ScheduleCreate, ScheduleResponse, ScheduleUpdate
from app.services.schedule_service import ScheduleService

router = APIRouter(prefix="/schedule", tags=["schedules"])


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    return ScheduleService(db)


def _out(schedule) -> ScheduleResponse:
    return ScheduleResponse.model_validate(schedule)


@router.post("/create", response_model=ApiResponse[ScheduleResponse], status_code=status.HTTP_201_CREATED)
def create_schedule(
    data: ScheduleCreate,
    service: ScheduleService = Depends(get_schedule_service),
    current_user: User = Depends(get_current_user),
):
    return ApiResponse.ok("Schedule created", _out(service.create(current_user, data)))


@router.put("/update/{schedule_id}", response_model=ApiResponse[ScheduleResponse])
def update_schedule(
    schedule_id: int,
    data: ScheduleUpdate,
    service: ScheduleService = Depends(get_schedule_service),
    current_user: User = Depends(get_current_user),
):
    return ApiResponse.ok("Schedule updated", _out(service.update(current_user, schedule_id, data)))


@router.get("/all", response_model=ApiResponse[List[ScheduleResponse]])
def list_schedules(
    date: Optional[dt.date] = None,
    user_id: Optional[int] = None,
    service_name: Optional[str] = Query(None, alias="service"),
    service: ScheduleService = Depends(get_schedule_service),
    current_user: User = Depends(require_permission("schedule.view_any")),
):
    schedules = service.list_all(date=date, user_id=user_id, service=service_name)
    return ApiResponse.ok("Schedules fetched", [_out(s) for s in schedules])


@router.get("/user", response_model=ApiResponse[List[ScheduleResponse]])
def list_my_schedules(
    date: Optional[dt.date] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = None,
    service: ScheduleService = Depends(get_schedule_service),
    current_user: User = Depends(get_current_user),
):
    schedules = service.list_for_user(current_user, current_user.id, date=date, month=month, year=year)
    return ApiResponse.ok("User schedules fetched", [_out(s) for s in schedules])


@router.get("/user/{user_id}", response_model=ApiResponse[List[ScheduleResponse]])
def list_user_schedules(
    user_id: int,
    date: Optional[dt.date] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = None,
    service: ScheduleService = Depends(get_schedule_service),
    current_user: User = Depends(get_current_user),
):
    schedules = service.list_for_user(current_user, user_id, date=date, month=month, year=year)
    return ApiResponse.ok("User schedules fetched", [_out(s) for s in schedules])


@router.get("/show/{schedule_id}", response_model=ApiResponse[ScheduleResponse])
def get_schedule(
    schedule_id: int,
    service: ScheduleService = Depends(get_schedule_service),
    current_user: User = Depends(get_current_user),
):
    return ApiResponse.ok("Schedule fetched", _out(service.get_for(current_user, schedule_id)))


@router.delete("/delete/{schedule_id}", response_model=ApiResponse[None])
def delete_schedule(
    schedule_id: int,
    service: ScheduleService = Depends(get_schedule_service),
    current_user: User = Depends(get_current_user),
):
    service.delete(current_user, schedule_id)
    return ApiResponse.ok("Schedule deleted")
