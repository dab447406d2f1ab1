from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.schemas import ApiResponse
from app.database import get_db
from app.models.user import User
from app.routers.auth_deps import get_current_user, require_permission
from app.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from app.services.task_service import TaskService

router = APIRouter(prefix="/task", tags=["tasks"])


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.post("/create", response_model=ApiResponse[TaskResponse], status_code=status.HTTP_201_CREATED)
def create_task(
    data: TaskCreate,
    service: TaskService = Depends(get_task_service),
    current_user: User = Depends(require_permission("task.assign")),
):
    return ApiResponse.ok("Task created", TaskResponse.model_validate(service.create(data)))


@router.put("/update/{task_id}", response_model=ApiResponse[TaskResponse])
def update_task(
    task_id: int,
    data: TaskUpdate,
    service: TaskService = Depends(get_task_service),
    current_user: User = Depends(get_current_user),
):
    task = service.update(current_user, task_id, data)
    return ApiResponse.ok("Task updated", TaskResponse.model_validate(task))


@router.patch("/toggle/{task_id}", response_model=ApiResponse[TaskResponse])
def toggle_task(
    task_id: int,
    service: TaskService = Depends(get_task_service),
    current_user: User = Depends(get_current_user),
):
    task = service.toggle(current_user, task_id)
    return ApiResponse.ok("Task status toggled", TaskResponse.model_validate(task))


@router.get("/my", response_model=ApiResponse[List[TaskResponse]])
def list_my_tasks(
    overdue: bool = False,
    service: TaskService = Depends(get_task_service),
    current_user: User = Depends(get_current_user),
):
    tasks = service.list_mine(current_user, overdue=overdue)
    return ApiResponse.ok("Tasks fetched", [TaskResponse.model_validate(t) for t in tasks])


@router.get("/all", response_model=ApiResponse[List[TaskResponse]])
def list_tasks(
    user_id: Optional[int] = None,
    overdue: bool = False,
    service: TaskService = Depends(get_task_service),
    current_user: User = Depends(require_permission("task.view_any")),
):
    tasks = service.list_all(user_id=user_id, overdue=overdue)
    return ApiResponse.ok("Tasks fetched", [TaskResponse.model_validate(t) for t in tasks])


@router.get("/show/{task_id}", response_model=ApiResponse[TaskResponse])
def get_task(
    task_id: int,
    service: TaskService = Depends(get_task_service),
    current_user: User = Depends(get_current_user),
):
    return ApiResponse.ok("Task fetched", TaskResponse.model_validate(service.get_for(current_user, task_id)))


@router.delete("/delete/{task_id}", response_model=ApiResponse[None])
def delete_task(
    task_id: int,
    service: TaskService = Depends(get_task_service),
    current_user: User = Depends(get_current_user),
):
    service.delete(current_user, task_id)
    return ApiResponse.ok("Task deleted")
