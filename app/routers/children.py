from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.core.schemas import ApiResponse
from app.database import commit_session, get_db
from app.models.child import Child
from app.models.user import User
from app.routers.auth_deps import get_current_user, require_permission
from app.schemas.child import ChildCreate, ChildResponse, ChildUpdate

router = APIRouter(prefix="/child", tags=["children"])


def _get_own_child(db: Session, child_id: int, user: User) -> Child:
    child = db.query(Child).filter(Child.id == child_id, Child.user_id == user.id).first()
    if not child:
        raise NotFoundError("Child not found or unauthorized.")
    return child


@router.post("/create", response_model=ApiResponse[ChildResponse], status_code=status.HTTP_201_CREATED)
def create_child(
    data: ChildCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    child = Child(**data.model_dump(), user_id=current_user.id)
    db.add(child)
    commit_session(db)
    db.refresh(child)
    return ApiResponse.ok("Child created successfully.", ChildResponse.model_validate(child))


@router.put("/update/{child_id}", response_model=ApiResponse[ChildResponse])
def update_child(
    child_id: int,
    data: ChildUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    child = _get_own_child(db, child_id, current_user)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(child, field, value)
    commit_session(db)
    db.refresh(child)
    return ApiResponse.ok("Child updated successfully.", ChildResponse.model_validate(child))


@router.get("/my", response_model=ApiResponse[List[ChildResponse]])
def get_my_children(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    children = db.query(Child).filter(Child.user_id == current_user.id).order_by(
        Child.created_at.desc(), Child.id.desc()
    ).all()
    return ApiResponse.ok("Children fetched successfully.", [ChildResponse.model_validate(c) for c in children])


@router.get("/all", response_model=ApiResponse[List[ChildResponse]])
def get_all_children(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("child.list_all")),
):
    children = db.query(Child).order_by(Child.user_id.asc(), Child.id.asc()).all()
    return ApiResponse.ok("Children fetched successfully.", [ChildResponse.model_validate(c) for c in children])


@router.get("/detail/{child_id}", response_model=ApiResponse[ChildResponse])
def get_child(child_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    child = _get_own_child(db, child_id, current_user)
    return ApiResponse.ok("Child fetched successfully.", ChildResponse.model_validate(child))


@router.delete("/delete/{child_id}", response_model=ApiResponse[None])
def delete_child(child_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    child = _get_own_child(db, child_id, current_user)
    db.delete(child)
    commit_session(db)
    return ApiResponse.ok("Child deleted successfully.")
