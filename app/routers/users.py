from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.exceptions import DuplicateKeyError, NotFoundError, ValidationError
from app.core.schemas import ApiResponse
from app.database import commit_session, get_db
from app.models.user import User
from app.routers.auth_deps import get_current_user, require_permission
from app.schemas.auth import PasswordChange
from app.schemas.user import RoleUpdate, UserPage, UserResponse, UserUpdate
from app.services import auth as auth_service
from app.services.audit import AuditService
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["users"])


@router.get("/all", response_model=ApiResponse[UserPage])
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, description="Matches name or email"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("user.list")),
):
    query = db.query(User)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

    total = query.count()
    users = query.order_by(User.name.asc(), User.id.asc()).offset((page - 1) * limit).limit(limit).all()
    return ApiResponse.ok(
        "Users fetched successfully.",
        UserPage(items=[UserResponse.model_validate(u) for u in users], total=total, page=page, limit=limit),
    )


@router.get("/my", response_model=ApiResponse[UserResponse])
def get_me(current_user: User = Depends(get_current_user)):
    return ApiResponse.ok("User fetched successfully.", UserResponse.model_validate(current_user))


@router.put("/update", response_model=ApiResponse[UserResponse])
def update_profile(
    update_data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update current user's profile information."""
    changes = update_data.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in changes:
        existing_user = db.query(User).filter(User.email == changes["email"]).first()
        if existing_user and existing_user.id != current_user.id:
            raise DuplicateKeyError("Email already in use")

    for field, value in changes.items():
        setattr(current_user, field, value)
    commit_session(db)
    db.refresh(current_user)
    return ApiResponse.ok("User updated successfully.", UserResponse.model_validate(current_user))


@router.put("/change-password", response_model=ApiResponse[None])
def change_password(
    data: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Securely update current user's password."""
    if not auth_service.verify_password(data.current_password, current_user.hashed_password):
        raise ValidationError("Incorrect current password")

    current_user.hashed_password = auth_service.get_password_hash(data.new_password)
    current_user.reset_token_jti = None
    commit_session(db)
    return ApiResponse.ok("Password updated successfully.")


@router.delete("/delete", response_model=ApiResponse[None])
def delete_me(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Delete the caller's account and everything it owns."""
    user_id = current_user.id
    db.delete(current_user)
    commit_session(db)
    logger.info(f"User {user_id} deleted their account")
    return ApiResponse.ok("User deleted successfully.")


@router.put("/{user_id}/role", response_model=ApiResponse[UserResponse])
def change_role(
    user_id: int,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("user.change_role")),
):
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    before_role = user.role
    user.role = data.role
    AuditService.log(
        db,
        action="change_role",
        entity_type="user",
        entity_id=user.id,
        user_id=current_user.id,
        user_role=current_user.role,
        details={"target_user_id": user.id},
        before_state={"role": before_role},
        after_state={"role": data.role},
    )
    commit_session(db)
    db.refresh(user)
    return ApiResponse.ok("User role updated successfully.", UserResponse.model_validate(user))
