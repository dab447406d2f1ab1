from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from app.core.schemas import ApiResponse
from app.database import get_db
from app.models.audit_log import AuditLog
from app.routers.auth_deps import require_permission

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_permission("audit.read"))]
)


class AuditLogResponse(BaseModel):
    id: int
    action: str
    entity_type: str
    entity_id: Optional[int] = None
    user_id: Optional[int] = None
    user_role: Optional[str] = None
    details: Optional[Any] = None
    before_state: Optional[Any] = None
    after_state: Optional[Any] = None
    timestamp: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


@router.get("/audit-logs", response_model=ApiResponse[List[AuditLogResponse]])
def get_audit_logs(
    entity_type: Optional[str] = None,
    action: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """Audit entries, newest first."""
    query = db.query(AuditLog)
    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)
    if action:
        query = query.filter(AuditLog.action == action)
    logs = query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).offset(skip).limit(limit).all()
    return ApiResponse.ok("Audit logs fetched", [AuditLogResponse.model_validate(log) for log in logs])
