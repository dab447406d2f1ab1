"""
Leave Request Service

Business logic for the leave workflow:

    PENDING --approve--> APPROVED   (terminal, debits the ledger)
    PENDING --reject---> REJECTED   (terminal)

Architecture:
- Router -> LeaveRequestService -> Models
- Approval debits the matching LeaveBalance through LeaveBalanceService.debit
  and flips the status in the same transaction: both writes commit together
  or neither does.
- Terminal requests reject every further update or delete.
"""
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import (
    AccessDeniedError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)
from app.core.permissions import ensure_owner_or_permitted, is_allowed
from app.models.leave_request import LeaveRequest, LeaveStatus
from app.models.leave_type import LeaveType
from app.models.user import User
from app.schemas.leave import LeaveRequestCreate, LeaveRequestUpdate
from app.services.audit import AuditService
from app.services.base import BaseService
from app.services.leave_balance_service import LeaveBalanceService

NULLABLE_FIELDS = frozenset({"reason", "comment", "attachment_url"})


class LeaveRequestService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.balances = LeaveBalanceService(db)
        self.audit = AuditService(db)

    def _query(self):
        return self.db.query(LeaveRequest).options(
            joinedload(LeaveRequest.user),
            joinedload(LeaveRequest.leave_type),
        )

    def _get(self, request_id: int) -> LeaveRequest:
        leave = self._query().filter(LeaveRequest.id == request_id).first()
        if not leave:
            raise NotFoundError("Leave request not found")
        return leave

    def _ensure_leave_type(self, leave_type_id: int) -> None:
        if not self.db.get(LeaveType, leave_type_id):
            raise NotFoundError("Leave type not found")

    @staticmethod
    def _ensure_dates(start_date, end_date) -> None:
        if end_date < start_date:
            raise ValidationError(
                "End date must be on or after start date",
                details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
            )

    @staticmethod
    def _ensure_pending(leave: LeaveRequest, verb: str) -> None:
        if leave.is_terminal:
            raise InvalidStateTransitionError(
                f"Cannot {verb} a leave request that is already {leave.status}"
            )

    # --- Create / read ---

    def create(self, actor: User, data: LeaveRequestCreate) -> LeaveRequest:
        self._ensure_dates(data.start_date, data.end_date)
        self._ensure_leave_type(data.leave_type_id)

        leave = LeaveRequest(
            user_id=actor.id,
            status=LeaveStatus.PENDING.value,
            **data.model_dump(),
        )
        self.db.add(leave)
        self.commit()
        self._logger.info(f"Leave request {leave.id} created by user {actor.id} ({leave.days} days)")
        return self._get(leave.id)

    def get_for(self, actor: User, request_id: int) -> LeaveRequest:
        leave = self._get(request_id)
        ensure_owner_or_permitted(
            actor, leave.user_id, "leave_request.view_any",
            "Unauthorized to view this leave request",
        )
        return leave

    def list_mine(self, actor: User, status: Optional[LeaveStatus] = None) -> List[LeaveRequest]:
        query = self._query().filter(LeaveRequest.user_id == actor.id)
        if status:
            query = query.filter(LeaveRequest.status == status.value)
        return query.order_by(LeaveRequest.start_date.desc()).all()

    def list_all(self, status: Optional[LeaveStatus] = None, user_id: Optional[int] = None) -> List[LeaveRequest]:
        query = self._query()
        if status:
            query = query.filter(LeaveRequest.status == status.value)
        if user_id:
            query = query.filter(LeaveRequest.user_id == user_id)
        return query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc()).all()

    # --- Mutations ---

    def update(self, actor: User, request_id: int, data: LeaveRequestUpdate) -> LeaveRequest:
        """
        Edit a pending request. A ``status`` in the payload is a review and
        requires the review permission; it is applied after the field edits so
        the debit uses the final dates and leave type.
        """
        leave = self._get(request_id)
        ensure_owner_or_permitted(
            actor, leave.user_id, "leave_request.manage_any",
            "Unauthorized to update this leave request",
        )
        self._ensure_pending(leave, "update")

        # Optional text fields may be cleared with null; required columns ignore it
        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }
        new_status = changes.pop("status", None)
        if new_status is not None and not is_allowed(actor.role, "leave_request.review"):
            raise AccessDeniedError("Only a supervisor can change the status of a leave request")

        start_date = changes.get("start_date", leave.start_date)
        end_date = changes.get("end_date", leave.end_date)
        self._ensure_dates(start_date, end_date)
        if "leave_type_id" in changes:
            self._ensure_leave_type(changes["leave_type_id"])

        try:
            for field, value in changes.items():
                setattr(leave, field, value)
            if new_status is not None and new_status != LeaveStatus.PENDING:
                self._transition(leave, new_status, actor)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self._get(leave.id)

    def review(self, actor: User, request_id: int, decision: LeaveStatus, comment: Optional[str] = None) -> LeaveRequest:
        """Approve or reject a pending request."""
        leave = self._get(request_id)
        self._ensure_pending(leave, "approve" if decision == LeaveStatus.APPROVED else "reject")
        try:
            if comment is not None:
                leave.comment = comment
            self._transition(leave, decision, actor)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self._get(leave.id)

    def delete(self, actor: User, request_id: int) -> None:
        leave = self._get(request_id)
        ensure_owner_or_permitted(
            actor, leave.user_id, "leave_request.manage_any",
            "Unauthorized to delete this leave request",
        )
        self._ensure_pending(leave, "delete")
        self.db.delete(leave)
        self.commit()

    def _transition(self, leave: LeaveRequest, new_status: LeaveStatus, actor: User) -> None:
        """
        Apply PENDING -> APPROVED/REJECTED inside the open transaction.
        Raises before any write when the ledger cannot cover an approval.
        """
        if new_status not in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
            raise InvalidStateTransitionError(f"Cannot transition leave request to {new_status.value}")

        before_state = {"status": leave.status}
        days = leave.days
        details = {"owner_id": leave.user_id, "leave_type_id": leave.leave_type_id, "days": days}

        if new_status == LeaveStatus.APPROVED:
            balance = self.balances.debit(
                user_id=leave.user_id,
                year=leave.start_date.year,
                leave_type_id=leave.leave_type_id,
                days=days,
            )
            details["remaining_balance"] = balance.remaining_balance

        leave.status = new_status.value
        leave.reviewed_by_id = actor.id
        leave.reviewed_at = datetime.now(timezone.utc)

        self.audit.log_action(
            action="approve_leave" if new_status == LeaveStatus.APPROVED else "reject_leave",
            entity_type="leave_request",
            entity_id=leave.id,
            user_id=actor.id,
            user_role=actor.role,
            details=details,
            before_state=before_state,
            after_state={"status": leave.status},
        )
        self._logger.info(f"Leave request {leave.id} {leave.status} by user {actor.id}")
