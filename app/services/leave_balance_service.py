"""
Leave Balance Service

Owns the per user/year/type ledger rows.

- Admin create/update/delete with uniqueness on (user, year, leave type)
- Reads scoped to the caller unless the policy table grants wider access
- ``debit``: the guarded decrement used by leave approval. It does NOT commit;
  the workflow commits the debit together with the status change.
"""
from datetime import date
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import DuplicateKeyError, InsufficientBalanceError, NotFoundError
from app.core.permissions import ensure_owner_or_permitted
from app.models.leave_balance import LeaveBalance
from app.models.leave_type import LeaveType
from app.models.user import User
from app.schemas.leave import LeaveBalanceCreate, LeaveBalanceUpdate
from app.services.audit import AuditService
from app.services.base import BaseService

DUPLICATE_MESSAGE = "Leave balance already exists for this user, year, and leave type"


def _snapshot(balance: LeaveBalance) -> dict:
    return {
        "year": balance.year,
        "initial_balance": balance.initial_balance,
        "used_balance": balance.used_balance,
        "remaining_balance": balance.remaining_balance,
    }


class LeaveBalanceService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.audit = AuditService(db)

    def _query(self):
        return self.db.query(LeaveBalance).options(
            joinedload(LeaveBalance.user),
            joinedload(LeaveBalance.leave_type),
        )

    def _exists(self, user_id: int, year: int, leave_type_id: int, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(LeaveBalance.id).filter(
            LeaveBalance.user_id == user_id,
            LeaveBalance.year == year,
            LeaveBalance.leave_type_id == leave_type_id,
        )
        if exclude_id is not None:
            query = query.filter(LeaveBalance.id != exclude_id)
        return query.first() is not None

    def find_for(self, user_id: int, year: int, leave_type_id: int) -> Optional[LeaveBalance]:
        return self.db.query(LeaveBalance).filter(
            LeaveBalance.user_id == user_id,
            LeaveBalance.year == year,
            LeaveBalance.leave_type_id == leave_type_id,
        ).first()

    def get(self, balance_id: int) -> LeaveBalance:
        balance = self._query().filter(LeaveBalance.id == balance_id).first()
        if not balance:
            raise NotFoundError("Leave balance not found")
        return balance

    # --- Admin mutations ---

    def create(self, data: LeaveBalanceCreate) -> LeaveBalance:
        if not self.db.get(User, data.user_id):
            raise NotFoundError("User not found")
        if not self.db.get(LeaveType, data.leave_type_id):
            raise NotFoundError("Leave type not found")
        if self._exists(data.user_id, data.year, data.leave_type_id):
            self.log_warning("Duplicate leave balance rejected", user_id=data.user_id, year=data.year)
            raise DuplicateKeyError(DUPLICATE_MESSAGE)

        balance = LeaveBalance(**data.model_dump())
        self.db.add(balance)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent create on the unique key
            self.db.rollback()
            raise DuplicateKeyError(DUPLICATE_MESSAGE)
        self._logger.info(f"Created leave balance {balance.id} for user {balance.user_id} ({balance.year})")
        return self.get(balance.id)

    def update(self, balance_id: int, data: LeaveBalanceUpdate, actor: User) -> LeaveBalance:
        """
        Set any subset of the counters. No re-derivation of remaining_balance:
        the admin is responsible for consistency, the audit log keeps the trail.
        """
        balance = self.get(balance_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return balance

        new_year = changes.get("year", balance.year)
        if new_year != balance.year and self._exists(balance.user_id, new_year, balance.leave_type_id, exclude_id=balance.id):
            raise DuplicateKeyError(DUPLICATE_MESSAGE)

        before = _snapshot(balance)
        for field, value in changes.items():
            setattr(balance, field, value)

        self.audit.log_action(
            action="update_leave_balance",
            entity_type="leave_balance",
            entity_id=balance.id,
            user_id=actor.id,
            user_role=actor.role,
            details={"owner_id": balance.user_id, "fields": sorted(changes)},
            before_state=before,
            after_state=_snapshot(balance),
        )
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateKeyError(DUPLICATE_MESSAGE)
        return self.get(balance.id)

    def delete(self, balance_id: int) -> None:
        balance = self.get(balance_id)
        self.db.delete(balance)
        self.commit()

    # --- Reads ---

    def list_all(self) -> List[LeaveBalance]:
        return self._query().join(LeaveBalance.user).order_by(
            LeaveBalance.year.desc(), User.name.asc()
        ).all()

    def list_for_user(self, actor: User, user_id: Optional[int] = None, year: Optional[int] = None) -> List[LeaveBalance]:
        target_id = user_id or actor.id
        ensure_owner_or_permitted(
            actor, target_id, "leave_balance.view_any",
            "Unauthorized to view other user's leave balance",
        )
        return self._query().join(LeaveBalance.leave_type).filter(
            LeaveBalance.user_id == target_id,
            LeaveBalance.year == (year or date.today().year),
        ).order_by(LeaveType.name.asc()).all()

    def get_for(self, actor: User, balance_id: int) -> LeaveBalance:
        balance = self.get(balance_id)
        ensure_owner_or_permitted(
            actor, balance.user_id, "leave_balance.view_any",
            "Unauthorized to view this leave balance",
        )
        return balance

    # --- Ledger debit ---

    def debit(self, user_id: int, year: int, leave_type_id: int, days: int) -> LeaveBalance:
        """
        Consume ``days`` from the matching balance row inside the caller's transaction.

        The UPDATE is guarded by ``remaining_balance >= days`` so two concurrent
        approvals cannot drive the row negative: the loser matches zero rows.
        """
        balance = self.find_for(user_id, year, leave_type_id)
        if balance is None:
            raise NotFoundError(f"No leave balance configured for {year} and this leave type")
        if balance.remaining_balance < days:
            raise InsufficientBalanceError(
                "Insufficient leave balance",
                details={"requested_days": days, "remaining_balance": balance.remaining_balance},
            )

        result = self.db.execute(
            update(LeaveBalance)
            .where(
                LeaveBalance.id == balance.id,
                LeaveBalance.remaining_balance >= days,
            )
            .values(
                used_balance=LeaveBalance.used_balance + days,
                remaining_balance=LeaveBalance.remaining_balance - days,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InsufficientBalanceError(
                "Insufficient leave balance",
                details={"requested_days": days},
            )
        self.db.refresh(balance)
        return balance
