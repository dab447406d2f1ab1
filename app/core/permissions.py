"""
Declarative role policy.

Every role-gated action is named here once and mapped to the roles allowed to
perform it. Routers depend on ``require_permission(<action>)`` and services
call ``ensure_owner_or_permitted`` for ownership checks, so no handler compares
role values inline.
"""
from typing import Dict, FrozenSet

from app.core.exceptions import AccessDeniedError
from app.models.user import User, UserRole

ADMIN_ONLY: FrozenSet[UserRole] = frozenset({UserRole.ADMIN})

# Roles exempt from ownership restrictions on read/list/mutate operations
PRIVILEGED: FrozenSet[UserRole] = frozenset({
    UserRole.ADMIN,
    UserRole.MANAGER,
    UserRole.CHEF_SERVICE,
})

POLICIES: Dict[str, FrozenSet[UserRole]] = {
    # Identity
    "user.list": ADMIN_ONLY,
    "user.change_role": ADMIN_ONLY,
    "audit.read": ADMIN_ONLY,
    "child.list_all": ADMIN_ONLY,
    # Reference data
    "leave_type.manage": ADMIN_ONLY,
    # Ledger
    "leave_balance.manage": ADMIN_ONLY,
    "leave_balance.list_all": ADMIN_ONLY,
    "leave_balance.view_any": PRIVILEGED,
    # Workflow
    "leave_request.review": PRIVILEGED,
    "leave_request.view_any": PRIVILEGED,
    "leave_request.manage_any": PRIVILEGED,
    # Schedules
    "schedule.manage_any": PRIVILEGED,
    "schedule.view_any": PRIVILEGED,
    # Tasks
    "task.assign": PRIVILEGED,
    "task.view_any": PRIVILEGED,
    "task.manage_any": PRIVILEGED,
}


def is_allowed(role: UserRole, action: str) -> bool:
    """True when ``role`` may perform ``action``. Unknown actions are denied."""
    return role in POLICIES.get(action, frozenset())


def ensure_allowed(user: User, action: str) -> None:
    if not is_allowed(user.role, action):
        allowed = sorted(r.value for r in POLICIES.get(action, frozenset()))
        raise AccessDeniedError(f"Access denied. Required roles: {allowed}")


def ensure_owner_or_permitted(user: User, owner_id: int, action: str, message: str = None) -> None:
    """Owners pass; everyone else needs ``action`` in the policy table."""
    if owner_id == user.id or is_allowed(user.role, action):
        return
    raise AccessDeniedError(message or "You are not authorized to access this resource.")
