import pytest
from fastapi import status
from app.core.exceptions import AccessDeniedError
from app.core.permissions import POLICIES, ensure_owner_or_permitted, is_allowed
from app.models.user import User, UserRole

@pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.MANAGER, UserRole.CHEF_SERVICE])
def test_supervisors_review_leave(role):
    assert is_allowed(role, "leave_request.review")

def test_employee_has_no_policy_rights():
    assert not any(is_allowed(UserRole.EMPLOYEE, action) for action in POLICIES)

def test_admin_only_actions():
    for action in ("leave_type.manage", "leave_balance.manage", "user.change_role", "audit.read"):
        assert is_allowed(UserRole.ADMIN, action)
        assert not is_allowed(UserRole.MANAGER, action)
        assert not is_allowed(UserRole.CHEF_SERVICE, action)

def test_unknown_action_is_denied():
    assert not is_allowed(UserRole.ADMIN, "payroll.run")

def test_owner_passes_without_policy():
    user = User(id=3, role=UserRole.EMPLOYEE)
    ensure_owner_or_permitted(user, 3, "task.manage_any")
    with pytest.raises(AccessDeniedError):
        ensure_owner_or_permitted(user, 4, "task.manage_any")

def test_audit_logs_endpoint(client, admin_user, manager_user, employee_user, auth_headers):
    client.put(f"/api/v1/user/{employee_user.id}/role", headers=auth_headers(admin_user), json={"role": "CHEF_SERVICE"})

    denied = client.get("/api/v1/admin/audit-logs", headers=auth_headers(manager_user))
    assert denied.status_code == status.HTTP_403_FORBIDDEN

    response = client.get("/api/v1/admin/audit-logs?entity_type=user", headers=auth_headers(admin_user))
    assert response.status_code == status.HTTP_200_OK
    logs = response.json()["data"]
    assert len(logs) == 1
    assert logs[0]["action"] == "change_role"
    assert logs[0]["user_id"] == admin_user.id
