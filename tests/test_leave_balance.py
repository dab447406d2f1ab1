import pytest
from datetime import date
from fastapi import status
from app.models.audit_log import AuditLog
from app.models.leave_balance import LeaveBalance

def _balance_payload(user, leave_type, **overrides):
    payload = {
        "user_id": user.id,
        "leave_type_id": leave_type.id,
        "year": 2025,
        "initial_balance": 20,
    }
    payload.update(overrides)
    return payload

def test_create_balance_derives_remaining(client, admin_user, employee_user, annual_leave, auth_headers):
    response = client.post(
        "/api/v1/leave-balance/create",
        headers=auth_headers(admin_user),
        json=_balance_payload(employee_user, annual_leave, used_balance=5),
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()["data"]
    assert data["initial_balance"] == 20
    assert data["used_balance"] == 5
    assert data["remaining_balance"] == 15
    assert data["leave_type"]["name"] == "Annual Leave"

def test_create_balance_used_exceeds_initial(client, admin_user, employee_user, annual_leave, auth_headers):
    response = client.post(
        "/api/v1/leave-balance/create",
        headers=auth_headers(admin_user),
        json=_balance_payload(employee_user, annual_leave, initial_balance=2, used_balance=5),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

def test_duplicate_balance_is_rejected(client, admin_user, employee_user, annual_leave, auth_headers, db_session):
    headers = auth_headers(admin_user)
    first = client.post("/api/v1/leave-balance/create", headers=headers, json=_balance_payload(employee_user, annual_leave))
    assert first.status_code == status.HTTP_201_CREATED

    second = client.post("/api/v1/leave-balance/create", headers=headers, json=_balance_payload(employee_user, annual_leave))
    assert second.status_code == status.HTTP_400_BAD_REQUEST
    assert second.json()["error"] == "DUPLICATE_KEY"
    assert db_session.query(LeaveBalance).count() == 1

    # Another year is a different ledger row
    other_year = client.post("/api/v1/leave-balance/create", headers=headers, json=_balance_payload(employee_user, annual_leave, year=2026))
    assert other_year.status_code == status.HTTP_201_CREATED

def test_create_balance_unknown_user(client, admin_user, annual_leave, auth_headers):
    response = client.post(
        "/api/v1/leave-balance/create",
        headers=auth_headers(admin_user),
        json={"user_id": 999, "leave_type_id": annual_leave.id, "year": 2025, "initial_balance": 5},
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND

def test_create_balance_forbidden_for_manager(client, manager_user, employee_user, annual_leave, auth_headers):
    response = client.post(
        "/api/v1/leave-balance/create",
        headers=auth_headers(manager_user),
        json=_balance_payload(employee_user, annual_leave),
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN

def test_update_balance_is_audited(client, admin_user, employee_user, annual_leave, auth_headers, db_session):
    headers = auth_headers(admin_user)
    balance_id = client.post(
        "/api/v1/leave-balance/create", headers=headers, json=_balance_payload(employee_user, annual_leave)
    ).json()["data"]["id"]

    response = client.put(
        f"/api/v1/leave-balance/update/{balance_id}",
        headers=headers,
        json={"initial_balance": 25},
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    # Manual edits are stored as given
    assert data["initial_balance"] == 25
    assert data["remaining_balance"] == 20

    entry = db_session.query(AuditLog).filter(AuditLog.action == "update_leave_balance").one()
    assert entry.before_state["initial_balance"] == 20
    assert entry.after_state["initial_balance"] == 25

def test_update_balance_year_collision(client, admin_user, employee_user, annual_leave, auth_headers):
    headers = auth_headers(admin_user)
    client.post("/api/v1/leave-balance/create", headers=headers, json=_balance_payload(employee_user, annual_leave))
    second = client.post(
        "/api/v1/leave-balance/create", headers=headers, json=_balance_payload(employee_user, annual_leave, year=2026)
    ).json()["data"]

    response = client.put(f"/api/v1/leave-balance/update/{second['id']}", headers=headers, json={"year": 2025})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "DUPLICATE_KEY"

def test_user_balances_default_to_current_year(client, admin_user, employee_user, annual_leave, auth_headers):
    headers = auth_headers(admin_user)
    this_year = date.today().year
    client.post("/api/v1/leave-balance/create", headers=headers, json=_balance_payload(employee_user, annual_leave, year=this_year))
    client.post("/api/v1/leave-balance/create", headers=headers, json=_balance_payload(employee_user, annual_leave, year=this_year - 1))

    mine = client.get("/api/v1/leave-balance/user", headers=auth_headers(employee_user))
    assert mine.status_code == status.HTTP_200_OK
    assert [b["year"] for b in mine.json()["data"]] == [this_year]

    last_year = client.get(f"/api/v1/leave-balance/user?year={this_year - 1}", headers=auth_headers(employee_user))
    assert [b["year"] for b in last_year.json()["data"]] == [this_year - 1]

def test_employee_cannot_read_other_balances(client, admin_user, employee_user, other_employee, manager_user, annual_leave, auth_headers):
    balance = client.post(
        "/api/v1/leave-balance/create", headers=auth_headers(admin_user), json=_balance_payload(employee_user, annual_leave)
    ).json()["data"]

    stranger = auth_headers(other_employee)
    assert client.get(f"/api/v1/leave-balance/user/{employee_user.id}", headers=stranger).status_code == status.HTTP_403_FORBIDDEN
    assert client.get(f"/api/v1/leave-balance/show/{balance['id']}", headers=stranger).status_code == status.HTTP_403_FORBIDDEN

    supervisor = auth_headers(manager_user)
    response = client.get(f"/api/v1/leave-balance/show/{balance['id']}", headers=supervisor)
    assert response.status_code == status.HTTP_200_OK

def test_list_all_and_delete(client, admin_user, employee_user, annual_leave, auth_headers):
    headers = auth_headers(admin_user)
    balance = client.post(
        "/api/v1/leave-balance/create", headers=headers, json=_balance_payload(employee_user, annual_leave)
    ).json()["data"]

    assert len(client.get("/api/v1/leave-balance/all", headers=headers).json()["data"]) == 1
    assert client.get("/api/v1/leave-balance/all", headers=auth_headers(employee_user)).status_code == status.HTTP_403_FORBIDDEN

    response = client.delete(f"/api/v1/leave-balance/delete/{balance['id']}", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert client.get("/api/v1/leave-balance/all", headers=headers).json()["data"] == []

def test_lost_create_race_maps_to_duplicate(db_session, employee_user, annual_leave, monkeypatch):
    """A row committed between the pre-check and our commit still answers DUPLICATE_KEY."""
    from app.core.exceptions import DuplicateKeyError
    from app.schemas.leave import LeaveBalanceCreate
    from app.services.leave_balance_service import LeaveBalanceService

    db_session.add(LeaveBalance(
        user_id=employee_user.id, year=2025, leave_type_id=annual_leave.id,
        initial_balance=10, used_balance=0, remaining_balance=10,
    ))
    db_session.commit()

    service = LeaveBalanceService(db_session)
    monkeypatch.setattr(service, "_exists", lambda *args, **kwargs: False)

    with pytest.raises(DuplicateKeyError) as exc_info:
        service.create(LeaveBalanceCreate(
            user_id=employee_user.id, leave_type_id=annual_leave.id, year=2025, initial_balance=20,
        ))
    assert exc_info.value.error_code == "DUPLICATE_KEY"

    rows = db_session.query(LeaveBalance).all()
    assert len(rows) == 1
    assert rows[0].initial_balance == 10
