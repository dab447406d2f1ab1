import pytest
from datetime import time
from fastapi import status
from app.models.schedule import Schedule
from app.services.schedule_service import intervals_overlap

def _schedule(client, headers, start, end, day="2025-05-01", **extra):
    return client.post(
        "/api/v1/schedule/create",
        headers=headers,
        json={"date": day, "start_time": start, "end_time": end, "service": "Emergency", **extra},
    )

@pytest.mark.parametrize("a, b, expected", [
    (("09:00", "12:00"), ("11:00", "13:00"), True),   # new start inside existing
    (("09:00", "12:00"), ("08:00", "10:00"), True),   # new end inside existing
    (("09:00", "12:00"), ("08:00", "13:00"), True),   # new contains existing
    (("09:00", "12:00"), ("10:00", "11:00"), True),   # existing contains new
    (("09:00", "12:00"), ("12:00", "14:00"), False),  # touching after
    (("09:00", "12:00"), ("07:00", "09:00"), False),  # touching before
    (("09:00", "12:00"), ("13:00", "14:00"), False),
])
def test_intervals_overlap(a, b, expected):
    existing = [time.fromisoformat(t) for t in a]
    new = [time.fromisoformat(t) for t in b]
    assert intervals_overlap(new[0], new[1], existing[0], existing[1]) is expected

def test_overlap_scenario(client, employee_user, auth_headers, db_session):
    """09:00-12:00 exists; 11:00-13:00 conflicts, 12:00-14:00 is accepted."""
    headers = auth_headers(employee_user)
    first = _schedule(client, headers, "09:00", "12:00")
    assert first.status_code == status.HTTP_201_CREATED

    conflict = _schedule(client, headers, "11:00", "13:00")
    assert conflict.status_code == status.HTTP_400_BAD_REQUEST
    body = conflict.json()
    assert body["error"] == "SCHEDULE_CONFLICT"
    assert body["details"]["conflicting_schedule_id"] == first.json()["data"]["id"]
    assert db_session.query(Schedule).count() == 1

    adjacent = _schedule(client, headers, "12:00", "14:00")
    assert adjacent.status_code == status.HTTP_201_CREATED
    assert db_session.query(Schedule).count() == 2

def test_other_user_or_date_does_not_conflict(client, employee_user, other_employee, auth_headers):
    assert _schedule(client, auth_headers(employee_user), "09:00", "12:00").status_code == status.HTTP_201_CREATED
    assert _schedule(client, auth_headers(other_employee), "09:00", "12:00").status_code == status.HTTP_201_CREATED
    assert _schedule(client, auth_headers(employee_user), "09:00", "12:00", day="2025-05-02").status_code == status.HTTP_201_CREATED

def test_end_must_follow_start(client, employee_user, auth_headers):
    response = _schedule(client, auth_headers(employee_user), "12:00", "12:00")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "VALIDATION_ERROR"

def test_update_excludes_itself(client, employee_user, auth_headers):
    headers = auth_headers(employee_user)
    morning = _schedule(client, headers, "09:00", "12:00").json()["data"]
    _schedule(client, headers, "14:00", "16:00")

    # Stretching within its own slot is not a conflict with itself
    grown = client.put(f"/api/v1/schedule/update/{morning['id']}", headers=headers, json={"end_time": "13:00"})
    assert grown.status_code == status.HTTP_200_OK
    assert grown.json()["data"]["end_time"] == "13:00:00"

    clash = client.put(f"/api/v1/schedule/update/{morning['id']}", headers=headers, json={"end_time": "15:00"})
    assert clash.status_code == status.HTTP_400_BAD_REQUEST
    assert clash.json()["error"] == "SCHEDULE_CONFLICT"

    inverted = client.put(f"/api/v1/schedule/update/{morning['id']}", headers=headers, json={"start_time": "14:00"})
    assert inverted.status_code == status.HTTP_400_BAD_REQUEST

def test_supervisor_creates_for_others(client, employee_user, manager_user, other_employee, auth_headers):
    response = _schedule(client, auth_headers(manager_user), "08:00", "10:00", user_id=employee_user.id)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["data"]["user_id"] == employee_user.id

    denied = _schedule(client, auth_headers(other_employee), "08:00", "10:00", user_id=employee_user.id)
    assert denied.status_code == status.HTTP_403_FORBIDDEN

def test_owner_or_supervisor_access(client, employee_user, other_employee, manager_user, auth_headers):
    schedule = _schedule(client, auth_headers(employee_user), "09:00", "12:00").json()["data"]

    stranger = auth_headers(other_employee)
    assert client.get(f"/api/v1/schedule/show/{schedule['id']}", headers=stranger).status_code == status.HTTP_403_FORBIDDEN
    assert client.delete(f"/api/v1/schedule/delete/{schedule['id']}", headers=stranger).status_code == status.HTTP_403_FORBIDDEN
    assert client.get(f"/api/v1/schedule/user/{employee_user.id}", headers=stranger).status_code == status.HTTP_403_FORBIDDEN

    supervisor = auth_headers(manager_user)
    assert client.get(f"/api/v1/schedule/show/{schedule['id']}", headers=supervisor).status_code == status.HTTP_200_OK
    assert client.delete(f"/api/v1/schedule/delete/{schedule['id']}", headers=supervisor).status_code == status.HTTP_200_OK

def test_user_schedules_filters(client, employee_user, auth_headers):
    headers = auth_headers(employee_user)
    _schedule(client, headers, "09:00", "12:00", day="2025-05-01")
    _schedule(client, headers, "09:00", "12:00", day="2025-05-20")
    _schedule(client, headers, "09:00", "12:00", day="2025-06-02")

    by_day = client.get("/api/v1/schedule/user?date=2025-05-20", headers=headers).json()["data"]
    assert [s["date"] for s in by_day] == ["2025-05-20"]

    by_month = client.get("/api/v1/schedule/user?month=5&year=2025", headers=headers).json()["data"]
    assert [s["date"] for s in by_month] == ["2025-05-01", "2025-05-20"]

    everything = client.get("/api/v1/schedule/user", headers=headers).json()["data"]
    assert len(everything) == 3

def test_list_all_is_privileged(client, employee_user, manager_user, auth_headers):
    _schedule(client, auth_headers(employee_user), "09:00", "12:00")
    assert client.get("/api/v1/schedule/all", headers=auth_headers(employee_user)).status_code == status.HTTP_403_FORBIDDEN

    response = client.get("/api/v1/schedule/all?service=Emergency", headers=auth_headers(manager_user))
    assert response.status_code == status.HTTP_200_OK
    assert len(response.json()["data"]) == 1
    assert client.get("/api/v1/schedule/all?service=Radiology", headers=auth_headers(manager_user)).json()["data"] == []

def test_times_with_utc_offset_are_field_errors(client, employee_user, auth_headers, db_session):
    headers = auth_headers(employee_user)
    mixed = _schedule(client, headers, "09:00+02:00", "12:00")
    assert mixed.status_code == status.HTTP_400_BAD_REQUEST
    body = mixed.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert [d["field"] for d in body["details"]] == ["start_time"]
    assert db_session.query(Schedule).count() == 0

    stored = _schedule(client, headers, "09:00", "12:00").json()["data"]
    update = client.put(
        f"/api/v1/schedule/update/{stored['id']}",
        headers=headers,
        json={"end_time": "13:00+00:00"},
    )
    assert update.status_code == status.HTTP_400_BAD_REQUEST
    assert [d["field"] for d in update.json()["details"]] == ["end_time"]
