import pytest

from app.core.errors import AuthError
from app.core.session import Role, SessionContext
from tests.conftest import auth_header, relate

COORDINATOR = auth_header("tok-c1", "coordinator")


def test_assign_list_and_unassign(client):
    r = client.post(
        "/coordinator/assignments",
        headers=COORDINATOR,
        json={"teacher_id": "t1", "student_id": "s3", "commission_name": "History", "course_id": "c-hist"},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["teacher_id"] == "t1"
    assert body["assigned_at"] is not None

    r = client.get("/coordinator/assignments", headers=COORDINATOR)
    assert r.status_code == 200, r.text
    assert [row["student_id"] for row in r.json()] == ["s3"]

    r = client.delete("/coordinator/assignments/s3", headers=COORDINATOR)
    assert r.status_code == 204, r.text

    r = client.get("/coordinator/assignments", headers=COORDINATOR)
    assert r.json() == []


def test_student_cannot_have_two_teachers(client):
    payload = {"teacher_id": "t1", "student_id": "s1", "commission_name": "Math A"}
    r = client.post("/coordinator/assignments", headers=COORDINATOR, json=payload)
    assert r.status_code == 201, r.text

    r = client.post("/coordinator/assignments", headers=COORDINATOR, json={**payload, "teacher_id": "t2"})
    assert r.status_code == 409, r.text


def test_forged_token_cannot_change_relations(client):
    forged = auth_header("not-a-google-token", "coordinator")

    r = client.post(
        "/coordinator/assignments",
        headers=forged,
        json={"teacher_id": "t1", "student_id": "s1", "commission_name": "Math A"},
    )
    assert r.status_code == 401, r.text

    relate(teacher_id="t1", student_id="s2", commission_name="Math A")
    r = client.delete("/coordinator/assignments/s2", headers=forged)
    assert r.status_code == 401, r.text

    r = client.get("/coordinator/assignments", headers=COORDINATOR)
    assert [row["student_id"] for row in r.json()] == ["s2"]


def test_unassign_unknown_student(client):
    r = client.delete("/coordinator/assignments/nobody", headers=COORDINATOR)
    assert r.status_code == 404, r.text


def test_assignment_changes_the_coordinator_view(client):
    before = client.get("/coordinator/data", headers=COORDINATOR).json()["data"]["metrics"]

    client.post(
        "/coordinator/assignments",
        headers=COORDINATOR,
        json={"teacher_id": "t2", "student_id": "s3", "commission_name": "History"},
    )
    after = client.get("/coordinator/data", headers=COORDINATOR).json()["data"]["metrics"]

    assert after["assigned_students"] == before["assigned_students"] + 1
    assert after["unassigned_students"] == before["unassigned_students"] - 1


def test_only_coordinators_manage_relations(client):
    r = client.post(
        "/coordinator/assignments",
        headers=auth_header("tok-t1", "teacher"),
        json={"teacher_id": "t1", "student_id": "s1", "commission_name": "Math A"},
    )
    assert r.status_code == 403, r.text


def test_blank_commission_is_rejected(client):
    r = client.post(
        "/coordinator/assignments",
        headers=COORDINATOR,
        json={"teacher_id": "t1", "student_id": "s1", "commission_name": ""},
    )
    assert r.status_code == 422, r.text


def test_session_context_lifecycle():
    session = SessionContext()
    assert not session.is_active
    with pytest.raises(AuthError):
        session.require()

    session.init("tok", Role.teacher)
    assert session.require() == "tok"
    assert session.role is Role.teacher

    session.clear()
    assert not session.is_active
    with pytest.raises(AuthError):
        session.init("", Role.student)
