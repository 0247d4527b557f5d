import httpx
import pytest

from src.tutoring_center.tutoring_center.core import constants as c
from src.tutoring_center.tutoring_center.main import create_app
from src.tutoring_center.tutoring_center.store.memory_store import MemoryDocumentStore


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def sheet_requests():
    return []


@pytest.fixture
def client(store, sheet_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        sheet_requests.append(request)
        return httpx.Response(200)

    app = create_app(
        "config.testing",
        store=store,
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    with app.test_client() as client:
        yield client
    app.extensions["tutoring_center"].close()


def _course(client, **overrides) -> str:
    body = {"title": "English-A1", "days": "DCHJ", "time": "14:00", "price": "300000", **overrides}
    resp = client.post("/api/courses", json=body)
    assert resp.status_code == 201
    return resp.get_json()["id"]


def test_student_lifecycle(client, store):
    course_id = _course(client)

    resp = client.post("/api/students", json={"name": "Ali", "assignedCourseId": course_id})
    assert resp.status_code == 201
    student_id = resp.get_json()["id"]

    resp = client.post(f"/api/students/{student_id}/transactions", json={"amount": 50000, "kind": "deposit"})
    assert resp.status_code == 201

    detail = client.get(f"/api/students/{student_id}").get_json()
    assert detail["student"]["name"] == "Ali"
    assert detail["student"]["course"] == "English-A1"
    assert detail["student"]["balance"] == 50000
    assert detail["course"]["id"] == course_id
    assert [p["amount"] for p in detail["payments"]] == ["+50,000 UZS"]


def test_validation_and_not_found_are_json_errors(client):
    resp = client.post("/api/students", json={"name": ""})
    assert resp.status_code == 400
    assert "name" in resp.get_json()["error"]

    assert client.get("/api/students/ghost").status_code == 404
    assert client.delete("/api/courses/ghost").status_code == 404
    assert client.patch("/api/students/x", json={"balance": 5}).status_code == 400


def test_course_delete_unassigns_students(client, store):
    course_id = _course(client)
    student_id = client.post("/api/students", json={"name": "Ali", "assignedCourseId": course_id}).get_json()["id"]

    resp = client.delete(f"/api/courses/{course_id}")

    assert resp.get_json() == {"ok": True, "unassigned": 1}
    doc = store.get(c.STUDENTS, student_id)
    assert (doc.get("assignedCourseId"), doc.get("course"), doc.get("status")) == (None, "Not Assigned", "Pending")


def test_attendance_round_trip_and_sheet_sync(client, store, sheet_requests):
    course_id = _course(client)
    ali = client.post("/api/students", json={"name": "Ali", "assignedCourseId": course_id}).get_json()["id"]
    bob = client.post("/api/students", json={"name": "Bobur", "assignedCourseId": course_id}).get_json()["id"]
    client.put(
        "/api/settings",
        json={"enableGoogleSheets": True, "googleSheetsUrl": "https://script.example/exec", "attendanceFormat": "simple"},
    )

    sheet = client.get(f"/api/courses/{course_id}/attendance?date=2025-01-08").get_json()
    assert sheet["isEditing"] is False
    assert set(sheet["students"]) == {ali, bob}

    first = client.post(
        f"/api/courses/{course_id}/attendance",
        json={"date": "2025-01-08", "students": {bob: {"status": "Absent", "reason": "Sick"}}},
    ).get_json()
    second = client.post(
        f"/api/courses/{course_id}/attendance",
        json={"date": "2025-01-08", "students": {bob: {"status": "Present"}}},
    ).get_json()

    assert first["id"] == second["id"]
    assert (second["present"], second["absent"]) == (2, 0)
    assert len(store.list(c.ATTENDANCE)) == 1

    status = client.get("/api/attendance/sync").get_json()
    assert status["pending"] == 2
    flushed = client.post("/api/attendance/sync").get_json()
    assert flushed["sent"] == 2
    assert len(sheet_requests) == 2


def test_bad_date_is_rejected(client):
    course_id = _course(client)
    resp = client.get(f"/api/courses/{course_id}/attendance?date=08.01.2025")
    assert resp.status_code == 400


def test_lead_conversion(client, store):
    course_id = _course(client)
    lead_id = client.post("/api/leads", json={"name": "Sardor", "interestedCourseId": course_id}).get_json()["id"]

    client.patch(f"/api/leads/{lead_id}", json={"status": "Interested", "notes": "Evening group"})
    resp = client.post(f"/api/leads/{lead_id}/convert")

    assert resp.status_code == 201
    student_id = resp.get_json()["studentId"]
    lead = store.get(c.LEADS, lead_id)
    assert lead.get("status") == "Registered"
    assert lead.get("notes") == "Evening group"
    assert lead.get("convertedStudentId") == student_id
    assert client.post(f"/api/leads/{lead_id}/convert").status_code == 400


def test_dashboard_and_settings(client):
    _course(client, startDate="2020-01-01")
    client.post("/api/teachers", json={"name": "Aziza"})
    client.post("/api/finance", json={"title": "Rent", "amount": "-100000", "type": "Expense"})

    data = client.get("/api/dashboard?date=2025-01-08").get_json()
    assert data["stats"] == {"students": 0, "teachers": 1, "active_courses": 1, "revenue": -100000}
    assert [x["title"] for x in data["lessons"]] == ["English-A1"]

    assert client.put("/api/settings", json={"attendanceFormat": "weird"}).status_code == 400
    assert client.get("/api/settings").get_json()["attendanceFormat"] == "default"


def test_request_id_is_echoed(client):
    resp = client.get("/api/students", headers={"X-Request-ID": "abc123"})
    assert resp.headers["X-Request-ID"] == "abc123"
    assert client.get("/api/students").headers["X-Request-ID"] != "-"
