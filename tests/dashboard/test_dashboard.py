from datetime import date, datetime

from src.tutoring_center.tutoring_center.core import constants as c
from src.tutoring_center.tutoring_center.core.enums import CourseStatus
from src.tutoring_center.tutoring_center.courses.model import Course
from src.tutoring_center.tutoring_center.dashboard.service import (
    course_derived_status,
    course_roster,
    dashboard_stats,
    debtors,
    lessons_on,
    student_attendance_history,
    student_payments,
)
from src.tutoring_center.tutoring_center.session import load_snapshot
from src.tutoring_center.tutoring_center.store.memory_store import MemoryDocumentStore, seed

NOW = datetime(2025, 1, 8, 12, 0)


def _snapshot():
    store = MemoryDocumentStore(clock=lambda: NOW)
    seed(
        store,
        c.COURSES,
        {
            "live": {"title": "English-A1", "days": "DCHJ", "time": "14:00", "startDate": "2024-09-01T00:00:00Z"},
            "early": {"title": "Chess", "days": "DCHJ", "time": "09:00"},
            "soon": {"title": "Math", "days": "SPSH", "startDate": "2025-02-01"},
            "paused": {"title": "Art", "status": "Paused", "startDate": "2024-01-01"},
            "done": {"title": "IELTS", "startDate": "2024-01-01", "endDate": "2024-12-31"},
        },
    )
    seed(store, c.TEACHERS, {"t1": {"name": "Aziza"}})
    seed(
        store,
        c.STUDENTS,
        {
            "s1": {"name": "Ali", "assignedCourseId": "live", "balance": -25000},
            "s2": {"name": "Bobur", "assignedCourseId": "live", "balance": 10000},
            "s3": {"name": "Vali", "balance": "-50000"},
        },
    )
    seed(
        store,
        c.FINANCE,
        {
            "f1": {"title": "Fee", "amount": "+50,000 UZS", "studentId": "s1", "createdAt": 3},
            "f2": {"title": "Auto", "amount": "-25000", "studentId": "s1", "createdAt": 2},
            "f3": {"title": "Old", "amount": "gift", "studentName": "ali", "createdAt": 1},
            "f4": {"title": "Other", "amount": 1000, "studentId": "s2", "createdAt": 4},
        },
    )
    seed(
        store,
        c.ATTENDANCE,
        {
            "a1": {"courseId": "live", "courseName": "English-A1", "date": "2025-01-06", "students": {"s1": {"status": "Present"}}},
            "a2": {
                "courseId": "live",
                "courseName": "English-A1",
                "date": "2025-01-08",
                "timestamp": 5,
                "students": {"s1": {"status": "Absent", "reason": "Sick"}, "s2": {"status": "Present"}},
            },
            "broken": {"courseId": "live", "date": "2025-01-07", "students": "not a map"},
        },
    )
    return load_snapshot(store)


def test_derived_status():
    snapshot = _snapshot()
    status = {x.id: course_derived_status(x, NOW) for x in snapshot.courses}

    assert status == {
        "live": CourseStatus.LIVE,
        "early": CourseStatus.LIVE,
        "soon": CourseStatus.UPCOMING,
        "paused": CourseStatus.PAUSED,
        "done": CourseStatus.COMPLETED,
    }


def test_dashboard_stats():
    stats = dashboard_stats(_snapshot(), NOW)

    assert stats.students == 3
    assert stats.teachers == 1
    assert stats.active_courses == 2
    assert stats.revenue == 50000 - 25000 + 1000


def test_attendance_history_newest_first_and_tolerant():
    rows = student_attendance_history(_snapshot(), "s1")

    assert [r.date for r in rows] == ["2025-01-08", "2025-01-06"]
    assert rows[0].status == "Absent"
    assert rows[0].reason == "Sick"
    assert rows[0].timestamp == 5
    assert rows[1].timestamp == 0
    assert student_attendance_history(_snapshot(), "nobody") == []


def test_payments_match_id_or_name_newest_first():
    snapshot = _snapshot()
    payments = student_payments(snapshot, snapshot.student("s1"))

    assert [p.id for p in payments] == ["f1", "f2", "f3"]
    assert [p.id for p in student_payments(snapshot, snapshot.student("s1"), limit=1)] == ["f1"]


def test_debtors_sorted_by_debt():
    assert [s.id for s in debtors(_snapshot())] == ["s3", "s1"]


def test_roster_and_lessons():
    snapshot = _snapshot()

    assert {s.id for s in course_roster(snapshot, snapshot.course("live"))} == {"s1", "s2"}
    assert [x.id for x in lessons_on(snapshot, date(2025, 1, 8))] == ["early", "live"]
    assert lessons_on(snapshot, date(2025, 1, 12)) == []


def test_aggregates_on_empty_snapshot():
    empty = load_snapshot(MemoryDocumentStore())
    stats = dashboard_stats(empty, NOW)

    assert (stats.students, stats.teachers, stats.active_courses, stats.revenue) == (0, 0, 0, 0)
    assert course_derived_status(Course(id="x", title=""), NOW) == CourseStatus.LIVE
