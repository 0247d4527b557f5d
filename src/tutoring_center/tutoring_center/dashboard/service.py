"""Derived views over a snapshot. Nothing here writes to the store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..attendance.model import AttendanceHistoryRow
from ..attendance.service import roster
from ..core import constants as c
from ..core.enums import CourseStatus
from ..courses.model import Course
from ..courses.schedule import courses_meeting_on
from ..finance.model import FinanceEntry
from ..finance.service import total_revenue
from ..session import SchoolSnapshot
from ..students.model import Student


@dataclass(frozen=True)
class DashboardStats:
    students: int
    teachers: int
    active_courses: int
    revenue: float


def course_derived_status(course: Course, now: datetime) -> CourseStatus:
    """Paused is authoritative when stored; otherwise dates decide."""

    if course.status == CourseStatus.PAUSED:
        return CourseStatus.PAUSED
    if course.end_date is not None and now > course.end_date:
        return CourseStatus.COMPLETED
    if course.start_date is not None and course.start_date > now:
        return CourseStatus.UPCOMING
    return CourseStatus.LIVE


def dashboard_stats(snapshot: SchoolSnapshot, now: datetime) -> DashboardStats:
    return DashboardStats(
        students=len(snapshot.students),
        teachers=len(snapshot.teachers),
        active_courses=sum(1 for x in snapshot.courses if course_derived_status(x, now) == CourseStatus.LIVE),
        revenue=total_revenue(snapshot),
    )


def student_attendance_history(snapshot: SchoolSnapshot, student_id: str) -> list[AttendanceHistoryRow]:
    rows: list[AttendanceHistoryRow] = []
    for record in snapshot.attendance:
        mark = record.students.get(str(student_id))
        if mark is None:
            continue
        rows.append(
            AttendanceHistoryRow(
                record_id=record.id,
                date=record.date,
                course_id=record.course_id,
                course_name=record.course_name,
                status=mark.status,
                reason=mark.reason,
                note=mark.note,
                homework=mark.homework,
                timestamp=record.timestamp or 0,
            )
        )
    rows.sort(key=lambda r: r.date or "", reverse=True)
    return rows


def student_payments(snapshot: SchoolSnapshot, student: Student, limit: int = c.DEFAULT_PAYMENTS_LIMIT) -> list[FinanceEntry]:
    """Newest ledger lines for a student, matched by id or (legacy) by name."""

    name = student.name.strip().lower()
    matches = [
        e
        for e in snapshot.finance
        if e.student_id == student.id or (name and e.student_name.strip().lower() == name)
    ]
    return matches[:limit]


def debtors(snapshot: SchoolSnapshot) -> list[Student]:
    return sorted((s for s in snapshot.students if s.is_debtor), key=lambda s: s.balance)


def course_roster(snapshot: SchoolSnapshot, course: Course) -> list[Student]:
    return roster(course, snapshot)


def lessons_on(snapshot: SchoolSnapshot, on: date) -> list[Course]:
    """Courses meeting on a day, earliest start first."""

    return sorted(courses_meeting_on(snapshot.courses, on), key=lambda x: x.time or "~")
