from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..activities.service import ActivityLog
from ..common.datetime_utils import iso_date, now_local
from ..core.exceptions import AlreadyExistsError, NotFoundError
from ..courses.model import Course
from ..session import SchoolSnapshot
from ..store.document_store import SERVER_TIMESTAMP
from ..students.model import Student
from .model import AttendanceRecord, StudentMark
from .repository import AttendanceRepository
from .sync.factory import FormatterFactory
from .sync.outbox import SheetsSyncQueue
from .sync.payload import build_payload

logger = logging.getLogger(__name__)

Marks = Mapping[str, "StudentMark | Mapping[str, Any]"]


@dataclass(frozen=True)
class AttendanceSheet:
    """What the attendance screen opens with."""

    record_id: Optional[str]
    is_editing: bool
    marks: dict[str, StudentMark]


def roster(course: Course, snapshot: SchoolSnapshot) -> list[Student]:
    """Students of a course; unassigned legacy students are matched by title."""

    return [
        s
        for s in snapshot.students
        if s.assigned_course_id == course.id
        or (s.assigned_course_id is None and course.title and s.course == course.title)
    ]


def _named(mark: StudentMark, student: Optional[Student]) -> StudentMark:
    if mark.name or not student or not student.name:
        return mark
    return StudentMark(mark.status, mark.reason, mark.note, mark.homework, student.name)


def merge_marks(
    stored: Mapping[str, StudentMark],
    students: list[Student],
    supplied: Mapping[str, StudentMark],
) -> dict[str, StudentMark]:
    """Stored marks win over defaults; supplied marks win over both.

    Students missing from today's roster keep their stored mark.
    """

    merged: dict[str, StudentMark] = dict(stored)
    for s in students:
        merged.setdefault(s.id, StudentMark.default())
    merged.update(supplied)

    by_id = {s.id: s for s in students}
    return {sid: _named(m, by_id.get(sid)) for sid, m in merged.items()}


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        activities: ActivityLog,
        *,
        sync_queue: Optional[SheetsSyncQueue] = None,
        formatter_factory: Optional[FormatterFactory] = None,
    ):
        self._attendance = attendance
        self._activities = activities
        self._sync_queue = sync_queue
        self._factory = formatter_factory or FormatterFactory()

    def build_marks(self, course: Course, on: date, *, snapshot: SchoolSnapshot) -> AttendanceSheet:
        existing = self._attendance.find(course.id, iso_date(on))
        students = roster(course, snapshot)
        if existing is None:
            return AttendanceSheet(None, False, merge_marks({}, students, {}))

        # The sheet shows today's roster only; save_or_update keeps the rest.
        ids = {s.id for s in students}
        merged = merge_marks(existing.students, students, {})
        return AttendanceSheet(existing.id, True, {k: v for k, v in merged.items() if k in ids})

    def save_or_update_attendance(
        self,
        course: Course,
        on: date,
        marks: Optional[Marks] = None,
        *,
        snapshot: SchoolSnapshot,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        if course is None or not course.id:
            raise NotFoundError("Course not found")

        now = now or now_local()
        date_key = iso_date(on)
        supplied = {str(k): StudentMark.from_dict(v) for k, v in (marks or {}).items()}
        students = roster(course, snapshot)

        existing = self._attendance.find(course.id, date_key)
        created = False
        if existing is None:
            fields = self._fields(course, date_key, merge_marks({}, students, supplied), now)
            fields["createdAt"] = SERVER_TIMESTAMP
            try:
                record = self._attendance.create_if_absent(AttendanceRecord.key(course.id, date_key), fields)
                created = True
            except AlreadyExistsError:
                logger.info("Attendance for %s on %s was created concurrently; merging", course.title, date_key)
                existing = self._attendance.find(course.id, date_key)
                if existing is None:
                    raise

        if not created:
            merged = merge_marks(existing.students, students, supplied)
            record = self._attendance.replace(existing.id, self._fields(course, date_key, merged, now))

        present, absent = record.counts()
        logger.info(
            "Attendance %s for %s on %s: %d present, %d absent",
            "saved" if created else "updated",
            course.title,
            date_key,
            present,
            absent,
        )
        if created:
            self._activities.record(f"Davomat olindi: {course.title} ({date_key})")

        self._enqueue_sync(record, snapshot)
        return record

    def _fields(self, course: Course, date_key: str, marks: Mapping[str, StudentMark], now: datetime) -> dict:
        return {
            "courseId": course.id,
            "courseName": course.title,
            "courseTime": course.time or "",
            "courseDays": course.days if course.days is not None else "",
            "date": date_key,
            "students": {sid: m.to_dict() for sid, m in marks.items()},
            "timestamp": int(now.timestamp() * 1000),
        }

    def _enqueue_sync(self, record: AttendanceRecord, snapshot: SchoolSnapshot) -> None:
        settings = snapshot.settings
        if self._sync_queue is None or not settings.sync_enabled:
            return
        try:
            payload = build_payload(record, snapshot, fmt=settings.attendance_format, factory=self._factory)
            self._sync_queue.enqueue(settings.google_sheets_url, payload)
        except Exception:
            logger.exception("Could not queue sheets sync for %s %s", record.course_name, record.date)
