"""Session-scoped cache of the latest collection snapshots.

Services never read ambient state: they receive a `SchoolSnapshot` (an
immutable view of every collection) as an explicit argument. `SchoolSession`
keeps the current snapshot up to date, either from live store subscriptions
(`watch`) or by re-reading the store on `refresh()`.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from .activities.model import Activity
from .attendance.model import AttendanceRecord
from .core import constants as c
from .courses.model import Course
from .finance.model import FinanceEntry
from .leads.model import Lead
from .schedules.model import ScheduleEntry
from .settings.model import AppSettings
from .store.document_store import Document, DocumentStore
from .students.model import Student
from .subjects.model import Subject
from .teachers.model import Teacher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchoolSnapshot:
    students: tuple[Student, ...] = ()
    teachers: tuple[Teacher, ...] = ()
    courses: tuple[Course, ...] = ()
    subjects: tuple[Subject, ...] = ()
    leads: tuple[Lead, ...] = ()
    finance: tuple[FinanceEntry, ...] = ()
    schedule: tuple[ScheduleEntry, ...] = ()
    attendance: tuple[AttendanceRecord, ...] = ()
    activities: tuple[Activity, ...] = ()
    settings: AppSettings = field(default_factory=AppSettings)

    def student(self, student_id: str) -> Optional[Student]:
        return next((s for s in self.students if s.id == str(student_id)), None)

    def course(self, course_id: Optional[str]) -> Optional[Course]:
        if not course_id:
            return None
        return next((x for x in self.courses if x.id == str(course_id)), None)

    def lead(self, lead_id: str) -> Optional[Lead]:
        return next((x for x in self.leads if x.id == str(lead_id)), None)

    def enrolled_in(self, course_id: str) -> list[Student]:
        return [s for s in self.students if s.assigned_course_id == str(course_id)]


# attribute -> (collection, parser, order_by, descending)
_SOURCES: dict[str, tuple[str, Callable[[str, Any], Any], str, bool]] = {
    "students": (c.STUDENTS, Student.from_doc, "name", False),
    "teachers": (c.TEACHERS, Teacher.from_doc, "name", False),
    "courses": (c.COURSES, Course.from_doc, "title", False),
    "subjects": (c.SUBJECTS, Subject.from_doc, "title", False),
    "leads": (c.LEADS, Lead.from_doc, "createdAt", True),
    "finance": (c.FINANCE, FinanceEntry.from_doc, "createdAt", True),
    "schedule": (c.SCHEDULE, ScheduleEntry.from_doc, "startTime", False),
    "attendance": (c.ATTENDANCE, AttendanceRecord.from_doc, "date", True),
    "activities": (c.ACTIVITIES, Activity.from_doc, "createdAt", True),
}


def _parse(attr: str, docs: Sequence[Document]) -> tuple:
    _, parser, _, _ = _SOURCES[attr]
    return tuple(parser(d.id, d.data) for d in docs)


def _settings_from(docs: Sequence[Document], defaults: AppSettings) -> AppSettings:
    doc = next((d for d in docs if d.id == c.SETTINGS_DOC_ID), None)
    return AppSettings.from_doc(doc.data if doc else None, defaults=defaults)


def load_snapshot(store: DocumentStore, *, default_settings: Optional[AppSettings] = None) -> SchoolSnapshot:
    values: dict[str, Any] = {}
    for attr, (collection, _, order_by, descending) in _SOURCES.items():
        values[attr] = _parse(attr, store.list(collection, order_by=order_by, descending=descending))
    settings_doc = store.get(c.SETTINGS, c.SETTINGS_DOC_ID)
    values["settings"] = AppSettings.from_doc(settings_doc.data if settings_doc else None, defaults=default_settings)
    return SchoolSnapshot(**values)


class SchoolSession:
    """Owns the current snapshot for one app/session lifetime."""

    def __init__(self, store: DocumentStore, *, default_settings: Optional[AppSettings] = None):
        self._store = store
        self._defaults = default_settings or AppSettings()
        self._snapshot = SchoolSnapshot(settings=self._defaults)
        self._lock = threading.Lock()
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def store(self) -> DocumentStore:
        return self._store

    @property
    def snapshot(self) -> SchoolSnapshot:
        return self._snapshot

    @property
    def is_live(self) -> bool:
        return bool(self._unsubscribers)

    def open(self) -> "SchoolSession":
        watch = getattr(self._store, "watch", None)
        if watch is None:
            self.refresh()
            return self

        for attr, (collection, _, order_by, descending) in _SOURCES.items():
            self._unsubscribers.append(
                watch(collection, self._on_snapshot(attr), order_by=order_by, descending=descending)
            )
        self._unsubscribers.append(watch(c.SETTINGS, self._on_settings))
        return self

    def refresh(self) -> SchoolSnapshot:
        snapshot = load_snapshot(self._store, default_settings=self._defaults)
        with self._lock:
            self._snapshot = snapshot
        return snapshot

    def current(self) -> SchoolSnapshot:
        """Latest snapshot; stores without subscriptions are re-read."""

        return self._snapshot if self.is_live else self.refresh()

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def _on_snapshot(self, attr: str) -> Callable[[Sequence[Document]], None]:
        def apply(docs: Sequence[Document]) -> None:
            parsed = _parse(attr, docs)
            with self._lock:
                self._snapshot = dataclasses.replace(self._snapshot, **{attr: parsed})
            logger.debug("Snapshot %s: %d documents", attr, len(parsed))

        return apply

    def _on_settings(self, docs: Sequence[Document]) -> None:
        settings = _settings_from(docs, self._defaults)
        with self._lock:
            self._snapshot = dataclasses.replace(self._snapshot, settings=settings)
