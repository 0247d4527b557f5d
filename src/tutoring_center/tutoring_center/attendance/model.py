from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import coerce_datetime
from ..common.parsing import as_text, parse_enum
from ..core.constants import DEFAULT_HOMEWORK
from ..core.enums import MarkStatus


@dataclass(frozen=True)
class StudentMark:
    """One student's entry inside an attendance record."""

    status: str = MarkStatus.PRESENT.value
    reason: str = ""
    note: str = ""
    homework: str = DEFAULT_HOMEWORK
    name: Optional[str] = None

    @property
    def is_present(self) -> bool:
        return parse_enum(MarkStatus, self.status) == MarkStatus.PRESENT

    @property
    def is_absent(self) -> bool:
        return parse_enum(MarkStatus, self.status) == MarkStatus.ABSENT

    @classmethod
    def default(cls) -> "StudentMark":
        return cls()

    @classmethod
    def from_dict(cls, data: Any) -> "StudentMark":
        if isinstance(data, StudentMark):
            return data
        if not isinstance(data, Mapping):
            return cls()
        status = parse_enum(MarkStatus, data.get("status"))
        name = data.get("name")
        return cls(
            status=status.value if status else as_text(data.get("status"), MarkStatus.PRESENT.value),
            reason=as_text(data.get("reason")),
            note=as_text(data.get("note")),
            homework=as_text(data.get("homework"), DEFAULT_HOMEWORK),
            name=str(name) if name else None,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "status": self.status,
            "reason": self.reason,
            "note": self.note,
            "homework": self.homework,
        }
        if self.name:
            out["name"] = self.name
        return out


@dataclass(frozen=True)
class AttendanceRecord:
    """At most one per (course_id, date)."""

    id: str
    course_id: str
    course_name: str
    date: str
    students: Mapping[str, StudentMark] = field(default_factory=dict)
    course_time: str = ""
    course_days: Any = ""
    timestamp: Optional[int] = None
    created_at: Optional[datetime] = None

    @staticmethod
    def key(course_id: str, date_key: str) -> str:
        return f"{course_id}_{date_key}"

    def counts(self) -> tuple[int, int]:
        present = sum(1 for m in self.students.values() if m.is_present)
        absent = sum(1 for m in self.students.values() if m.is_absent)
        return present, absent

    @classmethod
    def from_doc(cls, doc_id: str, data: Mapping[str, Any]) -> "AttendanceRecord":
        raw_students = data.get("students")
        students = (
            {str(sid): StudentMark.from_dict(m) for sid, m in raw_students.items()}
            if isinstance(raw_students, Mapping)
            else {}
        )
        ts = data.get("timestamp")
        return cls(
            id=str(doc_id),
            course_id=as_text(data.get("courseId")),
            course_name=as_text(data.get("courseName")),
            date=as_text(data.get("date")),
            students=students,
            course_time=as_text(data.get("courseTime")),
            course_days=data.get("courseDays") or "",
            timestamp=int(ts) if isinstance(ts, (int, float)) and not isinstance(ts, bool) else None,
            created_at=coerce_datetime(data.get("createdAt")),
        )


@dataclass(frozen=True)
class AttendanceHistoryRow:
    """Read-model: one student's mark projected out of a record."""

    record_id: str
    date: str
    course_id: str
    course_name: str
    status: str
    reason: str
    note: str
    homework: str
    timestamp: int = 0
