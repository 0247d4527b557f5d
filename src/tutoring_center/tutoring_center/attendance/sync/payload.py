from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from ...core.constants import SYNC_DEFAULT_HOMEWORK, UNKNOWN_STUDENT
from ...core.enums import SheetsFormat
from ...session import SchoolSnapshot
from ..model import AttendanceRecord
from .base import SyncRow
from .factory import FormatterFactory


def build_rows(record: AttendanceRecord, snapshot: SchoolSnapshot) -> list[SyncRow]:
    rows: list[SyncRow] = []
    for student_id, mark in record.students.items():
        student = snapshot.student(student_id)
        name = student.name if student and student.name else (mark.name or UNKNOWN_STUDENT)
        rows.append(
            SyncRow(
                id=str(student_id),
                name=name,
                status=mark.status,
                reason=mark.reason or "",
                note=mark.note or "",
                homework=mark.homework or SYNC_DEFAULT_HOMEWORK,
            )
        )
    return rows


def build_payload(
    record: AttendanceRecord,
    snapshot: SchoolSnapshot,
    *,
    fmt: SheetsFormat,
    factory: Optional[FormatterFactory] = None,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """JSON body posted to the spreadsheet endpoint."""

    formatter = (factory or FormatterFactory()).for_format(fmt)
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    return {
        "courseName": record.course_name,
        "courseTime": record.course_time or "",
        "courseDays": record.course_days or "",
        "date": record.date,
        "timestamp": stamp,
        "format": fmt.value,
        "attendance": formatter.format(build_rows(record, snapshot)),
    }
