from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional

from ..common.datetime_utils import coerce_date
from ..common.parsing import as_text


@dataclass(frozen=True)
class ScheduleEntry:
    """A single calendar-bound lesson slot (not the course's weekly pattern)."""

    id: str
    date: Optional[date]
    start_time: str = ""
    end_time: str = ""
    title: str = ""
    course_id: Optional[str] = None

    @classmethod
    def from_doc(cls, doc_id: str, data: Mapping[str, Any]) -> "ScheduleEntry":
        course_id = data.get("courseId")
        return cls(
            id=str(doc_id),
            date=coerce_date(data.get("date")),
            start_time=as_text(data.get("startTime")),
            end_time=as_text(data.get("endTime")),
            title=as_text(data.get("title")),
            course_id=str(course_id) if course_id else None,
        )
