from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import coerce_datetime
from ..common.parsing import as_text, parse_enum
from ..core.enums import LeadStatus


@dataclass(frozen=True)
class Lead:
    id: str
    name: str
    phone: str = ""
    source: str = ""
    interested_course_id: Optional[str] = None
    course_name: str = ""
    status: LeadStatus = LeadStatus.NEW
    created_at: Optional[datetime] = None
    notes: str = ""
    converted_student_id: Optional[str] = None

    @classmethod
    def from_doc(cls, doc_id: str, data: Mapping[str, Any]) -> "Lead":
        course_id = data.get("interestedCourseId")
        student_id = data.get("convertedStudentId")
        return cls(
            id=str(doc_id),
            name=as_text(data.get("name")),
            phone=as_text(data.get("phone")),
            source=as_text(data.get("source")),
            interested_course_id=str(course_id) if course_id else None,
            course_name=as_text(data.get("courseName")),
            status=parse_enum(LeadStatus, data.get("status"), LeadStatus.NEW),
            created_at=coerce_datetime(data.get("createdAt")),
            notes=as_text(data.get("notes")),
            converted_student_id=str(student_id) if student_id else None,
        )
