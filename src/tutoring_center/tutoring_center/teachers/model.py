from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from ..common.parsing import as_text, parse_number


@dataclass(frozen=True)
class Teacher:
    id: str
    name: str
    subject: str = ""
    phone: str = ""
    salary_type: str = ""
    weekly_hours: float = 0.0
    assigned_courses: tuple[str, ...] = field(default_factory=tuple)
    status: str = ""

    @classmethod
    def from_doc(cls, doc_id: str, data: Mapping[str, Any]) -> "Teacher":
        courses = data.get("assignedCourses")
        return cls(
            id=str(doc_id),
            name=as_text(data.get("name")),
            subject=as_text(data.get("subject")),
            phone=as_text(data.get("phone")),
            salary_type=as_text(data.get("salaryType")),
            weekly_hours=parse_number(data.get("weeklyHours")),
            assigned_courses=tuple(str(c) for c in courses) if isinstance(courses, (list, tuple)) else (),
            status=as_text(data.get("status")),
        )
