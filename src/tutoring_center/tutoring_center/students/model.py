from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import coerce_datetime
from ..common.parsing import as_text, parse_enum, parse_number
from ..core.enums import StudentStatus


@dataclass(frozen=True)
class Student:
    id: str
    name: str
    phone: str = ""
    assigned_course_id: Optional[str] = None
    course: str = ""
    status: Optional[StudentStatus] = None
    balance: float = 0.0
    payment_plan: str = ""
    attendance_rate: float = 0.0
    created_at: Optional[datetime] = None

    @property
    def is_debtor(self) -> bool:
        return self.balance < 0

    @classmethod
    def from_doc(cls, doc_id: str, data: Mapping[str, Any]) -> "Student":
        course_id = data.get("assignedCourseId")
        return cls(
            id=str(doc_id),
            name=as_text(data.get("name")),
            phone=as_text(data.get("phone")),
            assigned_course_id=str(course_id) if course_id not in (None, "") else None,
            course=as_text(data.get("course")),
            status=parse_enum(StudentStatus, data.get("status")),
            balance=parse_number(data.get("balance")),
            payment_plan=as_text(data.get("paymentPlan")),
            attendance_rate=parse_number(data.get("attendanceRate")),
            created_at=coerce_datetime(data.get("createdAt")),
        )
