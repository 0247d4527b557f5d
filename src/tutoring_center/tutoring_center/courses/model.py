from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from ..common.datetime_utils import coerce_datetime
from ..common.parsing import as_text, parse_enum, parse_number, parse_price
from ..core.enums import CourseStatus

DaysDescriptor = Union[str, list, tuple, None]


@dataclass(frozen=True)
class Course:
    """A recurring group: schedule, monthly price and enrolled students."""

    id: str
    title: str
    instructor: str = ""
    instructor_id: Optional[str] = None
    price: Any = None
    days: DaysDescriptor = None
    time: str = ""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[CourseStatus] = None
    students_count: int = 0

    @property
    def monthly_price(self) -> Optional[int]:
        return parse_price(self.price)

    @classmethod
    def from_doc(cls, doc_id: str, data: Mapping[str, Any]) -> "Course":
        days = data.get("days")
        instructor_id = data.get("instructorId")
        return cls(
            id=str(doc_id),
            title=as_text(data.get("title")),
            instructor=as_text(data.get("instructor")),
            instructor_id=str(instructor_id) if instructor_id else None,
            price=data.get("price"),
            days=list(days) if isinstance(days, (list, tuple)) else days,
            time=as_text(data.get("time")),
            start_date=coerce_datetime(data.get("startDate")),
            end_date=coerce_datetime(data.get("endDate")),
            status=parse_enum(CourseStatus, data.get("status")),
            students_count=int(parse_number(data.get("studentsCount"))),
        )
