from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import coerce_datetime
from ..common.parsing import as_text, parse_amount, parse_enum
from ..core.enums import FinanceType


@dataclass(frozen=True)
class FinanceEntry:
    """Ledger line. `amount` keeps the stored text, `value` its parsed number."""

    id: str
    title: str
    amount: str
    value: float
    type: Optional[FinanceType] = None
    category: str = ""
    date: str = ""
    student_id: Optional[str] = None
    student_name: str = ""
    course_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc_id: str, data: Mapping[str, Any]) -> "FinanceEntry":
        raw = data.get("amount")
        student_id = data.get("studentId")
        course_id = data.get("courseId")
        return cls(
            id=str(doc_id),
            title=as_text(data.get("title")),
            amount=as_text(raw),
            value=parse_amount(raw),
            type=parse_enum(FinanceType, data.get("type")),
            category=as_text(data.get("category")),
            date=as_text(data.get("date")),
            student_id=str(student_id) if student_id else None,
            student_name=as_text(data.get("studentName")),
            course_id=str(course_id) if course_id else None,
            created_at=coerce_datetime(data.get("createdAt")),
        )


@dataclass(frozen=True)
class DailyDeductionMarker:
    id: str
    course_id: str
    date: str
    processed_at: Optional[datetime] = None

    @staticmethod
    def key(course_id: str, date_key: str) -> str:
        return f"{course_id}_{date_key}"
