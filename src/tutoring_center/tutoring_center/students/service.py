from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from ..activities.service import ActivityLog
from ..common.datetime_utils import localized_date
from ..common.parsing import format_amount, parse_enum
from ..common.validators import require_non_empty, require_positive
from ..core import constants as c
from ..core.enums import FinanceType, StudentStatus, TransactionKind
from ..core.exceptions import NotFoundError, ValidationError
from ..store.document_store import SERVER_TIMESTAMP, DocumentStore
from .model import Student

logger = logging.getLogger(__name__)

_EDITABLE = ("name", "phone", "assignedCourseId", "status", "paymentPlan", "attendanceRate")

_TRANSACTION_TITLES = {
    TransactionKind.DEPOSIT: "To'lov (Kirim)",
    TransactionKind.WITHDRAWAL: "To'lov (Chiqim)",
}


class StudentService:
    """Student CRUD and manual balance adjustments.

    `balance` is only ever changed through increments (deductions and
    `record_transaction`), never written directly.
    """

    def __init__(
        self,
        store: DocumentStore,
        activities: ActivityLog,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._store = store
        self._activities = activities
        self._clock = clock

    def get(self, student_id: str) -> Student:
        doc = self._store.get(c.STUDENTS, str(student_id))
        if doc is None:
            raise NotFoundError("Student not found")
        return Student.from_doc(doc.id, doc.data)

    def _course_label(self, course_id: Optional[str]) -> str:
        if not course_id:
            return c.UNASSIGNED_LABEL
        doc = self._store.get(c.COURSES, str(course_id))
        if doc is None:
            raise ValidationError("Selected course does not exist")
        return str(doc.get("title") or c.UNASSIGNED_LABEL)

    def _fields(self, data: Mapping[str, Any]) -> dict[str, Any]:
        if "balance" in data:
            raise ValidationError("balance can only change through transactions")
        unknown = set(data) - set(_EDITABLE)
        if unknown:
            raise ValidationError(f"Unknown student fields: {', '.join(sorted(unknown))}")

        fields = dict(data)
        if "name" in fields:
            fields["name"] = require_non_empty(fields["name"], "name")
        if "status" in fields:
            status = parse_enum(StudentStatus, fields["status"])
            if status is None:
                raise ValidationError(f"Unknown student status: {fields['status']}")
            fields["status"] = status.value
        if "assignedCourseId" in fields:
            course_id = fields["assignedCourseId"] or None
            fields["assignedCourseId"] = course_id
            fields["course"] = self._course_label(course_id)
        return fields

    def add_student(self, data: Mapping[str, Any]) -> str:
        fields = self._fields(data)
        if "name" not in fields:
            raise ValidationError("name is required")

        course_id = fields.get("assignedCourseId")
        fields.setdefault("assignedCourseId", None)
        fields.setdefault("course", c.UNASSIGNED_LABEL)
        fields.setdefault("status", (StudentStatus.ACTIVE if course_id else StudentStatus.WAITING).value)
        fields.setdefault("attendanceRate", 100)
        fields["balance"] = 0
        fields["createdAt"] = SERVER_TIMESTAMP

        student_id = self._store.create(c.STUDENTS, fields)
        logger.info("Student added: %s (%s)", fields["name"], student_id)
        self._activities.record(f"Yangi o'quvchi qo'shildi: {fields['name']}", fields["course"])
        return student_id

    def update_student(self, student_id: str, data: Mapping[str, Any]) -> None:
        fields = self._fields(data)
        current = self.get(student_id)
        if not fields:
            return
        self._store.update(c.STUDENTS, current.id, fields)
        logger.info("Student updated: %s (%s)", current.name, current.id)

    def delete_student(self, student_id: str) -> None:
        current = self.get(student_id)
        self._store.delete(c.STUDENTS, current.id)
        logger.info("Student deleted: %s (%s)", current.name, current.id)
        self._activities.record(f"O'quvchi o'chirildi: {current.name}")

    def record_transaction(self, student_id: str, amount: Any, kind: TransactionKind | str) -> str:
        """Deposit or withdraw; the balance change and its ledger line commit together."""

        value = require_positive(amount, "amount")
        if value.is_integer():
            value = int(value)
        tx_kind = parse_enum(TransactionKind, kind)
        if tx_kind is None:
            raise ValidationError(f"Unknown transaction kind: {kind}")

        student = self.get(student_id)
        is_deposit = tx_kind == TransactionKind.DEPOSIT
        sign = "+" if is_deposit else "-"

        batch = self._store.batch()
        batch.increment(c.STUDENTS, student.id, "balance", value if is_deposit else -value)
        entry_id = batch.create(
            c.FINANCE,
            {
                "title": _TRANSACTION_TITLES[tx_kind],
                "amount": f"{sign}{format_amount(value)} {c.CURRENCY}",
                "type": (FinanceType.INCOME if is_deposit else FinanceType.EXPENSE).value,
                "category": c.TUITION_CATEGORY,
                "date": localized_date(self._clock().date()),
                "studentId": student.id,
                "studentName": student.name,
                "createdAt": SERVER_TIMESTAMP,
            },
        )
        batch.commit()

        logger.info("%s of %s recorded for %s", tx_kind.value.capitalize(), format_amount(value), student.name)
        self._activities.record(f"Added transaction: {_TRANSACTION_TITLES[tx_kind]}", student.name)
        return entry_id
