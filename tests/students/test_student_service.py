from datetime import datetime

import pytest

from src.tutoring_center.tutoring_center.activities.service import ActivityLog
from src.tutoring_center.tutoring_center.core import constants as c
from src.tutoring_center.tutoring_center.core.exceptions import NotFoundError, ValidationError
from src.tutoring_center.tutoring_center.store.memory_store import MemoryDocumentStore, seed
from src.tutoring_center.tutoring_center.students.service import StudentService

NOW = datetime(2025, 1, 8, 10, 0)


def _setup():
    store = MemoryDocumentStore(clock=lambda: NOW)
    seed(store, c.COURSES, {"c1": {"title": "English-A1"}, "c2": {"title": "Math"}})
    return store, StudentService(store, ActivityLog(store), clock=lambda: NOW)


def test_add_student_sets_label_status_and_zero_balance():
    store, service = _setup()

    enrolled = service.add_student({"name": "Ali", "phone": "+998", "assignedCourseId": "c1"})
    waiting = service.add_student({"name": "Bobur"})

    doc = store.get(c.STUDENTS, enrolled)
    assert doc.get("course") == "English-A1"
    assert doc.get("status") == "Active"
    assert doc.get("balance") == 0
    assert doc.get("attendanceRate") == 100
    assert doc.get("createdAt") == NOW

    doc = store.get(c.STUDENTS, waiting)
    assert doc.get("assignedCourseId") is None
    assert doc.get("course") == "Guruhsiz"
    assert doc.get("status") == "Waiting"


def test_add_student_validation():
    _, service = _setup()

    with pytest.raises(ValidationError):
        service.add_student({"name": ""})
    with pytest.raises(ValidationError):
        service.add_student({"name": "Ali", "balance": 100})
    with pytest.raises(ValidationError):
        service.add_student({"name": "Ali", "assignedCourseId": "missing"})
    with pytest.raises(ValidationError):
        service.add_student({"name": "Ali", "status": "Graduated"})


def test_update_student_recomputes_course_label():
    store, service = _setup()
    student_id = service.add_student({"name": "Ali", "assignedCourseId": "c1"})

    service.update_student(student_id, {"assignedCourseId": "c2", "status": "active"})

    doc = store.get(c.STUDENTS, student_id)
    assert doc.get("course") == "Math"
    assert doc.get("status") == "Active"

    service.update_student(student_id, {"assignedCourseId": None})
    assert store.get(c.STUDENTS, student_id).get("course") == "Guruhsiz"


def test_update_rejects_balance_writes():
    store, service = _setup()
    student_id = service.add_student({"name": "Ali"})

    with pytest.raises(ValidationError):
        service.update_student(student_id, {"balance": 1_000_000})
    assert store.get(c.STUDENTS, student_id).get("balance") == 0


def test_deposit_and_withdrawal_adjust_balance_with_ledger_line():
    store, service = _setup()
    student_id = service.add_student({"name": "Ali", "assignedCourseId": "c1"})

    service.record_transaction(student_id, 50000, "deposit")
    service.record_transaction(student_id, "20000", "withdrawal")

    assert store.get(c.STUDENTS, student_id).get("balance") == 30000
    entries = {e.get("amount"): e for e in store.list(c.FINANCE)}
    assert set(entries) == {"+50,000 UZS", "-20,000 UZS"}
    assert entries["+50,000 UZS"].get("type") == "Income"
    assert entries["-20,000 UZS"].get("type") == "Expense"
    assert entries["+50,000 UZS"].get("category") == "Tuition"
    assert entries["+50,000 UZS"].get("studentName") == "Ali"
    assert entries["+50,000 UZS"].get("date") == "08.01.2025"


@pytest.mark.parametrize("amount", [0, -5, "abc", None])
def test_transaction_amount_must_be_positive(amount):
    store, service = _setup()
    student_id = service.add_student({"name": "Ali"})

    with pytest.raises(ValidationError):
        service.record_transaction(student_id, amount, "deposit")
    assert store.list(c.FINANCE) == []


def test_transaction_for_unknown_student():
    _, service = _setup()
    with pytest.raises(NotFoundError):
        service.record_transaction("ghost", 1000, "deposit")
    with pytest.raises(ValidationError):
        service.record_transaction("ghost", 1000, "refund")


def test_delete_student():
    store, service = _setup()
    student_id = service.add_student({"name": "Ali"})

    service.delete_student(student_id)

    assert store.get(c.STUDENTS, student_id) is None
    with pytest.raises(NotFoundError):
        service.delete_student(student_id)
