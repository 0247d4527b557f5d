from datetime import date, datetime

import pytest

from src.tutoring_center.tutoring_center.activities.service import ActivityLog
from src.tutoring_center.tutoring_center.core import constants as c
from src.tutoring_center.tutoring_center.core.enums import SheetsFormat
from src.tutoring_center.tutoring_center.core.exceptions import NotFoundError, StoreError, ValidationError
from src.tutoring_center.tutoring_center.finance.service import FinanceService, total_revenue
from src.tutoring_center.tutoring_center.schedules.service import ScheduleService
from src.tutoring_center.tutoring_center.session import load_snapshot
from src.tutoring_center.tutoring_center.settings.model import AppSettings
from src.tutoring_center.tutoring_center.settings.service import SettingsService
from src.tutoring_center.tutoring_center.store.memory_store import MemoryDocumentStore
from src.tutoring_center.tutoring_center.subjects.service import SubjectService
from src.tutoring_center.tutoring_center.teachers.service import TeacherService

NOW = datetime(2025, 1, 8, 10, 0)


def _store() -> MemoryDocumentStore:
    return MemoryDocumentStore(clock=lambda: NOW)


def test_finance_entry_gets_local_date_and_timestamp():
    store = _store()
    service = FinanceService(store, ActivityLog(store), clock=lambda: NOW)

    entry_id = service.add_transaction({"title": "Rent", "amount": "-1,000,000 UZS", "type": "expense"})

    doc = store.get(c.FINANCE, entry_id)
    assert doc.get("date") == "08.01.2025"
    assert doc.get("createdAt") == NOW
    assert doc.get("type") == "Expense"
    assert total_revenue(load_snapshot(store)) == -1_000_000

    service.delete_transaction(entry_id)
    assert store.list(c.FINANCE) == []


@pytest.mark.parametrize(
    "data",
    [
        {"title": "", "amount": "10"},
        {"title": "Rent"},
        {"title": "Rent", "amount": "10", "type": "Loan"},
        {"title": "Rent", "amount": "10", "date": "yesterday"},
    ],
)
def test_finance_validation(data):
    store = _store()
    with pytest.raises(ValidationError):
        FinanceService(store, ActivityLog(store)).add_transaction(data)


def test_settings_defaults_and_merge():
    store = _store()
    defaults = AppSettings(attendance_format=SheetsFormat.COMPACT)
    service = SettingsService(store, ActivityLog(store), defaults=defaults)

    assert service.get_settings() == defaults

    updated = service.update_settings({"enableGoogleSheets": True, "googleSheetsUrl": " https://script.example/exec "})

    assert updated.attendance_format == SheetsFormat.COMPACT
    assert updated.sync_enabled
    assert updated.google_sheets_url == "https://script.example/exec"

    service.update_settings({"attendanceFormat": "SIMPLE"})
    assert store.get(c.SETTINGS, c.SETTINGS_DOC_ID).data == {
        "enableGoogleSheets": True,
        "googleSheetsUrl": "https://script.example/exec",
        "attendanceFormat": "simple",
    }


def test_settings_rejects_bad_values():
    store = _store()
    service = SettingsService(store, ActivityLog(store))

    with pytest.raises(ValidationError):
        service.update_settings({"googleSheetsUrl": "ftp://nope"})
    with pytest.raises(ValidationError):
        service.update_settings({"theme": "dark"})


def test_schedule_classes_for_a_day():
    store = _store()
    service = ScheduleService(store)
    day = date(2025, 1, 8)

    service.add_class(on=day, title="Mock exam", start_time="16:00", end_time="17:00")
    service.add_class(on=day, title="Speaking club", start_time="09:30")
    service.add_class(on=date(2025, 1, 9), title="Other day", start_time="10:00")

    classes = ScheduleService.classes_on(load_snapshot(store), day)
    assert [x.title for x in classes] == ["Speaking club", "Mock exam"]

    service.delete_class(classes[0].id)
    assert [x.title for x in ScheduleService.classes_on(load_snapshot(store), day)] == ["Mock exam"]

    with pytest.raises(ValidationError):
        service.add_class(on=day, title="Bad", start_time="noon")


def test_teacher_and_subject_crud():
    store = _store()
    teachers = TeacherService(store, ActivityLog(store))
    subjects = SubjectService(store)

    teacher_id = teachers.add_teacher({"name": "Aziza", "subject": "English", "weeklyHours": "12"})
    teachers.update_teacher(teacher_id, {"status": "On leave"})
    assert teachers.get(teacher_id).weekly_hours == 12
    assert teachers.get(teacher_id).status == "On leave"
    teachers.delete_teacher(teacher_id)
    with pytest.raises(NotFoundError):
        teachers.get(teacher_id)

    subject_id = subjects.add_subject({"title": "IELTS", "price": "600 000"})
    subjects.update_subject(subject_id, {"price": 650000})
    assert load_snapshot(store).subjects[0].price == 650000
    with pytest.raises(NotFoundError):
        subjects.update_subject("ghost", {"price": 1})
    with pytest.raises(ValidationError):
        subjects.add_subject({"price": 1})


class _BrokenStore(MemoryDocumentStore):
    def create(self, collection, fields, *, doc_id=None):
        raise StoreError("disk full")


def test_activity_failures_are_swallowed_and_logged(caplog):
    ActivityLog(_BrokenStore()).record("Anything")
    assert "Failed to record activity" in caplog.text
