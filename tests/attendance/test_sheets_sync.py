import json
from datetime import datetime, timedelta, timezone

import httpx

from src.tutoring_center.tutoring_center.attendance.model import AttendanceRecord, StudentMark
from src.tutoring_center.tutoring_center.attendance.sync.compact_format import CompactFormatter
from src.tutoring_center.tutoring_center.attendance.sync.default_format import DefaultFormatter
from src.tutoring_center.tutoring_center.attendance.sync.factory import FormatterFactory
from src.tutoring_center.tutoring_center.attendance.sync.outbox import SYNC_JOB_ID, SheetsSyncQueue, build_sync_scheduler
from src.tutoring_center.tutoring_center.attendance.sync.payload import build_payload, build_rows
from src.tutoring_center.tutoring_center.attendance.sync.simple_format import SimpleFormatter
from src.tutoring_center.tutoring_center.core.enums import SheetsFormat
from src.tutoring_center.tutoring_center.session import SchoolSnapshot
from src.tutoring_center.tutoring_center.students.model import Student

NOW = datetime(2025, 1, 8, 15, 0)


def _record() -> AttendanceRecord:
    return AttendanceRecord(
        id="c1_2025-01-08",
        course_id="c1",
        course_name="English-A1",
        date="2025-01-08",
        course_time="14:00",
        course_days="DCHJ",
        students={
            "A": StudentMark(status="Present"),
            "B": StudentMark(status="absent", reason="Sick", homework=""),
            "gone": StudentMark(status="Present", name="Zarina"),
            "ghost": StudentMark(status="Absent"),
        },
    )


def _snapshot() -> SchoolSnapshot:
    return SchoolSnapshot(students=(Student(id="A", name="Ali"), Student(id="B", name="Bobur")))


def test_rows_resolve_names_from_students_then_embedded_then_unknown():
    rows = {r.id: r for r in build_rows(_record(), _snapshot())}

    assert rows["A"].name == "Ali"
    assert rows["gone"].name == "Zarina"
    assert rows["ghost"].name == "Unknown"
    assert rows["B"].homework == "0"


def test_formatter_factory():
    factory = FormatterFactory()
    assert isinstance(factory.for_format(SheetsFormat.SIMPLE), SimpleFormatter)
    assert isinstance(factory.for_format("COMPACT"), CompactFormatter)
    assert isinstance(factory.for_format("default"), DefaultFormatter)
    assert isinstance(factory.for_format(None), DefaultFormatter)


def test_default_payload_has_one_row_per_student():
    stamp = datetime(2025, 1, 8, 10, 0, tzinfo=timezone.utc)
    payload = build_payload(_record(), _snapshot(), fmt=SheetsFormat.DEFAULT, now=stamp)

    assert payload["courseName"] == "English-A1"
    assert payload["courseTime"] == "14:00"
    assert payload["courseDays"] == "DCHJ"
    assert payload["date"] == "2025-01-08"
    assert payload["timestamp"] == "2025-01-08T10:00:00+00:00"
    assert payload["format"] == "default"
    assert {"id": "A", "name": "Ali", "status": "Present", "reason": "", "note": "", "homework": "1"} in payload["attendance"]
    assert len(payload["attendance"]) == 4


def test_simple_payload_counts_status_case_insensitively():
    payload = build_payload(_record(), _snapshot(), fmt=SheetsFormat.SIMPLE)
    assert payload["attendance"] == {"present": 2, "absent": 2, "total": 4}


def test_compact_payload():
    payload = build_payload(_record(), _snapshot(), fmt=SheetsFormat.COMPACT)

    assert payload["attendance"]["present"] == ["Ali", "Zarina"]
    assert {"name": "Bobur", "reason": "Sick"} in payload["attendance"]["absent"]
    assert payload["attendance"]["total"] == 4


def _queue(handler, **kwargs) -> SheetsSyncQueue:
    return SheetsSyncQueue(httpx.Client(transport=httpx.MockTransport(handler)), **kwargs)


def test_delivery_posts_json_as_text_plain():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200)

    queue = _queue(handler)
    queue.enqueue("https://script.example/exec", {"courseName": "English-A1", "date": "2025-01-08"})

    result = queue.flush(NOW)

    assert result.sent == 1
    assert queue.pending == []
    assert requests[0].method == "POST"
    assert requests[0].headers["Content-Type"].startswith("text/plain")
    assert json.loads(requests[0].content) == {"courseName": "English-A1", "date": "2025-01-08"}


def test_enqueue_without_url_is_ignored():
    queue = _queue(lambda request: httpx.Response(200))
    assert queue.enqueue("", {"date": "2025-01-08"}) is None
    assert queue.pending == []


def test_failures_back_off_then_dead_letter():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(500)

    queue = _queue(handler, max_attempts=3, backoff=timedelta(seconds=30))
    queue.enqueue("https://script.example/exec", {"date": "2025-01-08"})

    assert queue.flush(NOW).retried == 1
    task = queue.pending[0]
    assert task.next_attempt_at == NOW + timedelta(seconds=30)
    assert task.last_error == "HTTP 500"

    # Not due yet
    assert queue.flush(NOW + timedelta(seconds=10)).retried == 0
    assert len(calls) == 1

    assert queue.flush(NOW + timedelta(seconds=30)).retried == 1
    assert queue.pending[0].next_attempt_at == NOW + timedelta(seconds=30) + timedelta(seconds=60)

    result = queue.flush(NOW + timedelta(minutes=5))
    assert result.dead == 1
    assert queue.pending == []
    assert [t.attempts for t in queue.dead_letters] == [3]


def test_transport_errors_are_retried():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    queue = _queue(handler)
    queue.enqueue("https://script.example/exec", {"date": "2025-01-08"})

    result = queue.flush(NOW)

    assert result.retried == 1
    assert queue.pending[0].last_error.startswith("ConnectTimeout")


def test_scheduler_drains_queue_on_interval():
    queue = _queue(lambda request: httpx.Response(200))
    scheduler = build_sync_scheduler(queue, interval=30)

    scheduler.start()
    try:
        job = scheduler.get_job(SYNC_JOB_ID)
        assert job.func == queue.flush
        assert job.trigger.interval == timedelta(seconds=30)
        assert scheduler.running
    finally:
        scheduler.shutdown(wait=False)
    assert not scheduler.running
