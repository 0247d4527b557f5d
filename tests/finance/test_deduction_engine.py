from datetime import datetime, timedelta

from src.tutoring_center.tutoring_center.activities.service import ActivityLog
from src.tutoring_center.tutoring_center.core import constants as c
from src.tutoring_center.tutoring_center.finance.deduction import DeductionEngine, DeductionTrigger
from src.tutoring_center.tutoring_center.session import load_snapshot
from src.tutoring_center.tutoring_center.store.memory_store import MemoryDocumentStore, seed

WEDNESDAY_1430 = datetime(2025, 1, 8, 14, 30)


def _store() -> MemoryDocumentStore:
    store = MemoryDocumentStore(clock=lambda: WEDNESDAY_1430)
    seed(
        store,
        c.COURSES,
        {"English-A1": {"title": "English-A1", "days": "DCHJ", "time": "14:00", "price": "300000"}},
    )
    seed(
        store,
        c.STUDENTS,
        {
            f"s{i}": {"name": f"Student {i}", "assignedCourseId": "English-A1", "course": "English-A1", "balance": 0}
            for i in (1, 2, 3)
        },
    )
    return store


def _engine(store) -> DeductionEngine:
    return DeductionEngine(store, ActivityLog(store, clock=lambda: WEDNESDAY_1430))


def _balances(store) -> dict:
    return {d.id: d.get("balance") for d in store.list(c.STUDENTS)}


def test_charges_every_enrolled_student_once():
    store = _store()
    engine = _engine(store)

    report = engine.process_daily_deductions(load_snapshot(store), WEDNESDAY_1430)

    assert [d.course_id for d in report.processed] == ["English-A1"]
    assert report.total_charged == 75000
    assert _balances(store) == {"s1": -25000, "s2": -25000, "s3": -25000}

    entries = store.list(c.FINANCE)
    assert len(entries) == 3
    assert {e.get("amount") for e in entries} == {"-25000"}
    assert {e.get("category") for e in entries} == {c.AUTO_DEDUCTION_CATEGORY}
    assert {e.get("date") for e in entries} == {"08.01.2025"}
    assert {e.get("studentId") for e in entries} == {"s1", "s2", "s3"}

    markers = store.list(c.DAILY_DEDUCTIONS)
    assert [m.id for m in markers] == ["English-A1_2025-01-08"]
    assert markers[0].get("processedAt") == WEDNESDAY_1430


def test_second_pass_same_day_is_a_no_op():
    store = _store()
    engine = _engine(store)
    engine.process_daily_deductions(load_snapshot(store), WEDNESDAY_1430)
    commits = store.commits

    report = engine.process_daily_deductions(load_snapshot(store), WEDNESDAY_1430.replace(hour=15))

    assert report.processed == []
    assert report.skipped == {"English-A1": "already processed"}
    assert store.commits == commits
    assert len(store.list(c.FINANCE)) == 3
    assert len(store.list(c.DAILY_DEDUCTIONS)) == 1
    assert _balances(store) == {"s1": -25000, "s2": -25000, "s3": -25000}


def test_skip_reasons():
    store = _store()
    seed(
        store,
        c.COURSES,
        {
            "late": {"title": "Late", "days": "DCHJ", "time": "18:00 - 19:30", "price": 300000},
            "tue": {"title": "Tuesday", "days": "SPSH", "time": "09:00", "price": 300000},
            "notime": {"title": "No time", "days": "Har kuni", "time": "", "price": 300000},
            "free": {"title": "Free", "days": "Har kuni", "time": "09:00", "price": "bepul"},
        },
    )
    report = _engine(store).process_daily_deductions(load_snapshot(store), WEDNESDAY_1430)

    assert report.skipped == {
        "late": "not started",
        "tue": "no lesson today",
        "notime": "no start time",
        "free": "no fee",
    }
    assert [d.course_id for d in report.processed] == ["English-A1"]


def test_start_minute_boundary():
    store = _store()
    engine = _engine(store)

    early = engine.process_daily_deductions(load_snapshot(store), datetime(2025, 1, 8, 13, 59))
    on_time = engine.process_daily_deductions(load_snapshot(store), datetime(2025, 1, 8, 14, 0))

    assert early.skipped["English-A1"] == "not started"
    assert [d.course_id for d in on_time.processed] == ["English-A1"]


def test_course_without_students_still_gets_marker():
    store = _store()
    seed(store, c.COURSES, {"empty": {"title": "Empty", "days": "DCHJ", "time": "10:00", "price": 120000}})

    report = _engine(store).process_daily_deductions(load_snapshot(store), WEDNESDAY_1430)

    empty = next(d for d in report.processed if d.course_id == "empty")
    assert empty.students == 0
    assert store.get(c.DAILY_DEDUCTIONS, "empty_2025-01-08") is not None


def test_failed_batch_leaves_nothing_behind():
    store = _store()
    snapshot = load_snapshot(store)
    # Student disappears between snapshot and charge
    store.delete(c.STUDENTS, "s2")

    report = _engine(store).process_daily_deductions(snapshot, WEDNESDAY_1430)

    assert "English-A1" in report.failed
    assert store.list(c.FINANCE) == []
    assert store.list(c.DAILY_DEDUCTIONS) == []
    assert _balances(store) == {"s1": 0, "s3": 0}


class _StaleMarkerReads(MemoryDocumentStore):
    """Marker reads that miss a marker committed by another process."""

    def get(self, collection, doc_id):
        if collection == c.DAILY_DEDUCTIONS:
            return None
        return super().get(collection, doc_id)


def test_concurrent_marker_is_not_charged_twice():
    store = _StaleMarkerReads(clock=lambda: WEDNESDAY_1430)
    seed(store, c.COURSES, {"English-A1": {"title": "English-A1", "days": "DCHJ", "time": "14:00", "price": "300000"}})
    seed(store, c.STUDENTS, {"s1": {"name": "A", "assignedCourseId": "English-A1", "balance": 0}})
    engine = _engine(store)

    engine.process_daily_deductions(load_snapshot(store), WEDNESDAY_1430)
    report = engine.process_daily_deductions(load_snapshot(store), WEDNESDAY_1430)

    assert report.skipped == {"English-A1": "already processed"}
    assert store.get(c.STUDENTS, "s1").get("balance") == -25000
    assert len(store.list(c.FINANCE)) == 1


def test_processed_course_is_logged_as_activity():
    store = _store()
    _engine(store).process_daily_deductions(load_snapshot(store), WEDNESDAY_1430)

    actions = [a.get("action") for a in store.list(c.ACTIVITIES)]
    assert any("English-A1" in a and "3" in a for a in actions)


def test_trigger_runs_at_most_once_per_interval():
    store = _store()
    calls = []
    engine = _engine(store)

    def snapshot():
        calls.append(1)
        return load_snapshot(store)

    trigger = DeductionTrigger(engine, snapshot, interval=timedelta(minutes=10))

    assert trigger.maybe_run(WEDNESDAY_1430) is not None
    assert trigger.maybe_run(WEDNESDAY_1430 + timedelta(minutes=5)) is None
    assert trigger.maybe_run(WEDNESDAY_1430 + timedelta(minutes=10)) is not None
    assert len(calls) == 2


def test_text_balances_are_charged_from_their_value():
    store = _store()
    store.update(c.STUDENTS, "s1", {"balance": "150000"})

    _engine(store).process_daily_deductions(load_snapshot(store), WEDNESDAY_1430)

    assert _balances(store)["s1"] == 125000
