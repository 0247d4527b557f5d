from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..activities.service import ActivityLog
from ..common.datetime_utils import fractional_hour, iso_date, localized_date, parse_start_time
from ..core import constants as c
from ..core.enums import FinanceType
from ..core.exceptions import AlreadyExistsError, DomainError, StoreError
from ..courses.model import Course
from ..courses.schedule import is_lesson_scheduled_on
from ..session import SchoolSnapshot
from ..store.document_store import SERVER_TIMESTAMP, DocumentStore
from .calculator.base import FeeCalculator
from .calculator.standard_calculator import FixedLessonsFeeCalculator
from .model import DailyDeductionMarker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CourseDeduction:
    course_id: str
    course_title: str
    daily_fee: int
    students: int


@dataclass
class DeductionReport:
    """Outcome of one pass; skipped maps course id -> reason."""

    date: str
    processed: list[CourseDeduction] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def total_charged(self) -> int:
        return sum(d.daily_fee * d.students for d in self.processed)


class DeductionEngine:
    """Charges each enrolled student once per course per lesson day.

    A course is charged when it meets today and its start time has passed.
    Balance deltas, ledger entries and the (course, date) marker are written in
    one batch; the marker is a create-if-absent write, so a concurrent or
    repeated pass cannot charge the same course twice on the same day.
    """

    def __init__(
        self,
        store: DocumentStore,
        activities: ActivityLog,
        *,
        calculator: Optional[FeeCalculator] = None,
    ):
        self._store = store
        self._activities = activities
        self._calculator = calculator or FixedLessonsFeeCalculator()

    def process_daily_deductions(self, snapshot: SchoolSnapshot, now: datetime) -> DeductionReport:
        report = DeductionReport(date=iso_date(now.date()))

        for course in snapshot.courses:
            reason = self._skip_reason(course, now)
            if reason:
                report.skipped[course.id] = reason
                continue

            fee = self._calculator.daily_fee(course)
            if fee is None:
                report.skipped[course.id] = "no fee"
                continue

            marker_id = DailyDeductionMarker.key(course.id, report.date)
            try:
                if self._store.get(c.DAILY_DEDUCTIONS, marker_id) is not None:
                    report.skipped[course.id] = "already processed"
                    continue
                result = self._charge(course, fee, marker_id, snapshot, now)
            except AlreadyExistsError:
                logger.info("Deduction for %s on %s was committed concurrently", course.title, report.date)
                report.skipped[course.id] = "already processed"
                continue
            except (StoreError, DomainError) as e:
                logger.exception("Auto-deduction failed for %s (%s)", course.title, course.id)
                report.failed[course.id] = str(e)
                continue

            report.processed.append(result)
            self._activities.record(
                f"Avtomatik yechim: {course.title} guruhidan {result.students} ta o'quvchidan yechildi"
            )

        if report.processed:
            logger.info(
                "Auto-deduction %s: %d course(s), %d charged",
                report.date,
                len(report.processed),
                report.total_charged,
            )
        return report

    def _skip_reason(self, course: Course, now: datetime) -> Optional[str]:
        if not is_lesson_scheduled_on(course, now.date()):
            return "no lesson today"
        start = parse_start_time(course.time)
        if start is None:
            return "no start time"
        if fractional_hour(now) < fractional_hour(start):
            return "not started"
        return None

    def _charge(
        self,
        course: Course,
        fee: int,
        marker_id: str,
        snapshot: SchoolSnapshot,
        now: datetime,
    ) -> CourseDeduction:
        enrolled = snapshot.enrolled_in(course.id)
        batch = self._store.batch()

        for student in enrolled:
            batch.increment(c.STUDENTS, student.id, "balance", -fee)
            batch.create(
                c.FINANCE,
                {
                    "title": c.AUTO_DEDUCTION_TITLE.format(title=course.title),
                    "amount": f"-{fee}",
                    "type": FinanceType.EXPENSE.value,
                    "category": c.AUTO_DEDUCTION_CATEGORY,
                    "date": localized_date(now.date()),
                    "studentId": student.id,
                    "studentName": student.name,
                    "courseId": course.id,
                    "createdAt": SERVER_TIMESTAMP,
                },
            )

        batch.create(
            c.DAILY_DEDUCTIONS,
            {"courseId": course.id, "date": iso_date(now.date()), "processedAt": SERVER_TIMESTAMP},
            doc_id=marker_id,
        )
        batch.commit()

        logger.info("Deducted %d from %d student(s) of %s", fee, len(enrolled), course.title)
        return CourseDeduction(course_id=course.id, course_title=course.title, daily_fee=fee, students=len(enrolled))


class DeductionTrigger:
    """Runs the engine from request hooks, at most once per interval."""

    def __init__(
        self,
        engine: DeductionEngine,
        snapshot_source: Callable[[], SchoolSnapshot],
        *,
        interval: timedelta = timedelta(minutes=c.DEFAULT_DEDUCTION_CHECK_MINUTES),
    ):
        self._engine = engine
        self._snapshot_source = snapshot_source
        self._interval = interval
        self._last_run: Optional[datetime] = None
        self._lock = threading.Lock()

    def maybe_run(self, now: datetime) -> Optional[DeductionReport]:
        with self._lock:
            if self._last_run is not None and now - self._last_run < self._interval:
                return None
            self._last_run = now
        return self._engine.process_daily_deductions(self._snapshot_source(), now)
