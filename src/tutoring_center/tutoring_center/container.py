from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional

import httpx
from apscheduler.schedulers.background import BackgroundScheduler

from .activities.service import ActivityLog
from .attendance.repository import DocumentAttendanceRepository
from .attendance.service import AttendanceService
from .attendance.sync.factory import FormatterFactory
from .attendance.sync.outbox import SheetsSyncQueue, build_sync_scheduler
from .core import constants as c
from .courses.service import CourseService
from .database.connection import DBConfig, DatabaseConnection
from .finance.calculator.standard_calculator import build_fee_calculator
from .finance.deduction import DeductionEngine, DeductionTrigger
from .finance.service import FinanceService
from .leads.service import LeadService
from .schedules.service import ScheduleService
from .session import SchoolSession
from .settings.service import SettingsService
from .store.document_store import DocumentStore
from .store.memory_store import MemoryDocumentStore
from .store.mysql_store import MySQLDocumentStore
from .students.service import StudentService
from .subjects.service import SubjectService
from .teachers.service import TeacherService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    store: DocumentStore
    session: SchoolSession

    activities: ActivityLog
    attendance_repo: DocumentAttendanceRepository
    sync_queue: SheetsSyncQueue
    sync_scheduler: Optional[BackgroundScheduler]

    student_service: StudentService
    teacher_service: TeacherService
    course_service: CourseService
    subject_service: SubjectService
    schedule_service: ScheduleService
    finance_service: FinanceService
    lead_service: LeadService
    settings_service: SettingsService
    attendance_service: AttendanceService
    deduction_engine: DeductionEngine
    deduction_trigger: DeductionTrigger

    def close(self) -> None:
        if self.sync_scheduler is not None and self.sync_scheduler.running:
            self.sync_scheduler.shutdown(wait=False)
        self.session.close()
        self.sync_queue.close()


def build_store(settings: Any) -> DocumentStore:
    backend = str(getattr(settings, "STORE_BACKEND", "memory")).lower()
    if backend == "mysql":
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
        return MySQLDocumentStore(conn)
    return MemoryDocumentStore()


def build_container(
    settings: Any,
    *,
    store: Optional[DocumentStore] = None,
    http_client: Optional[httpx.Client] = None,
) -> Container:
    store = store if store is not None else build_store(settings)
    session = SchoolSession(store).open()
    activities = ActivityLog(store)

    sync_queue = SheetsSyncQueue(
        http_client,
        timeout=float(getattr(settings, "SHEETS_SYNC_TIMEOUT", c.DEFAULT_SYNC_TIMEOUT_SECONDS)),
        max_attempts=int(getattr(settings, "SHEETS_SYNC_MAX_ATTEMPTS", c.DEFAULT_SYNC_MAX_ATTEMPTS)),
        backoff=timedelta(seconds=int(getattr(settings, "SHEETS_SYNC_BACKOFF_SECONDS", c.DEFAULT_SYNC_BACKOFF_SECONDS))),
    )
    sync_scheduler = None
    if getattr(settings, "SHEETS_SYNC_WORKER", True):
        sync_scheduler = build_sync_scheduler(
            sync_queue,
            interval=float(getattr(settings, "SHEETS_SYNC_INTERVAL", c.DEFAULT_SYNC_WORKER_INTERVAL_SECONDS)),
        )
        sync_scheduler.start()

    calculator = build_fee_calculator(
        getattr(settings, "FEE_RULE", "fixed"),
        lessons_per_month=int(getattr(settings, "LESSONS_PER_MONTH", c.DEFAULT_LESSONS_PER_MONTH)),
    )
    deduction_engine = DeductionEngine(store, activities, calculator=calculator)
    deduction_trigger = DeductionTrigger(
        deduction_engine,
        session.current,
        interval=timedelta(minutes=int(getattr(settings, "DEDUCTION_CHECK_MINUTES", c.DEFAULT_DEDUCTION_CHECK_MINUTES))),
    )

    attendance_repo = DocumentAttendanceRepository(store)
    attendance_service = AttendanceService(
        attendance_repo,
        activities,
        sync_queue=sync_queue,
        formatter_factory=FormatterFactory(),
    )

    logger.info("Container ready (store=%s, fee=%s)", type(store).__name__, type(calculator).__name__)

    return Container(
        store=store,
        session=session,
        activities=activities,
        attendance_repo=attendance_repo,
        sync_queue=sync_queue,
        sync_scheduler=sync_scheduler,
        student_service=StudentService(store, activities),
        teacher_service=TeacherService(store, activities),
        course_service=CourseService(store, activities),
        subject_service=SubjectService(store),
        schedule_service=ScheduleService(store),
        finance_service=FinanceService(store, activities),
        lead_service=LeadService(store, activities),
        settings_service=SettingsService(store, activities),
        attendance_service=attendance_service,
        deduction_engine=deduction_engine,
        deduction_trigger=deduction_trigger,
    )
