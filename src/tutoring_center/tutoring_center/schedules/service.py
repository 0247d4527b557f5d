from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from ..common.datetime_utils import iso_date, parse_start_time
from ..common.validators import require_non_empty
from ..core import constants as c
from ..core.exceptions import ValidationError
from ..session import SchoolSnapshot
from ..store.document_store import DocumentStore
from .model import ScheduleEntry

logger = logging.getLogger(__name__)


class ScheduleService:
    """One-off calendar slots, independent of a course's weekly pattern."""

    def __init__(self, store: DocumentStore):
        self._store = store

    def add_class(
        self,
        *,
        on: date,
        title: str,
        start_time: str,
        end_time: str = "",
        course_id: Optional[str] = None,
    ) -> str:
        title = require_non_empty(title, "title")
        if parse_start_time(start_time) is None:
            raise ValidationError("startTime must look like HH:MM")
        if end_time and parse_start_time(end_time) is None:
            raise ValidationError("endTime must look like HH:MM")

        fields: dict[str, Any] = {
            "date": iso_date(on),
            "startTime": start_time.strip(),
            "endTime": end_time.strip(),
            "title": title,
            "courseId": course_id or None,
        }
        class_id = self._store.create(c.SCHEDULE, fields)
        logger.info("Class scheduled: %s on %s at %s", title, fields["date"], fields["startTime"])
        return class_id

    def delete_class(self, class_id: str) -> None:
        self._store.delete(c.SCHEDULE, str(class_id))

    @staticmethod
    def classes_on(snapshot: SchoolSnapshot, on: date) -> list[ScheduleEntry]:
        return sorted((e for e in snapshot.schedule if e.date == on), key=lambda e: e.start_time)
