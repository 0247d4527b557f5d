from __future__ import annotations

import logging
from typing import Any, Mapping

from ..activities.service import ActivityLog
from ..common.validators import require_non_empty
from ..core import constants as c
from ..core.enums import StudentStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..store.document_store import DocumentStore
from .model import Course

logger = logging.getLogger(__name__)

_COURSE_FIELDS = (
    "title",
    "instructor",
    "instructorId",
    "price",
    "days",
    "time",
    "startDate",
    "endDate",
    "status",
    "studentsCount",
)


def _clean(data: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(data) - set(_COURSE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown course fields: {', '.join(sorted(unknown))}")
    out = dict(data)
    if "title" in out:
        out["title"] = require_non_empty(out["title"], "title")
    if "status" in out and hasattr(out["status"], "value"):
        out["status"] = out["status"].value
    return out


class CourseService:
    """Course CRUD. Changes that touch students are committed in one batch."""

    def __init__(self, store: DocumentStore, activities: ActivityLog):
        self._store = store
        self._activities = activities

    def get(self, course_id: str) -> Course:
        doc = self._store.get(c.COURSES, str(course_id))
        if doc is None:
            raise NotFoundError("Course not found")
        return Course.from_doc(doc.id, doc.data)

    def add_course(self, data: Mapping[str, Any]) -> str:
        fields = _clean(data)
        if "title" not in fields:
            raise ValidationError("title is required")
        course_id = self._store.create(c.COURSES, fields)
        logger.info("Course created: %s (%s)", fields["title"], course_id)
        self._activities.record(f"Created new course: {fields['title']}")
        return course_id

    def update_course(self, course_id: str, data: Mapping[str, Any]) -> None:
        """Update a course; a new title is copied onto every enrolled student."""

        fields = _clean(data)
        current = self.get(course_id)

        batch = self._store.batch()
        batch.update(c.COURSES, current.id, fields)

        renamed = 0
        new_title = fields.get("title")
        if new_title and new_title != current.title:
            for doc in self._store.query(c.STUDENTS, {"assignedCourseId": current.id}):
                batch.update(c.STUDENTS, doc.id, {"course": new_title})
                renamed += 1
        batch.commit()

        if renamed:
            logger.info("Course %s renamed to %s; %d student label(s) updated", current.id, new_title, renamed)
        self._activities.record(f"Updated course: {new_title or current.title}")

    def delete_course(self, course_id: str) -> int:
        """Delete a course and unassign its students. Returns how many were unassigned."""

        current = self.get(course_id)
        enrolled = self._store.query(c.STUDENTS, {"assignedCourseId": current.id})

        batch = self._store.batch()
        for doc in enrolled:
            batch.update(
                c.STUDENTS,
                doc.id,
                {
                    "assignedCourseId": None,
                    "course": c.NOT_ASSIGNED,
                    "status": StudentStatus.PENDING.value,
                },
            )
        batch.delete(c.COURSES, current.id)
        batch.commit()

        logger.info("Course deleted: %s (%d student(s) unassigned)", current.title, len(enrolled))
        self._activities.record(f"Deleted course: {current.title}")
        return len(enrolled)

