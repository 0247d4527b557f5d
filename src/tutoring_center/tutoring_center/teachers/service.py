from __future__ import annotations

import logging
from typing import Any, Mapping

from ..activities.service import ActivityLog
from ..common.validators import require_non_empty
from ..core import constants as c
from ..core.exceptions import NotFoundError, ValidationError
from ..store.document_store import DocumentStore
from .model import Teacher

logger = logging.getLogger(__name__)

_FIELDS = ("name", "subject", "phone", "salaryType", "weeklyHours", "assignedCourses", "status")


def _clean(data: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(data) - set(_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown teacher fields: {', '.join(sorted(unknown))}")
    out = dict(data)
    if "name" in out:
        out["name"] = require_non_empty(out["name"], "name")
    return out


class TeacherService:
    def __init__(self, store: DocumentStore, activities: ActivityLog):
        self._store = store
        self._activities = activities

    def get(self, teacher_id: str) -> Teacher:
        doc = self._store.get(c.TEACHERS, str(teacher_id))
        if doc is None:
            raise NotFoundError("Teacher not found")
        return Teacher.from_doc(doc.id, doc.data)

    def add_teacher(self, data: Mapping[str, Any]) -> str:
        fields = _clean(data)
        if "name" not in fields:
            raise ValidationError("name is required")
        teacher_id = self._store.create(c.TEACHERS, fields)
        logger.info("Teacher added: %s (%s)", fields["name"], teacher_id)
        self._activities.record(f"Added teacher: {fields['name']}")
        return teacher_id

    def update_teacher(self, teacher_id: str, data: Mapping[str, Any]) -> None:
        fields = _clean(data)
        current = self.get(teacher_id)
        if fields:
            self._store.update(c.TEACHERS, current.id, fields)

    def delete_teacher(self, teacher_id: str) -> None:
        current = self.get(teacher_id)
        self._store.delete(c.TEACHERS, current.id)
        logger.info("Teacher deleted: %s (%s)", current.name, current.id)
