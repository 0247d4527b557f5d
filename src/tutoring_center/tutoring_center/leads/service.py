from __future__ import annotations

import logging
from typing import Any, Mapping

from ..activities.service import ActivityLog
from ..common.parsing import parse_enum
from ..common.validators import require_non_empty
from ..core import constants as c
from ..core.enums import LeadStatus, StudentStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..store.document_store import SERVER_TIMESTAMP, DocumentStore
from .model import Lead

logger = logging.getLogger(__name__)

_FIELDS = ("name", "phone", "source", "interestedCourseId", "courseName", "notes")


def _clean(data: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(data) - set(_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown lead fields: {', '.join(sorted(unknown))}")
    out = dict(data)
    if "name" in out:
        out["name"] = require_non_empty(out["name"], "name")
    return out


def _status(value: LeadStatus | str) -> LeadStatus:
    status = parse_enum(LeadStatus, value)
    if status is None:
        raise ValidationError(f"Unknown lead status: {value}")
    return status


class LeadService:
    """Prospective students and their conversion into enrolled students."""

    def __init__(self, store: DocumentStore, activities: ActivityLog):
        self._store = store
        self._activities = activities

    def get(self, lead_id: str) -> Lead:
        doc = self._store.get(c.LEADS, str(lead_id))
        if doc is None:
            raise NotFoundError("Lead not found")
        return Lead.from_doc(doc.id, doc.data)

    def add_lead(self, data: Mapping[str, Any]) -> str:
        fields = _clean(data)
        if "name" not in fields:
            raise ValidationError("name is required")
        fields["status"] = LeadStatus.NEW.value
        fields["createdAt"] = SERVER_TIMESTAMP

        lead_id = self._store.create(c.LEADS, fields)
        logger.info("Lead added: %s (%s)", fields["name"], lead_id)
        self._activities.record(f"Added new lead: {fields['name']}")
        return lead_id

    def update_lead(self, lead_id: str, data: Mapping[str, Any]) -> None:
        fields = _clean(data)
        current = self.get(lead_id)
        if fields:
            self._store.update(c.LEADS, current.id, fields)

    def update_lead_status(self, lead_id: str, status: LeadStatus | str) -> None:
        new_status = _status(status)
        current = self.get(lead_id)
        self._store.update(c.LEADS, current.id, {"status": new_status.value})
        logger.info("Lead %s: %s -> %s", current.name, current.status.value, new_status.value)

    def delete_lead(self, lead_id: str) -> None:
        self._store.delete(c.LEADS, str(lead_id))

    def convert_to_student(self, lead_id: str) -> str:
        """Enroll a lead. The new student and the Registered lead commit together."""

        lead = self.get(lead_id)
        if lead.converted_student_id:
            raise ValidationError(f"{lead.name} is already a student")

        course_id = lead.interested_course_id
        course_doc = self._store.get(c.COURSES, course_id) if course_id else None
        if course_doc is None:
            course_id = None

        batch = self._store.batch()
        student_id = batch.create(
            c.STUDENTS,
            {
                "name": lead.name,
                "phone": lead.phone,
                "assignedCourseId": course_id,
                "course": str(course_doc.get("title")) if course_doc else c.UNASSIGNED_LABEL,
                "status": (StudentStatus.ACTIVE if course_id else StudentStatus.WAITING).value,
                "balance": 0,
                "attendanceRate": 100,
                "createdAt": SERVER_TIMESTAMP,
            },
        )
        batch.update(
            c.LEADS,
            lead.id,
            {"status": LeadStatus.REGISTERED.value, "convertedStudentId": student_id},
        )
        batch.commit()

        logger.info("Lead %s converted to student %s", lead.name, student_id)
        self._activities.record(f"Lead converted: {lead.name}")
        return student_id
