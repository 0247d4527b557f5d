from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from ..core.constants import ATTENDANCE
from ..store.document_store import DocumentStore
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def find(self, course_id: str, date_key: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_if_absent(self, record_id: str, fields: Mapping[str, Any]) -> AttendanceRecord:
        """Raises AlreadyExistsError when record_id is taken."""

        raise NotImplementedError

    def replace(self, record_id: str, fields: Mapping[str, Any]) -> AttendanceRecord:
        """Overwrite the given top-level fields (the whole students map included)."""

        raise NotImplementedError


class DocumentAttendanceRepository:
    def __init__(self, store: DocumentStore):
        self._store = store

    def _load(self, record_id: str) -> AttendanceRecord:
        doc = self._store.get(ATTENDANCE, record_id)
        return AttendanceRecord.from_doc(record_id, doc.data if doc else {})

    def find(self, course_id: str, date_key: str) -> Optional[AttendanceRecord]:
        doc = self._store.get(ATTENDANCE, AttendanceRecord.key(course_id, date_key))
        if doc is not None:
            return AttendanceRecord.from_doc(doc.id, doc.data)

        # Records created before ids were derived from (course, date)
        docs = self._store.query(ATTENDANCE, {"courseId": course_id, "date": date_key})
        if not docs:
            return None
        records = [AttendanceRecord.from_doc(d.id, d.data) for d in docs]
        records.sort(key=lambda r: (r.timestamp or 0, r.id))
        return records[0]

    def create_if_absent(self, record_id: str, fields: Mapping[str, Any]) -> AttendanceRecord:
        self._store.create(ATTENDANCE, fields, doc_id=record_id)
        return self._load(record_id)

    def replace(self, record_id: str, fields: Mapping[str, Any]) -> AttendanceRecord:
        self._store.set(ATTENDANCE, record_id, fields, merge=True)
        return self._load(record_id)
