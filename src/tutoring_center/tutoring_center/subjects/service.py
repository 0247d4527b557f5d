from __future__ import annotations

from typing import Any, Mapping

from ..common.validators import require_non_empty
from ..core import constants as c
from ..core.exceptions import NotFoundError, ValidationError
from ..store.document_store import DocumentStore


def _clean(data: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(data) - {"title", "price"}
    if unknown:
        raise ValidationError(f"Unknown subject fields: {', '.join(sorted(unknown))}")
    out = dict(data)
    if "title" in out:
        out["title"] = require_non_empty(out["title"], "title")
    return out


class SubjectService:
    def __init__(self, store: DocumentStore):
        self._store = store

    def add_subject(self, data: Mapping[str, Any]) -> str:
        fields = _clean(data)
        if "title" not in fields:
            raise ValidationError("title is required")
        return self._store.create(c.SUBJECTS, fields)

    def update_subject(self, subject_id: str, data: Mapping[str, Any]) -> None:
        fields = _clean(data)
        if self._store.get(c.SUBJECTS, str(subject_id)) is None:
            raise NotFoundError("Subject not found")
        if fields:
            self._store.update(c.SUBJECTS, str(subject_id), fields)

    def delete_subject(self, subject_id: str) -> None:
        self._store.delete(c.SUBJECTS, str(subject_id))
