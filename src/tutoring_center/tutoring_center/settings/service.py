from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..activities.service import ActivityLog
from ..common.parsing import parse_enum
from ..core import constants as c
from ..core.enums import SheetsFormat
from ..core.exceptions import ValidationError
from ..store.document_store import DocumentStore
from .model import AppSettings

logger = logging.getLogger(__name__)

_FIELDS = ("attendanceFormat", "enableGoogleSheets", "googleSheetsUrl")


class SettingsService:
    """The single `settings/app` document; missing keys fall back to defaults."""

    def __init__(self, store: DocumentStore, activities: ActivityLog, *, defaults: Optional[AppSettings] = None):
        self._store = store
        self._activities = activities
        self._defaults = defaults or AppSettings()

    def get_settings(self) -> AppSettings:
        doc = self._store.get(c.SETTINGS, c.SETTINGS_DOC_ID)
        return AppSettings.from_doc(doc.data if doc else None, defaults=self._defaults)

    def update_settings(self, data: Mapping[str, Any]) -> AppSettings:
        unknown = set(data) - set(_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")

        fields = dict(data)
        if "attendanceFormat" in fields:
            fmt = parse_enum(SheetsFormat, fields["attendanceFormat"])
            if fmt is None:
                raise ValidationError(f"Unknown attendance format: {fields['attendanceFormat']}")
            fields["attendanceFormat"] = fmt.value
        if "enableGoogleSheets" in fields:
            fields["enableGoogleSheets"] = bool(fields["enableGoogleSheets"])
        if "googleSheetsUrl" in fields:
            url = str(fields["googleSheetsUrl"] or "").strip()
            if url and not url.startswith(("http://", "https://")):
                raise ValidationError("googleSheetsUrl must be an http(s) URL")
            fields["googleSheetsUrl"] = url

        self._store.set(c.SETTINGS, c.SETTINGS_DOC_ID, fields, merge=True)
        logger.info("Settings updated: %s", ", ".join(sorted(fields)))
        self._activities.record("Updated Google Sheets settings")
        return self.get_settings()
