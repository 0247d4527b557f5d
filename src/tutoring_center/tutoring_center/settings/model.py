from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..common.parsing import as_text, parse_enum
from ..core.enums import SheetsFormat


@dataclass(frozen=True)
class AppSettings:
    attendance_format: SheetsFormat = SheetsFormat.DEFAULT
    enable_google_sheets: bool = False
    google_sheets_url: str = ""

    @property
    def sync_enabled(self) -> bool:
        return self.enable_google_sheets and bool(self.google_sheets_url.strip())

    @classmethod
    def from_doc(cls, data: Mapping[str, Any] | None, *, defaults: "AppSettings | None" = None) -> "AppSettings":
        base = defaults or cls()
        if not data:
            return base
        enabled = data.get("enableGoogleSheets", base.enable_google_sheets)
        return cls(
            attendance_format=parse_enum(SheetsFormat, data.get("attendanceFormat"), base.attendance_format),
            enable_google_sheets=enabled if isinstance(enabled, bool) else str(enabled).lower() in {"1", "true", "yes"},
            google_sheets_url=as_text(data.get("googleSheetsUrl"), base.google_sheets_url),
        )

    def to_doc(self) -> dict[str, Any]:
        return {
            "attendanceFormat": self.attendance_format.value,
            "enableGoogleSheets": self.enable_google_sheets,
            "googleSheetsUrl": self.google_sheets_url,
        }
