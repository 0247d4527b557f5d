from __future__ import annotations

from typing import Sequence

from .base import AttendanceFormatter, SyncRow


class CompactFormatter(AttendanceFormatter):
    """Names of who came, plus who did not and why."""

    def format(self, rows: Sequence[SyncRow]) -> dict:
        return {
            "present": [r.name for r in rows if r.is_present],
            "absent": [{"name": r.name, "reason": r.reason} for r in rows if r.is_absent],
            "total": len(rows),
        }
