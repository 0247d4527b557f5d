from __future__ import annotations

from typing import Sequence

from .base import AttendanceFormatter, SyncRow


class SimpleFormatter(AttendanceFormatter):
    """Aggregate counts only."""

    def format(self, rows: Sequence[SyncRow]) -> dict[str, int]:
        return {
            "present": sum(1 for r in rows if r.is_present),
            "absent": sum(1 for r in rows if r.is_absent),
            "total": len(rows),
        }
