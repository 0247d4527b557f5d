from __future__ import annotations

from typing import Sequence

from .base import AttendanceFormatter, SyncRow


class DefaultFormatter(AttendanceFormatter):
    """One full row per student."""

    def format(self, rows: Sequence[SyncRow]) -> list[dict[str, str]]:
        return [r.to_dict() for r in rows]
