from __future__ import annotations

from dataclasses import dataclass

from ...core.enums import SheetsFormat
from .base import AttendanceFormatter
from .compact_format import CompactFormatter
from .default_format import DefaultFormatter
from .simple_format import SimpleFormatter


@dataclass
class FormatterFactory:
    """Factory Pattern: pick the payload formatter for the configured format."""

    def for_format(self, fmt: SheetsFormat | str | None) -> AttendanceFormatter:
        value = fmt.value if isinstance(fmt, SheetsFormat) else str(fmt or "").strip().lower()
        if value == SheetsFormat.SIMPLE.value:
            return SimpleFormatter()
        if value == SheetsFormat.COMPACT.value:
            return CompactFormatter()
        return DefaultFormatter()
