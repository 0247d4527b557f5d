from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence

from ...core.enums import MarkStatus


@dataclass(frozen=True)
class SyncRow:
    id: str
    name: str
    status: str
    reason: str
    note: str
    homework: str

    @property
    def is_present(self) -> bool:
        return self.status.lower() == MarkStatus.PRESENT.value.lower()

    @property
    def is_absent(self) -> bool:
        return self.status.lower() == MarkStatus.ABSENT.value.lower()

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "reason": self.reason,
            "note": self.note,
            "homework": self.homework,
        }


class AttendanceFormatter(ABC):
    """Strategy Pattern: shape of the `attendance` field sent to the sheet."""

    @abstractmethod
    def format(self, rows: Sequence[SyncRow]) -> Any:
        raise NotImplementedError
