from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...courses.model import Course


class FeeCalculator(ABC):
    """Calculator interface (Strategy Pattern for per-lesson fees)."""

    @abstractmethod
    def daily_fee(self, course: Course) -> Optional[int]:
        """Fee charged per lesson, or None when no fee can be charged."""

        raise NotImplementedError
