from __future__ import annotations

import math
from typing import Optional

from .base import FeeCalculator
from ...core.constants import DEFAULT_LESSONS_PER_MONTH, WEEKS_PER_MONTH
from ...courses.model import Course
from ...courses.schedule import lessons_per_week


def _positive(fee: float) -> Optional[int]:
    # half-up, not banker's rounding
    fee = math.floor(fee + 0.5)
    return fee if fee > 0 else None


class FixedLessonsFeeCalculator(FeeCalculator):
    """Standard rule: round(monthly price / 12), whatever the weekly pattern."""

    def __init__(self, lessons_per_month: int = DEFAULT_LESSONS_PER_MONTH):
        if lessons_per_month <= 0:
            raise ValueError("lessons_per_month must be positive")
        self.lessons_per_month = int(lessons_per_month)

    def daily_fee(self, course: Course) -> Optional[int]:
        price = course.monthly_price
        if price is None:
            return None
        return _positive(price / self.lessons_per_month)


class ScheduleAwareFeeCalculator(FeeCalculator):
    """Monthly price spread over the lessons the weekly pattern actually yields."""

    def daily_fee(self, course: Course) -> Optional[int]:
        price = course.monthly_price
        per_week = lessons_per_week(course)
        if price is None or per_week == 0:
            return None
        return _positive(price / (per_week * WEEKS_PER_MONTH))


def build_fee_calculator(rule: str, *, lessons_per_month: int = DEFAULT_LESSONS_PER_MONTH) -> FeeCalculator:
    if (rule or "fixed").strip().lower() == "schedule":
        return ScheduleAwareFeeCalculator()
    return FixedLessonsFeeCalculator(lessons_per_month)
