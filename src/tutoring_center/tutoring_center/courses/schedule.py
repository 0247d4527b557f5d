"""Which weekdays a course meets on.

A course's `days` field is either a code (DCHJ = Mon/Wed/Fri, SPSH =
Tue/Thu/Sat, "Har kuni" = every day), free text such as "Du, Chor, Jum", or a
list of day tokens. Weekdays are ISO-style indexes: Monday=0 .. Sunday=6.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Iterable, Optional

from .model import Course, DaysDescriptor

ALL_DAYS = frozenset(range(7))
ODD_DAYS = frozenset({0, 2, 4})
EVEN_DAYS = frozenset({1, 3, 5})

WEEKDAY_ALIASES: dict[int, tuple[str, ...]] = {
    0: ("mon", "du", "dushanba", "d"),
    1: ("tue", "se", "seshanba", "s"),
    2: ("wed", "chor", "chorshanba", "ch", "cho"),
    3: ("thu", "pay", "payshanba", "p", "pa"),
    4: ("fri", "jum", "juma", "j", "ju"),
    5: ("sat", "shan", "shanba", "sh", "sha"),
    6: ("sun", "yak", "yakshanba", "y", "ya"),
}

DAY_CODES: dict[str, frozenset[int]] = {
    "dchj": ODD_DAYS,
    "toq": ODD_DAYS,
    "spsh": EVEN_DAYS,
    "juft": EVEN_DAYS,
    "daily": ALL_DAYS,
    "everyday": ALL_DAYS,
    "harkuni": ALL_DAYS,
}

_EVERY_DAY_PHRASES = ("har kuni", "every day", "daily")
_SPLIT_RE = re.compile(r"[,\s\-/]+")
# Aliases short enough to appear inside unrelated words only match exactly.
_MIN_CONTAINED_ALIAS = 3

_EXACT: dict[str, int] = {alias: day for day, aliases in WEEKDAY_ALIASES.items() for alias in aliases}
_CONTAINED = sorted(
    ((alias, day) for alias, day in _EXACT.items() if len(alias) >= _MIN_CONTAINED_ALIAS),
    key=lambda item: len(item[0]),
    reverse=True,
)


def weekday_of_token(token: str) -> Optional[int]:
    """Weekday named by a single token, or None.

    Exact alias first; otherwise the longest alias the token contains, so that
    "seshanba" is Tuesday even though it also contains "shanba".
    """

    t = token.strip().lower()
    if not t:
        return None
    if t in _EXACT:
        return _EXACT[t]
    for alias, day in _CONTAINED:
        if alias in t:
            return day
    return None


def _raw_parts(days: DaysDescriptor) -> list[str]:
    if days is None:
        return []
    if isinstance(days, (list, tuple, set, frozenset)):
        return [str(d) for d in days if d is not None]
    return [str(days)]


def lesson_weekdays(days: DaysDescriptor) -> frozenset[int]:
    """All weekdays a `days` descriptor covers. Unknown tokens are ignored."""

    found: set[int] = set()
    for part in _raw_parts(days):
        lowered = part.lower()
        if any(phrase in lowered for phrase in _EVERY_DAY_PHRASES):
            return ALL_DAYS

        for token in _SPLIT_RE.split(lowered):
            if not token:
                continue
            if token in DAY_CODES:
                found |= DAY_CODES[token]
                continue
            day = weekday_of_token(token)
            if day is not None:
                found.add(day)
    return frozenset(found)


def is_lesson_scheduled_on(course: Course, on: date) -> bool:
    if course is None or not course.days:
        return False
    return on.weekday() in lesson_weekdays(course.days)


def lessons_per_week(course: Course) -> int:
    return len(lesson_weekdays(course.days))


def courses_meeting_on(courses: Iterable[Course], on: date) -> list[Course]:
    return [x for x in courses if is_lesson_scheduled_on(x, on)]
