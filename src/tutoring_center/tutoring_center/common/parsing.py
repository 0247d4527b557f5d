"""Parse-on-read helpers for loosely typed document fields.

Prices and amounts arrive as numbers or as formatted strings such as
"500 000 so'm" or "+20,000 UZS". Parsers never raise: an unparseable price is
None and an unparseable amount is 0.
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional

_NON_DIGITS = re.compile(r"[^\d]")
_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def parse_price(value: Any) -> Optional[int]:
    """Monthly price with every non-digit character stripped."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value)
    digits = _NON_DIGITS.sub("", str(value))
    if not digits:
        return None
    return int(digits)


def parse_amount(value: Any) -> float:
    """Signed ledger amount; anything unreadable contributes 0."""

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return 0.0 if math.isnan(value) or math.isinf(value) else float(value)
    cleaned = _NON_NUMERIC.sub("", str(value))
    try:
        number = float(cleaned)
    except ValueError:
        return 0.0
    return 0.0 if math.isnan(number) or math.isinf(number) else number


def parse_number(value: Any, default: float = 0.0) -> float:
    """Plain numeric field (balance, hours) stored as number or numeric string."""

    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return default if math.isnan(number) or math.isinf(number) else number


def format_amount(value: float) -> str:
    """20000.0 -> '20,000', 12.5 -> '12.5'"""

    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def parse_enum(enum_cls, value: Any, default=None):
    """Enum member for a stored value, matched case-insensitively."""

    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return default
    for member in enum_cls:
        if member.value.lower() == value.strip().lower():
            return member
    return default


def as_text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)
