from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping

from ..activities.service import ActivityLog
from ..common.datetime_utils import localized_date
from ..common.parsing import parse_enum
from ..common.validators import require_non_empty
from ..core import constants as c
from ..core.enums import FinanceType
from ..core.exceptions import ValidationError
from ..session import SchoolSnapshot
from ..store.document_store import SERVER_TIMESTAMP, DocumentStore

logger = logging.getLogger(__name__)

_FIELDS = ("title", "amount", "type", "category", "studentId", "studentName", "courseId")


def total_revenue(snapshot: SchoolSnapshot) -> float:
    """Sum of every parsed ledger amount; unreadable amounts add nothing."""
    return sum(e.value for e in snapshot.finance)


class FinanceService:
    def __init__(
        self,
        store: DocumentStore,
        activities: ActivityLog,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._store = store
        self._activities = activities
        self._clock = clock

    def add_transaction(self, data: Mapping[str, Any]) -> str:
        unknown = set(data) - set(_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown transaction fields: {', '.join(sorted(unknown))}")

        fields = dict(data)
        fields["title"] = require_non_empty(fields.get("title"), "title")
        if fields.get("amount") in (None, ""):
            raise ValidationError("amount is required")
        if "type" in fields:
            tx_type = parse_enum(FinanceType, fields["type"])
            if tx_type is None:
                raise ValidationError(f"Unknown transaction type: {fields['type']}")
            fields["type"] = tx_type.value

        fields["date"] = localized_date(self._clock().date())
        fields["createdAt"] = SERVER_TIMESTAMP

        entry_id = self._store.create(c.FINANCE, fields)
        logger.info("Transaction added: %s %s", fields["title"], fields["amount"])
        self._activities.record(f"Added transaction: {fields['title']}")
        return entry_id

    def delete_transaction(self, entry_id: str) -> None:
        self._store.delete(c.FINANCE, str(entry_id))
        logger.info("Transaction deleted: %s", entry_id)
