from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from ..core import constants as c
from ..core.exceptions import StoreError
from ..store.document_store import SERVER_TIMESTAMP, DocumentStore

logger = logging.getLogger(__name__)


class ActivityLog:
    """Audit trail. Recording is best effort and never fails the caller."""

    def __init__(self, store: DocumentStore, *, actor: str = "Admin", clock: Callable[[], datetime] = datetime.now):
        self._store = store
        self._actor = actor
        self._clock = clock

    def record(self, action: str, target: str = "System", *, icon: str = "notifications-outline") -> None:
        try:
            self._store.create(
                c.ACTIVITIES,
                {
                    "name": self._actor,
                    "action": action,
                    "target": target,
                    "time": self._clock().strftime("%H:%M:%S"),
                    "createdAt": SERVER_TIMESTAMP,
                    "icon": icon,
                },
            )
        except StoreError:
            logger.exception("Failed to record activity: %s", action)
