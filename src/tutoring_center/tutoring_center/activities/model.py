from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import coerce_datetime
from ..common.parsing import as_text


@dataclass(frozen=True)
class Activity:
    """Audit trail entry shown in the dashboard feed."""

    id: str
    name: str
    action: str
    target: str
    time: str = ""
    created_at: Optional[datetime] = None
    icon: str = ""

    @classmethod
    def from_doc(cls, doc_id: str, data: Mapping[str, Any]) -> "Activity":
        return cls(
            id=str(doc_id),
            name=as_text(data.get("name")),
            action=as_text(data.get("action")),
            target=as_text(data.get("target")),
            time=as_text(data.get("time")),
            created_at=coerce_datetime(data.get("createdAt")),
            icon=as_text(data.get("icon")),
        )
