from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..common.parsing import as_text, parse_price


@dataclass(frozen=True)
class Subject:
    """Course template used to prefill new courses."""

    id: str
    title: str
    price: Optional[int] = None

    @classmethod
    def from_doc(cls, doc_id: str, data: Mapping[str, Any]) -> "Subject":
        return cls(id=str(doc_id), title=as_text(data.get("title")), price=parse_price(data.get("price")))
