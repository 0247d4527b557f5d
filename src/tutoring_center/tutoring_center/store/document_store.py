from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence

from ..common.parsing import parse_number


class _ServerTimestamp:
    """Placeholder replaced by the store clock when a write is applied."""

    _instance: Optional["_ServerTimestamp"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


def new_id() -> str:
    return uuid.uuid4().hex[:20]


def apply_delta(old: Any, delta: float) -> float:
    """Numeric increment; numeric strings keep their value, anything unreadable counts as 0."""

    value = parse_number(old) + delta
    return int(value) if float(value).is_integer() else value


@dataclass(frozen=True)
class Document:
    id: str
    data: Mapping[str, Any]

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


@dataclass(frozen=True)
class BatchOp:
    kind: str  # create | set | update | increment | delete
    collection: str
    doc_id: str
    fields: Mapping[str, Any] = field(default_factory=dict)
    merge: bool = False
    delta: float = 0


class WriteBatch:
    """Collects writes and commits them as one all-or-nothing unit."""

    def __init__(self, committer: Callable[[Sequence[BatchOp]], None]):
        self._committer = committer
        self._ops: list[BatchOp] = []
        self._committed = False

    @property
    def ops(self) -> Sequence[BatchOp]:
        return tuple(self._ops)

    def __len__(self) -> int:
        return len(self._ops)

    def create(self, collection: str, fields: Mapping[str, Any], *, doc_id: Optional[str] = None) -> str:
        """Create-if-absent; the whole batch fails if doc_id already exists."""

        doc_id = doc_id or new_id()
        self._ops.append(BatchOp("create", collection, doc_id, dict(fields)))
        return doc_id

    def set(self, collection: str, doc_id: str, fields: Mapping[str, Any], *, merge: bool = False) -> None:
        self._ops.append(BatchOp("set", collection, doc_id, dict(fields), merge=merge))

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        self._ops.append(BatchOp("update", collection, doc_id, dict(fields)))

    def increment(self, collection: str, doc_id: str, field_name: str, delta: float) -> None:
        """Commutative numeric delta; a missing or unreadable field counts as 0."""

        self._ops.append(BatchOp("increment", collection, doc_id, {field_name: None}, delta=delta))

    def delete(self, collection: str, doc_id: str) -> None:
        self._ops.append(BatchOp("delete", collection, doc_id))

    def commit(self) -> None:
        if self._committed:
            raise RuntimeError("Batch already committed")
        self._committed = True
        if self._ops:
            self._committer(tuple(self._ops))


class DocumentStore(Protocol):
    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        raise NotImplementedError

    def list(self, collection: str, *, order_by: Optional[str] = None, descending: bool = False) -> Sequence[Document]:
        raise NotImplementedError

    def query(self, collection: str, filters: Mapping[str, Any]) -> Sequence[Document]:
        """Documents whose fields equal every filter value."""

        raise NotImplementedError

    def create(self, collection: str, fields: Mapping[str, Any], *, doc_id: Optional[str] = None) -> str:
        raise NotImplementedError

    def set(self, collection: str, doc_id: str, fields: Mapping[str, Any], *, merge: bool = False) -> None:
        raise NotImplementedError

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> None:
        raise NotImplementedError

    def batch(self) -> WriteBatch:
        raise NotImplementedError


def sort_documents(docs: list[Document], order_by: Optional[str], descending: bool) -> list[Document]:
    """Order like the live subscriptions: missing values last, mixed types by text."""

    if not order_by:
        return docs

    present = [d for d in docs if d.data.get(order_by) is not None]
    missing = [d for d in docs if d.data.get(order_by) is None]

    def key(d: Document):
        v = d.data.get(order_by)
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return (0, v, "")
        return (1, 0, str(v))

    present.sort(key=key, reverse=descending)
    return present + missing
