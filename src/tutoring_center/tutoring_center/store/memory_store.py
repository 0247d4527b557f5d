from __future__ import annotations

import copy
import logging
import threading
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..core.exceptions import AlreadyExistsError, NotFoundError, StoreError
from .document_store import SERVER_TIMESTAMP, BatchOp, Document, WriteBatch, apply_delta, new_id, sort_documents

logger = logging.getLogger(__name__)

Listener = Callable[[Sequence[Document]], None]


class MemoryDocumentStore:
    """In-process document store with live per-collection subscriptions.

    Batches are applied to a copy of the data and swapped in only when every
    operation succeeded, so a failing batch leaves nothing behind.
    """

    def __init__(self, *, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock
        self._data: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self._listeners: dict[str, list[tuple[Listener, Optional[str], bool]]] = defaultdict(list)
        self._lock = threading.RLock()
        self.commits = 0

    # -- reads ---------------------------------------------------------------

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            data = self._data.get(collection, {}).get(doc_id)
            return Document(doc_id, copy.deepcopy(data)) if data is not None else None

    def list(self, collection: str, *, order_by: Optional[str] = None, descending: bool = False) -> Sequence[Document]:
        with self._lock:
            docs = [Document(k, copy.deepcopy(v)) for k, v in self._data.get(collection, {}).items()]
        return sort_documents(docs, order_by, descending)

    def query(self, collection: str, filters: Mapping[str, Any]) -> Sequence[Document]:
        with self._lock:
            return [
                Document(k, copy.deepcopy(v))
                for k, v in self._data.get(collection, {}).items()
                if all(v.get(f) == expected for f, expected in filters.items())
            ]

    # -- single writes ---------------------------------------------------------

    def create(self, collection: str, fields: Mapping[str, Any], *, doc_id: Optional[str] = None) -> str:
        b = self.batch()
        doc_id = b.create(collection, fields, doc_id=doc_id)
        b.commit()
        return doc_id

    def set(self, collection: str, doc_id: str, fields: Mapping[str, Any], *, merge: bool = False) -> None:
        b = self.batch()
        b.set(collection, doc_id, fields, merge=merge)
        b.commit()

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        b = self.batch()
        b.update(collection, doc_id, fields)
        b.commit()

    def delete(self, collection: str, doc_id: str) -> None:
        b = self.batch()
        b.delete(collection, doc_id)
        b.commit()

    def batch(self) -> WriteBatch:
        return WriteBatch(self._commit)

    # -- subscriptions ----------------------------------------------------------

    def watch(
        self,
        collection: str,
        callback: Listener,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> Callable[[], None]:
        """Call back with the full ordered collection now and after every change."""

        entry = (callback, order_by, descending)
        with self._lock:
            self._listeners[collection].append(entry)
        callback(self.list(collection, order_by=order_by, descending=descending))

        def unsubscribe() -> None:
            with self._lock:
                if entry in self._listeners[collection]:
                    self._listeners[collection].remove(entry)

        return unsubscribe

    # -- internals ---------------------------------------------------------------

    def _resolve(self, fields: Mapping[str, Any], now: datetime) -> dict[str, Any]:
        return {k: (now if v is SERVER_TIMESTAMP else copy.deepcopy(v)) for k, v in fields.items()}

    def _commit(self, ops: Sequence[BatchOp]) -> None:
        with self._lock:
            now = self._clock()
            staged = {c: dict(docs) for c, docs in self._data.items()}
            touched: set[str] = set()

            for op in ops:
                docs = staged.setdefault(op.collection, {})
                current = docs.get(op.doc_id)

                if op.kind == "create":
                    if current is not None:
                        raise AlreadyExistsError(f"{op.collection}/{op.doc_id} already exists")
                    docs[op.doc_id] = self._resolve(op.fields, now)
                elif op.kind == "set":
                    base = dict(current) if (op.merge and current is not None) else {}
                    base.update(self._resolve(op.fields, now))
                    docs[op.doc_id] = base
                elif op.kind == "update":
                    if current is None:
                        raise NotFoundError(f"{op.collection}/{op.doc_id} not found")
                    docs[op.doc_id] = {**current, **self._resolve(op.fields, now)}
                elif op.kind == "increment":
                    if current is None:
                        raise NotFoundError(f"{op.collection}/{op.doc_id} not found")
                    (field_name,) = op.fields.keys()
                    new_value = apply_delta(current.get(field_name), op.delta)
                    docs[op.doc_id] = {**current, field_name: new_value}
                elif op.kind == "delete":
                    docs.pop(op.doc_id, None)
                else:
                    raise StoreError(f"Unsupported batch operation: {op.kind}")

                touched.add(op.collection)

            self._data = defaultdict(dict, staged)
            self.commits += 1
            listeners = [(c, list(self._listeners.get(c, []))) for c in touched]

        for collection, entries in listeners:
            for callback, order_by, descending in entries:
                try:
                    callback(self.list(collection, order_by=order_by, descending=descending))
                except Exception:
                    logger.exception("Snapshot listener for %s failed", collection)


def seed(store: MemoryDocumentStore, collection: str, docs: Mapping[str, Mapping[str, Any]]) -> None:
    """Load fixture documents keyed by id (tests and demo data)."""

    b = store.batch()
    for doc_id, fields in docs.items():
        b.set(collection, doc_id or new_id(), fields)
    b.commit()
