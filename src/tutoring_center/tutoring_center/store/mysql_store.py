from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import AlreadyExistsError, NotFoundError, StoreError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, json_path, load_json
from .document_store import SERVER_TIMESTAMP, BatchOp, Document, WriteBatch, apply_delta, new_id, sort_documents

logger = logging.getLogger(__name__)


class MySQLDocumentStore:
    """Document collections kept as JSON rows in a single MySQL table.

    Each batch runs in one transaction. Rows touched by update/increment are
    read with SELECT ... FOR UPDATE so deltas are applied to the latest value.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, table: str = "documents"):
        self._conn_factory = conn_factory
        self._table = table

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"SELECT doc_id, data FROM {self._table} WHERE collection=%s AND doc_id=%s",
                    (collection, doc_id),
                )
                r = fetchone(cur)
        except mysql.connector.Error as e:
            raise StoreError(f"Failed to read {collection}/{doc_id}") from e
        return Document(r["doc_id"], load_json(r["data"])) if r else None

    def list(self, collection: str, *, order_by: Optional[str] = None, descending: bool = False) -> Sequence[Document]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"SELECT doc_id, data FROM {self._table} WHERE collection=%s", (collection,))
                rows = fetchall(cur)
        except mysql.connector.Error as e:
            raise StoreError(f"Failed to list {collection}") from e
        docs = [Document(r["doc_id"], load_json(r["data"])) for r in rows]
        return sort_documents(docs, order_by, descending)

    def query(self, collection: str, filters: Mapping[str, Any]) -> Sequence[Document]:
        clauses = ["collection=%s"]
        params: list[object] = [collection]
        for field_name, expected in filters.items():
            clauses.append("JSON_EXTRACT(data, %s) = CAST(%s AS JSON)")
            params.extend([json_path(field_name), dump_json(expected)])

        where = " AND ".join(clauses)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"SELECT doc_id, data FROM {self._table} WHERE {where}", tuple(params))
                rows = fetchall(cur)
        except mysql.connector.Error as e:
            raise StoreError(f"Failed to query {collection}") from e
        return [Document(r["doc_id"], load_json(r["data"])) for r in rows]

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

    # -- internals ---------------------------------------------------------------

    def _locked(self, cur, op: BatchOp) -> Optional[dict[str, Any]]:
        cur.execute(
            f"SELECT data FROM {self._table} WHERE collection=%s AND doc_id=%s FOR UPDATE",
            (op.collection, op.doc_id),
        )
        r = fetchone(cur)
        return load_json(r["data"]) if r else None

    def _upsert(self, cur, op: BatchOp, data: Mapping[str, Any]) -> None:
        cur.execute(
            f"""
            INSERT INTO {self._table}(collection, doc_id, data)
            VALUES(%s,%s,%s)
            ON DUPLICATE KEY UPDATE data=VALUES(data)
            """,
            (op.collection, op.doc_id, dump_json(data)),
        )

    def _commit(self, ops: Sequence[BatchOp]) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("SELECT NOW(6) AS now")
                now = fetchone(cur)["now"]

                def resolve(fields: Mapping[str, Any]) -> dict[str, Any]:
                    return {k: (now if v is SERVER_TIMESTAMP else v) for k, v in fields.items()}

                for op in ops:
                    if op.kind == "create":
                        try:
                            cur.execute(
                                f"INSERT INTO {self._table}(collection, doc_id, data) VALUES(%s,%s,%s)",
                                (op.collection, op.doc_id or new_id(), dump_json(resolve(op.fields))),
                            )
                        except mysql.connector.IntegrityError as e:
                            if e.errno == errorcode.ER_DUP_ENTRY:
                                raise AlreadyExistsError(f"{op.collection}/{op.doc_id} already exists") from e
                            raise
                    elif op.kind == "set":
                        base = (self._locked(cur, op) or {}) if op.merge else {}
                        base.update(resolve(op.fields))
                        self._upsert(cur, op, base)
                    elif op.kind == "update":
                        current = self._locked(cur, op)
                        if current is None:
                            raise NotFoundError(f"{op.collection}/{op.doc_id} not found")
                        current.update(resolve(op.fields))
                        self._upsert(cur, op, current)
                    elif op.kind == "increment":
                        current = self._locked(cur, op)
                        if current is None:
                            raise NotFoundError(f"{op.collection}/{op.doc_id} not found")
                        (field_name,) = op.fields.keys()
                        current[field_name] = apply_delta(current.get(field_name), op.delta)
                        self._upsert(cur, op, current)
                    elif op.kind == "delete":
                        cur.execute(
                            f"DELETE FROM {self._table} WHERE collection=%s AND doc_id=%s",
                            (op.collection, op.doc_id),
                        )
                    else:
                        raise StoreError(f"Unsupported batch operation: {op.kind}")
        except mysql.connector.Error as e:
            logger.error("Batch of %d writes rolled back: %s", len(ops), e)
            raise StoreError("Batch commit failed") from e
