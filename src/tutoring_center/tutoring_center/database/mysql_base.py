from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[Tuple[Any, Any]]:
    """One connection, one transaction: commit on success, rollback on any error."""

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        logger.debug("Rolling back transaction on %s", conn_factory.config.database)
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def _json_default(value: Any):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Unsupported document value: {type(value)!r}")


def dump_json(value: Any) -> str:
    """Serialize a document (or a single filter value) for a JSON column."""
    return json.dumps(value, default=_json_default, ensure_ascii=False)


def load_json(raw: Any) -> Dict[str, Any]:
    """JSON column value as a dict.

    mysql-connector can return JSON as:
    - str
    - bytes / bytearray
    - an already decoded dict
    """

    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, Mapping):
        return dict(raw)
    return json.loads(raw or "{}")


def json_path(field_name: str) -> str:
    """`$."field"` path for JSON_EXTRACT, quoting field names with odd characters."""
    return '$."' + field_name.replace('"', '\\"') + '"'
