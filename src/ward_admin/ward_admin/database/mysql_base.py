from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
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


def dump_json_list(value: Any) -> str:
    """Serialize a list column; None is stored as an empty array."""
    return json.dumps(list(value or []), ensure_ascii=False)


def load_json_list(value: Any) -> list:
    """Normalize MySQL JSON values across connector implementations.

    mysql-connector can return JSON columns as:
    - str
    - bytes / bytearray
    - already decoded list (C extension)
    """

    if value is None:
        return []

    if isinstance(value, list):
        return value

    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")

    if isinstance(value, str):
        if not value.strip():
            return []
        decoded = json.loads(value)
        if decoded is None:
            return []
        if not isinstance(decoded, list):
            raise ValueError(f"Expected JSON array, got {type(decoded).__name__}")
        return decoded

    raise TypeError(f"Unsupported MySQL JSON value type: {type(value)!r}")
