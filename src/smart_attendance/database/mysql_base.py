from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence, Tuple

import mysql.connector
from mysql.connector import errorcode

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


def is_duplicate_key(err: mysql.connector.Error) -> bool:
    return getattr(err, "errno", None) == errorcode.ER_DUP_ENTRY


def in_clause(values: Sequence[Any]) -> Tuple[str, Tuple[Any, ...]]:
    """Build an ``IN (%s, ...)`` placeholder list for a non-empty sequence."""
    if not values:
        raise ValueError("in_clause() needs at least one value")
    return "(" + ",".join(["%s"] * len(values)) + ")", tuple(values)
