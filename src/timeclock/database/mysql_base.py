from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)`` for one transaction.

    Everything executed on the cursor commits together when the block exits
    normally and is rolled back if it raises, so callers group a record write
    with its audit row by issuing both inside a single block.
    """
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
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def is_duplicate_key(exc: BaseException) -> bool:
    """True for the unique-index violation raised by the active-record index."""
    return isinstance(exc, mysql.connector.IntegrityError) and getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Clock times come back from TIME columns as ``timedelta`` since midnight."""
    if value is None or isinstance(value, time):
        return value
    if not isinstance(value, timedelta):
        raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
    minutes, seconds = divmod(int(value.total_seconds()) % 86400, 60)
    hours, minutes = divmod(minutes, 60)
    return time(hours, minutes, seconds)
