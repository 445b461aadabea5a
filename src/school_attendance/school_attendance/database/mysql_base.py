from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional, Sequence

import mysql.connector

from ..app_logger import get_logger
from ..core.exceptions import StorageUnavailableError, ValidationError

log = get_logger("database")


@contextmanager
def db_cursor(conn_factory, *, dictionary: bool = True):
    """Open a connection + cursor for one unit of work.

    Commits when the block exits normally, rolls back otherwise and always
    closes the connection. Driver errors are translated into domain errors so
    the API layer never sees mysql.connector exceptions.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        log.error("database connection failed: %s", e)
        raise StorageUnavailableError("database unavailable, please retry") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as e:
        _safe_rollback(conn)
        log.warning("integrity error: %s", e)
        raise ValidationError("operation conflicts with existing data") from e
    except mysql.connector.Error as e:
        _safe_rollback(conn)
        log.error("database error: %s", e)
        raise StorageUnavailableError("database unavailable, please retry") from e
    except Exception:
        _safe_rollback(conn)
        raise
    finally:
        conn.close()


def _safe_rollback(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error as e:
        # Connection already broken; keep the error that got us here.
        log.debug("rollback failed: %s", e)


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_placeholders(values: Sequence[Any]) -> str:
    """"%s,%s,%s" for an IN (...) clause; callers must not pass an empty sequence."""
    if not values:
        raise ValueError("IN clause needs at least one value")
    return ",".join(["%s"] * len(values))


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
