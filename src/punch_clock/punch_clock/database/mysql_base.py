from __future__ import annotations

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import PersistenceError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)``; commit on success, rollback and re-raise as PersistenceError on driver errors."""
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        logger.exception("Cannot connect to database")
        raise PersistenceError("Database unavailable, please try again") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        logger.exception("Database statement failed")
        raise PersistenceError("Database error, please try again") from e
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


def to_float(value: Any, default: float = 0.0) -> float:
    """DECIMAL columns come back as Decimal; services work in floats."""
    if value is None:
        return default
    if isinstance(value, Decimal):
        return float(value)
    return float(value)
