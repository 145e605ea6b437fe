from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import StoreError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


def _quietly(action, what: str) -> None:
    # Rollback/close on a dead connection must not mask the error being raised.
    try:
        action()
    except mysql.connector.Error:
        logger.warning("%s failed on a broken connection", what, exc_info=True)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)``; commit on success, roll back on failure.

    Driver errors surface as StoreError so callers never see mysql.connector types.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        logger.exception("Could not open database connection")
        raise StoreError("Database unavailable") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        _quietly(conn.rollback, "Rollback")
        logger.exception("Database operation failed")
        raise StoreError(str(exc)) from exc
    except Exception:
        _quietly(conn.rollback, "Rollback")
        raise
    finally:
        _quietly(conn.close, "Close")


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def new_id() -> str:
    return str(uuid.uuid4())
