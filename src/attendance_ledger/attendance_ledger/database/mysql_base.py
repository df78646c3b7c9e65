from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from datetime import date, datetime
from functools import partial
from typing import Any, Callable, Dict, List, Optional, TypeVar

import mysql.connector

from ..core.exceptions import StoreUnavailable
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

T = TypeVar("T")


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on error."""
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


async def run_db(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking repository call in a worker thread.

    Driver errors surface as StoreUnavailable; nothing is assumed committed.
    """

    try:
        return await asyncio.to_thread(partial(fn, *args, **kwargs))
    except mysql.connector.Error as e:
        logger.error("Record store call %s failed", getattr(fn, "__name__", fn), exc_info=True)
        raise StoreUnavailable(str(e)) from e


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def as_date(value: Any) -> date:
    """MySQL DATE columns come back as date; tolerate datetime and ISO strings."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise TypeError(f"Unsupported MySQL DATE value type: {type(value)!r}")
