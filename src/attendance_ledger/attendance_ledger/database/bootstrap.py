from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Schema file only: no ';' inside string literals.
    sql = re.sub(r"(?m)^\s*--.*$", "", sql)
    for stmt in sql.split(";"):
        stmt = stmt.strip()
        if stmt:
            yield stmt


def apply_schema(db_config: dict, *, schema_path: Path) -> int:
    """Execute schema.sql against the configured database; returns statements run."""

    target = DBConfig.from_dict(db_config)
    sql = schema_path.read_text(encoding="utf-8")

    conn = mysql.connector.connect(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        database=target.database,
    )
    count = 0
    try:
        cur = conn.cursor()
        try:
            for stmt in _iter_sql_statements(sql):
                cur.execute(stmt)
                count += 1
            conn.commit()
        finally:
            cur.close()
    finally:
        conn.close()

    logger.info("Applied %d schema statements from %s", count, schema_path)
    return count
