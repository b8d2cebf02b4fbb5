from __future__ import annotations

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


def to_float(value: Any, default: float = 0.0) -> float:
    """Normalize MySQL DECIMAL/NULL values to float.

    mysql-connector returns DECIMAL columns as ``decimal.Decimal``.
    """

    if value is None:
        return default
    return float(value)


def to_optional_float(value: Any) -> Optional[float]:
    return None if value is None else to_float(value)


def in_clause(column: str, values) -> tuple[str, list]:
    """Build ``column IN (%s, ...)`` for a non-empty collection."""
    values = list(values)
    if not values:
        raise ValueError("in_clause requires at least one value")
    placeholders = ",".join(["%s"] * len(values))
    return f"{column} IN ({placeholders})", values
