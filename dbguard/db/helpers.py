"""
Shared DB helper utilities.

These wrappers ensure:
    - consistent interfaces across backends
    - predictable row→dict mapping

Driver errors are not wrapped; they reach the caller unchanged.

Backends import this module as `.helpers`
"""

from __future__ import annotations
from typing import Any, Optional, Iterable, Sequence, Union

Params = Optional[Union[Sequence[Any], dict]]


# ----------------------------------------------------------------------
# Execution helpers
# ----------------------------------------------------------------------

def safe_execute(conn: Any, query: str, params: Params = None):
    """
    Execute a single SQL statement on a fresh cursor.
    Returns the cursor.

    Parameters
    ----------
    conn:
        DB-API compatible connection object (pymysql, psycopg2, sqlite3).
    query:
        SQL string, with placeholders when ``params`` is given.
    params:
        Optional parameter sequence or mapping.
    """
    cur = conn.cursor()
    if params is None:
        cur.execute(query)
    else:
        cur.execute(query, params)
    return cur


def safe_executemany(conn: Any, query: str, seq: Iterable[Sequence[Any]]):
    """
    Execute the same SQL statement for multiple parameter sets.
    """
    cur = conn.cursor()
    cur.executemany(query, seq)
    return cur


# ----------------------------------------------------------------------
# Row mapping
# ----------------------------------------------------------------------

def row_to_dict(row: Any, description: Optional[Sequence[Sequence[Any]]] = None) -> dict:
    """
    Convert a backend row to a plain Python dict.

    Parameters
    ----------
    row:
        sqlite3.Row, pymysql DictCursor row, psycopg2 RealDictRow, or a
        plain tuple.
    description:
        Cursor description used to name the columns of tuple rows.
    """
    if row is None:
        return {}

    if isinstance(row, dict):
        return dict(row)

    # sqlite3.Row and similar
    if hasattr(row, "keys"):
        return {k: row[k] for k in row.keys()}

    if description:
        return {col[0]: value for col, value in zip(description, row)}

    return dict(enumerate(row))


__all__ = [
    "safe_execute",
    "safe_executemany",
    "row_to_dict",
]
