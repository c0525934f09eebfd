from unittest.mock import MagicMock

import pytest

from dbguard import DBConnection


def sql_quote(text):
    return "'" + text.replace("'", "''") + "'"


@pytest.fixture
def sqlite_options(tmp_path):
    """File-backed SQLite options so several connections see the same data."""
    return {
        "driver": "sqlite",
        "dbname": str(tmp_path / "dbguard.db"),
        "encoding": "UTF-8",
    }


@pytest.fixture
def sqlite_conn(sqlite_options):
    conn = DBConnection(sqlite_options)
    conn.exec(
        "CREATE TABLE items ("
        " id INTEGER PRIMARY KEY AUTOINCREMENT,"
        " name TEXT NOT NULL"
        ")"
    )
    yield conn
    conn.close()


@pytest.fixture
def driver():
    """Records physical begin/commit/rollback calls in order."""
    return MagicMock()
