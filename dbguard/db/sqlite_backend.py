"""
SQLite backend for dbguard.

Used for:
    - local development
    - tests
    - CLI tools

``dbname`` is the database file path (``:memory:`` when empty); host,
port and credentials are ignored.
"""

from __future__ import annotations
from typing import Any, Optional
import sqlite3

from ..config import DBConfig
from . import helpers
from .backend_base import (
    ATTR_AUTOCOMMIT,
    ATTR_SERVER_VERSION,
    ATTR_TIMEOUT,
    DBBackend,
)


class SQLiteBackend(DBBackend):
    """
    Minimal SQLite backend.
    """

    driver = "sqlite"
    charset_introducer = False

    def __init__(self):
        self._helpers = helpers
        self.timeout: Optional[int] = None

    @property
    def helpers(self):
        return self._helpers

    # ------------------------------------------------------------------
    # Connection handling
    # ------------------------------------------------------------------

    def connect(self, config: DBConfig) -> sqlite3.Connection:
        """
        Open a SQLite3 connection in autocommit mode with row_factory=dict-like
        access.

        Also ensures foreign keys are enforced.
        """
        self.timeout = config.timeout

        conn = sqlite3.connect(
            config.dbname or ":memory:",
            timeout=config.timeout,
            isolation_level=None,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")

        return conn

    def quote(self, raw: Any, text: str) -> str:
        if "\x00" in text:
            raise ValueError("SQLite string literals cannot contain NUL characters")
        return "'" + text.replace("'", "''") + "'"

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def begin(self, raw: Any) -> None:
        # With autocommit off, sqlite3 opens a transaction implicitly before
        # DML; adopt it instead of issuing a nested BEGIN.
        if raw.in_transaction:
            return
        raw.execute("BEGIN")

    def commit(self, raw: Any) -> None:
        raw.execute("COMMIT")

    def rollback(self, raw: Any) -> None:
        raw.execute("ROLLBACK")

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def last_insert_id(self, raw: Any, name: Optional[str] = None) -> Any:
        return raw.execute("SELECT last_insert_rowid()").fetchone()[0]

    def get_attribute(self, raw: Any, name: str) -> Any:
        if name == ATTR_AUTOCOMMIT:
            return raw.isolation_level is None
        if name == ATTR_TIMEOUT:
            return self.timeout
        if name == ATTR_SERVER_VERSION:
            return sqlite3.sqlite_version
        return super().get_attribute(raw, name)

    def set_attribute(self, raw: Any, name: str, value: Any) -> None:
        if name == ATTR_AUTOCOMMIT:
            raw.isolation_level = None if value else "DEFERRED"
            return
        super().set_attribute(raw, name, value)

    def next_auto_increment(
        self,
        conn: Any,
        table: str,
        database: Optional[str],
    ) -> Optional[int]:
        # Only tables declared AUTOINCREMENT appear in sqlite_sequence.
        source = f'"{database}".sqlite_sequence' if database else "sqlite_sequence"
        row = conn.fetch_one(f"SELECT seq FROM {source} WHERE name = ?", (table,))
        if not row:
            return None
        return row["seq"] + 1
