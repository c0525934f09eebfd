"""
MySQL backend for dbguard (PyMySQL).

This is the default backend. It provides:
    - connect()          autocommit connection with dict rows
    - quote()            Connection.escape
    - charset introducer support for quoted literals
    - auto-increment lookup via SHOW TABLE STATUS
"""

from __future__ import annotations

from typing import Any, Optional

import pymysql
import pymysql.cursors

from ..charset import resolve_charset
from ..config import DBConfig
from . import helpers
from .backend_base import (
    ATTR_AUTOCOMMIT,
    ATTR_SERVER_VERSION,
    ATTR_TIMEOUT,
    DBBackend,
)


def quote_identifier(name: str) -> str:
    """Backtick-quote a MySQL identifier."""
    return "`" + name.replace("`", "``") + "`"


def escape_like(pattern: str) -> str:
    """Escape LIKE wildcards so ``pattern`` matches literally."""
    return (
        pattern.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )


class MySQLBackend(DBBackend):
    """
    PyMySQL-backed implementation of the backend contract.
    """

    driver = "mysql"
    charset_introducer = True

    def __init__(self):
        self._helpers = helpers

    @property
    def helpers(self):
        return self._helpers

    # ------------------------------------------------------------------
    # Connection handling
    # ------------------------------------------------------------------

    def connect(self, config: DBConfig) -> Any:
        """
        Open a PyMySQL connection.

        The connection runs in autocommit mode; explicit transactions are
        opened through begin().
        """
        kwargs = {
            "user": config.username,
            "password": config.password,
            "database": config.dbname or None,
            "connect_timeout": config.timeout,
            "autocommit": True,
            "cursorclass": pymysql.cursors.DictCursor,
        }

        if config.unix_socket:
            kwargs["unix_socket"] = config.unix_socket
        else:
            kwargs["host"] = config.host
            kwargs["port"] = config.port

        charset = resolve_charset(config.effective_encoding())
        if charset is not None:
            kwargs["charset"] = charset

        return pymysql.connect(**kwargs)

    def quote(self, raw: Any, text: str) -> str:
        return raw.escape(text)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def begin(self, raw: Any) -> None:
        raw.begin()

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def last_insert_id(self, raw: Any, name: Optional[str] = None) -> Any:
        return raw.insert_id()

    def get_attribute(self, raw: Any, name: str) -> Any:
        if name == ATTR_AUTOCOMMIT:
            return raw.get_autocommit()
        if name == ATTR_TIMEOUT:
            return raw.connect_timeout
        if name == ATTR_SERVER_VERSION:
            return raw.get_server_info()
        return super().get_attribute(raw, name)

    def set_attribute(self, raw: Any, name: str, value: Any) -> None:
        if name == ATTR_AUTOCOMMIT:
            raw.autocommit(bool(value))
            return
        super().set_attribute(raw, name, value)

    def next_auto_increment(
        self,
        conn: Any,
        table: str,
        database: Optional[str],
    ) -> Optional[int]:
        query = "SHOW TABLE STATUS FROM {} LIKE {}".format(
            quote_identifier(database or conn.get_db_name()),
            conn.quote(escape_like(table)),
        )
        row = conn.fetch_one(query)
        if not row:
            return None
        return row["Auto_increment"]
