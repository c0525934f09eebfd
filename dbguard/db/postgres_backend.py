"""
Postgres backend for dbguard.

This backend mirrors the interface expected by:
    - DBConnection
    - DBPool

It provides:
    - connect()
    - quote() through psycopg2's QuotedString adapter
    - explicit BEGIN / COMMIT / ROLLBACK on an autocommit connection

Postgres has no charset introducer syntax, so quoted literals are never
prefixed. psycopg2 is an optional dependency (``pip install dbguard[postgres]``).
"""

from __future__ import annotations
from typing import Any, Optional
try:
    import psycopg2  # type: ignore
    import psycopg2.extensions  # type: ignore
    import psycopg2.extras  # type: ignore
except ImportError:
    psycopg2 = None


from ..config import DBConfig
from . import helpers
from .backend_base import (
    ATTR_AUTOCOMMIT,
    ATTR_SERVER_VERSION,
    ATTR_TIMEOUT,
    DBBackend,
)


_SERIAL_SEQUENCE_SQL = """
SELECT pg_get_serial_sequence(%(table)s, a.attname) AS seq
FROM pg_attribute a
WHERE a.attrelid = to_regclass(%(table)s)
  AND a.attnum > 0
  AND NOT a.attisdropped
  AND pg_get_serial_sequence(%(table)s, a.attname) IS NOT NULL
ORDER BY a.attnum
LIMIT 1
""".strip()


class PostgresBackend(DBBackend):
    """
    Minimal Postgres backend implementation.
    """

    driver = "pgsql"
    charset_introducer = False

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
        Create a psycopg2 connection with dict-like row access.

        A unix socket path is passed as ``host``, which libpq treats as
        the socket directory.
        """
        if psycopg2 is None:
            raise RuntimeError("psycopg2 is required for the pgsql driver")

        conn = psycopg2.connect(
            host=config.unix_socket or config.host or None,
            port=config.port,
            dbname=config.dbname or None,
            user=config.username or None,
            password=config.password or None,
            connect_timeout=config.timeout,
        )

        # Transactions are opened explicitly by begin().
        conn.autocommit = True
        conn.cursor_factory = psycopg2.extras.RealDictCursor  # type: ignore

        return conn

    def quote(self, raw: Any, text: str) -> str:
        adapter = psycopg2.extensions.QuotedString(text)
        adapter.prepare(raw)
        codec = psycopg2.extensions.encodings.get(raw.encoding, "utf-8")
        return adapter.getquoted().decode(codec)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def commit(self, raw: Any) -> None:
        raw.cursor().execute("COMMIT")

    def rollback(self, raw: Any) -> None:
        raw.cursor().execute("ROLLBACK")

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def last_insert_id(self, raw: Any, name: Optional[str] = None) -> Any:
        if name:
            row = self.helpers.safe_execute(
                raw, "SELECT currval(%s) AS id", (name,)
            ).fetchone()
        else:
            row = self.helpers.safe_execute(raw, "SELECT lastval() AS id").fetchone()
        return row["id"]

    def get_attribute(self, raw: Any, name: str) -> Any:
        if name == ATTR_AUTOCOMMIT:
            return raw.autocommit
        if name == ATTR_TIMEOUT:
            timeout = raw.get_dsn_parameters().get("connect_timeout")
            return int(timeout) if timeout else None
        if name == ATTR_SERVER_VERSION:
            return raw.server_version
        return super().get_attribute(raw, name)

    def set_attribute(self, raw: Any, name: str, value: Any) -> None:
        if name == ATTR_AUTOCOMMIT:
            raw.autocommit = bool(value)
            return
        super().set_attribute(raw, name, value)

    def next_auto_increment(
        self,
        conn: Any,
        table: str,
        database: Optional[str],
    ) -> Optional[int]:
        """
        Read the sequence behind the table's first serial/identity column.

        Postgres cannot query another database on the same connection, so
        ``database`` is taken as the schema.
        """
        name = f"{database}.{table}" if database else table
        row = conn.fetch_one(_SERIAL_SEQUENCE_SQL, {"table": name})
        if not row:
            return None

        state = conn.fetch_one(f"SELECT last_value, is_called FROM {row['seq']}")
        if not state:
            return None
        return state["last_value"] + 1 if state["is_called"] else state["last_value"]
