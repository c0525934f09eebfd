"""
Connection layer for dbguard.

This file defines:
- DBConnection: one physical database link with nested transactions,
  literal protection, logging and query counting
- PreparedStatement: a statement prepared on a DBConnection
- DBPool: connection factory sharing one QueryCounter
- create_backend: driver name -> backend instance

Only the operations listed on DBConnection reach the driver; there is no
generic attribute forwarding.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Sequence, Union

from ..charset import resolve_charset
from ..config import DBConfig, load_config
from ..counter import QueryCounter
from ..dsn import build_dsn
from ..errors import DBConnectionError, DBError, ProtectionError
from ..protect import ValueProtector
from ..transaction import TransactionGuard
from .backend_base import DBBackend, ensure_backend
from .mysql_backend import MySQLBackend
from .postgres_backend import PostgresBackend
from .sqlite_backend import SQLiteBackend

Options = Optional[Union[DBConfig, Mapping[str, Any]]]


_BACKENDS = {
    "mysql": MySQLBackend,
    "pgsql": PostgresBackend,
    "postgres": PostgresBackend,
    "postgresql": PostgresBackend,
    "sqlite": SQLiteBackend,
}


def create_backend(driver: str) -> DBBackend:
    """
    Instantiate the backend for a driver name.
    """
    name = (driver or "").lower()

    try:
        backend_cls = _BACKENDS[name]
    except KeyError:
        raise ValueError(f"Unsupported dbguard driver: {driver!r}") from None

    return backend_cls()


# ----------------------------------------------------------------------
# Prepared statements
# ----------------------------------------------------------------------

class PreparedStatement:
    """
    A statement bound to one connection, executable many times.

    Each execute() counts as one query on the owning connection.
    """

    def __init__(self, conn: "DBConnection", statement: str):
        self.conn = conn
        self.statement = statement
        self._cursor: Any = None

    def execute(self, params: Optional[Union[Sequence[Any], dict]] = None) -> "PreparedStatement":
        self.close()
        self._cursor = self.conn._run(self.statement, params)
        return self

    def fetchall(self) -> List[dict]:
        cur = self._require_cursor()
        return [self.conn.backend.helpers.row_to_dict(r, cur.description) for r in cur.fetchall()]

    def fetchone(self) -> Optional[dict]:
        cur = self._require_cursor()
        row = cur.fetchone()
        return self.conn.backend.helpers.row_to_dict(row, cur.description) if row is not None else None

    @property
    def rowcount(self) -> int:
        return self._require_cursor().rowcount

    def close(self) -> None:
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None

    def _require_cursor(self) -> Any:
        if self._cursor is None:
            raise RuntimeError("Statement has not been executed")
        return self._cursor


# ----------------------------------------------------------------------
# DBConnection
# ----------------------------------------------------------------------

class DBConnection:
    """
    One physical database connection.

    Parameters
    ----------
    options:
        DBConfig or mapping of connection options (see DBConfig).
    backend:
        Backend to use; defaults to the one registered for ``driver``.
    counter:
        Shared QueryCounter. A private counter is created when omitted.
    logger:
        Logging sink for connection and statement messages.

    Raises
    ------
    DBConnectionError
        If the physical connection cannot be established.
    """

    def __init__(
        self,
        options: Options = None,
        *,
        backend: Optional[DBBackend] = None,
        counter: Optional[QueryCounter] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = DBConfig.from_options(options)
        self.dsn = build_dsn(self.config)
        self.counter = counter if counter is not None else QueryCounter()
        self.logger = logger if logger is not None else logging.getLogger(__name__)

        self.raw: Any = None
        self._last_error: Optional[BaseException] = None

        try:
            self.backend = ensure_backend(backend or create_backend(self.config.driver))
            self.raw = self.backend.connect(self.config)
        except Exception as e:
            self._log(f"Connection failed to {self.dsn}", logging.CRITICAL)
            raise DBConnectionError("Connection error") from e

        self._log(f"Connection to {self.dsn}")

        self.protector = ValueProtector(
            self.get_encoding(),
            self.quote,
            introducer=self.backend.charset_introducer,
        )
        self.transactions = TransactionGuard(
            begin=lambda: self.backend.begin(self.raw),
            commit=lambda: self.backend.commit(self.raw),
            rollback=lambda: self.backend.rollback(self.raw),
        )

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, "%s / %s", type(self).__name__, message)

    def _require_open(self) -> Any:
        if self.raw is None:
            raise DBError(f"Connection to {self.dsn} is closed")
        return self.raw

    # ------------------------------------------------------------------
    # Configuration accessors
    # ------------------------------------------------------------------

    def get_db_name(self) -> str:
        return self.config.dbname

    def get_encoding(self) -> str:
        return self.config.effective_encoding()

    def get_charset(self) -> Optional[str]:
        return resolve_charset(self.get_encoding())

    @property
    def query_count(self) -> int:
        """Total queries issued through this connection's counter."""
        return self.counter.value

    # ------------------------------------------------------------------
    # SQL execution
    # ------------------------------------------------------------------

    def _run(self, statement: str, params: Any = None) -> Any:
        raw = self._require_open()
        self.counter.increment()
        self._last_error = None
        try:
            return self.backend.helpers.safe_execute(raw, statement, params)
        except Exception as e:
            self._last_error = e
            raise

    def exec(self, statement: str, params: Any = None) -> int:
        """
        Execute a statement and return the number of affected rows.
        """
        self._log(f'Exec "{statement}"')
        cur = self._run(statement, params)
        try:
            return cur.rowcount
        finally:
            cur.close()

    def execute_many(self, statement: str, seq: Iterable[Sequence[Any]]) -> int:
        """
        Execute a statement once per parameter set; counts as one query.
        """
        self._log(f'Exec "{statement}"')
        raw = self._require_open()
        self.counter.increment()
        self._last_error = None
        try:
            cur = self.backend.helpers.safe_executemany(raw, statement, seq)
        except Exception as e:
            self._last_error = e
            raise
        try:
            return cur.rowcount
        finally:
            cur.close()

    def query(self, statement: str, params: Any = None) -> Any:
        """
        Execute a statement and return the driver cursor holding its result.
        """
        self._log(f'Query "{statement}"')
        return self._run(statement, params)

    def fetch_all(self, statement: str, params: Any = None) -> List[dict]:
        cur = self.query(statement, params)
        try:
            return [self.backend.helpers.row_to_dict(r, cur.description) for r in cur.fetchall()]
        finally:
            cur.close()

    def fetch_one(self, statement: str, params: Any = None) -> Optional[dict]:
        cur = self.query(statement, params)
        try:
            row = cur.fetchone()
            return self.backend.helpers.row_to_dict(row, cur.description) if row is not None else None
        finally:
            cur.close()

    def prepare(self, statement: str) -> PreparedStatement:
        self._log(f'Prepare "{statement}"')
        return PreparedStatement(self, statement)

    # ------------------------------------------------------------------
    # Literals
    # ------------------------------------------------------------------

    def quote(self, text: str) -> str:
        """Quote ``text`` with the driver's string literal rules."""
        return self.backend.quote(self._require_open(), text)

    def protect(self, value: Any, force_quote: bool = False, strip_tags: bool = True) -> str:
        """
        Return ``value`` as a literal for inline SQL. See ValueProtector.
        """
        return self.protector.protect(value, force_quote, strip_tags)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def begin(self) -> None:
        self._require_open()
        self.transactions.begin()

    def commit(self) -> None:
        self._require_open()
        self.transactions.commit()

    def rollback(self) -> None:
        self._require_open()
        self.transactions.rollback()

    def in_transaction(self) -> bool:
        return self.transactions.in_transaction()

    @contextmanager
    def transaction(self) -> Iterator["DBConnection"]:
        """
        Wrap a block in begin()/commit(); roll back and re-raise on error.

            with conn.transaction():
                conn.exec("UPDATE ...")
        """
        self.begin()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        self.commit()

    # ------------------------------------------------------------------
    # Driver metadata
    # ------------------------------------------------------------------

    def last_insert_id(self, name: Optional[str] = None) -> Any:
        return self.backend.last_insert_id(self._require_open(), name)

    def get_attribute(self, name: str) -> Any:
        return self.backend.get_attribute(self._require_open(), name)

    def set_attribute(self, name: str, value: Any) -> None:
        self.backend.set_attribute(self._require_open(), name, value)

    def error_code(self) -> Any:
        """
        Return the driver error code of the last failed statement, or None
        when the last statement succeeded.
        """
        e = self._last_error
        if e is None:
            return None

        for attr in ("pgcode", "sqlite_errorname"):
            code = getattr(e, attr, None)
            if code:
                return code

        if e.args and isinstance(e.args[0], int):
            return e.args[0]

        return type(e).__name__

    def error_info(self) -> tuple:
        """
        Return ``(code, message)`` for the last failed statement, or
        ``(None, None)``.
        """
        e = self._last_error
        if e is None:
            return (None, None)
        message = str(e.args[-1]) if e.args else str(e)
        return (self.error_code(), message)

    def next_auto_increment(self, table: str, database: Optional[str] = None) -> int:
        """
        Return the next auto-increment value of ``table``.

        ``database`` defaults to the connection's default database.

        Raises
        ------
        ProtectionError
            If the backend finds no status row for the table.
        """
        value = self.backend.next_auto_increment(self, table, database)
        if value is None:
            raise ProtectionError(f"No auto-increment information for table {table!r}")
        return value

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """
        Close the underlying connection. Safe to call multiple times.
        """
        if self.raw is None:
            return

        raw, self.raw = self.raw, None
        self._log(f"Disconnection from {self.dsn}")

        try:
            raw.close()
        except Exception:
            self.logger.warning("Error closing connection to %s", self.dsn, exc_info=True)

    @property
    def closed(self) -> bool:
        return self.raw is None

    def __enter__(self) -> "DBConnection":
        return self

    def __exit__(self, exc_type, exc, tb):
        try:
            if exc_type is not None and self.in_transaction():
                self.rollback()
        finally:
            self.close()
        return False

    def __repr__(self) -> str:
        return f"DBConnection({self.dsn!r})"


# ----------------------------------------------------------------------
# DB Pool
# ----------------------------------------------------------------------

class DBPool:
    """
    Connection factory.

    Every connection handed out shares the pool's QueryCounter, so
    ``query_count`` reports the total across all of them. Connections are
    not reused.

    Parameters
    ----------
    options:
        DBConfig or mapping; read from the environment (load_config) when
        omitted.
    """

    def __init__(
        self,
        options: Options = None,
        *,
        backend: Optional[DBBackend] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = DBConfig.from_options(options) if options is not None else load_config()
        self.backend = backend
        self.logger = logger
        self.counter = QueryCounter()

        if self.config.enable_logging:
            logging.basicConfig(level=logging.INFO)
            (logger or logging.getLogger(__name__)).info("Initializing DBPool for %s", build_dsn(self.config))

    def get(self) -> DBConnection:
        """
        Open a new DBConnection.
        """
        return DBConnection(
            self.config,
            backend=self.backend,
            counter=self.counter,
            logger=self.logger,
        )

    @property
    def query_count(self) -> int:
        return self.counter.value

    # ------------------------------------------------------------------
    # Context manager syntax:
    #     with db_pool.connection() as conn:
    #         ...
    # ------------------------------------------------------------------

    def connection(self):
        return _ConnectionContext(self)


class _ConnectionContext:
    """
    Internal context manager for DBConnection.
    """

    def __init__(self, pool: DBPool):
        self.pool = pool
        self.conn: Optional[DBConnection] = None

    def __enter__(self) -> DBConnection:
        self.conn = self.pool.get()
        return self.conn

    def __exit__(self, exc_type, exc, tb):
        if self.conn is None:
            return False

        # Rollback on error
        try:
            if exc_type is not None and self.conn.in_transaction():
                self.conn.rollback()
        finally:
            # Always close
            self.conn.close()

        # Propagate exceptions
        return False


__all__ = [
    "DBConnection",
    "DBPool",
    "PreparedStatement",
    "create_backend",
]
