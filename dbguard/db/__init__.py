"""
dbguard.db

Driver-facing layer of dbguard.

This package provides:

- The connection abstraction:
      * DBConnection
      * PreparedStatement
      * DBPool
      * create_backend

- Helper functions for statement execution and row mapping:
      * safe_execute
      * safe_executemany
      * row_to_dict

- Concrete database backends:
      * MySQLBackend    (default, PyMySQL)
      * PostgresBackend (psycopg2, optional)
      * SQLiteBackend   (local development + tests)

- Backend contracts:
      * DBBackend
      * BackendLike
      * ensure_backend
"""

from .connection import DBConnection, DBPool, PreparedStatement, create_backend
from .mysql_backend import MySQLBackend
from .postgres_backend import PostgresBackend
from .sqlite_backend import SQLiteBackend
from .backend_base import (
    ATTR_AUTOCOMMIT,
    ATTR_DRIVER_NAME,
    ATTR_SERVER_VERSION,
    ATTR_TIMEOUT,
    DBBackend,
    BackendLike,
    ensure_backend,
)
from .helpers import (
    safe_execute,
    safe_executemany,
    row_to_dict,
)

__all__ = [
    # Connection / Pool
    "DBConnection",
    "DBPool",
    "PreparedStatement",
    "create_backend",

    # Backends
    "MySQLBackend",
    "PostgresBackend",
    "SQLiteBackend",
    "DBBackend",
    "BackendLike",
    "ensure_backend",

    # Attributes
    "ATTR_AUTOCOMMIT",
    "ATTR_DRIVER_NAME",
    "ATTR_SERVER_VERSION",
    "ATTR_TIMEOUT",

    # Helpers
    "safe_execute",
    "safe_executemany",
    "row_to_dict",
]
