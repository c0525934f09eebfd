"""
Backend base interfaces for dbguard.

This module defines the explicit capability set every database backend
(MySQL, Postgres, SQLite) provides to the connection layer. Nothing
outside this list is forwarded to the driver.

Backends must expose:

    backend.driver              -> DSN prefix ("mysql", "pgsql", ...)
    backend.charset_introducer  -> whether quoted literals take _<charset>
    backend.helpers             -> module with safe_execute, row_to_dict, ...

    backend.connect(config)                 -> raw DB-API connection
    backend.quote(raw, text)                -> quoted literal
    backend.begin(raw) / commit(raw) / rollback(raw)
    backend.last_insert_id(raw, name=None)
    backend.get_attribute(raw, name)
    backend.set_attribute(raw, name, value)
    backend.next_auto_increment(conn, table, database)

This file provides:
- DBBackend: abstract base class
- BackendLike: structural protocol
- ensure_backend: runtime validator
- ATTR_* attribute names
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol, runtime_checkable

from ..config import DBConfig


ATTR_AUTOCOMMIT = "autocommit"
ATTR_TIMEOUT = "timeout"
ATTR_SERVER_VERSION = "server_version"
ATTR_DRIVER_NAME = "driver_name"

ATTRIBUTES = (ATTR_AUTOCOMMIT, ATTR_TIMEOUT, ATTR_SERVER_VERSION, ATTR_DRIVER_NAME)


# ---------------------------------------------------------------------------
# Abstract Base Backend
# ---------------------------------------------------------------------------

class DBBackend(ABC):
    """
    Abstract base class for a dbguard backend.

    Subclasses wrap exactly one driver module. Transaction control is
    issued on a connection opened in autocommit mode, so statements run
    outside begin()/commit() are applied immediately.
    """

    driver: str = ""
    charset_introducer: bool = False

    @property
    @abstractmethod
    def helpers(self) -> Any:
        """
        Return the helper module associated with this backend.

        Normally this is dbguard.db.helpers.
        """
        raise NotImplementedError

    @abstractmethod
    def connect(self, config: DBConfig) -> Any:
        """
        Open and return a new raw DB-API 2.0 connection.
        """
        raise NotImplementedError

    @abstractmethod
    def quote(self, raw: Any, text: str) -> str:
        """
        Quote ``text`` as a string literal using the driver's rules.
        """
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def begin(self, raw: Any) -> None:
        raw.cursor().execute("BEGIN")

    def commit(self, raw: Any) -> None:
        raw.commit()

    def rollback(self, raw: Any) -> None:
        raw.rollback()

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @abstractmethod
    def last_insert_id(self, raw: Any, name: Optional[str] = None) -> Any:
        raise NotImplementedError

    def get_attribute(self, raw: Any, name: str) -> Any:
        """
        Return a connection attribute.

        The base implementation only knows ATTR_DRIVER_NAME; subclasses
        handle the rest and defer here for unknown names.
        """
        if name == ATTR_DRIVER_NAME:
            return self.driver
        raise ValueError(f"Unsupported attribute for {self.driver}: {name!r}")

    def set_attribute(self, raw: Any, name: str, value: Any) -> None:
        raise ValueError(f"Attribute {name!r} is read-only for {self.driver}")

    def next_auto_increment(
        self,
        conn: Any,
        table: str,
        database: Optional[str],
    ) -> Optional[int]:
        """
        Return the next auto-increment value of ``table``, or None when the
        table is unknown.

        ``conn`` is the DBConnection wrapper, so lookups are logged and
        counted like any other query. Backends without such a lookup keep
        this implementation, which raises ValueError.
        """
        raise ValueError(
            f"Auto-increment lookup is not supported for {self.driver}"
        )


# ---------------------------------------------------------------------------
# Structural Protocol
# ---------------------------------------------------------------------------

@runtime_checkable
class BackendLike(Protocol):
    """
    Structural protocol for objects usable as a dbguard backend.
    """

    driver: str
    charset_introducer: bool
    helpers: Any

    def connect(self, config: DBConfig) -> Any:
        ...

    def quote(self, raw: Any, text: str) -> str:
        ...

    def begin(self, raw: Any) -> None:
        ...

    def commit(self, raw: Any) -> None:
        ...

    def rollback(self, raw: Any) -> None:
        ...


# ---------------------------------------------------------------------------
# Runtime Guard
# ---------------------------------------------------------------------------

_REQUIRED = (
    "driver",
    "charset_introducer",
    "helpers",
    "connect",
    "quote",
    "begin",
    "commit",
    "rollback",
    "last_insert_id",
    "get_attribute",
    "set_attribute",
    "next_auto_increment",
)


def ensure_backend(backend: Any) -> BackendLike:
    """
    Validate that an object behaves like a dbguard backend.

    Raises:
        TypeError if required attributes are missing.
    """
    if isinstance(backend, DBBackend):
        return backend

    missing = [name for name in _REQUIRED if not hasattr(backend, name)]
    if missing:
        raise TypeError(
            f"Invalid dbguard backend {backend!r}: missing attributes {missing}"
        )

    return backend  # type: ignore[return-value]


__all__ = [
    "ATTRIBUTES",
    "ATTR_AUTOCOMMIT",
    "ATTR_DRIVER_NAME",
    "ATTR_SERVER_VERSION",
    "ATTR_TIMEOUT",
    "DBBackend",
    "BackendLike",
    "ensure_backend",
]
