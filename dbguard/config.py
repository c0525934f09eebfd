"""
Connection configuration for dbguard.

This module centralizes the options consumed when opening a connection:

    - driver selection (mysql, pgsql, sqlite)
    - network location (host/port or unix socket)
    - default database name and credentials
    - text encoding and connect timeout
    - feature flags (logging)

It provides:
    DBConfig       – structured config object
    load_config()  – load from environment variables or defaults
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
import os
import sys
from typing import Any, Mapping, Optional, Union


def default_encoding() -> str:
    """Process-wide default text encoding."""
    return sys.getdefaultencoding()


@dataclass(frozen=True)
class DBConfig:
    """
    Canonical configuration for a dbguard connection.

    Attributes
    ----------
    driver:
        Driver name used as the DSN prefix and to select the backend
        ("mysql", "pgsql", "sqlite").

    host, port:
        Network location. Ignored when ``unix_socket`` is set.

    dbname:
        Default database. For SQLite this is the database file path.

    username, password:
        Credentials passed through to the driver as-is.

    unix_socket:
        Path of a local socket; takes precedence over host/port.

    encoding:
        Text encoding of values handed to the connection. Mapped to a
        charset token by dbguard.charset.

    timeout:
        Connect timeout in seconds.

    enable_logging:
        Whether DBPool should configure basic INFO logging on creation.
    """

    driver: str = "mysql"
    host: str = ""
    port: int = 3306
    dbname: str = ""
    username: str = ""
    password: str = field(default="", repr=False)
    unix_socket: str = ""
    encoding: str = default_encoding()
    timeout: int = 5

    enable_logging: bool = False

    @classmethod
    def from_options(
        cls,
        options: Optional[Union["DBConfig", Mapping[str, Any]]] = None,
    ) -> "DBConfig":
        """
        Overlay a mapping of options onto the defaults.

        An existing DBConfig is returned unchanged. ``None`` values in the
        mapping are treated as "not set" and keep the default.

        Raises
        ------
        ValueError
            If the mapping contains an unknown option name.
        """
        if isinstance(options, DBConfig):
            return options

        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in dict(options or {}).items() if v is not None}

        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown connection options: {unknown}")

        if "port" in values:
            values["port"] = int(values["port"])
        if "timeout" in values:
            values["timeout"] = int(values["timeout"])

        return replace(cls(), **values)

    def effective_encoding(self) -> str:
        """
        Return the configured encoding, or the process default when empty.
        """
        return self.encoding or default_encoding()


def load_config() -> DBConfig:
    """
    Load DBConfig from environment variables, falling back to defaults.

    Recognized variables:
        DBGUARD_DRIVER          (mysql|pgsql|sqlite)
        DBGUARD_HOST
        DBGUARD_PORT            (integer)
        DBGUARD_DBNAME
        DBGUARD_USERNAME
        DBGUARD_PASSWORD
        DBGUARD_UNIX_SOCKET
        DBGUARD_ENCODING
        DBGUARD_TIMEOUT         (seconds)
        DBGUARD_ENABLE_LOGGING  ("true" / "false" / "1" / "0")

    Returns
    -------
    DBConfig
    """

    def _env_flag(name: str, default: bool) -> bool:
        val = os.getenv(name)
        if val is None:
            return default
        return val.strip().lower() in ("1", "true", "yes", "on")

    defaults = DBConfig()

    return DBConfig(
        driver=os.getenv("DBGUARD_DRIVER", defaults.driver),
        host=os.getenv("DBGUARD_HOST", defaults.host),
        port=int(os.getenv("DBGUARD_PORT", defaults.port)),
        dbname=os.getenv("DBGUARD_DBNAME", defaults.dbname),
        username=os.getenv("DBGUARD_USERNAME", defaults.username),
        password=os.getenv("DBGUARD_PASSWORD", defaults.password),
        unix_socket=os.getenv("DBGUARD_UNIX_SOCKET", defaults.unix_socket),
        encoding=os.getenv("DBGUARD_ENCODING", defaults.encoding),
        timeout=int(os.getenv("DBGUARD_TIMEOUT", defaults.timeout)),

        enable_logging=_env_flag(
            "DBGUARD_ENABLE_LOGGING",
            default=False
        ),
    )


__all__ = ["DBConfig", "default_encoding", "load_config"]
