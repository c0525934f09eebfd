"""
DSN assembly.

    <driver>:unix_socket=<path>[;dbname=<name>][;charset=<token>]
    <driver>:host=<host>;port=<port>[;dbname=<name>][;charset=<token>]
"""

from __future__ import annotations

from .charset import resolve_charset
from .config import DBConfig


def build_dsn(config: DBConfig) -> str:
    """Build the driver connection string for ``config``."""
    dsn = f"{config.driver}:"

    if config.unix_socket:
        dsn += f"unix_socket={config.unix_socket}"
    else:
        dsn += f"host={config.host};port={config.port}"

    if config.dbname:
        dsn += f";dbname={config.dbname}"

    charset = resolve_charset(config.effective_encoding())
    if charset is not None:
        dsn += f";charset={charset}"

    return dsn


__all__ = ["build_dsn"]
