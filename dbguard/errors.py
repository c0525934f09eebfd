"""
Error types raised by dbguard.

Only two failure kinds are defined here; everything raised by the
underlying driver during execution or transaction control propagates
unchanged.
"""

from __future__ import annotations


class DBError(Exception):
    """Base class for dbguard errors."""


class DBConnectionError(DBError):
    """
    The physical connection could not be established.

    The original driver exception is available as ``__cause__``.
    """


class ProtectionError(DBError):
    """
    A value could not be turned into a safe SQL literal, or a metadata
    lookup returned no row where one was required.
    """


__all__ = [
    "DBError",
    "DBConnectionError",
    "ProtectionError",
]
