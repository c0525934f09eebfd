"""
dbguard

Connection management and query-safety layer over a relational database
driver (MySQL by default).

Submodules include:
    - config       connection options and environment loading
    - dsn          driver connection string assembly
    - charset      encoding -> charset token lookup
    - protect      inline SQL literal construction
    - transaction  nested transaction reference counting
    - counter      shared query counter
    - db/          backends, connections and pools
"""

from .config import DBConfig, load_config
from .errors import DBError, DBConnectionError, ProtectionError
from .charset import resolve_charset
from .dsn import build_dsn
from .protect import ValueProtector
from .transaction import TransactionGuard
from .counter import QueryCounter
from .db import DBConnection, DBPool

__all__ = [
    "DBConfig",
    "load_config",
    "DBError",
    "DBConnectionError",
    "ProtectionError",
    "resolve_charset",
    "build_dsn",
    "ValueProtector",
    "TransactionGuard",
    "QueryCounter",
    "DBConnection",
    "DBPool",
]

__version__ = "0.1.0"
