"""
Encoding name -> MySQL charset token lookup.

The token is used twice:
    - as the ``charset=`` clause of the DSN
    - as the introducer prefix of quoted literals (``_utf8'...'``)

Unknown encodings map to ``None``, meaning "no explicit charset".
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional


ENCODING_CHARSETS: Mapping[str, str] = MappingProxyType({
    "cp1252": "latin1",
    "iso-8859-1": "latin1",
    "iso-8859-2": "latin2",
    "iso-8859-5": "latin5",
    "iso-8859-7": "greek",
    "iso-8859-8": "hebrew",
    "iso-8859-13": "latin7",
    "utf-8": "utf8",
    "utf-16": "utf16",
    "utf-32": "utf32",
})


def resolve_charset(encoding: Optional[str]) -> Optional[str]:
    """
    Return the charset token for ``encoding`` (case-insensitive), or None.
    """
    if not encoding:
        return None
    return ENCODING_CHARSETS.get(encoding.lower())


__all__ = ["ENCODING_CHARSETS", "resolve_charset"]
