"""
Inline SQL literal construction.

ValueProtector turns an arbitrary scalar into text that can be spliced
directly into a SQL statement:

    None                      -> NULL
    numeric (not forced)      -> bare literal, unescaped
    anything else             -> _<charset>'quoted text'

The numeric bypass is part of the observable contract: any value that
passes ``is_numeric`` is emitted verbatim. It is the one path where no
quoting happens at all, so callers that cannot vouch for their input
should pass ``force_quote=True``.

Parameter binding through DBConnection.exec/query should be preferred
wherever the statement shape allows it.
"""

from __future__ import annotations

import codecs
import math
import re
from decimal import Decimal
from typing import Any, Callable, Optional

from .charset import resolve_charset
from .errors import ProtectionError


# Candidate source encodings for byte input, in priority order.
DETECT_ORDER = ("ascii", "utf-8")

# Misdecoded Euro sign (U+0080 in UTF-8) and its proper UTF-8 encoding.
_EURO_BROKEN = b"\xc2\x80"
_EURO_UTF8 = b"\xe2\x82\xac"

_TAG_RE = re.compile(r"<!--.*?(?:-->|$)|<[A-Za-z/!?][^>]*(?:>|$)", re.S)
_NUMERIC_RE = re.compile(
    r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*",
    re.ASCII,
)


# ----------------------------------------------------------------------
# Building blocks
# ----------------------------------------------------------------------

def is_numeric(value: Any) -> bool:
    """
    Return True for numbers and numeric text.

    Accepted: bool, int, finite float/Decimal, and str/bytes made of an
    optional sign, digits with an optional decimal point, an optional
    exponent, and optional surrounding whitespace.
    """
    if isinstance(value, (bool, int)):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, (bytes, bytearray)):
        try:
            value = bytes(value).decode("ascii")
        except UnicodeDecodeError:
            return False
    if isinstance(value, str):
        return _NUMERIC_RE.fullmatch(value) is not None
    return False


def strip_markup(text: str) -> str:
    """Remove tag-like substrings (``<...>``) and HTML comments."""
    return _TAG_RE.sub("", text)


def detect_encoding(data: bytes) -> Optional[str]:
    """Return the first encoding in DETECT_ORDER that decodes ``data``."""
    for candidate in DETECT_ORDER:
        try:
            data.decode(candidate)
        except UnicodeDecodeError:
            continue
        return candidate
    return None


def decode_bytes(data: bytes) -> str:
    """Decode with the detected source encoding, 7-bit ASCII as fallback."""
    source = detect_encoding(data) or "ascii"
    return data.decode(source, errors="replace")


def convert_encoding(value: Any, target: str) -> str:
    """
    Normalize ``value`` to text representable in the ``target`` encoding.

    Bytes are decoded with the detected source encoding (7-bit ASCII when
    detection fails). The text is then passed through ``target``;
    characters it cannot represent become ``?``. For UTF-8 targets the
    misdecoded Euro sign is repaired.

    Raises LookupError for an unknown ``target``.
    """
    if isinstance(value, (bytes, bytearray)):
        text = decode_bytes(bytes(value))
    else:
        text = value

    if not text:
        return text

    codec = codecs.lookup(target).name
    encoded = text.encode(codec, errors="replace")

    if codec == "utf-8":
        encoded = encoded.replace(_EURO_BROKEN, _EURO_UTF8)

    return encoded.decode(codec)


def _numeric_literal(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("ascii")
    return str(value)


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return decode_bytes(bytes(value))
    if is_numeric(value):
        return _numeric_literal(value)
    return str(value)


# ----------------------------------------------------------------------
# ValueProtector
# ----------------------------------------------------------------------

class ValueProtector:
    """
    Produce SQL literals for one connection.

    Parameters
    ----------
    encoding:
        Target text encoding of the connection.
    quote:
        Driver quoting primitive. Takes text, returns it quoted with
        internal quotes escaped.
    introducer:
        Whether to prefix quoted text with ``_<charset>`` when the
        encoding maps to a charset token.
    """

    def __init__(
        self,
        encoding: str,
        quote: Callable[[str], str],
        *,
        introducer: bool = True,
    ):
        self.encoding = encoding
        self._quote = quote
        self.charset = resolve_charset(encoding) if introducer else None

    def protect(
        self,
        value: Any,
        force_quote: bool = False,
        strip_tags: bool = True,
    ) -> str:
        """
        Return ``value`` as a literal safe to splice into SQL text.

        Raises
        ------
        ProtectionError
            If the value cannot be converted to the connection encoding or
            the driver fails to quote it.
        """
        if value is None:
            return "NULL"

        numeric = is_numeric(value)

        if numeric and not force_quote:
            result = _numeric_literal(value)
        else:
            try:
                text = _to_text(value)
                if strip_tags:
                    text = strip_markup(text)
                text = convert_encoding(text, self.encoding)
            except Exception as e:
                raise ProtectionError(
                    f"Unable to convert data to {self.encoding!r}: {e}"
                ) from e

            result = self._quote_text(text)

        if not result and not numeric:
            return "''"
        return result

    __call__ = protect

    def _quote_text(self, text: str) -> str:
        try:
            quoted = self._quote(text)
        except Exception as e:
            raise ProtectionError(f'Unable to protect data "{text}"') from e

        if not quoted:
            raise ProtectionError(f'Unable to protect data "{text}"')

        prefix = f"_{self.charset}" if self.charset else ""
        return prefix + quoted


__all__ = [
    "DETECT_ORDER",
    "ValueProtector",
    "convert_encoding",
    "decode_bytes",
    "detect_encoding",
    "is_numeric",
    "strip_markup",
]
