"""
JSON string escaping.

Writes JSON string literals straight to a text stream. Runs of characters
that need no escaping are written as slices of the input, so no escaped copy
of the whole string is ever built.
"""

import io
import re
from types import MappingProxyType
from typing import TextIO


def _build_table():
    table = {chr(code): '\\u%04x' % code for code in range(0x20)}
    table.update({
        '\b': '\\b',
        '\t': '\\t',
        '\n': '\\n',
        '\f': '\\f',
        '\r': '\\r',
        '"': '\\"',
        '\\': '\\\\',
    })
    return MappingProxyType(table)


# Control characters, quote and backslash -> escape sequence. Read-only.
ESCAPE_TABLE = _build_table()

# Lone surrogates are matched too: they cannot be encoded as UTF-8 raw.
_NEEDS_ESCAPE = re.compile('["\\\\\x00-\x1f\ud800-\udfff]')


def _escape(char: str) -> str:
    escaped = ESCAPE_TABLE.get(char)
    if escaped is None:
        escaped = '\\u%04x' % ord(char)
    return escaped


def write_json_string(stream: TextIO, text: str) -> None:
    """
    Write ``text`` to ``stream`` as a quoted JSON string literal.

    Args:
        stream: Any object with a ``write(str)`` method
        text: Text to escape; every string is accepted

    Raises:
        Whatever ``stream.write`` raises. Nothing else.
    """
    write = stream.write
    write('"')
    pos = 0
    for match in _NEEDS_ESCAPE.finditer(text):
        start = match.start()
        if start > pos:
            write(text[pos:start])
        write(_escape(match.group()))
        pos = start + 1
    if pos < len(text):
        write(text[pos:])
    write('"')


def json_string(text: str) -> str:
    """Return ``text`` as a JSON string literal"""
    buf = io.StringIO()
    write_json_string(buf, text)
    return buf.getvalue()
