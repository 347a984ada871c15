"""
Attribute value rendering.

Attribute values arrive as arbitrary Python objects. Each is classified into
one of a fixed set of kinds and written with the JSON grammar for that kind.
"""

import math
from enum import Enum
from typing import Any, TextIO

from json_env_logger.escape import write_json_string


class Kind(Enum):
    TEXT = 'text'
    INTEGER = 'integer'
    FLOAT = 'float'
    BOOLEAN = 'boolean'
    OPAQUE = 'opaque'


def kind_of(value: Any) -> Kind:
    """Classify an attribute value"""
    if isinstance(value, str):
        return Kind.TEXT
    # bool is an int subclass
    if isinstance(value, bool):
        return Kind.BOOLEAN
    if isinstance(value, int):
        return Kind.INTEGER
    if isinstance(value, float):
        return Kind.FLOAT
    return Kind.OPAQUE


# Decimal digits per chunk, below the int-to-str conversion limit
_CHUNK_DIGITS = 1000
_CHUNK = 10 ** _CHUNK_DIGITS


def write_int(stream: TextIO, value: int) -> None:
    """Write an integer as a JSON number, however many digits it has"""
    try:
        text = int.__repr__(value)
    except ValueError:
        text = None
    if text is not None:
        stream.write(text)
        return

    if value < 0:
        stream.write('-')
        value = -value
    chunks = []
    while value:
        value, low = divmod(value, _CHUNK)
        chunks.append(low)
    stream.write(int.__repr__(chunks.pop()))
    for chunk in reversed(chunks):
        stream.write(int.__repr__(chunk).rjust(_CHUNK_DIGITS, '0'))


def write_value(stream: TextIO, value: Any) -> None:
    """
    Write one attribute value as a JSON token.

    Numbers and booleans are written unquoted. Text and every other object
    are written as escaped JSON strings, other objects via ``str()``.
    """
    kind = kind_of(value)
    if kind is Kind.TEXT:
        write_json_string(stream, value)
    elif kind is Kind.BOOLEAN:
        stream.write('true' if value else 'false')
    elif kind is Kind.INTEGER:
        write_int(stream, value)
    elif kind is Kind.FLOAT:
        if math.isfinite(value):
            stream.write(float.__repr__(value))
        else:
            # nan/inf have no JSON number form
            write_json_string(stream, float.__repr__(value))
    else:
        write_json_string(stream, str(value))
