"""
Log records and severity levels.
"""

import logging
import traceback
from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Iterable, Iterator, Tuple

TRACE = 5

logging.addLevelName(TRACE, 'TRACE')

_ALIASES = {'WARNING': 'WARN', 'CRITICAL': 'ERROR'}


class Level(IntEnum):
    """Severity level, valued on the ``logging`` numeric scale"""

    TRACE = TRACE
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR

    @classmethod
    def from_levelno(cls, levelno: int) -> 'Level':
        """Map any ``logging`` level number onto the five levels"""
        for level in (cls.ERROR, cls.WARN, cls.INFO, cls.DEBUG):
            if levelno >= level:
                return level
        return cls.TRACE

    @classmethod
    def parse(cls, name: str) -> 'Level':
        key = name.strip().upper()
        key = _ALIASES.get(key, key)
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown level: {name!r}")


Pair = Tuple[str, Any]


@dataclass(frozen=True)
class Record:
    """
    One log event handed to the encoder.

    ``attributes`` is iterated exactly once, in order. It may be a generator.
    """

    level: Level
    message: str
    attributes: Iterable[Pair] = ()

    @classmethod
    def from_log_record(cls, record: logging.LogRecord) -> 'Record':
        """
        Adapt a ``logging.LogRecord``.

        Structured fields come from ``extra={'context': ...}``, either a
        mapping or a sequence of ``(key, value)`` pairs.
        """
        return cls(
            level=Level.from_levelno(record.levelno),
            message=record.getMessage(),
            attributes=_attributes(record),
        )


def _attributes(record: logging.LogRecord) -> Iterator[Pair]:
    context = getattr(record, 'context', None)
    if context:
        if isinstance(context, Mapping):
            yield from context.items()
        else:
            yield from context

    if record.exc_info and record.exc_info[0] is not None:
        if not record.exc_text:
            record.exc_text = ''.join(traceback.format_exception(*record.exc_info)).rstrip('\n')
        yield 'exception', record.exc_text
