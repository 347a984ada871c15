"""
Timestamp sources for the ``ts`` field.
"""

import time
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Union

Timestamp = Union[int, str]
TimeSource = Callable[[], Timestamp]


class TimestampMode(Enum):
    EPOCH = 'epoch'
    ISO = 'iso'


def epoch_millis() -> int:
    """Milliseconds since the Unix epoch"""
    return time.time_ns() // 1_000_000


def rfc3339_millis() -> str:
    """Current UTC time as RFC 3339 with milliseconds, e.g. 2026-10-18T20:30:00.123Z"""
    now = datetime.now(timezone.utc)
    return now.strftime('%Y-%m-%dT%H:%M:%S.') + f'{now.microsecond // 1000:03d}Z'


def time_source_for(mode) -> TimeSource:
    """Select the time source for a timestamp mode (enum member or its value)"""
    mode = TimestampMode(mode)
    if mode is TimestampMode.ISO:
        return rfc3339_millis
    return epoch_millis
