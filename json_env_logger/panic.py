"""
Crash hook: uncaught exceptions become one JSON ERROR record.
"""

import logging
import sys
import threading
import traceback
from typing import Optional

from json_env_logger.record import Level, Record


def panic_record(
    message: str,
    thread: str,
    location: Optional[str] = None,
    backtrace: Optional[str] = None
) -> Record:
    """
    Build the record logged for a crash.

    Attributes are ``thread``, then ``location`` and ``backtrace`` when known.
    """
    attributes = [('thread', thread)]
    if location is not None:
        attributes.append(('location', location))
    if backtrace is not None:
        attributes.append(('backtrace', backtrace))
    return Record(Level.ERROR, f"panicked at '{message}'", attributes)


def _describe(exc_type, exc_value, exc_tb, thread_name, backtrace: bool) -> Record:
    message = str(exc_value) if exc_value is not None else ''
    if not message:
        message = exc_type.__name__

    location = None
    frames = traceback.extract_tb(exc_tb) if exc_tb is not None else []
    if frames:
        location = f'{frames[-1].filename}:{frames[-1].lineno}'

    trace = None
    if backtrace:
        trace = ''.join(traceback.format_exception(exc_type, exc_value, exc_tb)).rstrip('\n')

    return panic_record(message, thread_name or 'unnamed', location, trace)


def _log(logger: logging.Logger, record: Record) -> None:
    logger.error('%s', record.message, extra={'context': list(record.attributes)})


def panic_hook(backtrace: bool = False, logger: Optional[logging.Logger] = None) -> None:
    """
    Log uncaught exceptions, in any thread, as JSON via ``logger.error``.

    Args:
        backtrace: Add the formatted traceback as a ``backtrace`` field
        logger: Logger to report through (default: root logger)
    """
    logger = logger or logging.getLogger()
    previous_excepthook = sys.excepthook
    previous_threading_hook = threading.excepthook

    def excepthook(exc_type, exc_value, exc_tb):
        if issubclass(exc_type, (KeyboardInterrupt, SystemExit)):
            previous_excepthook(exc_type, exc_value, exc_tb)
            return
        thread_name = threading.current_thread().name
        _log(logger, _describe(exc_type, exc_value, exc_tb, thread_name, backtrace))

    def threading_excepthook(args):
        if issubclass(args.exc_type, SystemExit):
            previous_threading_hook(args)
            return
        thread_name = args.thread.name if args.thread is not None else None
        _log(logger, _describe(args.exc_type, args.exc_value, args.exc_traceback, thread_name, backtrace))

    sys.excepthook = excepthook
    threading.excepthook = threading_excepthook
