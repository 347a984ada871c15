"""
Record encoder: one log record -> one JSON line.
"""

import io
import json
import logging
import sys
from typing import Optional, TextIO

from json_env_logger.clock import TimeSource, epoch_millis
from json_env_logger.escape import write_json_string
from json_env_logger.record import Level, Record
from json_env_logger.values import write_value


def encode(stream: TextIO, record: Record, time_source: TimeSource = epoch_millis) -> None:
    """
    Write ``record`` to ``stream`` as a single JSON line.

    Output format:
    {"level":"INFO","ts":1760812800123,"msg":"User logged in","user_id":123}

    Fields are written in order: level, ts, msg, then attributes in the order
    the record yields them. Duplicate attribute keys are written as given.
    The stream is not flushed. Errors raised by ``stream.write`` propagate;
    a failure part way through can leave a truncated line behind.
    """
    write = stream.write
    write('{"level":"')
    write(record.level.name)
    write('","ts":')

    ts = time_source()
    if isinstance(ts, str):
        write_json_string(stream, ts)
    else:
        write(int.__repr__(ts))

    write(',"msg":')
    write_json_string(stream, record.message)

    for key, value in record.attributes:
        write(',')
        write_json_string(stream, str(key))
        write(':')
        write_value(stream, value)

    write('}\n')


class JSONHandler(logging.StreamHandler):
    """
    Stream handler that encodes each record straight onto its stream.

    Locking and write-error handling are left to ``logging.Handler``: the
    handler lock is held around ``emit`` and failures go to ``handleError``.
    """

    def __init__(self, stream: Optional[TextIO] = None, time_source: TimeSource = epoch_millis):
        super().__init__(stream)
        self.time_source = time_source

    def emit(self, record: logging.LogRecord) -> None:
        try:
            encode(self.stream, Record.from_log_record(record), self.time_source)
            self.flush()
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


class JSONFormatter(logging.Formatter):
    """
    Formatter producing the same JSON line as ``JSONHandler``.

    For handlers that need a string, such as ``logging.FileHandler``. The
    handler adds the line terminator.
    """

    def __init__(self, time_source: TimeSource = epoch_millis):
        super().__init__()
        self.time_source = time_source

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""
        buf = io.StringIO()
        encode(buf, Record.from_log_record(record), self.time_source)
        return buf.getvalue()[:-1]


def get_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    use_json: bool = True,
    time_source: TimeSource = epoch_millis
) -> logging.Logger:
    """
    Get a pre-configured logger instance.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (default: INFO)
        log_file: Optional file path for file handler
        use_json: Use JSON output (default: True)
        time_source: Timestamp source for JSON output

    Returns:
        Configured logger instance

    Example:
        logger = get_logger(__name__)
        logger.info("User action", extra={'context': {'user_id': 123}})
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Check if we already have handlers to avoid duplicates
    has_console_handler = any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
                              for h in logger.handlers)
    has_file_handler = any(isinstance(h, logging.FileHandler) and h.baseFilename == log_file
                           for h in logger.handlers) if log_file else False

    # Console handler
    if not has_console_handler:
        if use_json:
            console_handler = JSONHandler(sys.stderr, time_source=time_source)
        else:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(
                logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
            )
        console_handler.setLevel(level)
        logger.addHandler(console_handler)

    # File handler (optional)
    if log_file and not has_file_handler:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)

        if use_json:
            file_handler.setFormatter(JSONFormatter(time_source=time_source))
        else:
            file_handler.setFormatter(
                logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
            )

        logger.addHandler(file_handler)

    return logger


def validate_log_format(log_line: str) -> bool:
    """
    Validate that a log line is a well-formed JSON record.

    Args:
        log_line: Log line to validate

    Returns:
        True if valid JSON with required fields, False otherwise
    """
    try:
        data = json.loads(log_line)
    except (json.JSONDecodeError, TypeError):
        return False

    if not isinstance(data, dict):
        return False

    # Check required fields
    required_fields = ['level', 'ts', 'msg']
    if not all(field in data for field in required_fields):
        return False

    # Validate level is a valid log level
    if not isinstance(data['level'], str) or data['level'] not in Level.__members__:
        return False

    ts = data['ts']
    if isinstance(ts, bool) or not isinstance(ts, (int, str)):
        return False

    return isinstance(data['msg'], str)
