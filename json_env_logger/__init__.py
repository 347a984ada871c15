"""
json_env_logger: JSON log lines with environment-driven filtering

Writes every log record as one JSON object per line,
{"level":"INFO","ts":1760812800123,"msg":"hello","user_id":123},
with level/module filtering taken from the PYTHON_LOG environment variable.
"""

from json_env_logger.builder import (
    Builder,
    SetLoggerError,
    builder,
    builder_from_env,
    init,
    is_initialized,
    shutdown,
    try_init,
)
from json_env_logger.clock import TimestampMode, epoch_millis, rfc3339_millis
from json_env_logger.config import ConfigError, LoggerConfig, load_config
from json_env_logger.encoder import JSONFormatter, JSONHandler, encode, get_logger, validate_log_format
from json_env_logger.escape import write_json_string
from json_env_logger.filters import DEFAULT_ENV_VAR, EnvFilter
from json_env_logger.panic import panic_hook, panic_record
from json_env_logger.record import TRACE, Level, Record

__all__ = [
    'Builder', 'SetLoggerError', 'builder', 'builder_from_env', 'init', 'is_initialized',
    'shutdown', 'try_init', 'TimestampMode', 'epoch_millis', 'rfc3339_millis', 'ConfigError',
    'LoggerConfig', 'load_config', 'JSONFormatter', 'JSONHandler', 'encode', 'get_logger',
    'validate_log_format', 'write_json_string', 'DEFAULT_ENV_VAR', 'EnvFilter', 'panic_hook',
    'panic_record', 'TRACE', 'Level', 'Record',
]
__version__ = '1.0.0'
