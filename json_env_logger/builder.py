"""
Logger construction and process-wide registration.
"""

import logging
import os
import sys
import threading
from typing import Optional, TextIO, Union

from json_env_logger.clock import TimestampMode, time_source_for
from json_env_logger.config import LoggerConfig
from json_env_logger.encoder import JSONHandler
from json_env_logger.filters import DEFAULT_ENV_VAR, EnvFilter, parse_level


class SetLoggerError(Exception):
    """A logger has already been registered for this process"""
    pass


_lock = threading.Lock()
_installed: Optional[JSONHandler] = None


class Builder:
    """
    Configures a ``JSONHandler`` and its ``EnvFilter``.

    Example:
        Builder.from_env('MY_APP_LOG').target('stdout').timestamps('iso').init()
    """

    def __init__(self):
        self._filter = EnvFilter()
        self._target: Union[str, TextIO] = 'stderr'
        self._timestamps = TimestampMode.EPOCH

    @classmethod
    def from_env(cls, env_var: str = DEFAULT_ENV_VAR) -> 'Builder':
        builder = cls()
        builder._filter = EnvFilter.from_env(env_var)
        return builder

    @classmethod
    def from_default_env(cls) -> 'Builder':
        return cls.from_env(DEFAULT_ENV_VAR)

    @classmethod
    def from_config(cls, config: LoggerConfig) -> 'Builder':
        """Builder reading ``config.env_var``, falling back to ``config.filters``"""
        builder = cls.from_env(config.env_var)
        if config.filters and config.env_var not in os.environ:
            builder.parse_filters(config.filters)
        return builder.target(config.target).timestamps(config.timestamps)

    def filter_level(self, level) -> 'Builder':
        """Set the level for records not covered by a module directive"""
        self._filter.filter_level(_as_level(level))
        return self

    def filter_module(self, module: str, level) -> 'Builder':
        self._filter.filter_module(module, _as_level(level))
        return self

    def parse_filters(self, spec: str) -> 'Builder':
        self._filter.parse(spec)
        return self

    def target(self, target: Union[str, TextIO]) -> 'Builder':
        """'stdout', 'stderr' or any writable text stream"""
        if isinstance(target, str) and target not in ('stdout', 'stderr'):
            raise ValueError(f"Invalid target: {target}. Must be 'stdout', 'stderr' or a stream")
        self._target = target
        return self

    def timestamps(self, mode) -> 'Builder':
        self._timestamps = TimestampMode(mode)
        return self

    def build(self) -> JSONHandler:
        target = self._target
        if target == 'stdout':
            stream = sys.stdout
        elif target == 'stderr':
            stream = sys.stderr
        else:
            stream = target
        handler = JSONHandler(stream, time_source=time_source_for(self._timestamps))
        handler.addFilter(self._filter)
        return handler

    def try_init(self) -> JSONHandler:
        """
        Register the configured handler on the root logger.

        Raises:
            SetLoggerError: If a logger has already been registered
        """
        global _installed
        with _lock:
            if _installed is not None:
                raise SetLoggerError('json_env_logger is already initialized')
            handler = self.build()
            root = logging.getLogger()
            root.addHandler(handler)
            root.setLevel(min(self._filter.max_level(), logging.CRITICAL))
            _installed = handler
        return handler

    def init(self) -> JSONHandler:
        """Like ``try_init`` but a second registration is a fatal error"""
        try:
            return self.try_init()
        except SetLoggerError as e:
            raise RuntimeError(f'Failed to initialize logger: {e}') from e


def _as_level(level) -> int:
    if isinstance(level, str):
        return parse_level(level)
    return int(level)


def builder() -> Builder:
    """Builder configured from the default environment variable"""
    return Builder.from_default_env()


def builder_from_env(env_var: str) -> Builder:
    """Builder configured from a custom environment variable"""
    return Builder.from_env(env_var)


def try_init() -> JSONHandler:
    return builder().try_init()


def init() -> JSONHandler:
    """
    Register the JSON logger configured from the environment.

    Call once per process.
    """
    return builder().init()


def is_initialized() -> bool:
    return _installed is not None


def shutdown() -> None:
    """Remove and close the registered handler, allowing a new registration"""
    global _installed
    with _lock:
        if _installed is None:
            return
        root = logging.getLogger()
        root.removeHandler(_installed)
        _installed.close()
        _installed = None
