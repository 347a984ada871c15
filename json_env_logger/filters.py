"""
Level and module filtering driven by an environment variable.

Directives are comma separated:

    PYTHON_LOG=warn                     everything at WARN and above
    PYTHON_LOG=info,my_app.db=debug     DEBUG for my_app.db, INFO elsewhere
    PYTHON_LOG=my_app                   everything from my_app
    PYTHON_LOG=my_app=off               nothing from my_app
    PYTHON_LOG=info/user \\d+           INFO and above whose message matches
"""

import logging
import os
import re
from typing import List, Optional, Tuple

import click

from json_env_logger.record import Level

DEFAULT_ENV_VAR = 'PYTHON_LOG'

# Above every real level: nothing passes.
OFF = logging.CRITICAL + 10


def parse_level(name: str) -> int:
    """Level number for a level name, 'off' included"""
    if name.strip().lower() == 'off':
        return OFF
    return int(Level.parse(name))


class EnvFilter(logging.Filter):
    """
    ``logging.Filter`` applying module/level directives to logger names.

    The directive with the longest matching logger-name prefix decides; the
    bare level (no module) is the fallback. With no directives only ERROR
    records pass.
    """

    def __init__(self, spec: Optional[str] = None):
        super().__init__()
        self._default: Optional[int] = None
        self._modules: List[Tuple[str, int]] = []
        self._regex: Optional[re.Pattern] = None
        if spec:
            self.parse(spec)

    @classmethod
    def from_env(cls, env_var: str = DEFAULT_ENV_VAR) -> 'EnvFilter':
        return cls(os.environ.get(env_var))

    def parse(self, spec: str) -> 'EnvFilter':
        """Add the directives in ``spec``"""
        spec, _, regex = spec.partition('/')
        if regex:
            try:
                self._regex = re.compile(regex)
            except re.error as e:
                click.echo(f'warning: invalid logging spec regex {regex!r}, ignoring it: {e}', err=True)

        for directive in spec.split(','):
            directive = directive.strip()
            if not directive:
                continue
            module, sep, level = directive.partition('=')
            try:
                if sep:
                    self.filter_module(module.strip(), parse_level(level))
                else:
                    # A bare word is either a level or a module name
                    try:
                        self.filter_level(parse_level(module))
                    except ValueError:
                        self.filter_module(module, Level.TRACE)
            except ValueError:
                click.echo(f'warning: invalid logging spec {directive!r}, ignoring it', err=True)
        return self

    def filter_level(self, level) -> 'EnvFilter':
        self._default = int(level)
        return self

    def filter_module(self, module: str, level) -> 'EnvFilter':
        level = int(level)
        self._modules = [(m, lvl) for m, lvl in self._modules if m != module]
        self._modules.append((module, level))
        # Longest prefix first
        self._modules.sort(key=lambda item: len(item[0]), reverse=True)
        return self

    def level_for(self, name: str) -> int:
        """Minimum level number enabled for logger ``name``"""
        for module, level in self._modules:
            if name == module or name.startswith(module + '.'):
                return level
        if self._default is not None:
            return self._default
        if self._modules:
            return OFF
        return logging.ERROR

    def max_level(self) -> int:
        """Most verbose level enabled anywhere"""
        levels = [lvl for _, lvl in self._modules]
        if self._default is not None:
            levels.append(self._default)
        elif not self._modules:
            levels.append(logging.ERROR)
        return min(levels)

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno < self.level_for(record.name):
            return False
        if self._regex is not None:
            return self._regex.search(record.getMessage()) is not None
        return True
