"""
Logger configuration, optionally loaded from a YAML file.

Example config.yml:

    logging:
      env_var: MY_APP_LOG
      filters: info,my_app.db=debug
      timestamps: iso
      backtrace: true
      target: stdout
"""

from dataclasses import dataclass
from typing import Optional

import yaml

from json_env_logger.filters import DEFAULT_ENV_VAR


class ConfigError(Exception):
    """Configuration validation error"""
    pass


VALID_TIMESTAMPS = ['epoch', 'iso']
VALID_TARGETS = ['stdout', 'stderr']


@dataclass
class LoggerConfig:
    env_var: str = DEFAULT_ENV_VAR
    filters: Optional[str] = None
    timestamps: str = 'epoch'
    backtrace: bool = False
    target: str = 'stderr'


def parse_config(data) -> LoggerConfig:
    """
    Validate the ``logging`` section of a parsed config file.

    Args:
        data: Parsed YAML document (dict) or None

    Returns:
        LoggerConfig: Validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    if data is None:
        return LoggerConfig()
    if not isinstance(data, dict):
        raise ConfigError('Config must be a mapping')

    section = data.get('logging') or {}
    if not isinstance(section, dict):
        raise ConfigError('logging section must be a mapping')

    unknown = set(section) - set(LoggerConfig.__dataclass_fields__)
    if unknown:
        raise ConfigError(f"Unknown logging options: {', '.join(sorted(map(str, unknown)))}")

    config = LoggerConfig(**section)

    if not isinstance(config.env_var, str) or not config.env_var:
        raise ConfigError('env_var must be a non-empty string')

    if config.filters is not None and not isinstance(config.filters, str):
        raise ConfigError('filters must be a string of directives')

    if config.timestamps not in VALID_TIMESTAMPS:
        raise ConfigError(f"Invalid timestamps: {config.timestamps}. Must be one of {VALID_TIMESTAMPS}")

    if config.target not in VALID_TARGETS:
        raise ConfigError(f"Invalid target: {config.target}. Must be one of {VALID_TARGETS}")

    if not isinstance(config.backtrace, bool):
        raise ConfigError('backtrace must be true or false')

    return config


def load_config(config_path) -> LoggerConfig:
    """
    Load logger configuration from a YAML file.

    Raises:
        ConfigError: If the file is missing or invalid
    """
    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {config_path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}")

    return parse_config(data)
