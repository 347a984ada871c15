"""
Command line: emit demo records and validate JSON log files.
"""

import logging
import sys

import click

from json_env_logger.builder import Builder, SetLoggerError
from json_env_logger.config import ConfigError, LoggerConfig, load_config
from json_env_logger.encoder import validate_log_format
from json_env_logger.filters import DEFAULT_ENV_VAR
from json_env_logger.panic import panic_hook
from json_env_logger.record import TRACE


@click.group()
def cli():
    """json_env_logger - JSON log lines filtered by environment variable"""
    pass


@cli.command()
@click.option('--config', 'config_path', type=click.Path(), default=None, help='Path to config.yml')
@click.option('--target', type=click.Choice(['stdout', 'stderr']), default=None, help='Output stream')
@click.option('--iso-timestamps', is_flag=True, help='RFC 3339 timestamps instead of epoch milliseconds')
@click.option('--env-var', default=None, help=f'Filter variable (default: {DEFAULT_ENV_VAR})')
def demo(config_path, target, iso_timestamps, env_var):
    """Log one record at every level.

    Only ERROR is shown unless the filter variable enables more,
    e.g. PYTHON_LOG=trace.
    """
    try:
        config = load_config(config_path) if config_path else LoggerConfig()
    except ConfigError as e:
        click.echo(click.style(f'❌ {e}', fg='red'), err=True)
        sys.exit(1)

    if env_var:
        config.env_var = env_var
    if target:
        config.target = target
    if iso_timestamps:
        config.timestamps = 'iso'

    try:
        Builder.from_config(config).try_init()
    except SetLoggerError as e:
        click.echo(click.style(f'❌ {e}', fg='red'), err=True)
        sys.exit(1)

    panic_hook(backtrace=config.backtrace)

    logger = logging.getLogger('json_env_logger.demo')
    logger.log(TRACE, 'I am a trace', extra={'context': {'task_id': 567, 'thread_id': '12'}})
    logger.debug('I am a debug', extra={'context': {'foo': 2.3}})
    logger.info('I am an info')
    logger.warning('I am a warning')
    logger.error('I am an error')


@cli.command()
@click.argument('log_file', type=click.File('r'), default='-')
def validate(log_file):
    """Check that every line of LOG_FILE (default: stdin) is a JSON log record"""
    total = 0
    invalid = 0
    for lineno, line in enumerate(log_file, start=1):
        line = line.strip()
        if not line:
            continue
        total += 1
        if not validate_log_format(line):
            invalid += 1
            click.echo(click.style(f'✗ line {lineno}: {line[:80]}', fg='red'), err=True)

    if invalid:
        click.echo(click.style(f'❌ {invalid} of {total} lines invalid', fg='red'))
        sys.exit(1)

    click.echo(click.style(f'✓ {total} lines valid', fg='green'))


if __name__ == '__main__':
    cli()
