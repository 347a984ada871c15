"""
Allow running as a module: python -m json_env_logger
"""
from json_env_logger.cli import cli


if __name__ == '__main__':
    cli()
