#!/usr/bin/env python3
"""
Demo of json_env_logger configured through the builder.

Writes to stdout with RFC 3339 timestamps. Filtering still comes from
PYTHON_LOG, e.g. PYTHON_LOG=debug python examples/builder.py
"""

import logging

import json_env_logger
from json_env_logger import TRACE

json_env_logger.builder().target('stdout').timestamps('iso').init()

logger = logging.getLogger(__name__)

logger.log(TRACE, "I am a trace", extra={'context': {'task_id': 567, 'thread_id': '12'}})
logger.debug("I am a debug", extra={'context': {'foo': 2.3}})
logger.info("I am an info")
logger.warning("I am a warning")
logger.error("I am an error")
