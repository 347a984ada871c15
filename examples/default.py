#!/usr/bin/env python3
"""
Demo of json_env_logger with the default configuration.

Only errors are shown unless PYTHON_LOG enables more, e.g.:

    PYTHON_LOG=trace python examples/default.py
"""

import logging

import json_env_logger
from json_env_logger import TRACE

json_env_logger.init()
json_env_logger.panic_hook()

logger = logging.getLogger(__name__)

logger.log(TRACE, "I am a trace", extra={'context': {'task_id': 567, 'thread_id': '12'}})
logger.debug("I am a debug", extra={'context': {'foo': 1}})
logger.info("I am an info")
logger.warning("I am a warning")
logger.error("I am an error")

raise RuntimeError("the panic hook logs this as JSON")
