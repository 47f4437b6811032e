"""
Loguru sinks for the generator.

Everything goes to stderr: the command line writes the document itself to
stdout, so log lines must never be interleaved with it.
"""

import os
import sys
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
DEFAULT_LOG_FILE = "logs/openrpc_document.log"

_OFF = ("", "0", "false", "no")
_ON = ("1", "true", "yes")


def log_file_path(value: Optional[str] = None) -> Optional[str]:
    """``LOG_TO_FILE`` is either a flag or the path of the log file."""
    if value is None:
        value = os.environ.get("LOG_TO_FILE", "")
    if value.strip().lower() in _OFF:
        return None
    if value.strip().lower() in _ON:
        return DEFAULT_LOG_FILE
    return value


def setup_loguru_config(level: Optional[str] = None):
    logger.remove()
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()

    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=log_level)

    path = log_file_path()
    if path:
        logger.add(
            path,
            format=FILE_FORMAT,
            level=log_level,
            rotation="10 MB",
            retention="7 days",
        )
    return logger
