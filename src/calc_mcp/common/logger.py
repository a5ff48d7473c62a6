"""Package logger.

Records go to stderr: stdout carries the MCP stdio transport.
"""
import logging
import sys

from calc_mcp.common.config import get_settings


LOGGER_NAME = "calc_mcp"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(processName)s | %(message)s"


def configure_logger(level: str = "INFO") -> logging.Logger:
    """
    Configure the package logger. Calling it again only updates the level.

    :param str level: Logging level name (e.g., "DEBUG")

    :return: The package logger
    :rtype: logging.Logger
    """
    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not log.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
        log.propagate = False

    return log


logger: logging.Logger = configure_logger(get_settings().log_level)
