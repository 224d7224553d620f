"""
Provides support for logging
"""

import logging
import time
from typing import Any

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"


def configure_logging(
    level: int | str = logging.WARNING,
    handlers: list[logging.Handler] | None = None,
):
    """
    Configures logging format and log level.

    :param level: default = logging.WARNING. Level names, e.g. 'DEBUG', are also accepted.
    :return: None

    - log format: %(asctime)s [%(levelname)s] [%(name)s] %(message)s
    - timestamps are UTC

    >>> configure_logging(level=logging.DEBUG)
    >>> logger = logging.getLogger('algorekey.algorand')
    >>> logger.info('rekeyed account') # doctest: +SKIP
    2026-10-19 14:48:20,594 [INFO] [algorekey.algorand] rekeyed account

    """
    if isinstance(level, str):
        level_name = level.upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise ValueError(f"unknown log level: {level_name}")

    logging.Formatter.converter = time.gmtime
    logging.basicConfig(
        format=LOG_FORMAT,
        level=level,
        handlers=handlers,
        force=True,
    )
    logging.captureWarnings(True)


def get_logger(obj: Any, name: str | None = None) -> logging.Logger:
    """
    Returns a logger using the class name as the logger name.
    If `name` is specifed, then it is appended to the class name: `{self.__class__.__name__}.{name}`
    """
    logger = logging.getLogger(obj.__class__.__name__)
    if name is None:
        return logger

    return logger.getChild(name)
