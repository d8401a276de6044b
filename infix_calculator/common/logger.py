"""Package-wide logger shared by the pipeline, the REPL and the session host."""
import logging
import sys
from typing import Union

LOGGER_NAME = "infix_calculator"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

logger = logging.getLogger(LOGGER_NAME)

if not logger.handlers:
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(logging.WARNING)


def normalize_level(level: str) -> str:
    """
    Upper-case a level name and check it is one of LOG_LEVELS.

    :param str level: Level name, any case

    :return: Canonical level name
    :rtype: str
    :raises ValueError: If the level name is unknown
    """
    name = level.strip().upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level: {level!r} (expected one of {', '.join(LOG_LEVELS)})")
    return name


def configure_logging(level: Union[int, str]) -> None:
    """
    Set the level of the package logger.

    :param level: Level name (e.g. "DEBUG") or numeric logging level
    :raises ValueError: If the level name is unknown
    """
    if isinstance(level, str):
        level = logging.getLevelName(normalize_level(level))
    logger.setLevel(level)
