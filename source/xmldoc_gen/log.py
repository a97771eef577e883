from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO, Union

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOG_FORMAT = "[%(asctime)s][%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER_NAME = "xmldoc_gen"

# Accepted wherever a logger is injected.
LoggerLike = Union[logging.Logger, logging.LoggerAdapter]


def get_logger(name: str, logger: Optional[LoggerLike] = None) -> LoggerLike:
    """Return the injected logger, or the module logger for `name`."""
    return logger if logger is not None else logging.getLogger(name)


def verbosity_level(verbose: bool = False, trace: bool = False) -> int:
    if trace:
        return TRACE
    if verbose:
        return logging.DEBUG
    return logging.INFO


def configure_logging(level: int, stream: Optional[TextIO] = None) -> logging.Logger:
    """Attach a single stderr handler to the package logger.

    Standard output is reserved for generated Markdown and for the mdBook
    preprocessor protocol, so records never go there.
    """
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
