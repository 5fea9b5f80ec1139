"""Logging configuration for collection-tree."""

import sys

from loguru import logger

_PLAIN_FORMAT = "{level.icon} {message}"
_VERBOSE_FORMAT = "<green>{time:HH:mm:ss.SSS}</green> {level.icon} <cyan>{name}</cyan>:{line} {message}"


def configure_logging(*, verbose: bool = False) -> None:
    """Send loguru output to stderr; debug output also shows where it came from."""
    logger.remove()
    if verbose:
        logger.add(sys.stderr, level="DEBUG", format=_VERBOSE_FORMAT)
    else:
        logger.add(sys.stderr, level="INFO", format=_PLAIN_FORMAT)
