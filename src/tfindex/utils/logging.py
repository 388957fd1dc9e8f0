"""Logging setup for the command line."""

import sys
from typing import TextIO

from loguru import logger

DEFAULT_FORMAT = "<level>{level: <8}</level> {message}"
VERBOSE_FORMAT = "<green>{time:HH:mm:ss}</green> <level>{level: <8}</level> <cyan>{name}</cyan> {message}"


def configure_logging(verbose: bool = False, quiet: bool = False, stream: TextIO | None = None) -> None:
    """Replace loguru's default sink with one matching the CLI flags.

    Args:
        verbose: Debug level with timestamps and module names.
        quiet: Warnings and errors only.
        stream: Output stream (default: stderr).
    """
    if quiet:
        level = "WARNING"
    elif verbose:
        level = "DEBUG"
    else:
        level = "INFO"

    logger.remove()
    logger.add(
        stream or sys.stderr,
        level=level,
        format=VERBOSE_FORMAT if verbose else DEFAULT_FORMAT,
    )
