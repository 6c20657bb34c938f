"""Logging configuration."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "example_checker"


def setup_logging(verbose: bool = False, log_level: str | None = None) -> logging.Logger:
    """Set up logging for command-line runs.

    Log records go to stderr through a RichHandler so they never mix with a
    JSON report written to stdout.

    Args:
        verbose: Log debug detail instead of warnings only
        log_level: Explicit level name, overrides ``verbose``

    Returns:
        Configured package logger
    """
    level = log_level or ("DEBUG" if verbose else "WARNING")
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger
