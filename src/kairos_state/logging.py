"""
Logging setup built on loguru.

Library modules bind a ``source`` once at import time (``get_logger("block")``)
and log through it. The package is disabled in loguru on import; setup_logging
enables it and replaces the default sink.
"""

import sys

from loguru import logger

logger.configure(extra={"source": "STATE"})

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[source]: <10}</cyan> | "
    "{message}"
)


def setup_logging(*, debug: bool = False, trace: bool = False):
    """
    Route log records to stderr.

    Levels:
    - INFO: default, snapshot-level events and failures
    - DEBUG: every absorbed read failure and every command run
    - TRACE: raw tool output
    """
    logger.remove()
    logger.enable("kairos_state")
    logger.configure(extra={"source": "STATE"})

    if trace:
        level = "TRACE"
    elif debug:
        level = "DEBUG"
    else:
        level = "INFO"

    logger.add(
        sys.stderr,
        level=level,
        backtrace=False,
        diagnose=False,
        colorize=None,
        format=CONSOLE_FORMAT,
    )
    return logger


def get_logger(source: str):
    """Get a logger bound to a source name."""
    return logger.bind(source=source)
