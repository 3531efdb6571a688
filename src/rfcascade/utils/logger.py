"""Logging utilities for rfcascade."""

import logging
import sys
from typing import Optional, TextIO

LOGGING_FORMAT = (
    "%(asctime)s [%(levelname)s] %(name)s: %(message)s (%(filename)s:%(lineno)d)"
)
LOGGING_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# The cascade engine writes its step-by-step calculation log here at DEBUG
CALCULATION_TRACE_LOGGER = "rfcascade.analysis.link_budget"
TRACE_FORMAT = "%(message)s"

def setup_logging(level: int = logging.INFO, stream=sys.stdout) -> None:
    """
    Configures the root logger for rfcascade tools.

    Args:
        level: The minimum logging level to output (e.g., logging.DEBUG, logging.INFO).
        stream: The output stream (e.g., sys.stdout, sys.stderr, or a file handle).
    """
    logging.basicConfig(
        level=level,
        format=LOGGING_FORMAT,
        datefmt=LOGGING_DATE_FORMAT,
        stream=stream,
        force=True # Override any existing basicConfig by other libraries
    )


def enable_calculation_trace(stream: Optional[TextIO] = None) -> logging.Handler:
    """
    Print the cascade engine's calculation log (Pin + G = Pout, Friis steps,
    G/T summary) as bare lines, independent of the root logging level.

    Args:
        stream: Where to write the trace; defaults to sys.stderr.

    Returns:
        The attached handler, so callers can remove it again.
    """
    trace_logger = logging.getLogger(CALCULATION_TRACE_LOGGER)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(TRACE_FORMAT))
    trace_logger.addHandler(handler)
    trace_logger.setLevel(logging.DEBUG)
    trace_logger.propagate = False
    return handler


def get_logger(name: str) -> logging.Logger:
    """
    Returns a logger instance with the specified name.

    Args:
        name: The name for the logger (usually __name__ of the calling module).

    Returns:
        A configured Logger instance.
    """
    return logging.getLogger(name)
