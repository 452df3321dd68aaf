"""Logging infrastructure with scan-root context tracking.

Diagnostics go to stderr so they never interleave with the usage report on
stdout. The root currently being scanned is kept in a ContextVar and stamped
onto every record by ``ScanRootFilter``, so log lines emitted deep inside the
traversal can be attributed to the command-line argument that caused them.
"""

import contextvars
import logging
import sys
from collections.abc import Mapping
from typing import Final, TextIO, override

# Scan root context variable, set by the scanner for the duration of a scan
scan_root_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "scan_root",
    default=None,
)

# Log format constants
DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - [%(scan_root)s] - %(message)s"

DEFAULT_LOG_LEVEL: Final[str] = "WARNING"

VALID_LOG_LEVELS: Final[frozenset[str]] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class ScanRootFilter(logging.Filter):
    """Logging filter that adds the current scan root to log records."""

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        """Add scan root to log record from ContextVar.

        Args:
            record: Log record to enhance with the scan root

        Returns:
            True to allow the record to be logged
        """
        scan_root = scan_root_var.get()
        record.scan_root = scan_root if scan_root is not None else "-"
        return True


def configure_logging(
    *,
    log_level: str = DEFAULT_LOG_LEVEL,
    stream: TextIO | None = None,
) -> None:
    """Configure application logging.

    Sets up a single stderr handler on the root logger with scan-root
    tracking. Calling it again replaces the previous configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Stream for the handler (defaults to ``sys.stderr``)

    Example:
        >>> configure_logging(log_level="DEBUG")
        >>> logging.getLogger(__name__).debug("Starting scan")
    """
    root_logger = logging.getLogger()

    level = getattr(logging, log_level.upper(), logging.WARNING)
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
    console_handler.addFilter(ScanRootFilter())
    root_logger.addHandler(console_handler)


def get_scan_root() -> str | None:
    """Get the scan root of the current context, if a scan is running."""
    return scan_root_var.get()


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    *,
    extra: Mapping[str, object] | None = None,
) -> None:
    """Log a message with additional context fields appended to the text.

    The plain formatter does not render ``extra`` fields, so they are appended
    as ``key=value`` pairs as well as being attached to the record.

    Args:
        logger: Logger instance to use
        level: Logging level (e.g., logging.INFO)
        message: Log message
        extra: Additional context fields to include in log
    """
    context = dict(extra) if extra else {}
    if context:
        rendered = ", ".join(f"{key}={value}" for key, value in context.items())
        message = f"{message} ({rendered})"
    logger.log(level, message, extra=context)
