"""Error taxonomy for scanning and configuration."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

logger = logging.getLogger(__name__)


class DuScanError(Exception):
    """Base exception for all duscan errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:  # pyright: ignore[reportAny] # Flexible error context
        """Initialize DuScanError.

        Args:
            message: Error message
            context: Additional context information for debugging
        """
        super().__init__(message)
        self.message: str = message
        self.context: dict[str, Any] = context or {}  # pyright: ignore[reportAny] # Flexible error context


class ConfigurationError(DuScanError):
    """Exception raised for invalid policy or configuration input.

    Always detected before traversal starts, and always fatal.
    """

    def __init__(
        self,
        message: str,
        pydantic_error: ValidationError | None = None,
        context: dict[str, Any] | None = None,  # pyright: ignore[reportAny] # Flexible error context
    ) -> None:
        """Initialize ConfigurationError.

        Args:
            message: Error message
            pydantic_error: Original Pydantic ValidationError, if any
            context: Additional context information
        """
        full_context = context or {}
        if pydantic_error is not None:
            full_context["validation_errors"] = self._format_validation_errors(pydantic_error)

        super().__init__(message, full_context)
        self.pydantic_error: ValidationError | None = pydantic_error

    def _format_validation_errors(self, error: ValidationError) -> list[dict[str, Any]]:  # pyright: ignore[reportAny] # Flexible error formatting
        """Format Pydantic validation errors for better readability.

        Args:
            error: Pydantic ValidationError

        Returns:
            List of formatted error dictionaries
        """
        formatted_errors: list[dict[str, Any]] = []  # pyright: ignore[reportAny] # Flexible error formatting
        for err in error.errors():
            formatted_errors.append({
                "field": ".".join(str(loc) for loc in err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            })
        return formatted_errors

    def __str__(self) -> str:
        """Render the message followed by one line per validation error."""
        errors = self.context.get("validation_errors")
        if not errors:
            return self.message
        lines = [self.message]
        for err in errors:  # pyright: ignore[reportAny]
            field = err["field"] or "<root>"  # pyright: ignore[reportAny]
            lines.append(f"  {field}: {err['message']}")
        return "\n".join(lines)


class RootAccessError(DuScanError):
    """Exception raised when a scan root cannot be statted or listed."""

    def __init__(self, root: str, os_error: OSError) -> None:
        """Initialize RootAccessError.

        Args:
            root: Scan root as supplied by the caller
            os_error: Underlying operating system error
        """
        reason = os_error.strerror or str(os_error)
        super().__init__(
            f"cannot access '{root}': {reason}",
            {"path": root, "errno": os_error.errno},
        )
        self.root: str = root
        self.os_error: OSError = os_error


class EntrySoftError(DuScanError):
    """A per-entry failure recorded during a scan.

    Instances are collected into ``ScanResult.errors`` rather than raised; the
    affected entry contributes zero usage and traversal continues.
    """

    def __init__(self, path: str, reason: str, os_error: OSError | None = None) -> None:
        """Initialize EntrySoftError.

        Args:
            path: Path of the entry that failed
            reason: Short description of the failed operation
            os_error: Underlying operating system error, if any
        """
        detail = ""
        if os_error is not None:
            detail = f": {os_error.strerror or os_error}"
        super().__init__(
            f"{reason} '{path}'{detail}",
            {"path": path, "errno": getattr(os_error, "errno", None)},
        )
        self.path: str = path
        self.reason: str = reason
        self.os_error: OSError | None = os_error


class TraversalInvariantViolation(DuScanError):
    """Internal error: the traversal reached a state pruning should prevent."""

    def __init__(self, path: str, context: dict[str, Any] | None = None) -> None:  # pyright: ignore[reportAny] # Flexible error context
        """Initialize TraversalInvariantViolation.

        Args:
            path: Directory at which the violation was detected
            context: Additional context information
        """
        full_context = context or {}
        full_context["path"] = path
        super().__init__(f"directory cycle detected at '{path}'", full_context)
        self.path: str = path


def log_error(error: DuScanError, level: int = logging.WARNING) -> None:
    """Log an error together with its context.

    Args:
        error: Error to log
        level: Logging level (default: WARNING)
    """
    message = error.message
    if error.context:
        context_str = ", ".join(f"{k}={v}" for k, v in error.context.items())  # pyright: ignore[reportAny] # Flexible context values
        message = f"{message} (context: {context_str})"

    logger.log(level, message)
