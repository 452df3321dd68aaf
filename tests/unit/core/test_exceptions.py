"""Tests for the error taxonomy."""

from __future__ import annotations

import errno
import logging

import pytest
from pydantic import BaseModel, ValidationError

from duscan.core.exceptions import (
    ConfigurationError,
    DuScanError,
    EntrySoftError,
    RootAccessError,
    TraversalInvariantViolation,
    log_error,
)


class _Sample(BaseModel):
    count: int


class TestDuScanError:
    """Test base error behaviour."""

    def test_message_and_context(self) -> None:
        """Test that message and context are kept."""
        error = DuScanError("boom", {"path": "/x"})

        assert str(error) == "boom"
        assert error.message == "boom"
        assert error.context == {"path": "/x"}

    def test_context_defaults_to_empty(self) -> None:
        """Test default context."""
        assert DuScanError("boom").context == {}

    def test_subclasses_share_base(self) -> None:
        """Test that every error derives from DuScanError."""
        for cls in (ConfigurationError, RootAccessError, EntrySoftError, TraversalInvariantViolation):
            assert issubclass(cls, DuScanError)


class TestConfigurationError:
    """Test ConfigurationError formatting."""

    def test_plain_message(self) -> None:
        """Test an error without validation details."""
        error = ConfigurationError("invalid block size: '0'")

        assert str(error) == "invalid block size: '0'"
        assert error.pydantic_error is None

    def test_validation_errors_formatted(self) -> None:
        """Test that pydantic errors are listed per field."""
        with pytest.raises(ValidationError) as exc_info:
            _ = _Sample.model_validate({"count": "many"})

        error = ConfigurationError("invalid configuration", pydantic_error=exc_info.value)

        errors = error.context["validation_errors"]
        assert errors[0]["field"] == "count"
        assert error.pydantic_error is exc_info.value
        rendered = str(error)
        assert rendered.startswith("invalid configuration")
        assert "  count:" in rendered


class TestScanErrors:
    """Test root and entry errors."""

    def test_root_access_error(self) -> None:
        """Test message and attributes of RootAccessError."""
        os_error = FileNotFoundError(errno.ENOENT, "No such file or directory")
        error = RootAccessError("/missing", os_error)

        assert error.message == "cannot access '/missing': No such file or directory"
        assert error.root == "/missing"
        assert error.os_error is os_error
        assert error.context["errno"] == errno.ENOENT

    def test_entry_soft_error(self) -> None:
        """Test message of EntrySoftError with an OS error."""
        error = EntrySoftError("/data/locked", "cannot read directory", PermissionError(errno.EACCES, "Permission denied"))

        assert error.message == "cannot read directory '/data/locked': Permission denied"
        assert error.path == "/data/locked"
        assert error.reason == "cannot read directory"

    def test_entry_soft_error_without_os_error(self) -> None:
        """Test message of EntrySoftError without an OS error."""
        assert EntrySoftError("/a", "cannot stat").message == "cannot stat '/a'"

    def test_invariant_violation(self) -> None:
        """Test TraversalInvariantViolation message and context."""
        error = TraversalInvariantViolation("/a/loop", {"inode": 7})

        assert "cycle" in error.message
        assert error.path == "/a/loop"
        assert error.context == {"inode": 7, "path": "/a/loop"}


class TestLogError:
    """Test log_error helper."""

    def test_logs_with_context(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that context is included in the log message."""
        with caplog.at_level(logging.WARNING, logger="duscan.core.exceptions"):
            log_error(DuScanError("failed", {"path": "/x"}))

        assert "failed (context: path=/x)" in caplog.text
