"""Configuration models."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from duscan.core.data.filesystem.size_model import NATIVE_BLOCK_SIZE, BlockSize
from duscan.core.exceptions import ConfigurationError
from duscan.core.report import NegativeThresholdPolicy
from duscan.utils.logging import DEFAULT_LOG_LEVEL, VALID_LOG_LEVELS


class BaseConfig(BaseModel):
    """Base configuration model with common settings."""

    model_config: ConfigDict = ConfigDict(  # pyright: ignore[reportIncompatibleVariableOverride]
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        validate_default=True,
        frozen=True,
    )


class DuScanConfig(BaseConfig):
    """Settings read from the configuration file.

    Every field has a default, so an empty or missing file is valid. Command
    line flags override these values.
    """

    block_size: Annotated[
        str | None,
        Field(description="Default block size (e.g. 1024, K, 4KiB, native)"),
    ] = None
    human_readable: Annotated[
        bool,
        Field(description="Print sizes in powers of 1024 with unit suffixes"),
    ] = False
    si: Annotated[
        bool,
        Field(description="Print sizes in powers of 1000 with unit suffixes"),
    ] = False
    include_hidden: Annotated[
        bool,
        Field(description="Include entries whose name starts with a dot"),
    ] = False
    one_file_system: Annotated[
        bool,
        Field(description="Skip directories on other filesystems"),
    ] = False
    count_links: Annotated[
        bool,
        Field(description="Count hard-linked files once per link"),
    ] = False
    exclude: Annotated[
        tuple[str, ...],
        Field(description="Path prefixes or glob patterns to exclude"),
    ] = ()
    exclude_from: Annotated[
        Path | None,
        Field(description="File with one exclusion pattern per line"),
    ] = None
    negative_threshold: Annotated[
        NegativeThresholdPolicy,
        Field(description="Meaning of a negative threshold: at_most or reject"),
    ] = NegativeThresholdPolicy.AT_MOST
    log_level: Annotated[
        str,
        Field(description="Logging level"),
    ] = DEFAULT_LOG_LEVEL

    @field_validator("block_size", mode="after")
    @classmethod
    def validate_block_size(cls, v: str | None) -> str | None:
        """Validate that the block size parses to a positive value.

        Args:
            v: Block size string

        Returns:
            Validated block size string

        Raises:
            ValueError: If the block size is invalid
        """
        if v is None or v.lower() == NATIVE_BLOCK_SIZE:
            return v
        try:
            _ = BlockSize.parse(v)
        except ConfigurationError as exc:
            raise ValueError(exc.message) from exc
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level.

        Args:
            v: Log level name

        Returns:
            Upper-case log level

        Raises:
            ValueError: If the level is unknown
        """
        normalized = v.upper()
        if normalized not in VALID_LOG_LEVELS:
            msg = f"Invalid log level {v!r}. Valid options: {', '.join(sorted(VALID_LOG_LEVELS))}"
            raise ValueError(msg)
        return normalized

    @field_validator("exclude", mode="after")
    @classmethod
    def drop_empty_patterns(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Drop blank exclusion patterns."""
        return tuple(pattern for pattern in v if pattern)
