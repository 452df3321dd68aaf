"""Application runner for duscan."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from duscan.config.loader import (
    block_size_from_env,
    discover_config_file,
    load_config,
    load_exclude_file,
)
from duscan.config.models import DuScanConfig
from duscan.core.data.filesystem import (
    BlockSize,
    DirectoryScanner,
    ExclusionSet,
    FilterPolicy,
    MultiScanResult,
    SizeMode,
)
from duscan.core.data.filesystem.size_model import NATIVE_BLOCK_SIZE
from duscan.core.exceptions import ConfigurationError
from duscan.core.report import DisplayMode, ReportOptions, Threshold, render_report
from duscan.utils.logging import configure_logging, log_with_context

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS: Final[int] = 0
EXIT_SCAN_ERRORS: Final[int] = 1
EXIT_CONFIG_ERROR: Final[int] = 2
EXIT_INVARIANT_VIOLATION: Final[int] = 3

PROGRAM_NAME: Final[str] = "duscan"


@dataclass(slots=True, frozen=True)
class CommandLineOptions:
    """Options collected from the command line.

    Flags left at False fall back to the configuration file; values left at
    None fall back to the configuration file or the built-in default.
    """

    paths: tuple[str, ...] = (".",)
    show_all: bool = False
    human_readable: bool = False
    si: bool = False
    apparent_bytes: bool = False
    block_size: str | None = None
    summarize: bool = False
    total: bool = False
    max_depth: int | None = None
    threshold: str | None = None
    one_file_system: bool = False
    exclude_from: Path | None = None
    exclude: tuple[str, ...] = ()
    count_links: bool = False
    config_path: Path | None = None
    log_level: str | None = None


def resolve_block_size(options: CommandLineOptions, config: DuScanConfig) -> BlockSize:
    """Select the block size for this invocation.

    Precedence: ``-b``/``-h``/``--si`` (one byte), ``-B``, the configuration
    file's ``human_readable``/``si`` (one byte), the
    ``DU_BLOCK_SIZE``/``BLOCK_SIZE`` environment variables, the configuration
    file's ``block_size``, then 1024 bytes.

    Raises:
        ConfigurationError: If the selected value is invalid
    """
    if options.apparent_bytes or options.human_readable or options.si:
        return BlockSize(bytes=1)
    if options.block_size is not None:
        return _parse_block_size(options.block_size, options.paths)
    if config.human_readable or config.si:
        return BlockSize(bytes=1)

    requested = block_size_from_env() or config.block_size
    if requested is None:
        return BlockSize()
    return _parse_block_size(requested, options.paths)


def _parse_block_size(text: str, paths: tuple[str, ...]) -> BlockSize:
    if text.strip().lower() == NATIVE_BLOCK_SIZE:
        return BlockSize.native(paths[0] if paths else ".")
    return BlockSize.parse(text)


def resolve_display(options: CommandLineOptions, config: DuScanConfig) -> DisplayMode:
    """Select how usage values are rendered.

    Command-line choices win over the configuration file; an explicit ``-B``
    asks for block counts even when the file enables human-readable output.
    """
    if options.si:
        return DisplayMode.SI
    if options.human_readable:
        return DisplayMode.HUMAN
    if options.block_size is not None:
        return DisplayMode.BLOCKS
    if config.si:
        return DisplayMode.SI
    if config.human_readable:
        return DisplayMode.HUMAN
    return DisplayMode.BLOCKS


def build_policy(options: CommandLineOptions, config: DuScanConfig) -> FilterPolicy:
    """Build the filter policy from command line and configuration.

    Exclusion patterns from ``--exclude``, ``--exclude-from`` and the
    configuration file are merged into one set.

    Raises:
        ConfigurationError: If an exclude file cannot be read or the depth is
            negative
    """
    patterns: list[str] = [*config.exclude, *options.exclude]
    for exclude_file in (config.exclude_from, options.exclude_from):
        if exclude_file is not None:
            patterns.extend(load_exclude_file(exclude_file))

    return FilterPolicy(
        include_hidden=options.show_all or config.include_hidden,
        exclusions=ExclusionSet.from_patterns(patterns),
        one_file_system=options.one_file_system or config.one_file_system,
        max_depth=options.max_depth,
        list_files=options.show_all,
        count_links=options.count_links or config.count_links,
        size_mode=SizeMode.APPARENT if options.apparent_bytes else SizeMode.DISK_USAGE,
    )


class ApplicationRunner:
    """Main application runner that coordinates all components."""

    def __init__(
        self,
        options: CommandLineOptions,
        echo: Callable[[str], None],
        echo_err: Callable[[str], None],
    ) -> None:
        """Initialize the application runner.

        Args:
            options: Parsed command line options
            echo: Writes one report line to standard output
            echo_err: Writes one diagnostic line to standard error
        """
        self.options: CommandLineOptions = options
        self.echo: Callable[[str], None] = echo
        self.echo_err: Callable[[str], None] = echo_err

    def run(self) -> int:
        """Run the scan and print the report.

        Returns:
            Process exit code
        """
        try:
            config = load_config(discover_config_file(self.options.config_path))
            configure_logging(log_level=self.options.log_level or config.log_level)
            report, report_options = self._scan(config)
        except ConfigurationError as exc:
            self.echo_err(f"{PROGRAM_NAME}: {exc}")
            return EXIT_CONFIG_ERROR

        for failure in report.failures:
            self.echo_err(f"{PROGRAM_NAME}: {failure.message}")
        for violation in report.violations:
            self.echo_err(f"{PROGRAM_NAME}: internal error: {violation.message}")
        for error in report.errors:
            self.echo_err(f"{PROGRAM_NAME}: {error.message}")
        for line in render_report(report, report_options):
            self.echo(line)

        if report.violations:
            return EXIT_INVARIANT_VIOLATION
        return EXIT_SUCCESS if report.ok else EXIT_SCAN_ERRORS

    def _scan(self, config: DuScanConfig) -> tuple[MultiScanResult, ReportOptions]:
        options = self.options
        # Validate everything before the first directory is read
        policy = build_policy(options, config)
        block_size = resolve_block_size(options, config)
        threshold = (
            Threshold.parse(options.threshold, config.negative_threshold)
            if options.threshold is not None
            else Threshold()
        )
        report_options = ReportOptions(
            display=resolve_display(options, config),
            threshold=threshold,
            show_total=options.total,
        )

        log_with_context(
            logger,
            logging.INFO,
            "Starting scan",
            extra={
                "roots": len(options.paths),
                "block_size": block_size.bytes,
                "size_mode": policy.size_mode.value,
                "exclusions": len(policy.exclusions),
            },
        )
        scanner = DirectoryScanner(policy, block_size, summarize=options.summarize)
        return scanner.scan_roots(options.paths), report_options
