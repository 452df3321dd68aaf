"""Command-line interface for duscan."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import click

from duscan.utils.logging import VALID_LOG_LEVELS

try:
    __version__ = version("duscan")
except PackageNotFoundError:
    __version__ = "unknown"


def validate_log_level(
    ctx: click.Context,  # pyright: ignore[reportUnusedParameter] # required by Click callback signature
    param: click.Parameter,  # pyright: ignore[reportUnusedParameter] # required by Click callback signature
    value: str | None,
) -> str | None:
    """Validate and normalize log level.

    Args:
        ctx: Click context (required by Click callback signature)
        param: Click parameter (required by Click callback signature)
        value: Log level value to validate

    Returns:
        Normalized log level (uppercase)

    Raises:
        click.BadParameter: If validation fails
    """
    if value is None:
        return value

    normalized_value = value.upper().strip()
    if normalized_value not in VALID_LOG_LEVELS:
        raise click.BadParameter(
            f'Invalid log level "{value}". Valid options: {", ".join(sorted(VALID_LOG_LEVELS))}'
        )
    return normalized_value


def validate_config_path(
    ctx: click.Context,  # pyright: ignore[reportUnusedParameter] # required by Click callback signature
    param: click.Parameter,  # pyright: ignore[reportUnusedParameter] # required by Click callback signature
    value: Path | None,
) -> Path | None:
    """Validate configuration file path.

    Args:
        ctx: Click context (required by Click callback signature)
        param: Click parameter (required by Click callback signature)
        value: Path value to validate

    Returns:
        Validated Path object

    Raises:
        click.BadParameter: If validation fails
    """
    if value is None:
        return value

    if value.exists() and value.is_dir():
        raise click.BadParameter("Configuration path must be a file, not a directory")

    valid_extensions = {".yaml", ".yml"}
    if value.suffix.lower() not in valid_extensions:
        raise click.BadParameter(
            f"Invalid configuration file extension. Supported extensions: {', '.join(sorted(valid_extensions))}"
        )
    return value


@click.command(context_settings={"help_option_names": ["--help"]})
@click.argument("paths", nargs=-1, type=click.Path(path_type=str))
@click.option("--all", "-a", "show_all", is_flag=True, help="Include hidden entries and list files as well as directories")
@click.option("--human-readable", "-h", is_flag=True, help="Print sizes in powers of 1024 (e.g. 1.5M)")
@click.option("--si", is_flag=True, help="Print sizes in powers of 1000 (e.g. 1.6M)")
@click.option("--bytes", "-b", "apparent_bytes", is_flag=True, help="Print apparent sizes in bytes")
@click.option("--block-size", "-B", metavar="SIZE", default=None, help="Scale sizes by SIZE (e.g. -BK, -B4096, -B native)")
@click.option("--summarize", "-s", is_flag=True, help="Display only a total for each argument")
@click.option("--total", "-c", is_flag=True, help="Produce a grand total")
@click.option("--max-depth", "-d", type=int, default=None, metavar="N", help="Print totals only N or fewer levels below each argument")
@click.option(
    "--threshold",
    "-t",
    metavar="SIZE",
    default=None,
    help="Exclude entries smaller than SIZE if positive, or larger than |SIZE| if negative",
)
@click.option("--one-file-system", "-x", is_flag=True, help="Skip directories on different file systems")
@click.option(
    "--exclude-from",
    "-X",
    type=click.Path(path_type=Path),
    default=None,
    metavar="FILE",
    help="Exclude paths matching any pattern in FILE",
)
@click.option("--exclude", multiple=True, metavar="PATTERN", help="Exclude paths matching PATTERN (repeatable)")
@click.option("--count-links", "-l", is_flag=True, help="Count sizes many times if hard linked")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    callback=validate_config_path,
    help="Configuration file path (.yaml, .yml). Defaults to $DUSCAN_CONFIG or ~/.config/duscan/config.yaml.",
)
@click.option(
    "--log-level",
    type=str,
    default=None,
    callback=validate_log_level,
    help="Logging verbosity level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
)
@click.version_option(version=__version__, prog_name="duscan")
@click.pass_context
def cli(
    ctx: click.Context,
    paths: tuple[str, ...],
    show_all: bool,
    human_readable: bool,
    si: bool,
    apparent_bytes: bool,
    block_size: str | None,
    summarize: bool,
    total: bool,
    max_depth: int | None,
    threshold: str | None,
    one_file_system: bool,
    exclude_from: Path | None,
    exclude: tuple[str, ...],
    count_links: bool,
    config_path: Path | None,
    log_level: str | None,
) -> None:
    """Summarize disk usage of each PATH, recursively for directories.

    Examples:

        # Usage of the current directory tree
        duscan

        # Human-readable totals for two trees and a grand total
        duscan -sh -c /var /home

        # Two levels deep, skipping other filesystems and caches
        duscan -x -d 2 --exclude '*.cache' /
    """
    from duscan.app.runner import ApplicationRunner, CommandLineOptions

    options = CommandLineOptions(
        paths=paths or (".",),
        show_all=show_all,
        human_readable=human_readable,
        si=si,
        apparent_bytes=apparent_bytes,
        block_size=block_size,
        summarize=summarize,
        total=total,
        max_depth=max_depth,
        threshold=threshold,
        one_file_system=one_file_system,
        exclude_from=exclude_from,
        exclude=exclude,
        count_links=count_links,
        config_path=config_path,
        log_level=log_level,
    )
    runner = ApplicationRunner(
        options=options,
        echo=click.echo,
        echo_err=lambda line: click.echo(line, err=True),
    )

    try:
        exit_code = runner.run()
    except KeyboardInterrupt:
        click.echo("Interrupted", err=True)
        exit_code = 130
    ctx.exit(exit_code)
