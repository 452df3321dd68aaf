"""Configuration and exclude-file loading."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Final

import yaml
from pydantic import ValidationError

from duscan.config.models import DuScanConfig
from duscan.core.exceptions import ConfigurationError

# Matches ${VARIABLE_NAME} references in string values
ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Za-z0-9_]+)\}")

CONFIG_ENV_VAR: Final[str] = "DUSCAN_CONFIG"

# Block size environment variables honored by du, in precedence order
BLOCK_SIZE_ENV_VARS: Final[tuple[str, ...]] = ("DU_BLOCK_SIZE", "BLOCK_SIZE")

DEFAULT_CONFIG_PATH: Final[Path] = Path("~/.config/duscan/config.yaml")


def resolve_env_var(value: str) -> str:
    """Resolve ``${VARIABLE_NAME}`` references in a string value.

    Args:
        value: String potentially containing environment variable references

    Returns:
        String with environment variables resolved

    Raises:
        ConfigurationError: If a referenced environment variable is not set

    Examples:
        >>> os.environ["SCRATCH"] = "/scratch"
        >>> resolve_env_var("${SCRATCH}/tmp")
        '/scratch/tmp'
    """

    def replace_match(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            raise ConfigurationError(
                f"Required environment variable '{var_name}' is not set",
                context={"env_var": var_name},
            )
        return env_value

    return ENV_VAR_PATTERN.sub(replace_match, value)


def resolve_env_vars(data: object) -> object:
    """Recursively resolve environment variables in YAML data.

    Strings are resolved, mappings and lists are traversed, other values are
    returned unchanged.
    """
    if isinstance(data, str):
        return resolve_env_var(data)
    if isinstance(data, Mapping):
        return {key: resolve_env_vars(value) for key, value in data.items()}  # pyright: ignore[reportUnknownVariableType]
    if isinstance(data, list):
        return [resolve_env_vars(item) for item in data]  # pyright: ignore[reportUnknownVariableType]
    return data


class YamlLoader:
    """Loader for YAML configuration files."""

    def load(self, path: Path) -> dict[str, object]:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            Parsed configuration as a dictionary (empty for an empty file)

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        try:
            with open(path, encoding="utf-8") as f:
                content = yaml.safe_load(f)  # pyright: ignore[reportAny] # yaml.safe_load returns Any
        except OSError as exc:
            raise ConfigurationError(
                f"cannot read configuration file '{path}': {exc.strerror or exc}",
                context={"file_path": str(path)},
            ) from exc
        except yaml.YAMLError as exc:
            raise ConfigurationError(
                f"invalid YAML in configuration file '{path}': {exc}",
                context={"file_path": str(path)},
            ) from exc

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigurationError(
                f"configuration file '{path}' must contain a mapping",
                context={"file_path": str(path)},
            )
        return content  # pyright: ignore[reportUnknownVariableType] # content is dict after isinstance check


def discover_config_file(explicit: Path | None = None) -> Path | None:
    """Locate the configuration file to use.

    Searches, in order: the explicit path, ``$DUSCAN_CONFIG``, and
    ``~/.config/duscan/config.yaml``. Only the default location may be absent.

    Args:
        explicit: Path given on the command line

    Returns:
        Path of the configuration file, or None to use defaults
    """
    if explicit is not None:
        return explicit

    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)

    try:
        default_path = DEFAULT_CONFIG_PATH.expanduser()
    except RuntimeError:
        # Home directory cannot be determined
        return None
    return default_path if default_path.is_file() else None


def load_config(path: Path | None) -> DuScanConfig:
    """Load and validate the configuration file.

    Args:
        path: Configuration file, or None for defaults

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated
    """
    if path is None:
        return DuScanConfig()

    raw = YamlLoader().load(path)
    resolved = resolve_env_vars(raw)
    try:
        return DuScanConfig.model_validate(resolved)
    except ValidationError as exc:
        raise ConfigurationError(
            f"invalid configuration in '{path}'",
            pydantic_error=exc,
            context={"file_path": str(path)},
        ) from exc


def block_size_from_env() -> str | None:
    """Return the block size requested through the environment, if any."""
    for name in BLOCK_SIZE_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return None


def load_exclude_file(path: Path) -> list[str]:
    """Read exclusion patterns, one per line.

    Surrounding whitespace is stripped; blank lines and lines starting with
    ``#`` are skipped. Every other line is kept verbatim as a pattern.

    Args:
        path: Exclude file

    Returns:
        Patterns in file order

    Raises:
        ConfigurationError: If the file cannot be read
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        reason = exc.strerror if isinstance(exc, OSError) and exc.strerror else str(exc)
        raise ConfigurationError(
            f"cannot read exclude file '{path}': {reason}",
            context={"file_path": str(path)},
        ) from exc

    patterns: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        patterns.append(stripped)
    return patterns
