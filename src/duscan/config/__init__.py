"""Configuration file and exclude-file handling."""

from __future__ import annotations

from .loader import (
    YamlLoader,
    block_size_from_env,
    discover_config_file,
    load_config,
    load_exclude_file,
    resolve_env_var,
    resolve_env_vars,
)
from .models import BaseConfig, DuScanConfig

__all__ = [
    "BaseConfig",
    "DuScanConfig",
    "YamlLoader",
    "block_size_from_env",
    "discover_config_file",
    "load_config",
    "load_exclude_file",
    "resolve_env_var",
    "resolve_env_vars",
]
