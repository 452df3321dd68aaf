"""Shared utility modules.

This package provides pure, stateless helpers for size formatting and
parsing, and the logging setup shared by every module.
"""

from duscan.utils.formatting import (
    format_human_size,
    parse_size,
    unit_multiplier,
)

__all__ = [
    "format_human_size",
    "parse_size",
    "unit_multiplier",
]
