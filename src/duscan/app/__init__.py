"""Application module for duscan."""

from __future__ import annotations

from duscan.app.cli import cli
from duscan.app.runner import ApplicationRunner, CommandLineOptions

__all__ = [
    "cli",
    "ApplicationRunner",
    "CommandLineOptions",
]
