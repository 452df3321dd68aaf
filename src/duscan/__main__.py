"""Application entry point for duscan.

Exit Codes:
    0: Every root was scanned without errors
    1: A root could not be accessed or an entry could not be read
    2: Invalid command line, configuration or exclude file
    3: Traversal aborted on an internal invariant violation
"""

from __future__ import annotations

from duscan.app.cli import cli

__all__ = ["main"]


def main() -> None:
    """Main entry point for the duscan command."""
    cli(prog_name="duscan")


if __name__ == "__main__":
    main()
