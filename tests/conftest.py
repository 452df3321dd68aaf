"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator, Mapping
from pathlib import Path

import pytest

from duscan.core.data.filesystem import BlockSize, FilterPolicy, SizeMode

# Nested mapping: a str value is file content, a mapping is a subdirectory
TreeLayout = Mapping[str, "str | TreeLayout"]


def build_tree(base: Path, layout: TreeLayout) -> Path:
    """Materialize a directory layout beneath ``base``.

    Args:
        base: Existing directory to populate
        layout: Names mapped to file contents or nested layouts

    Returns:
        ``base``, for chaining
    """
    for name, content in layout.items():
        target = base / name
        if isinstance(content, str):
            _ = target.write_text(content)
        else:
            target.mkdir()
            _ = build_tree(target, content)
    return base


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[TreeLayout], Path]:
    """Create a scan root under tmp_path from a layout mapping."""

    def factory(layout: TreeLayout) -> Path:
        root = tmp_path / "root"
        root.mkdir()
        return build_tree(root, layout)

    return factory


@pytest.fixture
def byte_block() -> BlockSize:
    """One-byte blocks, so usage equals byte counts."""
    return BlockSize(bytes=1)


@pytest.fixture
def apparent_policy() -> FilterPolicy:
    """Policy measuring logical lengths, giving filesystem-independent sizes."""
    return FilterPolicy(size_mode=SizeMode.APPARENT)


@pytest.fixture(autouse=True)
def reset_root_logger() -> Generator[None, None, None]:
    """Restore root logger handlers changed by configure_logging."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
