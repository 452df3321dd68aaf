"""Result tree produced by a scan."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from duscan.core.data.filesystem.size_model import BlockSize


class NodeKind(str, Enum):
    """Kind of object a node reports on."""

    DIRECTORY = "directory"
    FILE = "file"


@dataclass(slots=True, frozen=True)
class ScanNode:
    """One directory (or, in per-file mode, one file) of the walked tree.

    Usage values are counted in blocks of the owning tree's block size.
    ``children`` only holds directories; file nodes live in ``files`` and are
    already part of ``self_usage``, so for every directory node
    ``cumulative_usage == self_usage + sum(c.cumulative_usage for c in children)``.
    """

    path: str
    kind: NodeKind
    depth: int
    self_usage: int
    cumulative_usage: int
    children: tuple[ScanNode, ...] = ()
    files: tuple[ScanNode, ...] = ()

    @property
    def is_directory(self) -> bool:
        return self.kind == NodeKind.DIRECTORY


@dataclass(slots=True, frozen=True)
class ScanSummary:
    """Flattened view of a tree: only the root's numbers."""

    path: str
    usage: int
    block_size: BlockSize

    @property
    def bytes(self) -> int:
        return self.usage * self.block_size.bytes


@dataclass(slots=True, frozen=True)
class ResultTree:
    """Read-only tree of scan nodes rooted at one scan path.

    Attributes:
        root: Root node (depth 0)
        block_size: Block size every usage value is expressed in
        summarized: True when per-subdirectory nodes were not retained
    """

    root: ScanNode
    block_size: BlockSize
    summarized: bool = False

    def walk(self, max_depth: int | None = None) -> Iterator[ScanNode]:
        """Yield nodes in pre-order: a directory, its files, then its subdirectories.

        Each call returns a fresh generator.

        Args:
            max_depth: Skip nodes deeper than this (None for all)
        """
        stack: list[ScanNode] = [self.root]
        while stack:
            node = stack.pop()
            if max_depth is not None and node.depth > max_depth:
                continue
            yield node
            if max_depth is None or node.depth < max_depth:
                yield from node.files
            stack.extend(reversed(node.children))

    def walk_post_order(self, max_depth: int | None = None) -> Iterator[ScanNode]:
        """Yield nodes children-first, the order ``du`` prints them in.

        Within a directory its files come first, then each subdirectory's
        subtree, then the directory itself.

        Args:
            max_depth: Skip nodes deeper than this (None for all)
        """
        stack: list[tuple[ScanNode, bool]] = [(self.root, False)]
        while stack:
            node, expanded = stack.pop()
            if max_depth is not None and node.depth > max_depth:
                continue
            if expanded:
                yield node
                continue
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.children))
            if max_depth is None or node.depth < max_depth:
                stack.extend((file_node, True) for file_node in reversed(node.files))

    def summary(self) -> ScanSummary:
        """Flatten the tree to the root's path and cumulative usage."""
        return ScanSummary(path=self.root.path, usage=self.root.cumulative_usage, block_size=self.block_size)

    @property
    def total_usage(self) -> int:
        """Cumulative usage of the root, in blocks."""
        return self.root.cumulative_usage

    @property
    def total_bytes(self) -> int:
        """Cumulative usage of the root, in bytes."""
        return self.root.cumulative_usage * self.block_size.bytes
