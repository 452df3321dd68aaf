"""Directory scanner: single-pass traversal and usage aggregation.

The scanner walks a tree iteratively with an explicit stack of frames, so
arbitrarily deep trees never exhaust the interpreter stack. Each directory is
listed completely inside a ``with os.scandir(...)`` block before any of its
entries is processed, which releases the directory handle before descending
into a child or moving on to a sibling.

Policy is applied during the walk: a directory that fails
``FilterPolicy.should_enter_directory`` is never listed, and nothing beneath
it contributes to any ancestor.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from duscan.core.data.filesystem.filters import FilterPolicy, PruneReason
from duscan.core.data.filesystem.result_tree import NodeKind, ResultTree, ScanNode
from duscan.core.data.filesystem.size_model import BlockSize, Entry, EntryKind, usage_of
from duscan.core.exceptions import (
    EntrySoftError,
    RootAccessError,
    TraversalInvariantViolation,
    log_error,
)
from duscan.utils.logging import log_with_context, scan_root_var

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ScanResult:
    """Outcome of scanning one root.

    Attributes:
        root: Scan root as supplied
        tree: Result tree rooted at ``root``
        errors: Per-entry soft failures, in the order they were encountered
    """

    root: str
    tree: ResultTree
    errors: tuple[EntrySoftError, ...] = ()

    @property
    def total_usage(self) -> int:
        return self.tree.total_usage


@dataclass(slots=True, frozen=True)
class MultiScanResult:
    """Outcome of scanning several independent roots.

    Attributes:
        outcomes: One entry per root in the order given: a ScanResult, the
            RootAccessError that aborted that root, or the
            TraversalInvariantViolation that aborted its traversal
        block_size: Block size every usage value is expressed in
    """

    outcomes: tuple[ScanResult | RootAccessError | TraversalInvariantViolation, ...]
    block_size: BlockSize

    @property
    def results(self) -> tuple[ScanResult, ...]:
        return tuple(o for o in self.outcomes if isinstance(o, ScanResult))

    @property
    def failures(self) -> tuple[RootAccessError, ...]:
        return tuple(o for o in self.outcomes if isinstance(o, RootAccessError))

    @property
    def violations(self) -> tuple[TraversalInvariantViolation, ...]:
        return tuple(o for o in self.outcomes if isinstance(o, TraversalInvariantViolation))

    @property
    def errors(self) -> tuple[EntrySoftError, ...]:
        """Soft errors of all roots, concatenated."""
        return tuple(error for result in self.results for error in result.errors)

    @property
    def grand_total(self) -> int:
        """Sum of every successfully scanned root's cumulative usage, in blocks.

        Hard links shared between roots are counted once per root.
        """
        return sum(result.total_usage for result in self.results)

    @property
    def ok(self) -> bool:
        """True when every root was scanned and no entry reported an error."""
        return not self.failures and not self.violations and not self.errors


@dataclass(slots=True)
class _Frame:
    """A directory being aggregated."""

    path: str
    depth: int
    identity: tuple[int, int]
    self_usage: int
    pending: Iterator[Entry] = field(default_factory=lambda: iter(()))
    child_usage: int = 0
    children: list[ScanNode] = field(default_factory=list)
    files: list[ScanNode] = field(default_factory=list)

    def adopt(self, node: ScanNode, *, retain: bool) -> None:
        """Fold a finished child directory into this frame."""
        self.child_usage += node.cumulative_usage
        if retain:
            self.children.append(node)

    def finalize(self) -> ScanNode:
        """Build the immutable node once every child has been folded in."""
        return ScanNode(
            path=self.path,
            kind=NodeKind.DIRECTORY,
            depth=self.depth,
            self_usage=self.self_usage,
            cumulative_usage=self.self_usage + self.child_usage,
            children=tuple(self.children),
            files=tuple(self.files),
        )


@dataclass(slots=True)
class _ScanState:
    """Mutable bookkeeping owned by one ``scan`` call."""

    policy: FilterPolicy
    errors: list[EntrySoftError] = field(default_factory=list)
    seen_links: set[tuple[int, int]] = field(default_factory=set)
    directories: int = 0
    files: int = 0
    pruned: int = 0

    def record_error(self, path: str, reason: str, exc: OSError) -> None:
        error = EntrySoftError(path, reason, exc)
        self.errors.append(error)
        log_with_context(
            logger,
            logging.DEBUG,
            "Skipping unreadable entry",
            extra={"path": path, "reason": reason, "error": str(exc)},
        )


def read_directory(path: str, state: _ScanState) -> list[Entry]:
    """List a directory and ``lstat`` each entry, sorted by name.

    Entries that cannot be statted are recorded as soft errors and left out.

    Raises:
        OSError: If the directory itself cannot be opened or read
    """
    entries: list[Entry] = []
    with os.scandir(path) as it:
        for dir_entry in it:
            try:
                st = dir_entry.stat(follow_symlinks=False)
            except OSError as exc:
                state.record_error(dir_entry.path, "cannot stat", exc)
                continue
            entries.append(Entry.from_stat(dir_entry.path, dir_entry.name, st))
    entries.sort(key=lambda entry: entry.name)
    return entries


class DirectoryScanner:
    """Scanner computing disk usage for directory trees.

    Provides single-pass traversal with support for:
    - Exclusion patterns, hidden-entry filtering and depth limiting
    - Filesystem-boundary limiting
    - Hard-link deduplication within one root
    - Summarized results that keep only the root node
    - Graceful handling of per-entry permission and I/O errors
    """

    def __init__(
        self,
        policy: FilterPolicy | None = None,
        block_size: BlockSize | None = None,
        *,
        summarize: bool = False,
    ) -> None:
        """Initialize the directory scanner.

        Args:
            policy: Filter policy applied to every scan (default policy if None)
            block_size: Block size usage is expressed in (1024 bytes if None)
            summarize: Keep only the root node of each result tree
        """
        self.policy: FilterPolicy = policy or FilterPolicy()
        self.block_size: BlockSize = block_size or BlockSize()
        self.summarize: bool = summarize

    def scan(self, root: str | os.PathLike[str]) -> ScanResult:
        """Scan one root.

        Args:
            root: Directory (or single file) to measure

        Returns:
            Result tree and soft errors for ``root``

        Raises:
            RootAccessError: If the root itself cannot be statted or listed
            TraversalInvariantViolation: If a directory cycle is reached
        """
        root_path = os.fspath(root)
        token = scan_root_var.set(root_path)
        try:
            return self._scan(root_path)
        finally:
            scan_root_var.reset(token)

    def scan_roots(self, roots: Iterable[str | os.PathLike[str]]) -> MultiScanResult:
        """Scan several roots independently.

        A root that cannot be accessed, or whose traversal hits a directory
        cycle, is recorded and the remaining roots are still scanned.

        Args:
            roots: Roots in reporting order

        Returns:
            Per-root outcomes and the grand total
        """
        outcomes: list[ScanResult | RootAccessError | TraversalInvariantViolation] = []
        for root in roots:
            try:
                outcomes.append(self.scan(root))
            except RootAccessError as exc:
                log_with_context(
                    logger,
                    logging.WARNING,
                    "Cannot scan root, skipping",
                    extra={"path": exc.root, "error": str(exc.os_error)},
                )
                outcomes.append(exc)
            except TraversalInvariantViolation as exc:
                log_error(exc, logging.ERROR)
                outcomes.append(exc)
        return MultiScanResult(outcomes=tuple(outcomes), block_size=self.block_size)

    def _scan(self, root: str) -> ScanResult:
        try:
            st = os.lstat(root)
        except OSError as exc:
            raise RootAccessError(root, exc) from exc

        root_entry = Entry.from_stat(root, os.path.basename(root.rstrip(os.sep)) or root, st)
        policy = self.policy
        if policy.one_file_system and policy.root_device is None:
            policy = policy.bound_to(root_entry.device)
        state = _ScanState(policy=policy)

        if root_entry.kind != EntryKind.DIRECTORY:
            usage = usage_of(root_entry, self.block_size, policy.size_mode)
            node = ScanNode(path=root, kind=NodeKind.FILE, depth=0, self_usage=usage, cumulative_usage=usage)
            state.files += 1
            return self._finish(root, node, state)

        try:
            root_frame = self._open_frame(root_entry, 0, state)
        except OSError as exc:
            raise RootAccessError(root, exc) from exc

        stack: list[_Frame] = [root_frame]
        on_stack: set[tuple[int, int]] = {root_frame.identity}
        root_node: ScanNode | None = None

        while stack:
            frame = stack[-1]
            entry = next(frame.pending, None)

            if entry is None:
                _ = stack.pop()
                on_stack.discard(frame.identity)
                node = frame.finalize()
                if stack:
                    stack[-1].adopt(node, retain=not self.summarize)
                else:
                    root_node = node
                continue

            if entry.identity in on_stack:
                raise TraversalInvariantViolation(
                    entry.path,
                    {"device": entry.device, "inode": entry.inode, "depth": frame.depth + 1},
                )

            try:
                child = self._open_frame(entry, frame.depth + 1, state)
            except OSError as exc:
                state.record_error(entry.path, "cannot read directory", exc)
                continue

            stack.append(child)
            on_stack.add(child.identity)

        assert root_node is not None  # The root frame is always the last one popped
        return self._finish(root, root_node, state)

    def _open_frame(self, directory: Entry, depth: int, state: _ScanState) -> _Frame:
        """List a directory and fold its non-directory entries into a new frame.

        Raises:
            OSError: If the directory cannot be listed
        """
        entries = read_directory(directory.path, state)
        policy = state.policy
        state.directories += 1

        frame = _Frame(
            path=directory.path,
            depth=depth,
            identity=directory.identity,
            self_usage=usage_of(directory, self.block_size, policy.size_mode),
        )
        subdirectories: list[Entry] = []
        retain_files = not self.summarize and policy.retains_file_node(depth + 1)

        for entry in entries:
            if not policy.should_include_entry(entry.path, entry.is_hidden):
                continue
            if not policy.on_root_device(entry.device):
                continue

            if entry.kind == EntryKind.DIRECTORY:
                reason = policy.prune_reason(entry.path, depth + 1, entry.device)
                if reason is None:
                    subdirectories.append(entry)
                    continue
                state.pruned += 1
                if reason == PruneReason.DEPTH:
                    # Below the depth limit only the directory entry itself counts
                    frame.self_usage += usage_of(entry, self.block_size, policy.size_mode)
                continue

            if not policy.count_links and entry.nlink > 1:
                if entry.identity in state.seen_links:
                    continue
                state.seen_links.add(entry.identity)

            usage = usage_of(entry, self.block_size, policy.size_mode)
            frame.self_usage += usage
            state.files += 1
            if retain_files:
                frame.files.append(
                    ScanNode(
                        path=entry.path,
                        kind=NodeKind.FILE,
                        depth=depth + 1,
                        self_usage=usage,
                        cumulative_usage=usage,
                    )
                )

        frame.pending = iter(subdirectories)
        return frame

    def _finish(self, root: str, root_node: ScanNode, state: _ScanState) -> ScanResult:
        if self.summarize:
            root_node = ScanNode(
                path=root_node.path,
                kind=root_node.kind,
                depth=0,
                self_usage=root_node.self_usage,
                cumulative_usage=root_node.cumulative_usage,
            )
        tree = ResultTree(root=root_node, block_size=self.block_size, summarized=self.summarize)

        log_with_context(
            logger,
            logging.INFO,
            "Scan complete",
            extra={
                "path": root,
                "usage": tree.total_usage,
                "block_size": self.block_size.bytes,
                "directories": state.directories,
                "files": state.files,
                "pruned": state.pruned,
                "errors": len(state.errors),
            },
        )
        return ScanResult(root=root, tree=tree, errors=tuple(state.errors))


def scan(
    root: str | os.PathLike[str],
    policy: FilterPolicy,
    block_size: BlockSize,
    *,
    summarize: bool = False,
) -> ScanResult:
    """Scan one root with an explicit policy and block size.

    Raises:
        RootAccessError: If the root itself cannot be statted or listed
        TraversalInvariantViolation: If a directory cycle is reached
    """
    return DirectoryScanner(policy, block_size, summarize=summarize).scan(root)


def scan_roots(
    roots: Iterable[str | os.PathLike[str]],
    policy: FilterPolicy,
    block_size: BlockSize,
    *,
    summarize: bool = False,
) -> MultiScanResult:
    """Scan several roots independently and expose their grand total."""
    return DirectoryScanner(policy, block_size, summarize=summarize).scan_roots(roots)
