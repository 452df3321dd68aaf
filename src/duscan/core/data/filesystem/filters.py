"""Filter policy consulted by the scanner at every node."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum

from duscan.core.data.filesystem.exclusions import ExclusionSet
from duscan.core.data.filesystem.size_model import SizeMode
from duscan.core.exceptions import ConfigurationError


class PruneReason(str, Enum):
    """Why a directory was not entered."""

    DEPTH = "depth"
    FILESYSTEM_BOUNDARY = "filesystem_boundary"
    EXCLUDED = "excluded"


@dataclass(slots=True, frozen=True)
class FilterPolicy:
    """Immutable inclusion/exclusion policy for one scan.

    The policy is passed explicitly into every scan, so several roots can be
    scanned with independent policies.

    Attributes:
        include_hidden: Include entries whose name starts with a dot
        exclusions: Path patterns pruned from the scan
        one_file_system: Stay on the scan root's filesystem
        root_device: Device id of the scan root; bound by the scanner when
            ``one_file_system`` is requested and left unset by the caller
        max_depth: Deepest directory level entered (root is 0), None for unlimited
        list_files: Keep a node per file in addition to directories
        count_links: Count hard-linked files once per link instead of once
        size_mode: Allocated or apparent size accounting
    """

    include_hidden: bool = False
    exclusions: ExclusionSet = field(default_factory=ExclusionSet)
    one_file_system: bool = False
    root_device: int | None = None
    max_depth: int | None = None
    list_files: bool = False
    count_links: bool = False
    size_mode: SizeMode = SizeMode.DISK_USAGE

    def __post_init__(self) -> None:
        """Validate depth limits."""
        if self.max_depth is not None and self.max_depth < 0:
            raise ConfigurationError(
                f"invalid maximum depth: {self.max_depth}",
                context={"max_depth": self.max_depth},
            )

    def bound_to(self, device_id: int) -> FilterPolicy:
        """Return a copy whose filesystem boundary is ``device_id``."""
        return dataclasses.replace(self, root_device=device_id)

    def on_root_device(self, device_id: int) -> bool:
        """Whether an entry on ``device_id`` lies within the filesystem boundary."""
        if not self.one_file_system or self.root_device is None:
            return True
        return device_id == self.root_device

    def prune_reason(self, path: str, depth: int, device_id: int) -> PruneReason | None:
        """Return why a directory must not be entered, or None to enter it.

        Args:
            path: Directory path as constructed from the scan root
            depth: Depth the directory would occupy (root is 0)
            device_id: Device id of the directory

        Returns:
            The first applicable prune reason, or None
        """
        if self.max_depth is not None and depth > self.max_depth:
            return PruneReason.DEPTH
        if not self.on_root_device(device_id):
            return PruneReason.FILESYSTEM_BOUNDARY
        if self.exclusions.matches(path):
            return PruneReason.EXCLUDED
        return None

    def should_enter_directory(self, path: str, depth: int, device_id: int) -> bool:
        """Decide, before reading it, whether a directory's subtree is visited.

        Args:
            path: Directory path as constructed from the scan root
            depth: Depth the directory would occupy (root is 0)
            device_id: Device id of the directory

        Returns:
            False if the subtree is pruned
        """
        return self.prune_reason(path, depth, device_id) is None

    def should_include_entry(self, path: str, is_hidden: bool) -> bool:
        """Decide whether an entry takes part in the scan at all.

        Args:
            path: Entry path as constructed from the scan root
            is_hidden: Whether the entry name marks it hidden

        Returns:
            False for hidden entries (unless included) and excluded paths
        """
        if is_hidden and not self.include_hidden:
            return False
        return not self.exclusions.matches(path)

    def retains_file_node(self, depth: int) -> bool:
        """Whether a file at ``depth`` gets its own node in the result."""
        if not self.list_files:
            return False
        return self.max_depth is None or depth <= self.max_depth
