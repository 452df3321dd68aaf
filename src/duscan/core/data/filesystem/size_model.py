"""Size model: on-disk usage of entries and block-size conversion."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from enum import Enum
from typing import Final

from duscan.core.exceptions import ConfigurationError
from duscan.utils.formatting import format_human_size, parse_size

# st_blocks is counted in 512-byte units on every POSIX platform
ST_BLOCK_UNIT: Final[int] = 512

DEFAULT_BLOCK_SIZE: Final[int] = 1024

NATIVE_BLOCK_SIZE: Final[str] = "native"


class SizeMode(str, Enum):
    """Enumeration for size calculation modes."""

    APPARENT = "apparent"  # Logical length, directories count as 0
    DISK_USAGE = "disk_usage"  # Allocated blocks as reported by the filesystem


class EntryKind(str, Enum):
    """Classification of a filesystem object, without following symlinks."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"

    @classmethod
    def from_mode(cls, mode: int) -> EntryKind:
        """Classify an ``st_mode`` value."""
        if stat.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat.S_ISLNK(mode):
            return cls.SYMLINK
        if stat.S_ISREG(mode):
            return cls.FILE
        return cls.OTHER


@dataclass(slots=True, frozen=True)
class Entry:
    """A single filesystem object observed during traversal."""

    path: str
    name: str
    kind: EntryKind
    size: int
    device: int
    inode: int
    nlink: int
    blocks: int | None

    @classmethod
    def from_stat(cls, path: str, name: str, st: os.stat_result) -> Entry:
        """Build an entry from an ``lstat`` result.

        Args:
            path: Path of the entry as constructed during traversal
            name: Final path component
            st: Result of ``os.lstat`` (or ``DirEntry.stat(follow_symlinks=False)``)

        Returns:
            Entry carrying the metadata needed for usage accounting
        """
        return cls(
            path=path,
            name=name,
            kind=EntryKind.from_mode(st.st_mode),
            size=st.st_size,
            device=st.st_dev,
            inode=st.st_ino,
            nlink=st.st_nlink,
            blocks=getattr(st, "st_blocks", None),
        )

    @property
    def is_hidden(self) -> bool:
        """Whether the entry name marks it hidden."""
        return self.name.startswith(".") and self.name not in (".", "..")

    @property
    def identity(self) -> tuple[int, int]:
        """``(device, inode)`` pair identifying the underlying object."""
        return (self.device, self.inode)


@dataclass(slots=True, frozen=True)
class BlockSize:
    """Divisor converting byte counts into reported usage units.

    Attributes:
        bytes: Number of bytes per block (always positive)
        suffix: Unit letter appended when rendering plain block counts
    """

    bytes: int = DEFAULT_BLOCK_SIZE
    suffix: str = ""

    def __post_init__(self) -> None:
        """Reject non-positive block sizes."""
        if self.bytes <= 0:
            raise ConfigurationError(
                f"invalid block size: {self.bytes}",
                context={"block_size": self.bytes},
            )

    @classmethod
    def parse(cls, text: str) -> BlockSize:
        """Parse a block size argument such as ``4096``, ``K``, ``1M`` or ``4KiB``.

        A value given purely as a unit (``K``, ``M`` ...) keeps that unit as
        display suffix, so ``-BK`` renders ``"4K"`` just like ``du``.

        Raises:
            ConfigurationError: If the value is unparsable, zero or negative
        """
        stripped = text.strip()
        try:
            size = parse_size(stripped)
        except ValueError as exc:
            raise ConfigurationError(
                f"invalid block size: {text!r}",
                context={"block_size": text},
            ) from exc

        suffix = stripped.upper() if stripped.upper() in ("K", "M", "G", "T", "P", "E", "Z") else ""
        return cls(bytes=size, suffix=suffix)

    @classmethod
    def native(cls, path: str) -> BlockSize:
        """Return the fundamental block size of the filesystem holding ``path``.

        Falls back to the default block size where ``statvfs`` is unavailable.

        Raises:
            ConfigurationError: If the filesystem cannot be queried
        """
        statvfs = getattr(os, "statvfs", None)
        if statvfs is None:
            return cls()
        try:
            result = statvfs(path)
        except OSError as exc:
            raise ConfigurationError(
                f"cannot determine native block size of '{path}': {exc.strerror or exc}",
                context={"path": path},
            ) from exc
        return cls(bytes=result.f_frsize or result.f_bsize or DEFAULT_BLOCK_SIZE)

    def blocks_for(self, nbytes: int) -> int:
        """Round a byte count up to whole blocks."""
        return -(-nbytes // self.bytes)


def allocated_bytes(entry: Entry) -> int:
    """Bytes actually allocated to an entry.

    Uses the filesystem-reported block count; where the platform reports none
    the logical length stands in.
    """
    if entry.blocks is None:
        return max(entry.size, 0)
    return entry.blocks * ST_BLOCK_UNIT


def usage_of(entry: Entry, block_size: BlockSize, mode: SizeMode = SizeMode.DISK_USAGE) -> int:
    """Calculate the usage of a single entry in units of ``block_size``.

    Args:
        entry: Entry to measure
        block_size: Block size in effect
        mode: Allocated (``DISK_USAGE``) or logical (``APPARENT``) size

    Returns:
        Non-negative number of blocks, rounded up

    Examples:
        >>> e = Entry("f", "f", EntryKind.FILE, 5000, 1, 1, 1, None)
        >>> usage_of(e, BlockSize(4096), SizeMode.APPARENT)
        2
    """
    if mode == SizeMode.APPARENT:
        if entry.kind == EntryKind.DIRECTORY:
            return 0
        nbytes = max(entry.size, 0)
    else:
        nbytes = allocated_bytes(entry)
    return block_size.blocks_for(nbytes)


def format_usage(
    usage: int,
    block_size: BlockSize,
    *,
    human_readable: bool = False,
    si: bool = False,
) -> str:
    """Render a usage value for display.

    Args:
        usage: Usage in blocks of ``block_size``
        block_size: Block size the usage is expressed in
        human_readable: Render ``usage * block_size`` bytes with a unit suffix
        si: With ``human_readable``, use powers of 1000

    Returns:
        Display string such as ``"8"``, ``"8K"`` or ``"8.0K"``
    """
    if human_readable or si:
        return format_human_size(usage * block_size.bytes, si=si)
    return f"{usage}{block_size.suffix}"
