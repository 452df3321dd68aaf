"""Exclusion patterns for pruning paths during a scan."""

from __future__ import annotations

import fnmatch
import os
from abc import ABC, abstractmethod
from collections.abc import Iterable
from enum import Enum
from typing import Final, override

GLOB_CHARACTERS: Final[frozenset[str]] = frozenset("*?[")


class PatternType(str, Enum):
    """Enumeration for different pattern types."""

    PREFIX = "prefix"
    NAME_GLOB = "name_glob"
    PATH_GLOB = "path_glob"


class ExclusionPattern(ABC):
    """Base class for exclusion patterns."""

    pattern_type: PatternType

    def __init__(self, pattern: str) -> None:
        """Initialize the exclusion pattern.

        Args:
            pattern: The pattern string, verbatim
        """
        self.pattern: str = pattern

    @abstractmethod
    def matches(self, path: str) -> bool:
        """Check if the pattern matches the given path.

        Args:
            path: Path to check, as constructed from the scan root

        Returns:
            True if the pattern matches, False otherwise
        """

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExclusionPattern):
            return NotImplemented
        return (self.pattern_type, self.pattern) == (other.pattern_type, other.pattern)

    @override
    def __hash__(self) -> int:
        return hash((self.pattern_type, self.pattern))

    @override
    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.pattern!r})"


class PrefixPattern(ExclusionPattern):
    """Path-prefix matcher: the path itself and everything beneath it."""

    pattern_type = PatternType.PREFIX

    def __init__(self, pattern: str) -> None:
        """Initialize the prefix pattern, dropping trailing separators."""
        stripped = pattern.rstrip(os.sep)
        if os.altsep:
            stripped = stripped.rstrip(os.altsep)
        super().__init__(stripped or os.sep)
        self._prefix: str = self.pattern if self.pattern.endswith(os.sep) else self.pattern + os.sep

    @override
    def matches(self, path: str) -> bool:
        return path == self.pattern or path.startswith(self._prefix)


class NameGlobPattern(ExclusionPattern):
    """Glob matched against the final path component (``*.iso``, ``.cache*``)."""

    pattern_type = PatternType.NAME_GLOB

    @override
    def matches(self, path: str) -> bool:
        return fnmatch.fnmatchcase(os.path.basename(path), self.pattern)


class PathGlobPattern(ExclusionPattern):
    """Glob matched against the whole path (``*/node_modules``)."""

    pattern_type = PatternType.PATH_GLOB

    @override
    def matches(self, path: str) -> bool:
        return fnmatch.fnmatchcase(path, self.pattern)


def classify_pattern(pattern: str) -> PatternType:
    """Decide how a raw pattern line is matched.

    Args:
        pattern: Pattern string

    Returns:
        ``PREFIX`` for plain paths, ``NAME_GLOB`` for globs without a
        separator, ``PATH_GLOB`` for globs containing one
    """
    if not GLOB_CHARACTERS.intersection(pattern):
        return PatternType.PREFIX
    if os.sep in pattern or (os.altsep is not None and os.altsep in pattern):
        return PatternType.PATH_GLOB
    return PatternType.NAME_GLOB


_PATTERN_CLASSES: Final[dict[PatternType, type[ExclusionPattern]]] = {
    PatternType.PREFIX: PrefixPattern,
    PatternType.NAME_GLOB: NameGlobPattern,
    PatternType.PATH_GLOB: PathGlobPattern,
}


class ExclusionSet:
    """Immutable set of exclusion patterns with a single matching function.

    Patterns are compared against paths exactly as traversal builds them
    (scan root as supplied, joined with entry names), so an exclusion given
    relative to the current directory only matches a root given the same way.
    """

    __slots__ = ("_patterns",)

    def __init__(self, patterns: Iterable[ExclusionPattern] = ()) -> None:
        """Initialize the exclusion set.

        Args:
            patterns: Compiled exclusion patterns
        """
        self._patterns: tuple[ExclusionPattern, ...] = tuple(dict.fromkeys(patterns))

    @classmethod
    def from_patterns(cls, patterns: Iterable[str]) -> ExclusionSet:
        """Build an exclusion set from raw pattern strings.

        Empty strings are ignored.

        Args:
            patterns: Iterable of pattern strings

        Returns:
            New exclusion set
        """
        compiled: list[ExclusionPattern] = []
        for pattern in patterns:
            if not pattern:
                continue
            compiled.append(_PATTERN_CLASSES[classify_pattern(pattern)](pattern))
        return cls(compiled)

    def matches(self, path: str) -> bool:
        """Check if a path should be excluded.

        Args:
            path: Path to check

        Returns:
            True if any pattern matches the path
        """
        return any(pattern.matches(path) for pattern in self._patterns)

    def union(self, other: ExclusionSet) -> ExclusionSet:
        """Return a set holding the patterns of both sets."""
        return ExclusionSet((*self._patterns, *other._patterns))

    @property
    def patterns(self) -> tuple[ExclusionPattern, ...]:
        """Patterns in insertion order."""
        return self._patterns

    def __len__(self) -> int:
        return len(self._patterns)

    def __bool__(self) -> bool:
        return bool(self._patterns)

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExclusionSet):
            return NotImplemented
        return set(self._patterns) == set(other._patterns)

    @override
    def __hash__(self) -> int:
        return hash(frozenset(self._patterns))

    @override
    def __repr__(self) -> str:
        return f"ExclusionSet({[p.pattern for p in self._patterns]!r})"
