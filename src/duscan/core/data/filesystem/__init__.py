"""Filesystem traversal, filtering and size accounting."""

from __future__ import annotations

from .exclusions import ExclusionSet, PatternType
from .filters import FilterPolicy, PruneReason
from .result_tree import NodeKind, ResultTree, ScanNode, ScanSummary
from .scanner import DirectoryScanner, MultiScanResult, ScanResult, scan, scan_roots
from .size_model import BlockSize, Entry, EntryKind, SizeMode, format_usage, usage_of

__all__ = [
    "BlockSize",
    "DirectoryScanner",
    "Entry",
    "EntryKind",
    "ExclusionSet",
    "FilterPolicy",
    "MultiScanResult",
    "NodeKind",
    "PatternType",
    "PruneReason",
    "ResultTree",
    "ScanNode",
    "ScanResult",
    "ScanSummary",
    "SizeMode",
    "format_usage",
    "scan",
    "scan_roots",
    "usage_of",
]
