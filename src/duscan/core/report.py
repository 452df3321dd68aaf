"""Report rendering over finished result trees.

Threshold filtering happens here, at display time: a node hidden by the
threshold keeps its usage in every ancestor's cumulative figure because the
tree is never modified.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from duscan.core.data.filesystem.result_tree import ResultTree, ScanNode
from duscan.core.data.filesystem.scanner import MultiScanResult, ScanResult
from duscan.core.data.filesystem.size_model import BlockSize, format_usage
from duscan.core.exceptions import ConfigurationError
from duscan.utils.formatting import parse_size

TOTAL_LABEL: Final[str] = "total"


class DisplayMode(str, Enum):
    """How usage figures are rendered."""

    BLOCKS = "blocks"
    HUMAN = "human"
    SI = "si"


class NegativeThresholdPolicy(str, Enum):
    """What a negative threshold means."""

    AT_MOST = "at_most"  # Show nodes whose usage is at most |threshold|
    REJECT = "reject"  # Refuse negative thresholds


@dataclass(slots=True, frozen=True)
class Threshold:
    """Display threshold in bytes.

    A non-negative limit admits nodes with usage >= limit; a negative limit
    admits nodes with usage <= |limit|.
    """

    limit: int = 0

    @classmethod
    def parse(
        cls,
        text: str,
        negative: NegativeThresholdPolicy = NegativeThresholdPolicy.AT_MOST,
    ) -> Threshold:
        """Parse a threshold such as ``10K`` or ``-1M``.

        Raises:
            ConfigurationError: If the value is invalid or negative thresholds
                are rejected
        """
        try:
            limit = parse_size(text)
        except ValueError as exc:
            raise ConfigurationError(f"invalid threshold: {text!r}", context={"threshold": text}) from exc
        if limit < 0 and negative == NegativeThresholdPolicy.REJECT:
            raise ConfigurationError(
                f"negative threshold not allowed: {text!r}",
                context={"threshold": text, "negative_threshold": negative.value},
            )
        return cls(limit=limit)

    def admits(self, usage_bytes: int) -> bool:
        """Check whether a node of ``usage_bytes`` is displayed."""
        if self.limit < 0:
            return usage_bytes <= -self.limit
        return usage_bytes >= self.limit


@dataclass(slots=True, frozen=True)
class ReportOptions:
    """Presentation settings for one invocation."""

    display: DisplayMode = DisplayMode.BLOCKS
    threshold: Threshold = field(default_factory=Threshold)
    show_total: bool = False


def format_value(usage: int, block_size: BlockSize, display: DisplayMode) -> str:
    """Render a usage value according to the display mode."""
    return format_usage(
        usage,
        block_size,
        human_readable=display != DisplayMode.BLOCKS,
        si=display == DisplayMode.SI,
    )


def format_line(value: str, label: str) -> str:
    """Lay out one report line."""
    return f"{value:<10} {label}"


def visible_nodes(tree: ResultTree, threshold: Threshold) -> Iterator[ScanNode]:
    """Yield the nodes of a tree that pass the threshold, in ``du`` order.

    Summarized trees yield only their root.
    """
    nodes = (tree.root,) if tree.summarized else tree.walk_post_order()
    for node in nodes:
        if threshold.admits(node.cumulative_usage * tree.block_size.bytes):
            yield node


def render_result(result: ScanResult, options: ReportOptions) -> list[str]:
    """Render the lines for one scanned root."""
    tree = result.tree
    return [
        format_line(format_value(node.cumulative_usage, tree.block_size, options.display), node.path)
        for node in visible_nodes(tree, options.threshold)
    ]


def render_report(report: MultiScanResult, options: ReportOptions) -> list[str]:
    """Render every successfully scanned root and, if requested, the grand total.

    The total line is not subject to the threshold.
    """
    lines: list[str] = []
    for result in report.results:
        lines.extend(render_result(result, options))
    if options.show_total:
        lines.append(format_line(format_value(report.grand_total, report.block_size, options.display), TOTAL_LABEL))
    return lines
