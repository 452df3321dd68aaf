"""Pure formatting utilities for human-readable sizes.

This module provides stateless functions for converting byte counts into
human-readable strings and for parsing size strings typed on the command
line. All functions are pure with no side effects.
"""

import re
from typing import Final

# Unit suffixes in increasing magnitude; index + 1 is the exponent
UNIT_SUFFIXES: Final[tuple[str, ...]] = ("K", "M", "G", "T", "P", "E", "Z")

BINARY_BASE: Final[int] = 1024
DECIMAL_BASE: Final[int] = 1000

# "10", "1.5K", "4KiB", "2MB", "-1G", "K"
_SIZE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<sign>[-+]?)(?P<number>\d+(?:\.\d+)?)?(?P<unit>[KMGTPEZ]?)(?P<suffix>I?B?)$"
)


def unit_multiplier(unit: str, *, si: bool = False) -> int:
    """Return the byte multiplier for a unit letter.

    Args:
        unit: One of ``K M G T P E Z`` (case-insensitive) or empty for bytes
        si: Use powers of 1000 instead of 1024

    Returns:
        Number of bytes in one unit

    Raises:
        ValueError: If the unit is unknown

    Examples:
        >>> unit_multiplier("K")
        1024
        >>> unit_multiplier("M", si=True)
        1000000
    """
    if not unit:
        return 1
    normalized = unit.upper()
    if normalized not in UNIT_SUFFIXES:
        msg = f"unknown size unit: {unit!r}"
        raise ValueError(msg)
    base = DECIMAL_BASE if si else BINARY_BASE
    return base ** (UNIT_SUFFIXES.index(normalized) + 1)


def parse_size(text: str) -> int:
    """Parse a size string into a signed byte count.

    A bare unit (``"K"``) means one unit. ``KB`` means powers of 1000 and
    ``K``/``KiB`` powers of 1024, following coreutils conventions. Fractional
    values are truncated toward zero after multiplication.

    Args:
        text: Size string such as ``"4096"``, ``"10K"``, ``"1.5M"``, ``"-1G"``

    Returns:
        Size in bytes (may be negative)

    Raises:
        ValueError: If the string cannot be parsed

    Examples:
        >>> parse_size("10K")
        10240
        >>> parse_size("1.5M")
        1572864
        >>> parse_size("2KB")
        2000
        >>> parse_size("-1K")
        -1024
    """
    match = _SIZE_PATTERN.match(text.strip().upper())
    if match is None or (match.group("number") is None and not match.group("unit")):
        msg = f"invalid size: {text!r}"
        raise ValueError(msg)

    unit = match.group("unit")
    suffix = match.group("suffix")
    if suffix and not unit and suffix != "B":
        msg = f"invalid size: {text!r}"
        raise ValueError(msg)

    si = suffix == "B" and bool(unit)
    multiplier = unit_multiplier(unit, si=si)
    number = match.group("number")
    if number is None:
        magnitude = multiplier
    elif "." in number:
        magnitude = int(float(number) * multiplier)
    else:
        magnitude = int(number) * multiplier
    return -magnitude if match.group("sign") == "-" else magnitude


def format_human_size(size: int, *, si: bool = False) -> str:
    """Convert a byte count to a compact human-readable string.

    Values below one unit are shown as whole bytes; larger values get one
    decimal place and the largest fitting unit suffix.

    Args:
        size: Number of bytes to format (must be non-negative)
        si: Use powers of 1000 instead of 1024

    Returns:
        Human-readable string representation of the size

    Raises:
        ValueError: If size is negative

    Examples:
        >>> format_human_size(512)
        '512B'
        >>> format_human_size(2048)
        '2.0K'
        >>> format_human_size(1536 * 1024)
        '1.5M'
        >>> format_human_size(1500, si=True)
        '1.5K'
    """
    if size < 0:
        msg = "size must be non-negative"
        raise ValueError(msg)

    base = DECIMAL_BASE if si else BINARY_BASE
    if size < base:
        return f"{size}B"

    # Pick the unit after rounding so 1048575 renders as 1.0M, not 1024.0K
    exponent = 1
    while exponent < len(UNIT_SUFFIXES) and round(size / base**exponent, 1) >= base:
        exponent += 1

    return f"{size / base**exponent:.1f}{UNIT_SUFFIXES[exponent - 1]}"
