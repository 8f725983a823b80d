"""Utility functions for CLI byte-size handling."""

import re

SI_PREFIXES = ["", "k", "M", "G", "T", "P", "E", "Z", "Y"]

_SIZE_PATTERN = re.compile(r'^\s*(\d+(?:\.\d*)?|\.\d+)(?:[eE]([+-]?\d+))?\s*([A-Za-z]*)\s*$')


def parse_file_size(text: str) -> int:
    """
    Parse a byte count with an optional 1024-based SI prefix.

    Accepts a bare number, or a number followed by a prefix alone, the
    prefix plus "B", or the prefix plus "iB" (e.g. "64", "16k", "8kB", "1.5MiB").

    Args:
        text: Size string

    Returns:
        Size in bytes, truncated to an integer

    Raises:
        ValueError: If the string is not a number with a known unit
    """
    match = _SIZE_PATTERN.match(text)
    if not match:
        raise ValueError(f"expected <num> or <num>[{'|'.join(SI_PREFIXES[1:])}], got {text!r}")

    mantissa, exponent, unit = match.groups()
    number = float(f"{mantissa}e{exponent}" if exponent else mantissa)

    for power, prefix in enumerate(SI_PREFIXES):
        candidates = {prefix, prefix + "B", prefix + "iB"} if prefix else {"", "B"}
        if prefix == "k":
            candidates |= {"K", "KB", "KiB"}
        if unit in candidates:
            return int(number * (1024 ** power))

    raise ValueError(f"unknown size unit {unit!r} in {text!r}")


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"
