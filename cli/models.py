"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class BuildCommand:
    """Build the block map of one input file."""

    in_file: str
    out_file: str | None = None
    append: bool = False
    compression: str = "gzip"
    window: int | None = None
    min: int | None = None
    avg: int | None = None
    max: int | None = None
    debug: bool = False
    command: Literal["build"] = "build"
