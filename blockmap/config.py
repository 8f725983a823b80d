"""Configuration settings for block map builds."""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from blockmap.exceptions import ConfigError
from common.constants import (
    DEFAULT_AVG_CHUNK,
    DEFAULT_MAX_CHUNK,
    DEFAULT_MIN_CHUNK,
    DEFAULT_READ_SIZE,
    DEFAULT_WINDOW,
    SIZE_FIELD_MAX,
    STDOUT_SENTINEL,
)


WINDOW = int(os.environ.get("BLOCKMAP_WINDOW", str(DEFAULT_WINDOW)))

MIN_CHUNK = int(os.environ.get("BLOCKMAP_MIN", str(DEFAULT_MIN_CHUNK)))

AVG_CHUNK = int(os.environ.get("BLOCKMAP_AVG", str(DEFAULT_AVG_CHUNK)))

MAX_CHUNK = int(os.environ.get("BLOCKMAP_MAX", str(DEFAULT_MAX_CHUNK)))

COMPRESSION = os.environ.get("BLOCKMAP_COMPRESSION", "gzip")

READ_SIZE = int(os.environ.get("BLOCKMAP_READ_SIZE", str(DEFAULT_READ_SIZE)))


def validate_read_size(read_size: int) -> int:
    """
    Check the number of bytes requested per read from the input.

    Args:
        read_size: Requested block size

    Returns:
        The same read size

    Raises:
        ConfigError: If read_size is not a positive integer
    """
    if isinstance(read_size, bool) or not isinstance(read_size, int) or read_size <= 0:
        raise ConfigError(f"read size must be a positive integer, got {read_size!r}")
    return read_size


@dataclass(frozen=True)
class ChunkerConfig:
    """
    Rolling hash window and chunk size bounds, all in bytes.

    Validated on construction: window <= min <= avg <= max, avg is a power
    of two and max fits the unsigned 32-bit size field.
    """
    window: int
    min: int
    avg: int
    max: int

    def __post_init__(self):
        for name in ("window", "min", "avg", "max"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")

        if self.avg & (self.avg - 1) != 0:
            raise ConfigError(f"avg must be a power of two, got {self.avg}")
        if self.min > self.max:
            raise ConfigError(f"min must be <= max (min={self.min}, max={self.max})")
        if self.min < self.window:
            raise ConfigError(f"min must be >= window (min={self.min}, window={self.window})")
        if not self.min <= self.avg <= self.max:
            raise ConfigError(
                f"avg must lie between min and max (min={self.min}, avg={self.avg}, max={self.max})"
            )
        if self.max > SIZE_FIELD_MAX:
            raise ConfigError(f"max must be <= {SIZE_FIELD_MAX}, got {self.max}")

    @classmethod
    def default(cls) -> "ChunkerConfig":
        """Build the configuration from the BLOCKMAP_* environment defaults."""
        return cls(window=WINDOW, min=MIN_CHUNK, avg=AVG_CHUNK, max=MAX_CHUNK)


class CompressionFormat(Enum):
    """Compression applied to the serialized block map."""
    GZIP = "gzip"
    DEFLATE = "deflate"

    @classmethod
    def from_name(cls, name: str) -> "CompressionFormat":
        """
        Parse a compression selector.

        Args:
            name: Selector name, "gzip" or "deflate"

        Returns:
            Matching CompressionFormat

        Raises:
            ConfigError: If the name is not recognized
        """
        try:
            return cls(name)
        except ValueError:
            raise ConfigError(f"Unknown compression format {name}")


class OutputKind(Enum):
    PATH = "path"
    STDOUT = "stdout"
    APPEND = "append"


@dataclass(frozen=True)
class OutputTarget:
    """
    Where the compressed block map goes: a file, stdout, or the input's tail.
    """
    kind: OutputKind
    path: Optional[Path] = None

    def __post_init__(self):
        if (self.kind is OutputKind.PATH) != (self.path is not None):
            raise ConfigError("an output path is required for, and only for, path targets")

    @classmethod
    def to_path(cls, path: Union[str, os.PathLike]) -> "OutputTarget":
        if str(path) == STDOUT_SENTINEL:
            return cls.stdout()
        return cls(kind=OutputKind.PATH, path=Path(path))

    @classmethod
    def stdout(cls) -> "OutputTarget":
        return cls(kind=OutputKind.STDOUT)

    @classmethod
    def append(cls) -> "OutputTarget":
        return cls(kind=OutputKind.APPEND)

    @property
    def is_append(self) -> bool:
        return self.kind is OutputKind.APPEND
