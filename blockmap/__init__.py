"""Content-defined block maps for differential file updates."""

from blockmap.config import ChunkerConfig, CompressionFormat, OutputTarget
from blockmap.exceptions import (
    BlockMapError,
    BlockMapIOError,
    CompressionError,
    ConfigError,
    IntegrityError,
    SerializationError,
)
from blockmap.models import BlockMap, BlockMapFile, InputFileInfo
from blockmap.pipeline import build_block_map

__all__ = [
    "BlockMap",
    "BlockMapError",
    "BlockMapFile",
    "BlockMapIOError",
    "ChunkerConfig",
    "CompressionError",
    "CompressionFormat",
    "ConfigError",
    "InputFileInfo",
    "IntegrityError",
    "OutputTarget",
    "SerializationError",
    "build_block_map",
]
