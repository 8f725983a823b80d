"""Compression of serialized block maps."""

import gzip
import zlib

from blockmap.config import CompressionFormat
from blockmap.exceptions import CompressionError, ConfigError

COMPRESSION_LEVEL = 9


def archive_data(data: bytes, compression_format: CompressionFormat) -> bytes:
    """
    Compress data at maximum effort.

    GZIP output carries a zero mtime so repeated builds produce the same
    container header.

    Args:
        data: Bytes to compress
        compression_format: GZIP container or raw DEFLATE stream

    Returns:
        Compressed bytes

    Raises:
        ConfigError: If the compression format is not recognized
        CompressionError: If the compressor fails
    """
    try:
        if compression_format is CompressionFormat.GZIP:
            return gzip.compress(data, compresslevel=COMPRESSION_LEVEL, mtime=0)
        if compression_format is CompressionFormat.DEFLATE:
            compressor = zlib.compressobj(COMPRESSION_LEVEL, zlib.DEFLATED, -zlib.MAX_WBITS)
            return compressor.compress(data) + compressor.flush()
    except zlib.error as e:
        raise CompressionError(f"{compression_format.value} compression failed: {e}") from e

    raise ConfigError(f"Unknown compression format {compression_format!r}")
