"""Single-pass block map build: chunk, digest, serialize, write."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union

from blockmap.builder import BlockMapBuilder
from blockmap.chunker import Chunker
from blockmap.config import (
    READ_SIZE,
    ChunkerConfig,
    CompressionFormat,
    OutputTarget,
    validate_read_size,
)
from blockmap.digests import ChunkDigest, FileDigest
from blockmap.exceptions import BlockMapIOError, IntegrityError
from blockmap.models import BlockMap, InputFileInfo
from blockmap.serializer import serialize_block_map
from blockmap.streams import ChunkBuffer, TeeReader, drain
from blockmap.trailer import TrailerWriter
from common.constants import TRAILER_LENGTH_SIZE

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Outcome of the chunking pass; file_digest is still open for trailer bytes."""
    block_map: BlockMap
    size: int
    file_digest: FileDigest
    peak_buffer: int = 0


def compute_blocks(
    input_path: Union[str, os.PathLike],
    chunker_config: ChunkerConfig,
    read_size: Optional[int] = None,
) -> ScanResult:
    """
    Chunk a file and digest every chunk and the whole file in one pass.

    Bytes read by the chunker are teed into a ChunkBuffer. For each length
    it yields, exactly that many bytes are drained from the buffer through a
    TeeReader feeding the chunk digest and the file digest, so at most one
    chunk plus one read block is held in memory.

    Args:
        input_path: File to chunk
        chunker_config: Validated chunker configuration
        read_size: Bytes per read from the file. Defaults to BLOCKMAP_READ_SIZE

    Returns:
        ScanResult with the block map, the measured size and the live file digest

    Raises:
        ConfigError: If read_size is invalid; raised before the file is opened
        BlockMapIOError: If the file cannot be opened, read or measured
        IntegrityError: If the file changed size while being chunked
    """
    read_size = validate_read_size(READ_SIZE if read_size is None else read_size)

    builder = BlockMapBuilder()
    chunk_digest = ChunkDigest()
    file_digest = FileDigest()
    buffer = ChunkBuffer()

    try:
        with open(input_path, 'rb') as f:
            chunker = Chunker(TeeReader(f, buffer.write), chunker_config, read_size=read_size)
            digest_reader = TeeReader(buffer, chunk_digest.update, file_digest.update)

            for length in chunker:
                copied = drain(digest_reader, length)
                if copied != length:
                    raise IntegrityError(f"chunk {len(builder)} expected {length} bytes, buffered {copied}")
                builder.add(chunk_digest.finalize(), length)

            measured_size = os.fstat(f.fileno()).st_size
    except OSError as e:
        raise BlockMapIOError(f"Failed to read {input_path}: {e}") from e

    block_map = builder.build(measured_size)
    logger.info(
        f"Chunked {input_path}: {len(builder)} chunks, {measured_size} bytes, "
        f"peak buffer {buffer.high_water} bytes"
    )
    return ScanResult(
        block_map=block_map,
        size=measured_size,
        file_digest=file_digest,
        peak_buffer=buffer.high_water,
    )


def build_block_map(
    input_path: Union[str, os.PathLike],
    chunker_config: Optional[ChunkerConfig] = None,
    compression_format: CompressionFormat = CompressionFormat.GZIP,
    output: Optional[OutputTarget] = None,
    stdout: Optional[BinaryIO] = None,
) -> InputFileInfo:
    """
    Build the block map of a file and write it to the requested target.

    Args:
        input_path: File to describe
        chunker_config: Chunker bounds. Defaults to ChunkerConfig.default()
        compression_format: Compression for the written block map
        output: Destination. Defaults to stdout
        stdout: Binary stream standing in for stdout

    Returns:
        InputFileInfo for the final artifact; blockMapSize is set in append mode

    Raises:
        BlockMapError: Any subclass, on configuration, IO, integrity,
            serialization or compression failure
    """
    if chunker_config is None:
        chunker_config = ChunkerConfig.default()
    if output is None:
        output = OutputTarget.stdout()

    logger.debug(f"Building block map for {input_path} with {chunker_config} ({compression_format.value})")
    scan = compute_blocks(input_path, chunker_config)
    serialized = serialize_block_map(scan.block_map)

    writer = TrailerWriter(compression_format)
    size = scan.size
    block_map_size = None

    if output.is_append:
        block_map_size = writer.append(serialized, Path(input_path), scan.file_digest)
        size += block_map_size + TRAILER_LENGTH_SIZE
    else:
        writer.write_standalone(serialized, path=output.path, stdout=stdout)

    return InputFileInfo(size=size, sha512=scan.file_digest.finalize(), block_map_size=block_map_size)
