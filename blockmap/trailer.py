"""Writes the compressed block map standalone or as a trailer on the input file."""

import io
import logging
import os
import shutil
import struct
import sys
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Optional

from blockmap.archiver import archive_data
from blockmap.config import CompressionFormat
from blockmap.digests import FileDigest
from blockmap.exceptions import BlockMapError, BlockMapIOError, SerializationError
from blockmap.streams import TeeReader
from common.constants import SIZE_FIELD_MAX, TRAILER_LENGTH_FORMAT

logger = logging.getLogger(__name__)


class TrailerState(Enum):
    IDLE = "idle"
    COMPRESSING = "compressing"
    STANDALONE_WRITE = "standalone_write"
    APPEND_WRITE = "append_write"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS = {
    TrailerState.IDLE: {TrailerState.COMPRESSING},
    TrailerState.COMPRESSING: {TrailerState.STANDALONE_WRITE, TrailerState.APPEND_WRITE, TrailerState.FAILED},
    TrailerState.STANDALONE_WRITE: {TrailerState.DONE, TrailerState.FAILED},
    TrailerState.APPEND_WRITE: {TrailerState.DONE, TrailerState.FAILED},
    TrailerState.DONE: set(),
    TrailerState.FAILED: set(),
}


def encode_trailer_length(length: int) -> bytes:
    """
    Encode a payload length as the 4-byte big-endian trailer field.

    Raises:
        SerializationError: If the length does not fit in 32 bits
    """
    if length < 0 or length > SIZE_FIELD_MAX:
        raise SerializationError(f"payload of {length} bytes does not fit the 4-byte trailer length")
    return struct.pack(TRAILER_LENGTH_FORMAT, length)


def _append_only_opener(path, flags: int) -> int:
    # Ignores open()'s O_CREAT so a missing input is an error, not a new file.
    return os.open(path, os.O_WRONLY | os.O_APPEND)


class TrailerWriter:
    """
    Single-use writer for one build's compressed block map.

    States: IDLE -> COMPRESSING -> STANDALONE_WRITE | APPEND_WRITE -> DONE.
    Any failure moves the writer to FAILED and re-raises as a BlockMapError.
    """

    def __init__(self, compression_format: CompressionFormat):
        self.compression_format = compression_format
        self.state = TrailerState.IDLE
        self.archive_size: Optional[int] = None

    def _transition(self, new_state: TrailerState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise BlockMapError(f"TrailerWriter cannot move from {self.state.value} to {new_state.value}")
        logger.debug(f"TrailerWriter {self.state.value} -> {new_state.value}")
        self.state = new_state

    def _compress(self, data: bytes) -> bytes:
        self._transition(TrailerState.COMPRESSING)
        try:
            archive = archive_data(data, self.compression_format)
        except BlockMapError:
            self._transition(TrailerState.FAILED)
            raise
        self.archive_size = len(archive)
        return archive

    def write_standalone(self, data: bytes, path: Optional[Path] = None, stdout: Optional[BinaryIO] = None) -> int:
        """
        Compress data and write it to a file, or to stdout when path is None.

        Args:
            data: Serialized block map
            path: Destination file, created or truncated
            stdout: Binary stream used instead of sys.stdout.buffer when path is None

        Returns:
            Compressed size in bytes

        Raises:
            BlockMapIOError: If the destination cannot be written
        """
        archive = self._compress(data)
        self._transition(TrailerState.STANDALONE_WRITE)
        try:
            if path is None:
                stream = stdout if stdout is not None else sys.stdout.buffer
                stream.write(archive)
                stream.flush()
            else:
                with open(path, 'wb') as f:
                    f.write(archive)
        except OSError as e:
            self._transition(TrailerState.FAILED)
            raise BlockMapIOError(f"Failed to write block map to {path or 'stdout'}: {e}") from e

        self._transition(TrailerState.DONE)
        logger.info(f"Wrote {len(archive)} byte block map to {path or 'stdout'}")
        return len(archive)

    def append(self, data: bytes, path: Path, file_digest: FileDigest) -> int:
        """
        Compress data and append it plus its 4-byte length to the input file.

        The file is opened append-only and never created or truncated.
        Every appended byte is also fed to file_digest, so the digest
        describes the file's final content.

        Args:
            data: Serialized block map
            path: Input file that was just chunked
            file_digest: The build's whole-file digest, not yet finalized

        Returns:
            Compressed size in bytes, excluding the 4-byte length field

        Raises:
            SerializationError: If the payload is too large for the length field
            BlockMapIOError: If the file cannot be opened or written
        """
        archive = self._compress(data)
        try:
            length_field = encode_trailer_length(len(archive))
        except SerializationError:
            self._transition(TrailerState.FAILED)
            raise

        self._transition(TrailerState.APPEND_WRITE)
        try:
            with open(path, 'ab', opener=_append_only_opener) as f:
                shutil.copyfileobj(TeeReader(io.BytesIO(archive), file_digest.update), f)
                f.write(length_field)
        except OSError as e:
            self._transition(TrailerState.FAILED)
            raise BlockMapIOError(f"Failed to append block map to {path}: {e}") from e
        file_digest.update(length_field)

        self._transition(TrailerState.DONE)
        logger.info(f"Appended {len(archive)} byte block map trailer to {path}")
        return len(archive)
