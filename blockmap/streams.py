"""Stream helpers for reading each byte once and feeding it to several consumers."""

from typing import BinaryIO, Callable, Optional

Sink = Callable[[bytes], object]


class TeeReader:
    """
    Readable wrapper that forwards every chunk it returns to each sink.

    Sinks are called in order with the exact bytes handed to the reader's
    caller, so nothing is buffered beyond what the caller asked for.

    Usage:
        reader = TeeReader(source, chunk_digest.update, file_digest.update)
        reader.read(4096)
    """

    def __init__(self, source: BinaryIO, *sinks: Sink):
        self._source = source
        self._sinks = sinks

    def read(self, size: int = -1) -> bytes:
        data = self._source.read(size)
        if data:
            for sink in self._sinks:
                sink(data)
        return data


class ChunkBuffer:
    """
    FIFO byte buffer between the boundary detector and the digest stage.

    Written by a TeeReader on the detector side; drained one chunk at a time.
    """

    def __init__(self):
        self._data = bytearray()
        self.high_water = 0

    def write(self, data: bytes) -> int:
        self._data += data
        if len(self._data) > self.high_water:
            self.high_water = len(self._data)
        return len(data)

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0 or size >= len(self._data):
            data = bytes(self._data)
            self._data.clear()
            return data
        data = bytes(self._data[:size])
        del self._data[:size]
        return data

    def __len__(self) -> int:
        return len(self._data)


def drain(reader: BinaryIO, length: int, piece_size: Optional[int] = None) -> int:
    """
    Read and discard exactly `length` bytes from a reader.

    Args:
        reader: Readable stream, typically a TeeReader whose sinks consume the bytes
        length: Number of bytes to pull
        piece_size: Maximum bytes per read. Defaults to the whole length

    Returns:
        Number of bytes actually read, smaller than length if the reader ran dry
    """
    remaining = length
    step = piece_size or length
    while remaining > 0:
        data = reader.read(min(step, remaining))
        if not data:
            break
        remaining -= len(data)
    return length - remaining
