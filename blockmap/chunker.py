"""Content-defined boundary detection over a byte stream."""

import logging
from typing import BinaryIO, Iterator, Optional

from blockmap.config import READ_SIZE, ChunkerConfig, validate_read_size
from blockmap.rabin import RabinTable, RollingHash, get_table

logger = logging.getLogger(__name__)


class Chunker:
    """
    Lazy, single-use iterator of chunk lengths for a byte stream.

    A cut is made after a byte when the run since the last cut is at least
    `min` bytes and the rolling fingerprint is 0 modulo `avg`, or when the
    run reaches `max`. Trailing bytes form a final, possibly short, chunk.
    The lengths always sum to the number of bytes read from the source.

    Usage:
        for length in Chunker(stream, config):
            ...
    """

    def __init__(
        self,
        source: BinaryIO,
        config: ChunkerConfig,
        table: Optional[RabinTable] = None,
        read_size: int = READ_SIZE,
    ):
        """
        Initialize a chunker.

        Args:
            source: Binary stream with a read(n) method
            config: Validated chunker configuration
            table: Rabin table for config.window. Defaults to the shared Poly64 table
            read_size: Bytes requested from the source per read

        Raises:
            ConfigError: If read_size is not a positive integer
            ValueError: If table was built for a different window
        """
        validate_read_size(read_size)
        if table is not None and table.window != config.window:
            raise ValueError(f"table window {table.window} does not match config window {config.window}")

        self.config = config
        self.bytes_read = 0
        self._source = source
        self._table = table if table is not None else get_table(config.window)
        self._read_size = read_size
        self._lengths = self._scan()

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        return next(self._lengths)

    def _scan(self) -> Iterator[int]:
        rolling = RollingHash(self._table)
        roll = rolling.roll
        min_size = self.config.min
        max_size = self.config.max
        mask = self.config.avg - 1
        # The fingerprint only depends on the last `window` bytes, and no cut
        # is possible before `min`, so each chunk's head is skipped unhashed.
        skip = min_size - self.config.window
        run = 0

        while True:
            block = self._source.read(self._read_size)
            if not block:
                break
            self.bytes_read += len(block)

            view = memoryview(block)
            pos = 0
            end = len(block)
            while pos < end:
                if run < skip:
                    advance = min(skip - run, end - pos)
                    run += advance
                    pos += advance
                    continue

                for byte in view[pos:]:
                    pos += 1
                    run += 1
                    if (roll(byte) & mask == 0 and run >= min_size) or run >= max_size:
                        yield run
                        run = 0
                        rolling.reset()
                        break

        if run:
            yield run

        logger.debug(f"Chunker exhausted after {self.bytes_read} bytes")
