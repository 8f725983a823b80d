"""Assembles chunk (checksum, size) pairs into a validated block map."""

import logging
from typing import List

from blockmap.exceptions import IntegrityError
from blockmap.models import BlockMap, BlockMapFile
from common.constants import BLOCK_MAP_FILE_NAME, BLOCK_MAP_VERSION, SIZE_FIELD_MAX

logger = logging.getLogger(__name__)


class BlockMapBuilder:
    """
    Collects the parallel checksum and size sequences of a single pass.

    Usage:
        builder = BlockMapBuilder()
        builder.add(checksum, length)
        block_map = builder.build(measured_size)
    """

    def __init__(self, name: str = BLOCK_MAP_FILE_NAME):
        self.name = name
        self.checksums: List[str] = []
        self.sizes: List[int] = []
        self.total_size = 0

    def add(self, checksum: str, size: int) -> None:
        """
        Record the next chunk.

        Args:
            checksum: Encoded chunk digest
            size: Chunk length in bytes

        Raises:
            IntegrityError: If the size is not positive or exceeds the size field
        """
        if size <= 0 or size > SIZE_FIELD_MAX:
            raise IntegrityError(f"chunk {len(self.sizes)} has invalid size {size}")
        self.checksums.append(checksum)
        self.sizes.append(size)
        self.total_size += size

    def __len__(self) -> int:
        return len(self.sizes)

    def build(self, measured_size: int) -> BlockMap:
        """
        Validate the collected sizes and wrap them in a block map.

        Args:
            measured_size: File length read back from the filesystem after chunking

        Returns:
            BlockMap with one file entry at offset 0

        Raises:
            IntegrityError: If the sizes do not sum to measured_size
        """
        if self.total_size != measured_size:
            raise IntegrityError(
                f"Expected size sum: {measured_size}. Actual: {self.total_size}"
            )

        logger.debug(f"Built block map with {len(self.sizes)} chunks over {measured_size} bytes")
        return BlockMap(
            version=BLOCK_MAP_VERSION,
            files=[
                BlockMapFile(
                    name=self.name,
                    offset=0,
                    checksums=list(self.checksums),
                    sizes=list(self.sizes),
                )
            ],
        )
