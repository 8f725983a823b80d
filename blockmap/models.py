"""Pydantic models for the block map and the build result."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from common.constants import BLOCK_MAP_FILE_NAME, BLOCK_MAP_VERSION


class BlockMapFile(BaseModel):
    """Chunk checksums and sizes of one file segment, positionally aligned."""
    model_config = ConfigDict(frozen=True)

    name: str = BLOCK_MAP_FILE_NAME
    offset: int = Field(default=0, ge=0)
    checksums: List[str]
    sizes: List[int]


class BlockMap(BaseModel):
    """Versioned block map; field order here is the serialized order."""
    model_config = ConfigDict(frozen=True)

    version: str = BLOCK_MAP_VERSION
    files: List[BlockMapFile]


class InputFileInfo(BaseModel):
    """Build result: size and SHA-512 of the final artifact."""
    model_config = ConfigDict(populate_by_name=True)

    size: int
    sha512: str
    block_map_size: Optional[int] = Field(default=None, alias="blockMapSize")

    def to_json(self) -> bytes:
        """Serialize to JSON bytes, omitting blockMapSize outside append mode."""
        return self.model_dump_json(by_alias=True, exclude_none=True).encode('utf-8')
