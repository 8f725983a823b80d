"""Deterministic JSON encoding of block maps."""

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from blockmap.exceptions import SerializationError
from blockmap.models import BlockMap


def serialize_block_map(block_map: BlockMap) -> bytes:
    """
    Encode a block map as compact UTF-8 JSON.

    Field order follows the model declaration and no whitespace is emitted,
    so equal block maps always encode to identical bytes.

    Args:
        block_map: Block map to encode

    Returns:
        Serialized bytes

    Raises:
        SerializationError: If the encoder fails
    """
    try:
        return block_map.model_dump_json().encode('utf-8')
    except PydanticSerializationError as e:
        raise SerializationError(f"Failed to serialize block map: {e}") from e


def deserialize_block_map(data: bytes) -> BlockMap:
    """
    Parse serialized block map bytes.

    Args:
        data: JSON bytes produced by serialize_block_map

    Returns:
        Parsed BlockMap

    Raises:
        SerializationError: If the bytes are not a valid block map
    """
    try:
        return BlockMap.model_validate_json(data)
    except ValidationError as e:
        raise SerializationError(f"Invalid block map: {e}") from e
