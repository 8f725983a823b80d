"""Shared pytest fixtures for all tests."""

import gzip
import logging
import random
import struct
import zlib
from pathlib import Path

import pytest

from blockmap.config import ChunkerConfig


def random_bytes(size: int, seed: int = 1234) -> bytes:
    """Deterministic pseudo-random payload."""
    return random.Random(seed).randbytes(size)


def read_trailer(path: Path, deflate: bool = False) -> tuple[bytes, bytes, int]:
    """
    Split a file built in append mode.

    Args:
        path: File with an appended block map
        deflate: True if the payload is raw deflate rather than gzip

    Returns:
        Tuple of (original content, decompressed block map, payload length)
    """
    data = path.read_bytes()
    (length,) = struct.unpack(">I", data[-4:])
    payload = data[-4 - length:-4]
    if deflate:
        serialized = zlib.decompress(payload, wbits=-zlib.MAX_WBITS)
    else:
        serialized = gzip.decompress(payload)
    return data[:-4 - length], serialized, length


@pytest.fixture(autouse=True)
def reset_component_loggers():
    """Drop handlers bound to pytest's capture streams between tests."""
    yield
    for name in ('blockmap', 'cli'):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.propagate = True


@pytest.fixture
def small_config():
    """
    Small chunk bounds so short payloads produce many chunks.

    Returns:
        ChunkerConfig with window=16, min=32, avg=512, max=8192
    """
    return ChunkerConfig(window=16, min=32, avg=512, max=8192)


@pytest.fixture
def default_config():
    """Chunker bounds of the reference scenario (64 / 8 KiB / 16 KiB / 32 KiB)."""
    return ChunkerConfig(window=64, min=8192, avg=16384, max=32768)


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a 100,000 byte pseudo-random file.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to the sample file
    """
    file_path = tmp_path / 'sample.bin'
    file_path.write_bytes(random_bytes(100_000))
    return file_path


@pytest.fixture
def empty_file(tmp_path):
    file_path = tmp_path / 'empty.bin'
    file_path.write_bytes(b'')
    return file_path
