"""Incremental chunk and whole-file digests with base64 string encoding."""

import base64
import hashlib

from common.constants import CHUNK_DIGEST_SIZE


def encode_digest(raw: bytes) -> str:
    """
    Encode a raw digest for storage in the block map.

    Args:
        raw: Digest bytes

    Returns:
        Standard base64 string
    """
    return base64.b64encode(raw).decode('ascii')


def compute_chunk_checksum(data: bytes) -> str:
    """
    Compute the BLAKE2b chunk checksum for given data in one call.

    Args:
        data: Chunk bytes

    Returns:
        Base64 string of the 18-byte BLAKE2b digest
    """
    return encode_digest(hashlib.blake2b(data, digest_size=CHUNK_DIGEST_SIZE).digest())


class ChunkDigest:
    """
    BLAKE2b-18 accumulator over the bytes of one chunk.

    Usage:
        digest = ChunkDigest()
        digest.update(piece1)
        digest.update(piece2)
        checksum = digest.finalize()  # also resets for the next chunk
    """

    def __init__(self):
        self._hasher = hashlib.blake2b(digest_size=CHUNK_DIGEST_SIZE)
        self.bytes_hashed = 0

    def update(self, data: bytes) -> None:
        self._hasher.update(data)
        self.bytes_hashed += len(data)

    def finalize(self) -> str:
        """
        Return the encoded digest of everything fed since the last reset, then reset.

        Returns:
            Base64 string of the chunk digest
        """
        checksum = encode_digest(self._hasher.digest())
        self.reset()
        return checksum

    def reset(self) -> None:
        """Reset accumulator to initial state."""
        self._hasher = hashlib.blake2b(digest_size=CHUNK_DIGEST_SIZE)
        self.bytes_hashed = 0


class FileDigest:
    """
    SHA-512 accumulator over the whole artifact.

    One build owns one instance. The scan stage feeds it every input byte,
    then the trailer writer is its only writer. It cannot be reset.
    """

    def __init__(self):
        """Initialize a new whole-file digest."""
        self._hasher = hashlib.sha512()
        self._finalized = False
        self.bytes_hashed = 0

    def update(self, data: bytes) -> None:
        """
        Update digest with new data.

        Args:
            data: Bytes to add to digest calculation

        Raises:
            ValueError: If called after finalize()
        """
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        self._hasher.update(data)
        self.bytes_hashed += len(data)

    def finalize(self) -> str:
        """
        Finalize digest calculation and return result.

        Returns:
            Base64 string of the SHA-512 digest
        """
        self._finalized = True
        return encode_digest(self._hasher.digest())
