"""Custom exception classes for block map builds."""


class BlockMapError(Exception):
    """
    Base exception class for all block map build errors.
    """
    pass


class ConfigError(BlockMapError):
    """
    Raised when chunker bounds or the compression selector are invalid.
    """
    pass


class BlockMapIOError(BlockMapError):
    """
    Raised when opening, reading, writing or closing a file or stream fails.
    """
    pass


class IntegrityError(BlockMapError):
    """
    Raised when the chunk sizes do not add up to the measured file size.
    """
    pass


class SerializationError(BlockMapError):
    """
    Raised when the block map cannot be encoded or framed in a trailer.
    """
    pass


class CompressionError(BlockMapError):
    """
    Raised when the compression backend fails.
    """
    pass
