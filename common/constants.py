"""Project-wide constants (block map format, digest sizes, trailer layout)."""

BLOCK_MAP_VERSION: str = "2"
BLOCK_MAP_FILE_NAME: str = "file"

CHUNK_DIGEST_SIZE: int = 18  # bytes of BLAKE2b output per chunk

# Irreducible degree-63 polynomial used by the Rabin fingerprint
RABIN_POLY64: int = 0xbfe6b8a5bf378d83

TRAILER_LENGTH_FORMAT: str = ">I"
TRAILER_LENGTH_SIZE: int = 4
SIZE_FIELD_MAX: int = 2 ** 32 - 1

STDOUT_SENTINEL: str = "-"

DEFAULT_WINDOW: int = 64
DEFAULT_MIN_CHUNK: int = 8 * 1024
DEFAULT_AVG_CHUNK: int = 16 * 1024
DEFAULT_MAX_CHUNK: int = 32 * 1024
DEFAULT_READ_SIZE: int = 64 * 1024
