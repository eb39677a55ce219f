"""SSF1 save container protocol constants.

Single source of truth for on-disk magic values, field offsets and the
bounds of every heuristic scan. Container codec, block codec and verifier
must remain synchronized with this file.
"""

# File and record magics
MAGIC_CONTAINER = b"SSF1"  # Outer compressed container
MAGIC_BLOCK = b"SMBH"  # Named block inside the decompressed payload

# Container header: [Magic(4) | TotalComp(4) | ?(4) | TotalUnc(4) | ?(4) | MD5 hex(32) | opaque...]
OFF_TOTAL_COMPRESSED = 4
OFF_TOTAL_UNCOMPRESSED = 12
OFF_CHECKSUM = 20
CHECKSUM_LEN = 32
CHECKSUM_END = OFF_CHECKSUM + CHECKSUM_LEN

I32_FMT = "<i"

# Header length sanity bounds (computed as file length - declared compressed length)
MIN_HEADER_LEN = 16
MAX_HEADER_LEN = 1024 * 1024  # 1 MiB

# Chunk record: [UncompressedSize(4) | CompressedSize(4)] followed by zlib data
CHUNK_HEADER_FMT = "<ii"
CHUNK_HEADER_LEN = 8
MAX_CHUNK_SIZE_HINT = 500_000_000

# Block header: [Magic(4) | NameLen(4) | PayloadLen(4)] = 12 bytes
BLOCK_HEADER_FMT = "<4sII"
BLOCK_HEADER_LEN = 12
MAX_BLOCK_NAME_LEN = 1024  # includes the zero terminator

# Encoding defaults
DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1 MiB
COMPRESSION_LEVEL = 9

# Resynchronization bounds
DEFAULT_MAX_CHUNK_SCAN = 256 * 1024  # 256 KiB window for the first chunk record
DEFAULT_MAX_BLOCK_SCAN = 2_000_000  # first SMBH block must start inside this window

# Diagnostic fragment extraction
FRAGMENT_WINDOW_BACK = 4096
FRAGMENT_WINDOW_LEN = 8192
DEFAULT_MAX_FRAGMENTS = 64
DEFAULT_MIN_STRING_LEN = 4
DEFAULT_MAX_STRINGS = 256
MAX_STRING_RUN = 4096
