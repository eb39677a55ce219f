from ssf_core.container import chunk_stream_checksum
from ssf_core.protocol import MAGIC_CONTAINER, OFF_CHECKSUM, CHECKSUM_END

def stored_checksum(header: bytes) -> bytes:
    return bytes(header[OFF_CHECKSUM:CHECKSUM_END])

def checksum_matches(header: bytes, stream: bytes) -> bool:
    return stored_checksum(header) == chunk_stream_checksum(stream)

def looks_like_ssf(b: bytes) -> bool:
    return len(b) >= len(MAGIC_CONTAINER) and b[:4] == MAGIC_CONTAINER
