"""SSF1 outer container codec.

Layout (little-endian)::

    0   magic "SSF1"
    4   int32 total compressed bytes (sum of 8 + compressedSize over chunks)
    8   opaque
    12  int32 total uncompressed bytes
    16  opaque
    20  32 bytes ASCII md5 hex of the chunk stream
    52+ opaque, up to the header length
        chunk records: int32 uncompressedSize | int32 compressedSize | zlib data

The header is captured verbatim. Encoding rewrites only the two length
fields and the checksum; everything else is copied bit for bit.
"""
from __future__ import annotations

import hashlib
import struct
import zlib
from dataclasses import dataclass, field
from typing import Iterator
from warnings import warn

from ssf_core.errors import FormatError, ValidationError
from ssf_core.protocol import (
    MAGIC_CONTAINER,
    OFF_TOTAL_COMPRESSED,
    OFF_TOTAL_UNCOMPRESSED,
    OFF_CHECKSUM,
    CHECKSUM_LEN,
    CHECKSUM_END,
    I32_FMT,
    MIN_HEADER_LEN,
    MAX_HEADER_LEN,
    CHUNK_HEADER_FMT,
    CHUNK_HEADER_LEN,
    MAX_CHUNK_SIZE_HINT,
    DEFAULT_CHUNK_SIZE,
    COMPRESSION_LEVEL,
    DEFAULT_MAX_CHUNK_SCAN,
)


@dataclass(frozen=True)
class Chunk:
    """One compressed record of the chunk stream."""

    uncompressed_size: int
    compressed_size: int
    data: bytes

    def pack(self) -> bytes:
        return struct.pack(CHUNK_HEADER_FMT, self.uncompressed_size, self.compressed_size) + self.data


@dataclass(frozen=True)
class DecodedContainer:
    header: bytes
    payload: bytes
    header_length: int
    declared_compressed: int
    declared_uncompressed: int
    chunk_count: int
    diagnostics: tuple[str, ...] = field(default_factory=tuple)


def _read_i32(data: bytes, offset: int) -> int:
    return struct.unpack_from(I32_FMT, data, offset)[0]


def _check_magic(data: bytes, what: str) -> None:
    if data[: len(MAGIC_CONTAINER)] != MAGIC_CONTAINER:
        raise FormatError(
            f"{what} is not an SSF1 container",
            offset=0,
            expected=MAGIC_CONTAINER,
            actual=bytes(data[: len(MAGIC_CONTAINER)]),
        )


def try_inflate(comp: bytes) -> bytes | None:
    """Inflate a chunk as zlib-wrapped deflate, falling back to raw deflate.

    Returns None when neither interpretation yields any bytes.
    """
    for wbits in (zlib.MAX_WBITS, -zlib.MAX_WBITS):
        try:
            out = zlib.decompress(comp, wbits)
        except zlib.error:
            continue
        if out:
            return out
    return None


def find_first_chunk_offset(data: bytes, max_scan: int = DEFAULT_MAX_CHUNK_SCAN) -> int:
    """Scan forward for the first offset holding a chunk record that inflates.

    The search starts at the minimum header length and never looks past
    ``max_scan`` bytes into the file.
    """
    limit = min(max_scan, len(data) - MIN_HEADER_LEN)
    for off in range(MIN_HEADER_LEN, limit):
        if off + CHUNK_HEADER_LEN > len(data):
            break
        u, c = struct.unpack_from(CHUNK_HEADER_FMT, data, off)
        if c <= 0 or off + CHUNK_HEADER_LEN + c > len(data):
            continue
        if u < 0 or u > MAX_CHUNK_SIZE_HINT:
            continue
        start = off + CHUNK_HEADER_LEN
        if try_inflate(data[start : start + c]) is not None:
            return off
    raise FormatError(
        f"Could not locate first compressed chunk within {max_scan} bytes; "
        "header length may differ or the format is different"
    )


def locate_header_length(data: bytes, max_scan: int = DEFAULT_MAX_CHUNK_SCAN) -> int:
    """Header length is file length minus declared compressed length, unless implausible."""
    if len(data) < MIN_HEADER_LEN:
        raise FormatError("Truncated container header", expected=MIN_HEADER_LEN, actual=len(data))
    _check_magic(data, "Input")

    header_len = len(data) - _read_i32(data, OFF_TOTAL_COMPRESSED)
    if header_len < MIN_HEADER_LEN or header_len > MAX_HEADER_LEN:
        header_len = find_first_chunk_offset(data, max_scan)
    return header_len


def iter_chunks(data: bytes, start: int, total_compressed: int) -> Iterator[tuple[int, Chunk]]:
    """Yield ``(offset, chunk)`` until ``total_compressed`` bytes have been consumed."""
    offset = start
    processed = 0
    while processed < total_compressed:
        if offset + CHUNK_HEADER_LEN > len(data):
            raise FormatError("Unexpected EOF while reading chunk header", offset=offset)
        u, c = struct.unpack_from(CHUNK_HEADER_FMT, data, offset)
        if c <= 0 or offset + CHUNK_HEADER_LEN + c > len(data):
            raise FormatError(
                "Invalid compressed chunk size",
                offset=offset,
                expected=f"1..{len(data) - offset - CHUNK_HEADER_LEN}",
                actual=c,
            )
        body = offset + CHUNK_HEADER_LEN
        yield offset, Chunk(u, c, bytes(data[body : body + c]))
        offset = body + c
        processed += CHUNK_HEADER_LEN + c


def decode_container(data: bytes, max_scan: int = DEFAULT_MAX_CHUNK_SCAN) -> DecodedContainer:
    """Split an SSF1 file into its verbatim header and the decompressed payload."""
    header_len = locate_header_length(data, max_scan)
    total_comp = _read_i32(data, OFF_TOTAL_COMPRESSED)
    total_unc = _read_i32(data, OFF_TOTAL_UNCOMPRESSED)

    diagnostics: list[str] = []
    parts: list[bytes] = []
    count = 0
    for off, chunk in iter_chunks(data, header_len, total_comp):
        dec = try_inflate(chunk.data)
        if dec is None:
            raise FormatError("Could not decompress chunk", offset=off + CHUNK_HEADER_LEN)
        if len(dec) != chunk.uncompressed_size:
            diagnostics.append(
                f"chunk {count} at offset {off}: size hint {chunk.uncompressed_size}, inflated {len(dec)}"
            )
        parts.append(dec)
        count += 1

    payload = b"".join(parts)
    # Real saves are known to disagree here; keep going.
    if total_unc > 0 and len(payload) != total_unc:
        diagnostics.append(f"uncompressed size mismatch (expected {total_unc}, got {len(payload)})")

    for note in diagnostics:
        warn(note)

    return DecodedContainer(
        header=bytes(data[:header_len]),
        payload=payload,
        header_length=header_len,
        declared_compressed=total_comp,
        declared_uncompressed=total_unc,
        chunk_count=count,
        diagnostics=tuple(diagnostics),
    )


def compress_chunks(payload: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[Chunk]:
    if chunk_size <= 0:
        raise ValidationError("chunk_size must be positive", actual=chunk_size)
    chunks: list[Chunk] = []
    for off in range(0, len(payload), chunk_size):
        piece = payload[off : off + chunk_size]
        comp = zlib.compress(piece, COMPRESSION_LEVEL)
        chunks.append(Chunk(len(piece), len(comp), comp))
    return chunks


def chunk_stream_checksum(stream: bytes) -> bytes:
    """Lowercase md5 hex of a chunk stream, as stored in the header."""
    return hashlib.md5(stream).hexdigest().encode("ascii")


def encode_container(header: bytes, payload: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    """Compress ``payload`` into a fresh chunk stream behind a copy of ``header``."""
    if len(header) < CHECKSUM_END:
        raise FormatError("Header bytes too short", expected=CHECKSUM_END, actual=len(header))
    _check_magic(header, "Header")

    stream = b"".join(c.pack() for c in compress_chunks(payload, chunk_size))

    out = bytearray(header)
    struct.pack_into(I32_FMT, out, OFF_TOTAL_COMPRESSED, len(stream))
    struct.pack_into(I32_FMT, out, OFF_TOTAL_UNCOMPRESSED, len(payload))
    out[OFF_CHECKSUM : OFF_CHECKSUM + CHECKSUM_LEN] = chunk_stream_checksum(stream)
    return bytes(out) + stream


def encode_like(original: bytes, payload: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    """Re-encode ``payload`` reusing the header of an existing container file."""
    header_len = locate_header_length(original)
    return encode_container(original[:header_len], payload, chunk_size)
