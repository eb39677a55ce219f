"""SMBH named-block codec for the decompressed container payload.

Block layout (little-endian)::

    "SMBH" | u32 nameLength | u32 payloadLength | name + NUL | payload

Bytes before the first recognizable block and after the last one are kept
as opaque prefix/suffix so that ``build_blocks(parse_blocks(x)) == x``.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass

from ssf_core.errors import FormatError
from ssf_core.names import is_printable_ascii
from ssf_core.protocol import (
    MAGIC_BLOCK,
    BLOCK_HEADER_FMT,
    BLOCK_HEADER_LEN,
    MAX_BLOCK_NAME_LEN,
    DEFAULT_MAX_BLOCK_SCAN,
)


@dataclass(frozen=True)
class Block:
    name: str
    name_bytes: bytes  # includes the trailing zero
    payload: bytes

    @classmethod
    def from_name(cls, name: str, payload: bytes) -> "Block":
        return cls(name, name.encode("ascii") + b"\x00", payload)

    def with_payload(self, payload: bytes) -> "Block":
        return Block(self.name, self.name_bytes, payload)

    def pack(self) -> bytes:
        name_bytes = self.name_bytes
        if not name_bytes or name_bytes[-1] != 0:
            name_bytes = self.name.encode("ascii") + b"\x00"
        header = struct.pack(BLOCK_HEADER_FMT, MAGIC_BLOCK, len(name_bytes), len(self.payload))
        return header + name_bytes + self.payload


@dataclass(frozen=True)
class BlockSequence:
    prefix: bytes
    blocks: tuple[Block, ...]
    suffix: bytes

    def offsets(self) -> list[int]:
        """Absolute offset of every block header inside the rebuilt payload."""
        out: list[int] = []
        pos = len(self.prefix)
        for b in self.blocks:
            out.append(pos)
            pos += len(b.pack())
        return out

    def replace_blocks(self, blocks: list[Block] | tuple[Block, ...]) -> "BlockSequence":
        return BlockSequence(self.prefix, tuple(blocks), self.suffix)


def block_header_at(data: bytes, pos: int) -> tuple[int, int] | None:
    """Return ``(name_len, payload_len)`` if a plausible block header starts at ``pos``."""
    if pos < 0 or pos + BLOCK_HEADER_LEN > len(data):
        return None
    magic, name_len, payload_len = struct.unpack_from(BLOCK_HEADER_FMT, data, pos)
    if magic != MAGIC_BLOCK:
        return None
    if name_len == 0 or name_len > MAX_BLOCK_NAME_LEN:
        return None

    name_start = pos + BLOCK_HEADER_LEN
    if name_start + name_len + payload_len > len(data):
        return None

    name_raw = data[name_start : name_start + name_len]
    if name_raw[-1] != 0 or not is_printable_ascii(name_raw[:-1]):
        return None
    return name_len, payload_len


def find_first_block(data: bytes, max_scan: int = DEFAULT_MAX_BLOCK_SCAN) -> int:
    """Offset of the first valid block header inside the scan window."""
    limit = min(max_scan, len(data))
    pos = data.find(MAGIC_BLOCK, 0, limit + len(MAGIC_BLOCK) - 1)
    while pos != -1:
        if block_header_at(data, pos) is not None:
            return pos
        pos = data.find(MAGIC_BLOCK, pos + 1, limit + len(MAGIC_BLOCK) - 1)
    raise FormatError(f"Could not find SMBH blocks within the first {limit} bytes of the payload")


def parse_blocks(payload: bytes, max_scan: int = DEFAULT_MAX_BLOCK_SCAN) -> BlockSequence:
    first = find_first_block(payload, max_scan)

    blocks: list[Block] = []
    pos = first
    while True:
        hdr = block_header_at(payload, pos)
        if hdr is None:
            break
        name_len, payload_len = hdr
        name_start = pos + BLOCK_HEADER_LEN
        body = name_start + name_len
        name_bytes = bytes(payload[name_start:body])
        blocks.append(
            Block(
                name=name_bytes[:-1].decode("ascii"),
                name_bytes=name_bytes,
                payload=bytes(payload[body : body + payload_len]),
            )
        )
        pos = body + payload_len

    return BlockSequence(bytes(payload[:first]), tuple(blocks), bytes(payload[pos:]))


def build_blocks(sequence: BlockSequence) -> bytes:
    return b"".join([sequence.prefix, *(b.pack() for b in sequence.blocks), sequence.suffix])
