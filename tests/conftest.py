import struct

import pytest

from ssf_core.container import encode_container
from ssf_core.protocol import BLOCK_HEADER_FMT, CHECKSUM_END, MAGIC_BLOCK, MAGIC_CONTAINER

SPEC_PAYLOAD = b'{"Foo":1,"Nested":{"Establish_Task_Build_Crane":{"old":true}}}'


def raw_block(name: str, payload: bytes) -> bytes:
    raw_name = name.encode("ascii") + b"\x00"
    return struct.pack(BLOCK_HEADER_FMT, MAGIC_BLOCK, len(raw_name), len(payload)) + raw_name + payload


def raw_header(trailer: bytes = b"") -> bytes:
    h = bytearray(CHECKSUM_END)
    h[0:4] = MAGIC_CONTAINER
    h[8:12] = b"\xaa\xbb\xcc\xdd"
    h[16:20] = b"\x11\x22\x33\x44"
    return bytes(h) + trailer


@pytest.fixture
def map_payload() -> bytes:
    return b"".join(
        [
            b"\x07\x00LEAD",
            raw_block("environment.weather", b'{"rain":0.25}'),
            raw_block("infrastructure.request-system", SPEC_PAYLOAD),
            raw_block("infrastructure.request-system.cache", b"\x01\x02\x03\x04" * 4),
            b"\x00\x00TAIL",
        ]
    )


@pytest.fixture
def map_save(map_payload) -> bytes:
    return encode_container(raw_header(b"SLOT-0-OPAQUE"), map_payload, chunk_size=64)
