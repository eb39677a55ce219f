import json, struct, sys, hashlib
from pathlib import Path

from ssf_core.container import encode_container
from ssf_core.protocol import (
    MAGIC_CONTAINER,
    MAGIC_BLOCK,
    BLOCK_HEADER_FMT,
    CHECKSUM_END,
)
# --- CONFIGURATION ---
HEADER_LEN = 64  # 52 standard bytes + 12 opaque trailer
PREFIX_LEN = 24  # Unrecognized bytes before the first block
SUFFIX = b"\x00\x00\x00\x00END!"  # Trailing bytes after the last block

def block(name, payload):
    raw_name = name.encode("ascii") + b"\x00"
    return struct.pack(BLOCK_HEADER_FMT, MAGIC_BLOCK, len(raw_name), len(payload)) + raw_name + payload

def build_payload():
    """
    Map-like payload.
    The request system carries the Build Crane task, other blocks are decoys:
    a matching name with a binary body, a JSON block under another name.
    """
    request_system = {
        "$type": "RequestSystemSaveDesc",
        "tasks": {
            "Establish_Task_Build_Crane": {"$type": "RequestEstablishSaveDesc", "isFinished": True, "issuedRewardCount": 3},
            "Establish_Task_Build_Road": {"$type": "RequestEstablishSaveDesc", "isFinished": True},
        },
        "position": {"x": 712.76129150390625, "y": 16.101736068725586},
    }
    weather = {"rain": 0.25, "fog": False}

    return b"".join([
        hashlib.sha256(b"prefix").digest()[:PREFIX_LEN],
        block("environment.weather", json.dumps(weather, separators=(",", ":")).encode()),
        block("infrastructure.request-system", json.dumps(request_system, separators=(",", ":")).encode()),
        block("infrastructure.request-system.cache", b"\x01\x02\x03\x04" * 8),
        SUFFIX,
    ])

def build_header():
    header = bytearray(HEADER_LEN)
    header[0:4] = MAGIC_CONTAINER
    header[8:12] = struct.pack("<I", 0x00000002)  # opaque, must survive re-encode
    header[16:20] = struct.pack("<I", 0xCAFEF00D)
    header[CHECKSUM_END:] = hashlib.sha256(b"slot-0").digest()[: HEADER_LEN - CHECKSUM_END]
    return bytes(header)

def generate_save(out_dir, chunk_size=4096):
    path = Path(out_dir)
    path.mkdir(parents=True, exist_ok=True)

    save = path / "rb_map_08_contamination"
    save.write_bytes(encode_container(build_header(), build_payload(), chunk_size))

    print(f"Generating: {save}")
    return save

if __name__ == "__main__":
    generate_save(sys.argv[1] if len(sys.argv) > 1 else "saves_sample")
