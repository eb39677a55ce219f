from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from ssf_core import jsondoc
from ssf_core.blocks import BlockSequence, parse_blocks
from ssf_core.container import DecodedContainer
from ssf_core.errors import FormatError
from ssf_core.fragments import extract_fragments, looks_like_json, printable_strings
from ssf_core.protocol import DEFAULT_MAX_FRAGMENTS

BLOCK_INDEX_SCHEMA = pa.schema(
    [
        ("index", pa.int32()),
        ("name", pa.string()),
        ("offset", pa.int64()),
        ("name_length", pa.int32()),
        ("payload_length", pa.int64()),
        ("payload_kind", pa.string()),
        ("content_hash", pa.string()),
    ]
)


def payload_kind(data: bytes) -> str:
    return "json" if looks_like_json(data) else "binary"


def block_index(sequence: BlockSequence) -> list[dict]:
    rows: list[dict] = []
    for idx, (off, b) in enumerate(zip(sequence.offsets(), sequence.blocks)):
        rows.append(
            {
                "index": idx,
                "name": b.name,
                "offset": int(off),
                "name_length": len(b.name_bytes),
                "payload_length": len(b.payload),
                "payload_kind": payload_kind(b.payload),
                "content_hash": hashlib.sha256(b.payload).hexdigest(),
            }
        )
    return rows


def write_block_index(sequence: BlockSequence, out_path: Path) -> Path | None:
    """Write blocks.parquet into ``out_path``; None when there is nothing to index."""
    df = pd.DataFrame(block_index(sequence))
    if df.empty:
        return None

    Path(out_path).mkdir(parents=True, exist_ok=True)
    target = Path(out_path) / "blocks.parquet"
    table = pa.Table.from_pandas(df, schema=BLOCK_INDEX_SCHEMA, preserve_index=False)
    pq.write_table(table, target)
    return target


def build_decode_report(
    source: str,
    decoded: DecodedContainer,
    contains: str | None = None,
    max_fragments: int = DEFAULT_MAX_FRAGMENTS,
) -> tuple[dict[str, Any], BlockSequence | None]:
    """Summarize a decoded container for humans; also returns the parsed blocks if any."""
    notes = list(decoded.diagnostics)
    kind = payload_kind(decoded.payload)

    report: dict[str, Any] = {
        "sourceFile": source,
        "format": "SSF1",
        "headerLength": decoded.header_length,
        "expectedTotalCompressed": decoded.declared_compressed,
        "expectedTotalUncompressed": decoded.declared_uncompressed,
        "actualDecompressedBytes": len(decoded.payload),
        "chunkCount": decoded.chunk_count,
        "payloadKind": kind,
    }

    if kind == "json":
        try:
            report["payload"] = jsondoc.loads(decoded.payload)
        except ValueError as e:
            notes.append(f"payload looked like JSON but did not parse: {e}")

    sequence: BlockSequence | None = None
    try:
        sequence = parse_blocks(decoded.payload)
    except FormatError as e:
        notes.append(str(e))

    if sequence is not None:
        report["prefixLength"] = len(sequence.prefix)
        report["suffixLength"] = len(sequence.suffix)
        report["blocks"] = block_index(sequence)

    report["jsonFragments"] = [
        {"offset": f.offset, "length": f.length, "data": f.value}
        for f in extract_fragments(decoded.payload, contains, max_fragments)
    ]
    report["strings"] = printable_strings(decoded.payload)
    report["notes"] = notes
    return report, sequence


def write_decode_report(report: dict[str, Any], out_path: Path) -> Path:
    Path(out_path).mkdir(parents=True, exist_ok=True)
    target = Path(out_path) / "report.json"
    target.write_text(jsondoc.dumps_pretty(report), encoding="utf-8")
    return target
