import json

import pyarrow.parquet as pq

from conftest import raw_header
from ssf_core.container import decode_container, encode_container
from ssf_patch.report import BLOCK_INDEX_SCHEMA, build_decode_report, write_block_index, write_decode_report


def test_decode_report_summarizes_container(map_save, map_payload):
    decoded = decode_container(map_save)
    report, sequence = build_decode_report("slot0/map", decoded, contains="Nested")

    assert report["sourceFile"] == "slot0/map"
    assert report["format"] == "SSF1"
    assert report["headerLength"] == decoded.header_length
    assert report["actualDecompressedBytes"] == len(map_payload)
    assert report["payloadKind"] == "binary"
    assert "payload" not in report
    assert [b["name"] for b in report["blocks"]] == [
        "environment.weather",
        "infrastructure.request-system",
        "infrastructure.request-system.cache",
    ]
    assert [b["payload_kind"] for b in report["blocks"]] == ["json", "json", "binary"]
    assert report["prefixLength"] == len(sequence.prefix) == 6
    assert any("Foo" in f["data"] for f in report["jsonFragments"])
    assert "environment.weather" in report["strings"]
    assert report["notes"] == []


def test_report_and_block_index_files(map_save, tmp_path):
    decoded = decode_container(map_save)
    report, sequence = build_decode_report("map", decoded)

    report_path = write_decode_report(report, tmp_path)
    assert json.loads(report_path.read_text(encoding="utf-8"))["blocks"][1]["offset"] == report["blocks"][1]["offset"]

    index_path = write_block_index(sequence, tmp_path)
    table = pq.read_table(index_path)
    assert table.schema.names == BLOCK_INDEX_SCHEMA.names
    assert table.num_rows == 3
    rows = table.to_pylist()
    assert rows[0]["offset"] == 6
    assert rows[1]["name"] == "infrastructure.request-system"


def test_report_notes_unparseable_payload():
    decoded = decode_container(encode_container(raw_header(), b'[1,2] no blocks {"a":1}'))
    report, sequence = build_decode_report("x", decoded)
    assert sequence is None
    assert "blocks" not in report
    assert report["payloadKind"] == "json"
    assert any("Could not find SMBH blocks" in n for n in report["notes"])
    assert [f["data"] for f in report["jsonFragments"]] == [[1, 2], {"a": 1}]
