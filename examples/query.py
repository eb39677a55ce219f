"""Query a block index - list blocks whose name matches a selector."""
from __future__ import annotations

import sys
from pathlib import Path

import duckdb

from ssf_core.names import normalize_name


def main() -> None:
    if len(sys.argv) < 3:
        print("Usage: python query.py <inspect_out_dir> <selector>")
        print("Example: python query.py out/ request-system")
        sys.exit(1)

    out_dir = Path(sys.argv[1])
    selector = normalize_name(sys.argv[2])

    con = duckdb.connect(":memory:")
    con.execute(f"CREATE VIEW blocks AS SELECT * FROM '{out_dir}/blocks.parquet'")

    # Same normalization as the patch engine: lowercase, '-' -> '_'
    sql = """
    SELECT
        name,
        "offset",
        payload_length,
        payload_kind,
        content_hash
    FROM blocks
    WHERE contains(replace(lower(trim(name)), '-', '_'), ?)
    ORDER BY "offset"
    """

    print(f"--- Blocks matching: {selector} ---\n")

    df = con.execute(sql, [selector]).fetchdf()
    if df.empty:
        print("No blocks matched.")
        print("A patch with this selector would not apply.")
    else:
        for _, row in df.iterrows():
            print(f"BLOCK: {row['name']}")
            print(f"  Offset: {row['offset']}")
            print(f"  Payload: {row['payload_length']} bytes ({row['payload_kind']})")
            print(f"  SHA-256: {row['content_hash'][:16]}...")
            print()


if __name__ == "__main__":
    main()
