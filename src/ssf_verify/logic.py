import struct
from pathlib import Path
from ssf_core.blocks import parse_blocks
from ssf_core.container import chunk_stream_checksum, iter_chunks, locate_header_length, try_inflate
from ssf_core.errors import FormatError
from ssf_core.protocol import CHECKSUM_END, I32_FMT, OFF_TOTAL_COMPRESSED, OFF_TOTAL_UNCOMPRESSED
from .const import ERRORS, WARNINGS
from .digest import checksum_matches, looks_like_ssf, stored_checksum

def _fail(code: str, **extra) -> dict:
    errors = [{"code": code, "message": ERRORS[code], **extra}]
    return {"status": "FAIL", "error_count": len(errors), "errors": errors, "warnings": []}

def verify_container(path: Path) -> dict:
    data = Path(path).read_bytes()
    warnings = []

    if not looks_like_ssf(data):
        return _fail("E_MAGIC", path=str(path))

    try:
        header_len = locate_header_length(data)
    except FormatError as e:
        return _fail("E_HEADER", detail=str(e))
    if header_len < CHECKSUM_END:
        return _fail("E_HEADER", expected=CHECKSUM_END, computed=header_len)

    declared_comp = struct.unpack_from(I32_FMT, data, OFF_TOTAL_COMPRESSED)[0]
    declared_unc = struct.unpack_from(I32_FMT, data, OFF_TOTAL_UNCOMPRESSED)[0]

    # The chunk stream must run exactly to end of file.
    if header_len + declared_comp != len(data):
        return _fail("E_LENGTH_MISMATCH", expected=declared_comp, computed=len(data) - header_len)

    header = data[:header_len]
    stream = data[header_len:]
    if not checksum_matches(header, stream):
        return _fail(
            "E_CHECKSUM_MISMATCH",
            expected=stored_checksum(header).decode("ascii", errors="replace"),
            computed=chunk_stream_checksum(stream).decode("ascii"),
        )

    parts = []
    try:
        for off, chunk in iter_chunks(data, header_len, declared_comp):
            dec = try_inflate(chunk.data)
            if dec is None:
                return _fail("E_CHUNK_STREAM", offset=off)
            parts.append(dec)
    except FormatError as e:
        return _fail("E_CHUNK_STREAM", detail=str(e))
    payload = b"".join(parts)

    if declared_unc > 0 and len(payload) != declared_unc:
        warnings.append({
            "code": "W_UNCOMPRESSED_MISMATCH",
            "message": WARNINGS["W_UNCOMPRESSED_MISMATCH"],
            "expected": declared_unc,
            "computed": len(payload),
        })

    try:
        parse_blocks(payload)
    except FormatError as e:
        return _fail("E_NO_BLOCKS", detail=str(e))

    return {"status": "PASS", "error_count": 0, "errors": [], "warnings": warnings}
