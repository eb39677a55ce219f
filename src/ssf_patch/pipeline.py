"""SSF Patch - decode, patch and re-encode a save container."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ssf_core.blocks import build_blocks, parse_blocks
from ssf_core.container import decode_container, encode_container
from ssf_core.errors import ValidationError
from ssf_core.patch import PatchSpec, apply_patch
from ssf_core.protocol import DEFAULT_CHUNK_SIZE


@dataclass(frozen=True)
class PatchOutcome:
    output: bytes
    blocks_modified: int
    properties_replaced: int
    modified_names: tuple[str, ...]
    diagnostics: tuple[str, ...]


def patch_container(
    data: bytes,
    selector: str,
    property_name: str,
    value_json: str | bytes,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> PatchOutcome:
    """Run the whole pipeline over in-memory bytes. Nothing is written."""
    # Validate before touching the container.
    spec = PatchSpec.create(selector, property_name, value_json)

    decoded = decode_container(data)
    sequence = parse_blocks(decoded.payload)
    result = apply_patch(sequence, spec)
    payload = build_blocks(result.sequence)

    return PatchOutcome(
        output=encode_container(decoded.header, payload, chunk_size),
        blocks_modified=result.blocks_modified,
        properties_replaced=result.properties_replaced,
        modified_names=result.modified_names,
        diagnostics=decoded.diagnostics,
    )


def patch_file(
    input_path: Path,
    output_path: Path,
    selector: str,
    property_name: str,
    value_json: str | bytes,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> PatchOutcome:
    """Patch ``input_path`` into ``output_path``. The input is only ever read."""
    input_path = Path(input_path)
    output_path = Path(output_path)
    if output_path.resolve() == input_path.resolve():
        raise ValidationError("Output path must differ from the input path", actual=str(output_path))

    outcome = patch_container(input_path.read_bytes(), selector, property_name, value_json, chunk_size)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(outcome.output)
    return outcome
