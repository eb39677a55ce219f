"""SSF Patch - command line front end."""
from __future__ import annotations

import warnings
from pathlib import Path

import click

from ssf_core.container import decode_container
from ssf_core.errors import SsfError
from ssf_core.protocol import DEFAULT_CHUNK_SIZE, DEFAULT_MAX_FRAGMENTS
from ssf_patch.pipeline import PatchOutcome, patch_file
from ssf_patch.presets import PRESETS, get_preset
from ssf_patch.report import build_decode_report, write_block_index, write_decode_report

_chunk_size_option = click.option(
    "--chunk-size",
    type=click.IntRange(min=1),
    default=DEFAULT_CHUNK_SIZE,
    show_default=True,
    help="Uncompressed bytes per chunk when re-encoding",
)


def _fail(e: Exception) -> None:
    # Fail closed with a single-line reason, no stack trace.
    click.echo(f"FATAL: {e}")
    raise SystemExit(1)


def _report_outcome(outcome: PatchOutcome, output: Path) -> None:
    for note in outcome.diagnostics:
        click.echo(f"WARN: {note}")
    click.echo(f"OK: patchedBlocks={outcome.blocks_modified}, patchedProps={outcome.properties_replaced}")
    for name in outcome.modified_names:
        click.echo(f"  Block: {name}")
    click.echo(f"OK: wrote {output}")


def _run_patch(
    input_path: Path, output: Path, selector: str, prop: str, value_json: str, chunk_size: int
) -> None:
    click.echo(f"Patching: {input_path}")
    try:
        # Diagnostics are echoed from the outcome instead.
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            outcome = patch_file(input_path, output, selector, prop, value_json, chunk_size)
    except (SsfError, OSError) as e:
        _fail(e)
    _report_outcome(outcome, output)


@click.group()
def main():
    pass


@main.command("patch")
@click.argument("input_path", metavar="INPUT", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--selector", required=True, help="Block name substring, e.g. request-system")
@click.option("--property", "prop", required=True, help="JSON member name to replace at any depth")
@click.option("--value", "value_json", help="Replacement value as JSON text")
@click.option(
    "--value-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read the replacement JSON value from a file",
)
@_chunk_size_option
def patch_cmd(
    input_path: Path,
    output: Path,
    selector: str,
    prop: str,
    value_json: str | None,
    value_file: Path | None,
    chunk_size: int,
) -> None:
    """Replace PROPERTY in every JSON block matching SELECTOR; write OUTPUT."""
    if (value_json is None) == (value_file is None):
        raise click.UsageError("Pass exactly one of --value or --value-file")
    if value_file is not None:
        value_json = value_file.read_text(encoding="utf-8")
    _run_patch(input_path, output, selector, prop, value_json, chunk_size)


@main.command("preset")
@click.argument("name", type=click.Choice(sorted(PRESETS)))
@click.argument("input_path", metavar="INPUT", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@_chunk_size_option
def preset_cmd(name: str, input_path: Path, output: Path, chunk_size: int) -> None:
    """Apply a built-in patch."""
    p = get_preset(name)
    click.echo(f"Preset: {p.name} ({p.description})")
    _run_patch(input_path, output, p.selector, p.property_name, p.value_json, chunk_size)


@main.command("presets")
def presets_cmd() -> None:
    """List built-in patches."""
    for p in PRESETS.values():
        click.echo(f"{p.name}\t{p.selector}\t{p.property_name}\t{p.description}")


@main.command("inspect")
@click.argument("input_path", metavar="INPUT", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("out", type=click.Path(file_okay=False, path_type=Path))
@click.option("--contains", default=None, help="Only keep JSON fragments near this ASCII text")
@click.option("--max-fragments", type=click.IntRange(min=0), default=DEFAULT_MAX_FRAGMENTS, show_default=True)
def inspect_cmd(input_path: Path, out: Path, contains: str | None, max_fragments: int) -> None:
    """Decode INPUT and write report.json and blocks.parquet into OUT."""
    click.echo(f"Inspecting: {input_path}")
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            decoded = decode_container(input_path.read_bytes())
        report, sequence = build_decode_report(str(input_path), decoded, contains, max_fragments)
        report_path = write_decode_report(report, out)
        index_path = write_block_index(sequence, out) if sequence is not None else None
    except (SsfError, OSError) as e:
        _fail(e)

    click.echo(f"PASS: Report written to {report_path}")
    if index_path is not None:
        click.echo(f"  Blocks: {len(report['blocks'])} -> {index_path}")
    click.echo(f"  Payload: {report['actualDecompressedBytes']} bytes ({report['payloadKind']})")
    for note in report["notes"]:
        click.echo(f"  Note: {note}")


if __name__ == "__main__":
    main()
