import hashlib
import json
import os
import struct
import subprocess
import sys
from pathlib import Path

import pytest

from ssf_core.blocks import parse_blocks
from ssf_core.container import decode_container
from ssf_core.errors import PatchNotApplicable, ValidationError
from ssf_patch.pipeline import patch_container, patch_file
from ssf_patch.presets import PRESETS, get_preset

REPO = Path(__file__).resolve().parents[1]


def run(args, cwd=REPO):
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join([str(REPO / "src"), env.get("PYTHONPATH", "")])
    return subprocess.run([sys.executable, *args], cwd=cwd, env=env, check=False, capture_output=True, text=True)


def test_end_to_end_patch_and_reencode(map_save):
    outcome = patch_container(map_save, "request-system", "Establish_Task_Build_Crane", '{"new":true}', chunk_size=64)
    assert outcome.properties_replaced == 1
    assert outcome.blocks_modified == 1
    assert outcome.diagnostics == ()

    out = outcome.output
    header_len = decode_container(out).header_length
    stream = out[header_len:]
    assert struct.unpack_from("<i", out, 4)[0] == len(stream)
    assert out[20:52] == hashlib.md5(stream).hexdigest().encode("ascii")
    # Opaque header bytes survive.
    assert out[:4] == map_save[:4]
    assert out[8:12] == map_save[8:12]
    assert out[16:20] == map_save[16:20]
    assert out[52:header_len] == map_save[52:header_len] == b"SLOT-0-OPAQUE"

    payload = decode_container(out).payload
    assert struct.unpack_from("<i", out, 12)[0] == len(payload)
    blocks = parse_blocks(payload).blocks
    assert json.loads(blocks[1].payload)["Nested"]["Establish_Task_Build_Crane"] == {"new": True}


def test_only_the_patched_block_changes(map_save):
    before = parse_blocks(decode_container(map_save).payload)
    outcome = patch_container(map_save, "request-system", "Establish_Task_Build_Crane", "0")
    after = parse_blocks(decode_container(outcome.output).payload)

    assert after.prefix == before.prefix
    assert after.suffix == before.suffix
    assert after.blocks[0] == before.blocks[0]
    assert after.blocks[2] == before.blocks[2]
    assert after.blocks[1] != before.blocks[1]


def test_failures_produce_no_output(map_save, tmp_path):
    with pytest.raises(PatchNotApplicable):
        patch_container(map_save, "weather", "Establish_Task_Build_Crane", "1")
    with pytest.raises(ValidationError):
        patch_container(b"not even a container", "x", "y", "{oops")

    src = tmp_path / "save"
    src.write_bytes(map_save)
    out = tmp_path / "out" / "save"
    with pytest.raises(PatchNotApplicable):
        patch_file(src, out, "weather", "Establish_Task_Build_Crane", "1")
    assert not out.exists()

    with pytest.raises(ValidationError, match="must differ"):
        patch_file(src, src, "request-system", "Establish_Task_Build_Crane", "1")
    assert src.read_bytes() == map_save


def test_build_crane_preset_value():
    p = get_preset("build-crane")
    assert p is PRESETS["build-crane"]
    value = json.loads(p.value_json)
    assert value["$type"] == "RequestEstablishSaveDesc"
    assert value["isFinished"] is False
    assert value["trafficSaveDesc"]["retrySaveDesc"]["borderIndex"] == 2147483647
    with pytest.raises(KeyError, match="Unknown preset"):
        get_preset("nope")


def test_cli_preset_verify_and_corrupt(tmp_path):
    saves = tmp_path / "saves"
    r = run(["tools/make_sample_save.py", str(saves)])
    assert r.returncode == 0, r.stderr + r.stdout
    save = saves / "rb_map_08_contamination"
    original = save.read_bytes()

    r = run(["-m", "ssf_verify.cli", "container", str(save)])
    assert r.returncode == 0, r.stderr + r.stdout
    assert json.loads(r.stdout)["status"] == "PASS"

    patched = tmp_path / "patched" / "rb_map_08_contamination"
    r = run(["-m", "ssf_patch.cli", "preset", "build-crane", str(save), str(patched)])
    assert r.returncode == 0, r.stderr + r.stdout
    assert "patchedBlocks=1, patchedProps=1" in r.stdout
    assert save.read_bytes() == original

    r = run(["-m", "ssf_verify.cli", "container", str(patched)])
    assert r.returncode == 0, r.stderr + r.stdout

    blocks = parse_blocks(decode_container(patched.read_bytes()).payload).blocks
    doc = json.loads(blocks[1].payload)
    assert doc["tasks"]["Establish_Task_Build_Crane"]["isFinished"] is False
    assert doc["tasks"]["Establish_Task_Build_Road"]["isFinished"] is True

    # Corrupt and ensure failure
    r = run(["scripts/corrupt_one_byte.py", str(patched)])
    assert r.returncode == 0, r.stderr + r.stdout
    r = run(["-m", "ssf_verify.cli", "container", str(patched)])
    assert r.returncode != 0
    assert json.loads(r.stdout)["errors"][0]["code"] == "E_CHECKSUM_MISMATCH"


def test_cli_patch_fails_closed(tmp_path):
    saves = tmp_path / "saves"
    run(["tools/make_sample_save.py", str(saves)])
    save = saves / "rb_map_08_contamination"
    out = tmp_path / "out.bin"

    r = run(["-m", "ssf_patch.cli", "patch", str(save), str(out), "--selector", "weather", "--property", "nope", "--value", "1"])
    assert r.returncode == 1
    assert r.stdout.strip().splitlines()[-1].startswith("FATAL: No JSON blocks matched selector 'weather'")
    assert not out.exists()

    value_file = tmp_path / "value.json"
    value_file.write_text('{"rain": 1.5}', encoding="utf-8")
    r = run(["-m", "ssf_patch.cli", "patch", str(save), str(out), "--selector", "environment", "--property", "weather", "--value-file", str(value_file)])
    assert r.returncode == 1  # the weather block has no "weather" member

    r = run(["-m", "ssf_patch.cli", "patch", str(save), str(out), "--selector", "Environment.Weather", "--property", "rain", "--value-file", str(value_file)])
    assert r.returncode == 0, r.stderr + r.stdout
    assert out.exists()


def test_cli_inspect_and_presets(tmp_path):
    saves = tmp_path / "saves"
    run(["tools/make_sample_save.py", str(saves)])
    save = saves / "rb_map_08_contamination"
    out = tmp_path / "inspect"

    r = run(["-m", "ssf_patch.cli", "inspect", str(save), str(out), "--contains", "Build_Crane"])
    assert r.returncode == 0, r.stderr + r.stdout
    assert "PASS: Report written to" in r.stdout
    report = json.loads((out / "report.json").read_text(encoding="utf-8"))
    assert report["format"] == "SSF1"
    assert len(report["blocks"]) == 3
    assert (out / "blocks.parquet").exists()

    r = run(["-m", "ssf_patch.cli", "presets"])
    assert r.returncode == 0, r.stderr + r.stdout
    assert r.stdout.startswith("build-crane\trequest-system\tEstablish_Task_Build_Crane")

    r = run(["-m", "ssf_patch.cli", "inspect", str(save), str(tmp_path / "other"), "--contains", "Kräne"])
    assert r.returncode == 1
    assert r.stdout.strip().splitlines()[-1].startswith("FATAL: Fragment filter text must be ASCII")
