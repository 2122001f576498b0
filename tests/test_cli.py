import json
from pathlib import Path

import pytest

from lolrofl.cli import main
from rofl_builder import MATCH_ID, SegmentPlan, build_rofl, encrypt_raw, DATA_KEY, two_record_stream


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("LOLROFL_JOBS", "LOLROFL_LOG_LEVEL", "LOLROFL_DEBUG_LOG", "LOLROFL_OUT_DIR"):
        monkeypatch.delenv(name, raising=False)


def test_get_info(sample_path: Path, capsys) -> None:
    assert main(["get", "info", str(sample_path), "--signature"]) == 0
    out = capsys.readouterr().out
    assert "Header size: 288" in out
    assert f"Signature: {bytes(range(256)).hex()}" in out


def test_get_metadata(sample_path: Path, capsys) -> None:
    assert main(["get", "metadata", str(sample_path)]) == 0
    assert json.loads(capsys.readouterr().out)["gameLength"] == 91722

    assert main(["get", "m", str(sample_path), "--stats"]) == 0
    assert json.loads(capsys.readouterr().out)[0]["CHAMPIONS_KILLED"] == "3"


def test_get_metadata_stats_missing(tmp_path: Path, capsys) -> None:
    target = tmp_path / "nostats.rofl"
    target.write_bytes(build_rofl(metadata='{"gameLength": 1}').data)
    assert main(["get", "metadata", str(target), "--stats"]) == 1
    assert "statsJson" in capsys.readouterr().err


def test_get_payload_fields(sample_path: Path, capsys) -> None:
    assert main(["get", "payload", str(sample_path), "--id", "--interval", "--count", "chunk", "keyframe"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == [f"ID: {MATCH_ID}", "ChunkCount: 2", "KeyframeCount: 1", "KeyframeInterval: 60000"]


def test_get_payload_summary(sample_path: Path, capsys) -> None:
    assert main(["get", "p", str(sample_path)]) == 0
    assert f"Match ID: {MATCH_ID}" in capsys.readouterr().out


def test_analyze_stats(sample_path: Path, capsys) -> None:
    assert main(["-v", "--jobs", "2", "analyze", str(sample_path)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 3
    assert lines[0].startswith("Chunk 002 (")
    assert lines[0].endswith(": 2 {37: 2}")
    assert lines[2].startswith("Keyframe 001 (")


def test_analyze_verify_filters(sample_path: Path, capsys) -> None:
    assert main(["analyze", str(sample_path), "--mode", "verify", "--only", "chunk", "--id", "1"]) == 0
    assert capsys.readouterr().out.splitlines() == ["SUCCESS Chunk 1"]


def test_analyze_verify_reports_failures(tmp_path: Path, capsys) -> None:
    plans = [
        SegmentPlan(id=1, plaintext=two_record_stream()),
        SegmentPlan(id=2, sealed=encrypt_raw(b"\x00" * 7 + b"\x7f", DATA_KEY)),
        SegmentPlan(id=3, plaintext=two_record_stream() + b"\x00"),
    ]
    target = tmp_path / "broken.rofl"
    target.write_bytes(build_rofl(plans).data)

    assert main(["analyze", str(target), "--mode", "verify"]) == 1
    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["SUCCESS Chunk 1", "FAIL Chunk 2", "FAIL Chunk 3"]
    assert "padding" in captured.err


def test_analyze_detail_human(sample_path: Path, capsys) -> None:
    assert main(["analyze", str(sample_path), "--mode", "detail", "--only", "keyframe", "-H"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Keyframe 1: ["
    assert out[-1] == "]"
    assert len(out) == 5
    assert "type=16" in out[1]


def test_analyze_bytes(sample_path: Path, capsys) -> None:
    assert main(["analyze", str(sample_path), "--mode", "bytes", "--id", "2"]) == 0
    assert capsys.readouterr().out.strip() == f"Chunk 2: {two_record_stream().hex()}"


def test_export_all(sample_path: Path, sample_segments, tmp_path: Path) -> None:
    out_dir = tmp_path / "out"
    assert main(["export", "all", str(sample_path), "-d", str(out_dir)]) == 0
    names = sorted(path.name for path in out_dir.iterdir())
    assert names == [f"{MATCH_ID}-1-Chunk.bin", f"{MATCH_ID}-1-Keyframe.bin", f"{MATCH_ID}-2-Chunk.bin"]
    assert (out_dir / f"{MATCH_ID}-2-Chunk.bin").read_bytes() == sample_segments[0].plaintext


def test_export_chunk_ids_with_env_directory(sample_path: Path, tmp_path: Path, monkeypatch) -> None:
    out_dir = tmp_path / "env-out"
    monkeypatch.setenv("LOLROFL_OUT_DIR", str(out_dir))
    assert main(["export", "c", str(sample_path), "--id", "1"]) == 0
    assert [path.name for path in out_dir.iterdir()] == [f"{MATCH_ID}-1-Chunk.bin"]


def test_missing_file(tmp_path: Path, capsys) -> None:
    assert main(["get", "info", str(tmp_path / "absent.rofl")]) == 1
    assert "does not exist" in capsys.readouterr().err


def test_not_a_replay(tmp_path: Path, capsys) -> None:
    target = tmp_path / "junk.rofl"
    target.write_bytes(b"\x00" * 400)
    assert main(["get", "info", str(target)]) == 1
    assert "magic" in capsys.readouterr().err


def test_invalid_jobs_is_a_usage_error(sample_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--jobs", "zero", "get", "info", str(sample_path)])
    assert excinfo.value.code == 2


def test_debug_log_file(sample_path: Path, tmp_path: Path, monkeypatch) -> None:
    trace = tmp_path / "logs" / "debug.log"
    monkeypatch.setenv("LOLROFL_DEBUG_LOG", str(trace))
    assert main(["get", "payload", str(sample_path)]) == 0
    assert "payload header: match=" in trace.read_text(encoding="utf-8")
