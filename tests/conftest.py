"""Test configuration ensuring the project package and test helpers are importable."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
TESTS = ROOT / "tests"

root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)
if str(TESTS) not in sys.path:
    sys.path.insert(1, str(TESTS))

from rofl_builder import (  # noqa: E402
    CHUNK,
    KEYFRAME,
    SegmentPlan,
    build_rofl,
    encode_section,
    make_config,
    two_record_stream,
)


@pytest.fixture
def keyframe_stream() -> bytes:
    return b"".join(
        [
            encode_section(make_config(), time=60.0, section_type=0x10, params=1, data=b"state"),
            encode_section(make_config(relative=True, implicit_type=True), delta=20, params=2, data=b"more"),
            encode_section(make_config(short_params=True), time=61.0, section_type=0x11, params=3),
        ]
    )


@pytest.fixture
def sample_segments(keyframe_stream: bytes) -> list:
    """Two chunks and a keyframe, stored out of id order."""

    return [
        SegmentPlan(id=2, kind=CHUNK, plaintext=two_record_stream()),
        SegmentPlan(id=1, kind=CHUNK, plaintext=encode_section(make_config(), time=1.0, section_type=3)),
        SegmentPlan(id=1, kind=KEYFRAME, plaintext=keyframe_stream, chunk_id=2),
    ]


@pytest.fixture
def sample_file(sample_segments):
    return build_rofl(sample_segments)


@pytest.fixture
def sample_path(tmp_path: Path, sample_file) -> Path:
    target = tmp_path / "game.rofl"
    target.write_bytes(sample_file.data)
    return target
