"""Text rendering for the command line reports."""

from __future__ import annotations

from typing import List, Sequence

from ..analysis import SegmentReport
from ..model.header import FileHeader
from ..model.payload import PayloadHeader
from ..model.section import GenericSection
from ..model.segment import SegmentHeader, SegmentKind
from ..utils import hex_preview


def format_info(head: FileHeader, *, signature: bool = False) -> str:
    lines = [str(head)]
    if signature:
        lines.append(f"Signature: {head.signature.hex()}")
    return "\n".join(lines)


def format_payload_fields(
    payload: PayloadHeader,
    *,
    match_id: bool = False,
    duration: bool = False,
    count: Sequence[SegmentKind] = (),
    loadid: bool = False,
    startid: bool = False,
    interval: bool = False,
    key: bool = False,
) -> str:
    """Render the selected payload fields, or the full summary when none is selected."""

    lines: List[str] = []
    if match_id:
        lines.append(f"ID: {payload.match_id}")
    if duration:
        lines.append(f"Duration: {payload.duration} ms")
    for kind in count:
        if kind is SegmentKind.CHUNK:
            lines.append(f"ChunkCount: {payload.chunk_count}")
        else:
            lines.append(f"KeyframeCount: {payload.keyframe_count}")
    if loadid:
        lines.append(f"LoadEndChunk: {payload.load_end_chunk}")
    if startid:
        lines.append(f"StartChunk: {payload.game_start_chunk}")
    if interval:
        lines.append(f"KeyframeInterval: {payload.keyframe_interval}")
    if key:
        lines.append(f"EncryptionKey: {payload.encryption_key}")
    if not lines:
        return str(payload)
    return "\n".join(lines)


def format_break(report: SegmentReport, data: bytes) -> str:
    offset = report.error_offset or 0
    return (
        f"BROKE at index {offset} of {report.segment.kind.label} {report.segment.id} "
        f"({report.error}), next bytes: {hex_preview(data[offset:])}"
    )


def format_stats(report: SegmentReport, *, verbose: bool = False) -> str:
    line = f"{report.segment.kind.label} {report.segment.id:03} ({report.size:07}): {report.section_count}"
    if verbose:
        counts = ", ".join(f"{key}: {report.histogram[key]}" for key in sorted(report.histogram))
        line += f" {{{counts}}}"
    return line


def format_verify(segment: SegmentHeader, ok: bool) -> str:
    return f"{'SUCCESS' if ok else 'FAIL'} {segment.kind.label} {segment.id}"


def format_section(section: GenericSection) -> str:
    when = f"+{section.time.delta_ms}ms" if section.time.is_relative else "abs"
    data = "" if section.data is None else hex_preview(section.data, limit=section.data_len)
    return (
        f"  @{section.offset:06} t={section.time.seconds:.3f}s ({when}) "
        f"type={section.section_type} params={section.params} len={section.data_len} {data}"
    ).rstrip()


def format_detail(segment: SegmentHeader, sections: Sequence[GenericSection], *, human: bool = False) -> str:
    if human:
        lines = [f"{segment.kind.label} {segment.id}: ["]
        lines.extend(format_section(section) for section in sections)
        lines.append("]")
        return "\n".join(lines)
    records = ", ".join(f"({s.section_type}, {s.params}, {s.data_len})" for s in sections)
    return f"{segment.kind.label[0]}{segment.id}: [{records}]"


def export_filename(match_id: int, segment: SegmentHeader) -> str:
    return f"{match_id}-{segment.id}-{segment.kind.label}.bin"


__all__ = [
    "format_info",
    "format_payload_fields",
    "format_break",
    "format_stats",
    "format_verify",
    "format_section",
    "format_detail",
    "export_filename",
]
