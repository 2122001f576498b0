"""Segment headers: the fixed 17 byte entries framing each chunk and keyframe."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import Tuple

from ..byteops import require
from ..exceptions import UnknownSegmentKind

SEGMENT_HEADER_LEN = 17

_ENTRY = struct.Struct("<IBIII")


class SegmentKind(enum.IntEnum):
    CHUNK = 1
    KEYFRAME = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class SegmentHeader:
    """One entry of the segment table.

    ``offset`` is relative to the end of the table, as stored on disk.
    ``data_start`` is the resolved absolute position of the encrypted data in
    the file buffer.  ``chunk_id`` is only meaningful for keyframes.
    """

    index: int
    id: int
    kind: SegmentKind
    length: int
    chunk_id: int
    offset: int
    data_start: int

    @property
    def is_chunk(self) -> bool:
        return self.kind is SegmentKind.CHUNK

    @property
    def is_keyframe(self) -> bool:
        return self.kind is SegmentKind.KEYFRAME

    @property
    def data_range(self) -> Tuple[int, int]:
        return self.data_start, self.data_start + self.length

    def __str__(self) -> str:
        return (
            f"{self.kind.label} {self.id} "
            f"(len: {self.length}, next: {self.chunk_id}, offset: {self.offset})"
        )


def parse_segment_header(data: bytes, position: int, *, index: int, data_base: int) -> SegmentHeader:
    """Decode the table entry at ``position``.

    ``data_base`` is the absolute offset of the end of the segment table, the
    origin of the entry's relative data offset.
    """

    require(data, position, SEGMENT_HEADER_LEN, what=f"segment header {index}")
    segment_id, tag, length, chunk_id, offset = _ENTRY.unpack_from(data, position)
    try:
        kind = SegmentKind(tag)
    except ValueError:
        raise UnknownSegmentKind(tag, offset=position + 4) from None
    return SegmentHeader(
        index=index,
        id=segment_id,
        kind=kind,
        length=length,
        chunk_id=chunk_id if kind is SegmentKind.KEYFRAME else 0,
        offset=offset,
        data_start=data_base + offset,
    )


__all__ = ["SEGMENT_HEADER_LEN", "SegmentKind", "SegmentHeader", "parse_segment_header"]
