"""Lazy walk over the segment table at the start of the payload."""

from __future__ import annotations

import logging
from typing import Iterator

from ..byteops import require
from ..exceptions import SegmentCountMismatch, Truncated
from ..model.header import FileHeader
from ..model.payload import PayloadHeader
from ..model.segment import SEGMENT_HEADER_LEN, SegmentHeader, SegmentKind, parse_segment_header

LOG = logging.getLogger(__name__)


class SegmentTable:
    """Restartable iterable over the segment headers of a file.

    Every call to :func:`iter` starts a fresh walk in on-disk order.  Each
    yielded header has already been checked to reference data inside the
    payload region.  After the last entry the chunk and keyframe tallies are
    compared with the payload header and a mismatch raises
    :class:`~lolrofl.exceptions.SegmentCountMismatch`.
    """

    def __init__(self, data: bytes, header: FileHeader, payload: PayloadHeader) -> None:
        self._data = data
        self._payload = payload
        self.start, self.end = header.payload_range
        self.count = payload.segment_count
        self.data_base = self.start + SEGMENT_HEADER_LEN * self.count
        require(data, self.start, SEGMENT_HEADER_LEN * self.count, what="segment table", limit=self.end)
        LOG.debug("segment table: %d entries at %d, data from %d", self.count, self.start, self.data_base)

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[SegmentHeader]:
        tallies = {SegmentKind.CHUNK: 0, SegmentKind.KEYFRAME: 0}
        for index in range(self.count):
            position = self.start + SEGMENT_HEADER_LEN * index
            segment = parse_segment_header(self._data, position, index=index, data_base=self.data_base)
            if segment.data_start + segment.length > self.end:
                raise Truncated(
                    f"{segment.kind.label.lower()} {segment.id} data "
                    f"[{segment.data_start}, {segment.data_start + segment.length}) "
                    f"runs past the payload end {self.end}",
                    offset=position,
                )
            tallies[segment.kind] += 1
            yield segment

        if (tallies[SegmentKind.CHUNK], tallies[SegmentKind.KEYFRAME]) != (
            self._payload.chunk_count,
            self._payload.keyframe_count,
        ):
            raise SegmentCountMismatch(
                f"segment table holds {tallies[SegmentKind.CHUNK]} chunks and "
                f"{tallies[SegmentKind.KEYFRAME]} keyframes, payload header declares "
                f"{self._payload.chunk_count} and {self._payload.keyframe_count}",
                offset=self.start,
            )

    def segment_data(self, segment: SegmentHeader) -> memoryview:
        """Return a zero-copy view of the still encrypted data of ``segment``."""

        start, end = segment.data_range
        require(self._data, start, segment.length, what=f"segment {segment.id} data", limit=self.end)
        return memoryview(self._data)[start:end]


__all__ = ["SegmentTable"]
