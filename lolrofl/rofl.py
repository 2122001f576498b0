"""High level access to an in-memory ROFL replay."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional

from .decoders.cipher import SegmentCipher
from .exceptions import RoflError
from .iter.sections import SectionDecoder
from .iter.segments import SegmentTable
from .model.header import FileHeader, parse_file_header, read_metadata
from .model.payload import PayloadHeader, parse_payload_header
from .model.segment import SegmentHeader
from .utils import run_parallel

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class SegmentResult:
    """Outcome of decoding one segment: either ``data`` or ``error`` is set."""

    segment: SegmentHeader
    data: Optional[bytes] = None
    error: Optional[RoflError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Rofl:
    """A replay file loaded in memory.

    The file header is parsed and validated on construction.  Everything
    else (payload header, segment table, data key) is parsed on first use
    and cached; segment data is decoded on demand and never cached.
    """

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.head: FileHeader = parse_file_header(data)
        self._payload: Optional[PayloadHeader] = None
        self._table: Optional[SegmentTable] = None
        self._cipher: Optional[SegmentCipher] = None

    @classmethod
    def from_bytes(cls, data: bytes) -> "Rofl":
        return cls(data)

    def metadata(self) -> str:
        """Return the raw JSON metadata string."""

        return read_metadata(self.data, self.head)

    def payload(self) -> PayloadHeader:
        if self._payload is None:
            self._payload = parse_payload_header(self.data, self.head)
        return self._payload

    def segment_table(self) -> SegmentTable:
        if self._table is None:
            self._table = SegmentTable(self.data, self.head, self.payload())
        return self._table

    def segments(self) -> Iterator[SegmentHeader]:
        """Iterate the segment headers in on-disk order."""

        return iter(self.segment_table())

    def cipher(self) -> SegmentCipher:
        if self._cipher is None:
            self._cipher = SegmentCipher.from_payload(self.payload())
        return self._cipher

    def raw_segment(self, segment: SegmentHeader) -> memoryview:
        """Return the encrypted bytes of ``segment``."""

        return self.segment_table().segment_data(segment)

    def decode_segment(self, segment: SegmentHeader) -> bytes:
        """Decrypt and inflate ``segment`` into a flat buffer."""

        return self.cipher().decode(self.raw_segment(segment))

    def sections(self, segment: SegmentHeader, *, with_data: bool = True) -> SectionDecoder:
        return SectionDecoder(self.decode_segment(segment), with_data=with_data)

    def decode_segments(
        self,
        segments: Iterable[SegmentHeader] | None = None,
        *,
        jobs: int = 1,
    ) -> List[SegmentResult]:
        """Decode several segments, optionally on a thread pool.

        A failing segment produces a :class:`SegmentResult` carrying the error
        and does not stop the others.  Results follow the order of
        ``segments`` (the table order when omitted).
        """

        targets = list(self.segments() if segments is None else segments)
        # Shared state is built before fanning out; key errors concern every segment.
        self.segment_table()
        self.cipher()

        def worker(segment: SegmentHeader) -> SegmentResult:
            try:
                return SegmentResult(segment, data=self.decode_segment(segment))
            except RoflError as exc:
                LOG.debug("segment %d (%s) failed: %s", segment.id, segment.kind.label, exc)
                return SegmentResult(segment, error=exc)

        results, _ = run_parallel(targets, worker, jobs=jobs, label="segments")
        failed = sum(1 for result in results if not result.ok)
        if failed:
            LOG.info("%d of %d segments failed to decode", failed, len(results))
        return results


__all__ = ["Rofl", "SegmentResult"]
