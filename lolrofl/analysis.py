"""Per-segment section statistics used by ``lolrofl analyze``."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Sequence

from .exceptions import FormatError
from .iter.sections import SectionDecoder
from .model.section import GenericSection
from .model.segment import SegmentHeader, SegmentKind


@dataclass
class SegmentReport:
    """Summary of one walk over a decoded segment.

    ``histogram`` maps section types to counts, or record sizes to counts
    when the walk was restricted to a single type.
    """

    segment: SegmentHeader
    size: int
    section_count: int = 0
    histogram: Counter = field(default_factory=Counter)
    last_section: Optional[GenericSection] = None
    error: Optional[FormatError] = None
    error_offset: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def analyze_segment(segment: SegmentHeader, data: bytes, *, typed: Optional[int] = None) -> SegmentReport:
    """Walk ``data`` in headers-only mode and collect statistics.

    Decoding errors are recorded on the report instead of being raised.
    ``error_offset`` is the start of the first record that failed to decode.
    """

    report = SegmentReport(segment=segment, size=len(data))
    position = 0
    try:
        for section in SectionDecoder(data, with_data=False):
            position = section.end
            report.last_section = section
            if typed is None:
                report.section_count += 1
                report.histogram[section.section_type] += 1
            elif section.section_type == typed:
                report.section_count += 1
                report.histogram[section.size] += 1
    except FormatError as exc:
        report.error = exc
        report.error_offset = position
    return report


def select_segments(
    segments: Iterable[SegmentHeader],
    ids: Sequence[int] = (),
    only: Optional[SegmentKind] = None,
) -> Iterator[SegmentHeader]:
    """Yield the segments matching the id and kind filters.

    Empty filters match everything.
    """

    wanted = set(ids)
    for segment in segments:
        if wanted and segment.id not in wanted:
            continue
        if only is not None and segment.kind is not only:
            continue
        yield segment


__all__ = ["SegmentReport", "analyze_segment", "select_segments"]
