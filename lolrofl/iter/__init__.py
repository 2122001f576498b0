"""Lazy iterators over segments and sections."""

from .sections import LAYOUTS, RecordLayout, SectionDecoder, decode_sections, layout_for
from .segments import SegmentTable

__all__ = ["LAYOUTS", "RecordLayout", "SectionDecoder", "SegmentTable", "decode_sections", "layout_for"]
