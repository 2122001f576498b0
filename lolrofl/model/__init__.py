"""Structures mapping the parts of a ROFL file."""

from .header import HEADER_LEN, MAGIC, SIGNATURE_LEN, FileHeader, parse_file_header, read_metadata
from .payload import PAYLOAD_HEADER_FIXED_LEN, PayloadHeader, parse_payload_header
from .section import GenericSection, PacketTime, TimeEncoding
from .segment import SEGMENT_HEADER_LEN, SegmentHeader, SegmentKind, parse_segment_header

__all__ = [
    "HEADER_LEN",
    "MAGIC",
    "SIGNATURE_LEN",
    "FileHeader",
    "parse_file_header",
    "read_metadata",
    "PAYLOAD_HEADER_FIXED_LEN",
    "PayloadHeader",
    "parse_payload_header",
    "GenericSection",
    "PacketTime",
    "TimeEncoding",
    "SEGMENT_HEADER_LEN",
    "SegmentHeader",
    "SegmentKind",
    "parse_segment_header",
]
