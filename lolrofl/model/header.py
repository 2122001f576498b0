"""Fixed-layout file header and the metadata region it locates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from ..byteops import U16, U32, require
from ..exceptions import BadMagic, InvalidEncoding, Truncated

LOG = logging.getLogger(__name__)

MAGIC = b"RIOT"
HEADER_LEN = 288
SIGNATURE_LEN = 256

_SIGNATURE_OFFSET = 6
_HEADER_SIZE_OFFSET = 262
_FILE_SIZE_OFFSET = 264
_METADATA_OFFSET = 268
_METADATA_SIZE = 272
_PAYLOAD_HEADER_OFFSET = 276
_PAYLOAD_HEADER_SIZE = 280
_PAYLOAD_OFFSET = 284


@dataclass(frozen=True)
class FileHeader:
    """Immutable view of the 288 byte file header.

    All offsets are absolute positions in the file.  The payload region runs
    from ``payload_offset`` to ``file_size``.
    """

    signature: bytes
    header_size: int
    file_size: int
    metadata_offset: int
    metadata_size: int
    payload_header_offset: int
    payload_header_size: int
    payload_offset: int

    @property
    def metadata_range(self) -> Tuple[int, int]:
        return self.metadata_offset, self.metadata_offset + self.metadata_size

    @property
    def payload_header_range(self) -> Tuple[int, int]:
        return self.payload_header_offset, self.payload_header_offset + self.payload_header_size

    @property
    def payload_range(self) -> Tuple[int, int]:
        return self.payload_offset, self.file_size

    def __str__(self) -> str:
        return "\n".join(
            [
                f"Header size: {self.header_size}",
                f"File size: {self.file_size}",
                f"Metadata offset: {self.metadata_offset}",
                f"Metadata length: {self.metadata_size}",
                f"Payload Header offset: {self.payload_header_offset}",
                f"Payload Header length: {self.payload_header_size}",
                f"Payload offset: {self.payload_offset}",
            ]
        )


def parse_file_header(data: bytes) -> FileHeader:
    """Parse and validate the file header at the start of ``data``.

    Every region the header declares must fit inside ``data``; a file whose
    regions do not fit is rejected here before anything else is read.
    """

    if len(data) < len(MAGIC):
        raise Truncated(f"buffer of {len(data)} bytes is too short for the file magic", offset=0)
    if bytes(data[: len(MAGIC)]) != MAGIC:
        raise BadMagic(f"expected magic {MAGIC!r}, found {bytes(data[:len(MAGIC)])!r}", offset=0)
    require(data, 0, HEADER_LEN, what="file header")

    header = FileHeader(
        signature=bytes(data[_SIGNATURE_OFFSET : _SIGNATURE_OFFSET + SIGNATURE_LEN]),
        header_size=U16.unpack_from(data, _HEADER_SIZE_OFFSET)[0],
        file_size=U32.unpack_from(data, _FILE_SIZE_OFFSET)[0],
        metadata_offset=U32.unpack_from(data, _METADATA_OFFSET)[0],
        metadata_size=U32.unpack_from(data, _METADATA_SIZE)[0],
        payload_header_offset=U32.unpack_from(data, _PAYLOAD_HEADER_OFFSET)[0],
        payload_header_size=U32.unpack_from(data, _PAYLOAD_HEADER_SIZE)[0],
        payload_offset=U32.unpack_from(data, _PAYLOAD_OFFSET)[0],
    )

    require(data, 0, header.header_size, what="declared header")
    require(data, 0, header.file_size, what="declared file")
    require(data, header.metadata_offset, header.metadata_size, what="metadata region")
    require(data, header.payload_header_offset, header.payload_header_size, what="payload header region")
    if header.payload_offset > header.file_size:
        raise Truncated(
            f"payload offset {header.payload_offset} lies past the declared file size {header.file_size}",
            offset=_PAYLOAD_OFFSET,
        )

    LOG.debug(
        "file header: size=%d metadata=%s payload_header=%s payload=%s",
        header.file_size,
        header.metadata_range,
        header.payload_header_range,
        header.payload_range,
    )
    return header


def read_metadata(data: bytes, header: FileHeader) -> str:
    """Return the metadata region of ``data`` as a string (JSON is not parsed)."""

    start, end = header.metadata_range
    require(data, start, header.metadata_size, what="metadata region")
    try:
        return bytes(data[start:end]).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidEncoding(f"metadata is not valid UTF-8: {exc.reason}", offset=start + exc.start) from exc


__all__ = [
    "MAGIC",
    "HEADER_LEN",
    "SIGNATURE_LEN",
    "FileHeader",
    "parse_file_header",
    "read_metadata",
]
