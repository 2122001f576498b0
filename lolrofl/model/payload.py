"""Payload header: game identity, segment counts and the stored encryption key."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..byteops import read_bytes, read_u16, read_u32, read_u64
from ..exceptions import InvalidEncoding
from .header import FileHeader

LOG = logging.getLogger(__name__)

# Fixed fields preceding the variable-length key.
PAYLOAD_HEADER_FIXED_LEN = 34


@dataclass(frozen=True)
class PayloadHeader:
    """Decoded payload header.

    ``duration`` and ``keyframe_interval`` are in milliseconds.
    ``encryption_key`` is the base64 text exactly as stored in the file.
    """

    match_id: int
    duration: int
    keyframe_count: int
    chunk_count: int
    load_end_chunk: int
    game_start_chunk: int
    keyframe_interval: int
    encryption_key: str

    @property
    def segment_count(self) -> int:
        return self.chunk_count + self.keyframe_count

    def __str__(self) -> str:
        return "\n".join(
            [
                f"Match ID: {self.match_id}",
                f"Match Length: {self.duration} ms",
                f"Keyframe count: {self.keyframe_count}",
                f"Last loading Chunk: {self.load_end_chunk}",
                f"First game chunk: {self.game_start_chunk}",
                f"Total chunk count: {self.chunk_count}",
                f"Keyframe interval: {self.keyframe_interval}",
                f"Encryption key ({len(self.encryption_key)} chars): {self.encryption_key!r}",
            ]
        )


def parse_payload_header(data: bytes, header: FileHeader) -> PayloadHeader:
    """Read the payload header region that ``header`` locates inside ``data``.

    Reads are confined to the declared region; a key length running past it
    raises :class:`~lolrofl.exceptions.Truncated`.
    """

    start, limit = header.payload_header_range
    what = "payload header"
    match_id, pos = read_u64(data, start, what=what, limit=limit)
    duration, pos = read_u32(data, pos, what=what, limit=limit)
    keyframe_count, pos = read_u32(data, pos, what=what, limit=limit)
    chunk_count, pos = read_u32(data, pos, what=what, limit=limit)
    load_end_chunk, pos = read_u32(data, pos, what=what, limit=limit)
    game_start_chunk, pos = read_u32(data, pos, what=what, limit=limit)
    keyframe_interval, pos = read_u32(data, pos, what=what, limit=limit)
    key_len, pos = read_u16(data, pos, what=what, limit=limit)
    raw_key, pos = read_bytes(data, pos, key_len, what="encryption key", limit=limit)

    try:
        key = bytes(raw_key).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidEncoding(
            f"encryption key is not valid UTF-8: {exc.reason}",
            offset=start + PAYLOAD_HEADER_FIXED_LEN + exc.start,
        ) from exc

    payload = PayloadHeader(
        match_id=match_id,
        duration=duration,
        keyframe_count=keyframe_count,
        chunk_count=chunk_count,
        load_end_chunk=load_end_chunk,
        game_start_chunk=game_start_chunk,
        keyframe_interval=keyframe_interval,
        encryption_key=key,
    )
    LOG.debug(
        "payload header: match=%d chunks=%d keyframes=%d key_len=%d",
        match_id,
        chunk_count,
        keyframe_count,
        key_len,
    )
    return payload


__all__ = ["PAYLOAD_HEADER_FIXED_LEN", "PayloadHeader", "parse_payload_header"]
