"""Bounds-checked helpers for reading little-endian fields from buffers."""

from __future__ import annotations

import struct
from typing import Tuple

from .exceptions import Truncated

U8 = struct.Struct("<B")
U16 = struct.Struct("<H")
U32 = struct.Struct("<I")
U64 = struct.Struct("<Q")
F32 = struct.Struct("<f")


def require(data: bytes, offset: int, size: int, *, what: str = "field", limit: int | None = None) -> int:
    """Return the end offset of ``size`` bytes at ``offset`` or raise :class:`Truncated`.

    ``limit`` narrows the readable area to ``data[:limit]`` so reads can be
    confined to a declared region of a larger buffer.
    """

    end = offset + size
    bound = len(data) if limit is None else min(limit, len(data))
    if offset < 0 or size < 0 or end > bound:
        raise Truncated(
            f"{what} needs {size} bytes at offset {offset} but only {max(bound - offset, 0)} remain",
            offset=offset,
        )
    return end


def read_struct(
    fmt: struct.Struct, data: bytes, offset: int, *, what: str = "field", limit: int | None = None
) -> Tuple[int | float, int]:
    """Unpack a single value with ``fmt`` and return ``(value, next_offset)``."""

    end = require(data, offset, fmt.size, what=what, limit=limit)
    return fmt.unpack_from(data, offset)[0], end


def read_u16(data: bytes, offset: int, **kwargs) -> Tuple[int, int]:
    return read_struct(U16, data, offset, **kwargs)  # type: ignore[return-value]


def read_u32(data: bytes, offset: int, **kwargs) -> Tuple[int, int]:
    return read_struct(U32, data, offset, **kwargs)  # type: ignore[return-value]


def read_u64(data: bytes, offset: int, **kwargs) -> Tuple[int, int]:
    return read_struct(U64, data, offset, **kwargs)  # type: ignore[return-value]


def read_bytes(data: bytes, offset: int, size: int, *, what: str = "field", limit: int | None = None) -> Tuple[memoryview, int]:
    """Return a zero-copy view of ``size`` bytes at ``offset`` and the next offset."""

    end = require(data, offset, size, what=what, limit=limit)
    return memoryview(data)[offset:end], end


__all__ = [
    "U8",
    "U16",
    "U32",
    "U64",
    "F32",
    "require",
    "read_struct",
    "read_u16",
    "read_u32",
    "read_u64",
    "read_bytes",
]
