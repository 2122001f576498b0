"""Stateful decoder for the variable-width records of a decoded segment.

Each record starts with a configuration byte whose high nibble selects the
width of the fields that follow::

    bit   set                      clear
    0x80  time:   u8 delta (ms)    f32 absolute seconds
    0x10  length: u8               u32
    0x40  type:   absent (reuse)   u16
    0x20  params: u8               u32

Fields are stored in the order time, length, type, params, then ``length``
bytes of data.  All integers are little-endian.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Iterator, NamedTuple, Optional

from ..byteops import F32, U8, U16, U32, require
from ..exceptions import MissingInitialType
from ..model.section import GenericSection, PacketTime

LOG = logging.getLogger(__name__)

RELATIVE_TIME = 0x80
IMPLICIT_TYPE = 0x40
SHORT_PARAMS = 0x20
SHORT_LENGTH = 0x10


class RecordLayout(NamedTuple):
    """Field widths in bytes selected by one configuration byte."""

    time: int
    length: int
    type: int
    params: int

    @property
    def header_size(self) -> int:
        return 1 + self.time + self.length + self.type + self.params


# (bit, width when set, width when clear) in RecordLayout field order.
_FIELD_WIDTHS = (
    (RELATIVE_TIME, 1, 4),
    (SHORT_LENGTH, 1, 4),
    (IMPLICIT_TYPE, 0, 2),
    (SHORT_PARAMS, 1, 4),
)

LAYOUTS = tuple(
    RecordLayout(*(narrow if config & bit else wide for bit, narrow, wide in _FIELD_WIDTHS))
    for config in range(256)
)

_UNSIGNED = {1: U8, 2: U16, 4: U32}


def layout_for(config: int) -> RecordLayout:
    return LAYOUTS[config & 0xFF]


def _to_f32(value: float) -> float:
    return F32.unpack(F32.pack(value))[0]


@dataclass
class _DecodeState:
    """Running state of one walk over one segment."""

    position: int = 0
    last_type: Optional[int] = None
    last_time: float = 0.0


class SectionDecoder:
    """Restartable iterable over the sections of a decoded segment buffer.

    With ``with_data=False`` the data field of every record is skipped without
    being retained, which is enough to enumerate record boundaries, types and
    times.  Every iteration starts from the beginning of the buffer with fresh
    state; records are produced one at a time as they are consumed.

    Errors (:class:`~lolrofl.exceptions.Truncated`,
    :class:`~lolrofl.exceptions.MissingInitialType`) are raised after every
    record preceding the failure has been yielded.
    """

    def __init__(self, data: bytes | memoryview, *, with_data: bool = True) -> None:
        self._data = data
        self.with_data = with_data

    def __iter__(self) -> Iterator[GenericSection]:
        return self._walk(_DecodeState())

    def _read(self, fmt: struct.Struct, state: _DecodeState, what: str) -> int | float:
        end = require(self._data, state.position, fmt.size, what=what)
        value = fmt.unpack_from(self._data, state.position)[0]
        state.position = end
        return value

    def _walk(self, state: _DecodeState) -> Iterator[GenericSection]:
        data = self._data
        size = len(data)
        while state.position < size:
            start = state.position
            config = data[start]
            state.position += 1
            layout = LAYOUTS[config]

            if layout.time == 4:
                seconds = float(self._read(F32, state, "section time"))
                time = PacketTime.absolute(seconds)
            else:
                delta = int(self._read(U8, state, "section time delta"))
                # Running time is a 32 bit float, like the absolute times it extends.
                seconds = _to_f32(state.last_time + delta / 1000)
                time = PacketTime.relative(delta, seconds)
            state.last_time = seconds

            data_len = int(self._read(_UNSIGNED[layout.length], state, "section length"))

            if layout.type:
                section_type = int(self._read(U16, state, "section type"))
                state.last_type = section_type
            elif state.last_type is None:
                raise MissingInitialType(
                    f"section at offset {start} reuses the previous type but none was declared",
                    offset=start,
                )
            else:
                section_type = state.last_type

            params = int(self._read(_UNSIGNED[layout.params], state, "section params"))

            data_end = require(data, state.position, data_len, what="section data")
            payload = memoryview(data)[state.position : data_end] if self.with_data else None
            state.position = data_end

            yield GenericSection(
                time=time,
                section_type=section_type,
                params=params,
                data_len=data_len,
                config=config,
                offset=start,
                size=data_end - start,
                type_reused=not layout.type,
                data=payload,
            )
        LOG.debug("decoded section stream of %d bytes", size)


def decode_sections(data: bytes | memoryview, *, with_data: bool = True) -> list[GenericSection]:
    """Eagerly decode every section of ``data``."""

    return list(SectionDecoder(data, with_data=with_data))


__all__ = [
    "RELATIVE_TIME",
    "IMPLICIT_TYPE",
    "SHORT_PARAMS",
    "SHORT_LENGTH",
    "LAYOUTS",
    "RecordLayout",
    "SectionDecoder",
    "decode_sections",
    "layout_for",
]
