"""Event records ("sections") found in a decoded segment."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class TimeEncoding(enum.Enum):
    ABSOLUTE = "absolute"
    RELATIVE = "relative"


@dataclass(frozen=True)
class PacketTime:
    """Timestamp of a section.

    ``seconds`` is always the effective absolute game time.  ``delta_ms`` is
    the stored millisecond delta when the record used the relative encoding
    and ``None`` otherwise.
    """

    encoding: TimeEncoding
    seconds: float
    delta_ms: Optional[int] = None

    @classmethod
    def absolute(cls, seconds: float) -> "PacketTime":
        return cls(TimeEncoding.ABSOLUTE, seconds)

    @classmethod
    def relative(cls, delta_ms: int, seconds: float) -> "PacketTime":
        return cls(TimeEncoding.RELATIVE, seconds, delta_ms)

    @property
    def is_relative(self) -> bool:
        return self.encoding is TimeEncoding.RELATIVE


@dataclass(frozen=True)
class GenericSection:
    """A single decoded record.

    ``data`` is ``None`` when the segment was walked in headers-only mode;
    ``data_len`` is always populated.  ``offset`` and ``size`` locate the whole
    record (configuration byte included) in the decoded segment buffer.
    """

    time: PacketTime
    section_type: int
    params: int
    data_len: int
    config: int
    offset: int
    size: int
    type_reused: bool = False
    data: Optional[memoryview] = None

    @property
    def end(self) -> int:
        return self.offset + self.size

    def raw_data(self) -> Optional[bytes]:
        return None if self.data is None else bytes(self.data)


__all__ = ["TimeEncoding", "PacketTime", "GenericSection"]
