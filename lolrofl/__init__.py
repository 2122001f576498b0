"""Parse and inspect ROFL replay files generated from League of Legends games.

The library only operates on buffers already loaded in memory::

    from lolrofl import Rofl

    game = Rofl.from_bytes(Path("game.rofl").read_bytes())
    payload = game.payload()
    for segment in game.segments():
        for section in game.sections(segment, with_data=False):
            ...
"""

from .decoders import SegmentCipher
from .exceptions import (
    BadMagic,
    BadPadding,
    CryptoError,
    DecompressionFailed,
    FormatError,
    InvalidEncoding,
    InvalidKey,
    MisalignedCiphertext,
    MissingInitialType,
    RoflError,
    SegmentCountMismatch,
    Truncated,
    UnknownSegmentKind,
)
from .iter import SectionDecoder, SegmentTable
from .model import FileHeader, GenericSection, PacketTime, PayloadHeader, SegmentHeader, SegmentKind, TimeEncoding
from .rofl import Rofl, SegmentResult

__version__ = "0.2.0"

__all__ = [
    "Rofl",
    "SegmentResult",
    "FileHeader",
    "PayloadHeader",
    "SegmentHeader",
    "SegmentKind",
    "GenericSection",
    "PacketTime",
    "TimeEncoding",
    "SegmentTable",
    "SectionDecoder",
    "SegmentCipher",
    "RoflError",
    "FormatError",
    "BadMagic",
    "Truncated",
    "InvalidEncoding",
    "UnknownSegmentKind",
    "MissingInitialType",
    "SegmentCountMismatch",
    "CryptoError",
    "BadPadding",
    "DecompressionFailed",
    "InvalidKey",
    "MisalignedCiphertext",
]
