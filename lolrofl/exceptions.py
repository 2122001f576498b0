"""Custom exception hierarchy for the ROFL decoder."""

from __future__ import annotations

from typing import Optional


class RoflError(Exception):
    """Base class for all replay decoding errors."""


class FormatError(RoflError):
    """Raised when the container layout does not match the expected format.

    ``offset`` records where decoding stopped when it is known.  It is relative
    to the buffer being decoded (the whole file for header parsing, the
    decompressed segment for section decoding).
    """

    def __init__(self, message: str, *, offset: Optional[int] = None) -> None:
        super().__init__(message)
        self.offset = offset


class BadMagic(FormatError):
    """The buffer does not start with the ``RIOT`` magic."""


class Truncated(FormatError):
    """A read would run past the end of the buffer or of a declared region."""


class InvalidEncoding(FormatError):
    """A text region (metadata, encryption key) is not valid UTF-8."""


class UnknownSegmentKind(FormatError):
    """A segment header carries a kind tag other than chunk or keyframe."""

    def __init__(self, tag: int, *, offset: Optional[int] = None) -> None:
        super().__init__(f"unknown segment kind tag {tag}", offset=offset)
        self.tag = tag


class MissingInitialType(FormatError):
    """The first section of a segment omits its type field."""


class SegmentCountMismatch(FormatError):
    """The segment table disagrees with the chunk/keyframe counts of the payload header."""


class CryptoError(RoflError):
    """Raised when a segment or key cannot be decrypted or decompressed."""


class BadPadding(CryptoError):
    """The padding trailer of a decrypted buffer is out of range."""


class DecompressionFailed(CryptoError):
    """The decrypted segment is not a complete compressed stream."""


class InvalidKey(CryptoError):
    """The stored encryption key cannot be decoded or used as a cipher key."""


class MisalignedCiphertext(CryptoError):
    """The ciphertext is empty or not a whole number of cipher blocks."""


__all__ = [
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
