"""Decoders for encrypted payload segments."""

from .cipher import (
    BLOCK_SIZE,
    SegmentCipher,
    blowfish_decrypt,
    decode_stored_key,
    decompress_segment,
    derive_data_key,
)

__all__ = [
    "BLOCK_SIZE",
    "SegmentCipher",
    "blowfish_decrypt",
    "decode_stored_key",
    "decompress_segment",
    "derive_data_key",
]
