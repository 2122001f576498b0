"""Two-stage segment decryption: Blowfish with a padding trailer, then inflate.

The stored payload key is base64 text.  Decoding it and decrypting the result
with the match id (as decimal ASCII) yields the data key shared by every
segment of the game.  Segments are decrypted with that key using the same
primitive, then inflated.  Blowfish runs in ECB mode: each 8 byte block is
decrypted independently.
"""

from __future__ import annotations

import base64
import binascii
import logging
import zlib

from Crypto.Cipher import Blowfish

from ..exceptions import BadPadding, DecompressionFailed, InvalidKey, MisalignedCiphertext
from ..model.payload import PayloadHeader

LOG = logging.getLogger(__name__)

BLOCK_SIZE = Blowfish.block_size

# Accept a gzip or a zlib container around the deflate stream.
_INFLATE_WBITS = zlib.MAX_WBITS | 32


def _new_cipher(key: bytes):
    try:
        return Blowfish.new(key, Blowfish.MODE_ECB)
    except ValueError as exc:
        raise InvalidKey(f"unusable Blowfish key of {len(key)} bytes: {exc}") from exc


def blowfish_decrypt(ciphertext: bytes | memoryview, key: bytes) -> bytes:
    """Decrypt ``ciphertext`` with ``key`` and strip the padding trailer.

    The last decrypted byte gives the number of trailing bytes to drop.  A
    trailer larger than the block size or than the decrypted buffer raises
    :class:`~lolrofl.exceptions.BadPadding`.
    """

    size = len(ciphertext)
    if size == 0 or size % BLOCK_SIZE:
        raise MisalignedCiphertext(f"ciphertext of {size} bytes is not a whole number of {BLOCK_SIZE} byte blocks")

    plain = _new_cipher(key).decrypt(bytes(ciphertext))
    pad = plain[-1]
    if pad > BLOCK_SIZE or pad > len(plain):
        raise BadPadding(f"padding trailer {pad} exceeds the {BLOCK_SIZE} byte block size")
    return plain[: len(plain) - pad]


def decode_stored_key(encryption_key: str) -> bytes:
    """Return the raw bytes of the base64 key text stored in the payload header."""

    try:
        return base64.b64decode(encryption_key, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidKey(f"encryption key is not valid base64: {exc}") from exc


def derive_data_key(encryption_key: str, match_id: int) -> bytes:
    """Recover the per-game data key from the stored key and the match id."""

    stored = decode_stored_key(encryption_key)
    key = blowfish_decrypt(stored, str(match_id).encode("ascii"))
    LOG.debug("derived %d byte data key from %d byte stored key", len(key), len(stored))
    return key


def decompress_segment(compressed: bytes) -> bytes:
    """Inflate a decrypted segment.  Trailing bytes after the stream are ignored."""

    inflater = zlib.decompressobj(_INFLATE_WBITS)
    try:
        output = inflater.decompress(compressed)
        output += inflater.flush()
    except zlib.error as exc:
        raise DecompressionFailed(f"corrupt compressed segment: {exc}") from exc
    if not inflater.eof:
        raise DecompressionFailed("compressed segment ends before the end of its stream")
    return output


class SegmentCipher:
    """Decrypts and inflates the segments of one game.

    Holds only the immutable data key; a fresh cipher object is built for
    every call so one instance can be shared between worker threads.  The
    key is checked against the cipher once, on construction, so an unusable
    key fails for the whole game rather than for each segment.
    """

    def __init__(self, data_key: bytes) -> None:
        if not data_key:
            raise InvalidKey("derived data key is empty")
        self.data_key = bytes(data_key)
        _new_cipher(self.data_key)

    @classmethod
    def from_payload(cls, payload: PayloadHeader) -> "SegmentCipher":
        return cls(derive_data_key(payload.encryption_key, payload.match_id))

    def decrypt(self, ciphertext: bytes | memoryview) -> bytes:
        """Return the decrypted, still compressed segment."""

        return blowfish_decrypt(ciphertext, self.data_key)

    def decode(self, ciphertext: bytes | memoryview) -> bytes:
        """Return the flat segment buffer for the encrypted segment ``ciphertext``."""

        compressed = self.decrypt(ciphertext)
        output = decompress_segment(compressed)
        LOG.debug("segment: %d encrypted -> %d compressed -> %d bytes", len(ciphertext), len(compressed), len(output))
        return output


__all__ = [
    "BLOCK_SIZE",
    "SegmentCipher",
    "blowfish_decrypt",
    "decode_stored_key",
    "derive_data_key",
    "decompress_segment",
]
