"""
key_decoder.py — Turn whatever the user typed into a usable HMAC key.

Secrets arrive copy-pasted from setup pages, PDFs and screenshots: lowercase,
grouped with spaces, missing '=' padding, with OCR slips like '0' for 'O'.
The decoder never rejects input. It tries progressively looser readings of the
text and, when nothing decodes, falls back to the raw characters, so a code
can always be shown.

Every key is at least MIN_KEY_BYTES long; shorter results are zero-padded.
"""

import base64
import binascii
import logging
from typing import NamedTuple, Optional

from otp_tabs.config import MIN_KEY_BYTES
from otp_tabs.errors import DecodeFallbackExhausted

logger = logging.getLogger(__name__)

BASE32_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"

# Characters commonly misread in printed secrets (digit one, zero, eight, L).
CONFUSABLES = str.maketrans({"1": "I", "0": "O", "8": "B", "L": "I"})

# Strategy names reported by decode_secret_verbose()
STRATEGY_BASE32 = "base32"
STRATEGY_BASE32_PADDED = "base32-padded"
STRATEGY_FILTERED = "filtered"
STRATEGY_FILTERED_PADDED = "filtered-padded"
STRATEGY_SUBSTITUTED = "substituted"
STRATEGY_RAW = "raw"


class DecodedKey(NamedTuple):
    key: bytes
    strategy: str
    zero_padded: bool


def normalize(raw_text: str) -> str:
    """Uppercase and drop spaces: 'jbsw y3dp' -> 'JBSWY3DP'."""
    return raw_text.upper().replace(" ", "")


def pad_key(key: bytes, length: int = MIN_KEY_BYTES) -> bytes:
    """
    Zero-pad a key to `length` bytes.

    Keys already at least `length` bytes long are returned unchanged.
    """
    if len(key) < length:
        return key + b"\x00" * (length - len(key))
    return key


def _b32decode(text: str) -> Optional[bytes]:
    # base64.b32decode raises binascii.Error on bad symbols / padding and a
    # plain ValueError on non-ASCII input.
    try:
        return base64.b32decode(text)
    except (binascii.Error, ValueError):
        return None


def _b32decode_unpadded(text: str) -> Optional[bytes]:
    """
    Base32 without padding: any number of alphabet characters.

    Each character carries 5 bits, so `n` characters give `n * 5 // 8`
    bytes; leftover bits that do not fill a byte are dropped. Text with
    anything outside the alphabet (including '=') is rejected.
    """
    if any(c not in BASE32_CHARS for c in text):
        return None
    length = len(text) * 5 // 8
    # 'A' is the zero symbol, so filling the last group never changes the
    # leading bytes.
    text += "A" * (-len(text) % 8)
    return base64.b32decode(text)[:length]


def _b32decode_padded(text: str) -> Optional[bytes]:
    missing_padding = len(text) % 8
    if missing_padding != 0:
        text += "=" * (8 - missing_padding)
    return _b32decode(text)


def _try_decode(normalized: str):
    decoded = _b32decode_unpadded(normalized)
    if decoded is not None:
        return decoded, STRATEGY_BASE32

    decoded = _b32decode_padded(normalized)
    if decoded is not None:
        return decoded, STRATEGY_BASE32_PADDED

    filtered = "".join(c for c in normalized if c in BASE32_CHARS)
    if filtered != normalized:
        decoded = _b32decode_unpadded(filtered)
        if decoded is not None:
            return decoded, STRATEGY_FILTERED
        decoded = _b32decode_padded(filtered)
        if decoded is not None:
            return decoded, STRATEGY_FILTERED_PADDED

    substituted = normalized.translate(CONFUSABLES)
    if substituted != normalized:
        decoded = _b32decode_unpadded(substituted)
        if decoded is not None:
            return decoded, STRATEGY_SUBSTITUTED

    # Last resort: the characters themselves become the key.
    return normalized.encode("utf-8"), STRATEGY_RAW


def decode_secret_verbose(raw_text: str) -> DecodedKey:
    """
    Decode a secret and report how it was read.

    Order (first success wins):
    1. unpadded Base32 of the normalized text (any length)
    2. Base32 after right-padding with '=' to a multiple of 8
    3. if dropping non-Base32 characters changes the text: 1 and 2 on that
    4. if swapping 1/0/8/L for I/O/B/I changes the text: unpadded Base32 once
    5. the UTF-8 bytes of the normalized text

    Returns:
        DecodedKey(key, strategy, zero_padded)
    """
    normalized = normalize(raw_text)
    decoded, strategy = _try_decode(normalized)
    key = pad_key(decoded)
    if len(key) < MIN_KEY_BYTES:
        raise DecodeFallbackExhausted(
            f"decoder produced {len(key)} bytes, need at least {MIN_KEY_BYTES}"
        )
    logger.debug(
        "Decoded secret of %d chars via %s -> %d-byte key", len(raw_text), strategy, len(key)
    )
    return DecodedKey(key, strategy, len(decoded) < MIN_KEY_BYTES)


def decode_secret(raw_text: str) -> bytes:
    """Return the HMAC key for `raw_text`. Never fails; always >= 16 bytes."""
    return decode_secret_verbose(raw_text).key
