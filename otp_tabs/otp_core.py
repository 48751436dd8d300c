"""
otp_core.py — TOTP code derivation for otp-tabs.

Goals:
- Pure functions only: the caller passes the time, nothing is stored here.
- Secret text goes through the tolerant key decoder first, so any non-empty
  text yields a code.
- HMAC-SHA1 per RFC 4226 / RFC 6238 (what Google Authenticator and most
  issuers use), 6 digits and a 30 second step by default.
"""

import base64
import logging
import time
from typing import Optional, Tuple

import pyotp

from otp_tabs.config import DEFAULT_DIGITS, DEFAULT_TIME_STEP, MAX_DIGITS
from otp_tabs.errors import DerivationError, EmptySecretError
from otp_tabs.key_decoder import decode_secret

logger = logging.getLogger(__name__)


# --- Time window helpers ---------------------------------------------------
def current_timestamp() -> int:
    """Whole seconds since the Unix epoch."""
    return int(time.time())


def time_step(now: int, period: int = DEFAULT_TIME_STEP) -> int:
    """
    TOTP counter for `now`: floor(now / period).

    Every timestamp in [k*period, (k+1)*period) maps to the same counter k.
    """
    return now // period


def seconds_remaining(now: int, period: int = DEFAULT_TIME_STEP) -> int:
    """
    Seconds until the code valid at `now` expires.

    Always in [1, period]: exactly `period` on the first second of a window.
    """
    return period - (now % period)


# --- HOTP primitive --------------------------------------------------------
def hotp(key: bytes, counter: int, digits: int = DEFAULT_DIGITS) -> str:
    """
    HOTP code (RFC 4226) for a raw byte key and counter.

    Steps:
    1. Message = 8-byte big-endian counter
    2. HMAC-SHA1(key, message)
    3. Dynamic truncation -> 31-bit integer
    4. Modulo 10^digits, zero-padded to exactly `digits` characters

    The key is handed to pyotp as padded Base32; pyotp decodes it back
    to the same bytes.

    Raises:
        DerivationError: digits outside 1..10 or a negative counter
    """
    if not 1 <= digits <= MAX_DIGITS:
        raise DerivationError(f"digits must be between 1 and {MAX_DIGITS}, got {digits}")
    secret_b32 = base64.b32encode(key).decode("ascii")
    try:
        return pyotp.HOTP(secret_b32, digits=digits).at(counter)
    except ValueError as e:
        raise DerivationError(str(e)) from e


# --- TOTP ------------------------------------------------------------------
def derive(
    secret_text: str,
    digits: int = DEFAULT_DIGITS,
    period_seconds: int = DEFAULT_TIME_STEP,
    now: Optional[int] = None,
) -> Tuple[str, int]:
    """
    Derive the TOTP code for `secret_text` at time `now`.

    Arguments:
        secret_text: raw secret as typed by the user (any format)
        digits: code length
        period_seconds: TOTP step X in seconds
        now: epoch seconds (None -> current time)

    Returns:
        (code, remaining_seconds)
        - code: `digits` decimal characters
        - remaining_seconds: period_seconds - (now mod period_seconds)

    Raises:
        EmptySecretError: if secret_text is empty
        DerivationError: if digits / period / time are rejected
    """
    if not secret_text:
        raise EmptySecretError()
    if period_seconds < 1:
        raise DerivationError(f"period must be at least 1 second, got {period_seconds}")
    if now is None:
        now = current_timestamp()

    key = decode_secret(secret_text)
    counter = time_step(now, period_seconds)
    code = hotp(key, counter, digits)
    remaining = seconds_remaining(now, period_seconds)
    logger.debug("TOTP: counter=%d, remaining=%ds", counter, remaining)
    return code, remaining
