"""
otp_tabs package
================

Tabbed TOTP code generator (RFC 6238, HMAC-SHA1): several named sessions,
each with its own secret, refreshed together on a one second tick.

──────────────────────────────────────────────
Core algorithm
──────────────────────────────────────────────
- Key decoding: the typed secret is read as Base32 as leniently as possible
  (padding, stray characters, 1/0/8/L look-alikes) and falls back to the raw
  characters, then zero-padded to at least 16 bytes.

- TOTP: HOTP with counter = floor(now / period)
  → default period = 30 seconds, 6 digits.
  → remaining = period - (now mod period), in [1, period].

- Refresh: every tick recomputes each session's countdown from one `now`
  and regenerates the sessions whose window rolled over.

──────────────────────────────────────────────
Quick example
──────────────────────────────────────────────
>>> from otp_tabs import derive
>>> code, remaining = derive("JBSWY3DPEHPK3PXP", 6, 30, now=59)
>>> remaining
1

>>> from otp_tabs import SessionStore
>>> store = SessionStore()
>>> store.set_secret(0, "JBSWY3DPEHPK3PXP", now=59)
>>> store.active.current_code == code
True
"""

__version__ = "0.1.0"

from otp_tabs.config import CodeConfig, load_config
from otp_tabs.errors import (
    ClipboardError,
    ConfigError,
    DecodeFallbackExhausted,
    DerivationError,
    EmptySecretError,
    OTPTabsError,
)
from otp_tabs.key_decoder import decode_secret, decode_secret_verbose
from otp_tabs.otp_core import derive
from otp_tabs.scheduler import RefreshScheduler
from otp_tabs.sessions import Message, MessageKind, Session, SessionStore

__all__ = [
    "ClipboardError",
    "CodeConfig",
    "ConfigError",
    "DecodeFallbackExhausted",
    "DerivationError",
    "EmptySecretError",
    "Message",
    "MessageKind",
    "OTPTabsError",
    "RefreshScheduler",
    "Session",
    "SessionStore",
    "decode_secret",
    "decode_secret_verbose",
    "derive",
    "load_config",
]
