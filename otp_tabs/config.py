"""
config.py — Runtime configuration for otp-tabs.

Code length and period are read once at startup (CLI flag, then environment
variable, then default) and never change while the program runs.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from otp_tabs.errors import ConfigError

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # standard: 6 digits
DEFAULT_TIME_STEP = 30      # TOTP step (seconds)
MAX_DIGITS = 10
MIN_KEY_BYTES = 16          # 128-bit floor for decoded keys
CLEAR_MESSAGE_DELAY = 3.0   # seconds a copy message stays visible
TICK_INTERVAL = 1.0         # seconds between scheduler ticks

DIGITS_ENV = "OTP_TABS_DIGITS"
PERIOD_ENV = "OTP_TABS_PERIOD"


@dataclass(frozen=True)
class CodeConfig:
    """Process-wide code parameters shared by every session."""

    digits: int = DEFAULT_DIGITS
    period_seconds: int = DEFAULT_TIME_STEP

    def __post_init__(self) -> None:
        if not 1 <= self.digits <= MAX_DIGITS:
            raise ConfigError(f"digits must be between 1 and {MAX_DIGITS}, got {self.digits}")
        if self.period_seconds < 1:
            raise ConfigError(f"period must be at least 1 second, got {self.period_seconds}")


def _env_int(environ: Mapping[str, str], name: str) -> Optional[int]:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def load_config(
    digits: Optional[int] = None,
    period: Optional[int] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> CodeConfig:
    """
    Build the CodeConfig used for the whole run.

    Arguments:
        digits: value from the command line, wins over the environment
        period: value from the command line, wins over the environment
        environ: mapping to read OTP_TABS_DIGITS / OTP_TABS_PERIOD from
            (defaults to os.environ)

    Raises:
        ConfigError: if a value is not an integer or out of range
    """
    if environ is None:
        environ = os.environ
    if digits is None:
        digits = _env_int(environ, DIGITS_ENV)
    if period is None:
        period = _env_int(environ, PERIOD_ENV)
    return CodeConfig(
        digits=DEFAULT_DIGITS if digits is None else digits,
        period_seconds=DEFAULT_TIME_STEP if period is None else period,
    )
