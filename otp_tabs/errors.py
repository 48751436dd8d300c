"""Exception types raised by otp-tabs.

Session-scoped failures are turned into inline messages by the session store;
none of them is meant to end the process.
"""


class OTPTabsError(Exception):
    """Base class for every otp-tabs error."""


class ConfigError(OTPTabsError, ValueError):
    """Invalid startup configuration (digits / period)."""


class EmptySecretError(OTPTabsError):
    """No secret has been entered for the session."""

    def __init__(self, message: str = "Please enter a secret key") -> None:
        super().__init__(message)


class DecodeFallbackExhausted(OTPTabsError):
    """The key decoder produced no usable key. Guard only, never expected."""


class DerivationError(OTPTabsError):
    """The code derivation primitive rejected its parameters."""


class ClipboardError(OTPTabsError):
    """The clipboard could not be reached or refused the text."""
