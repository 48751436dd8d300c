import base64
import hashlib
import hmac
import struct

import pytest

from otp_tabs.config import CodeConfig
from otp_tabs.errors import ClipboardError
from otp_tabs.events import App

# RFC 6238 appendix B seed for SHA-1, as Base32
RFC_SECRET = base64.b32encode(b"12345678901234567890").decode("ascii")


def reference_totp(key: bytes, now: int, digits: int = 6, period: int = 30) -> str:
    digest = hmac.new(key, struct.pack(">Q", now // period), hashlib.sha1).digest()
    offset = digest[-1] & 0x0F
    binary = struct.unpack(">L", digest[offset:offset + 4])[0] & 0x7FFFFFFF
    return str(binary % 10 ** digits).zfill(digits)


class FakeClipboard:
    def __init__(self, error=None):
        self.error = error
        self.copied = []

    def copy(self, text):
        if self.error is not None:
            raise ClipboardError(self.error)
        self.copied.append(text)


class FakeClock:
    """Epoch seconds for derivation plus a monotonic clock for the event loop."""

    def __init__(self, now=35, monotonic=1000.0):
        self.now = now
        self.mono = monotonic

    def __call__(self):
        return self.now

    def monotonic(self):
        return self.mono

    def advance(self, seconds):
        self.now += int(seconds)
        self.mono += seconds


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app(clock, clipboard):
    return App(CodeConfig(), clipboard=clipboard, clock=clock, monotonic=clock.monotonic)
