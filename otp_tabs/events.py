"""
events.py — Single-threaded event loop driving the session store.

Every stimulus (clock tick, user intent, deferred timer) becomes an event on
one FIFO queue and is applied completely before the next one is looked at.
Nothing here starts threads; the caller pumps the loop from its own main loop
(the curses UI, the watch command, or a test).
"""

import heapq
import itertools
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Optional, Tuple

from otp_tabs.clipboard import ClipboardSink, CommandClipboard
from otp_tabs.config import CLEAR_MESSAGE_DELAY, TICK_INTERVAL, CodeConfig
from otp_tabs.otp_core import current_timestamp
from otp_tabs.scheduler import RefreshScheduler
from otp_tabs.sessions import SessionStore

logger = logging.getLogger(__name__)


# --- Events ----------------------------------------------------------------
@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class SecretChanged:
    index: int
    text: str


@dataclass(frozen=True)
class AddSession:
    pass


@dataclass(frozen=True)
class RemoveSession:
    index: int


@dataclass(frozen=True)
class SelectSession:
    index: int


@dataclass(frozen=True)
class StartRename:
    index: int


@dataclass(frozen=True)
class NameChanged:
    index: int
    text: str


@dataclass(frozen=True)
class ConfirmRename:
    index: int


@dataclass(frozen=True)
class CopyCode:
    index: int


@dataclass(frozen=True)
class Regenerate:
    index: int


@dataclass(frozen=True)
class ClearMessage:
    handle: int
    token: int


# --- Loop ------------------------------------------------------------------
class EventLoop:
    """
    FIFO event queue plus deferred timers.

    `monotonic` measures delays and tick spacing; it is injectable so tests
    can drive time by hand.
    """

    def __init__(
        self,
        handler: Callable[[object], None],
        tick_interval: float = TICK_INTERVAL,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._handler = handler
        self.tick_interval = tick_interval
        self._monotonic = monotonic
        self._queue: Deque[object] = deque()
        self._timers: List[Tuple[float, int, object]] = []
        self._sequence = itertools.count()
        self._last_tick: Optional[float] = None

    def post(self, event: object) -> None:
        self._queue.append(event)

    def call_later(self, delay: float, event: object) -> None:
        """Post `event` once `delay` seconds have passed."""
        due = self._monotonic() + delay
        heapq.heappush(self._timers, (due, next(self._sequence), event))

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    def _release_timers(self, now: float) -> None:
        while self._timers and self._timers[0][0] <= now:
            _, _, event = heapq.heappop(self._timers)
            self._queue.append(event)

    def pump(self) -> int:
        """
        Move due timers onto the queue, add a Tick when one is due, and
        handle everything queued. Returns the number of events handled.
        """
        now = self._monotonic()
        self._release_timers(now)
        if self._last_tick is None or now - self._last_tick >= self.tick_interval:
            self._last_tick = now
            self._queue.append(Tick())

        handled = 0
        while self._queue:
            event = self._queue.popleft()
            self._handler(event)
            handled += 1
        return handled


# --- Application -----------------------------------------------------------
class App:
    """
    Session store, scheduler and clipboard wired to one event loop.

    `clock` supplies wall-clock epoch seconds for code derivation;
    `monotonic` supplies the loop's timer clock.
    """

    def __init__(
        self,
        config: Optional[CodeConfig] = None,
        clipboard: Optional[ClipboardSink] = None,
        clock: Callable[[], int] = current_timestamp,
        monotonic: Callable[[], float] = time.monotonic,
        clear_delay: float = CLEAR_MESSAGE_DELAY,
    ) -> None:
        self.config = config if config is not None else CodeConfig()
        self.clock = clock
        self.store = SessionStore(self.config, clock=clock)
        self.scheduler = RefreshScheduler(self.store)
        self.clipboard = clipboard if clipboard is not None else CommandClipboard()
        self.clear_delay = clear_delay
        self.loop = EventLoop(self.dispatch, monotonic=monotonic)
        self._handlers = {
            Tick: self._on_tick,
            SecretChanged: lambda e: self.store.set_secret(e.index, e.text, self.clock()),
            AddSession: lambda e: self.store.add(),
            RemoveSession: lambda e: self.store.remove(e.index),
            SelectSession: lambda e: self.store.select(e.index),
            StartRename: lambda e: self.store.start_rename(e.index),
            NameChanged: lambda e: self.store.set_name(e.index, e.text),
            ConfirmRename: lambda e: self.store.confirm_rename(e.index),
            CopyCode: self._on_copy,
            Regenerate: lambda e: self.store.regenerate(e.index, self.clock()),
            ClearMessage: lambda e: self.store.clear_message(e.handle, e.token),
        }

    def post(self, event: object) -> None:
        self.loop.post(event)

    def pump(self) -> int:
        return self.loop.pump()

    def dispatch(self, event: object) -> None:
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"unknown event: {event!r}")
        handler(event)

    def _on_tick(self, event: Tick) -> None:
        self.scheduler.tick(self.clock())

    def _on_copy(self, event: CopyCode) -> None:
        result = self.store.copy_code(event.index, self.clipboard)
        if result is not None:
            handle, token = result
            self.loop.call_later(self.clear_delay, ClearMessage(handle, token))
