"""Per-tick countdown refresh and code rollover."""

import logging
from typing import List, Optional

from otp_tabs.otp_core import seconds_remaining, time_step
from otp_tabs.sessions import SessionStore

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """
    Keeps every session's countdown in step with the clock.

    One tick takes a single `now`, updates the countdown of each session that
    holds a code, then regenerates the sessions whose window rolled over. The
    scan finishes before any regeneration so all countdowns in a tick share
    the same snapshot.
    """

    def __init__(self, store: SessionStore) -> None:
        self.store = store

    def tick(self, now: Optional[int] = None) -> List[int]:
        """Returns the handles of the sessions that got a new code."""
        if now is None:
            now = self.store.clock()
        period = self.store.config.period_seconds
        step = time_step(now, period)

        due: List[int] = []
        for session in self.store:
            if not session.has_code:
                continue
            session.remaining_seconds = seconds_remaining(now, period)
            # A tick can land past the first second of a window, so a stale
            # time step counts as a rollover too.
            if session.remaining_seconds == period or session.time_step != step:
                due.append(session.handle)

        for handle in due:
            self.store.regenerate_handle(handle, now)
        if due:
            logger.debug("Tick at step %d regenerated %d session(s)", step, len(due))
        return due
