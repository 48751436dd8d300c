"""
sessions.py — The collection of code-generation sessions ("tabs").

SessionStore owns the ordered sessions and which one is active. Callers
address sessions by position (as a tab bar does); positions out of range are
ignored rather than raising. Each session also carries a stable handle so that
deferred work (the copy-message clear) still finds the right session after
tabs are removed or reordered.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

from otp_tabs.config import CodeConfig
from otp_tabs.errors import ClipboardError, DerivationError, EmptySecretError
from otp_tabs.otp_core import current_timestamp, derive, time_step

logger = logging.getLogger(__name__)

FIRST_SESSION_NAME = "New Tab"
COPY_SUCCESS_TEXT = "Code copied to clipboard!"


class MessageKind(enum.Enum):
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Message:
    """A line of feedback shown under a session's code.

    `token` is unique per message within a store; a deferred clear only
    applies while the session still shows the message it was scheduled for.
    """

    kind: MessageKind
    text: str
    token: int

    @property
    def is_error(self) -> bool:
        return self.kind is MessageKind.ERROR


@dataclass
class Session:
    handle: int
    display_name: str = FIRST_SESSION_NAME
    secret_text: str = ""
    current_code: Optional[str] = None
    message: Optional[Message] = None
    remaining_seconds: int = 0
    time_step: Optional[int] = None
    is_renaming: bool = True

    @property
    def has_code(self) -> bool:
        return bool(self.current_code)

    @property
    def last_error(self) -> Optional[str]:
        if self.message is not None and self.message.is_error:
            return self.message.text
        return None


class SessionStore:
    """Ordered sessions plus the active one. Never empty."""

    def __init__(
        self,
        config: Optional[CodeConfig] = None,
        clock: Callable[[], int] = current_timestamp,
    ) -> None:
        self.config = config if config is not None else CodeConfig()
        self.clock = clock
        self._sessions: List[Session] = []
        self._next_handle = 0
        self._next_token = 0
        first = self._new_session(FIRST_SESSION_NAME)
        self._sessions.append(first)
        self._active_handle = first.handle

    # --- lookups -------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions))

    def __getitem__(self, index: int) -> Session:
        session = self._at(index)
        if session is None:
            raise IndexError(f"no session at index {index}")
        return session

    def _at(self, index: int) -> Optional[Session]:
        if 0 <= index < len(self._sessions):
            return self._sessions[index]
        return None

    def handle_at(self, index: int) -> Optional[int]:
        session = self._at(index)
        return session.handle if session is not None else None

    def index_of(self, handle: int) -> Optional[int]:
        for index, session in enumerate(self._sessions):
            if session.handle == handle:
                return index
        return None

    def get(self, handle: int) -> Optional[Session]:
        index = self.index_of(handle)
        return self._sessions[index] if index is not None else None

    @property
    def active_index(self) -> int:
        # A stale handle falls back to the first tab.
        index = self.index_of(self._active_handle)
        return index if index is not None else 0

    @property
    def active(self) -> Session:
        return self._sessions[self.active_index]

    # --- collection ----------------------------------------------------------
    def _new_session(self, name: str) -> Session:
        session = Session(
            handle=self._next_handle,
            display_name=name,
            remaining_seconds=self.config.period_seconds,
        )
        self._next_handle += 1
        return session

    def add(self) -> int:
        """Append an empty session in renaming mode, make it active, return its handle."""
        session = self._new_session(f"Tab {len(self._sessions) + 1}")
        self._sessions.append(session)
        self._active_handle = session.handle
        logger.debug("Added session %d (%d open)", session.handle, len(self._sessions))
        return session.handle

    def remove(self, index: int) -> bool:
        """
        Remove the session at `index`.

        No-op (returns False) when the index is out of range or it is the only
        session left. Removing the active session activates the one that
        slides into its position, or the new last session when it was last.
        """
        if len(self._sessions) <= 1 or self._at(index) is None:
            return False
        removed = self._sessions.pop(index)
        if removed.handle == self._active_handle:
            active_index = min(index, len(self._sessions) - 1)
            self._active_handle = self._sessions[active_index].handle
        logger.debug("Removed session %d (%d open)", removed.handle, len(self._sessions))
        return True

    def select(self, index: int) -> bool:
        session = self._at(index)
        if session is None:
            return False
        self._active_handle = session.handle
        return True

    # --- renaming ------------------------------------------------------------
    def start_rename(self, index: int) -> None:
        session = self._at(index)
        if session is not None:
            session.is_renaming = True

    def set_name(self, index: int, text: str) -> None:
        session = self._at(index)
        if session is not None:
            session.display_name = text

    def confirm_rename(self, index: int) -> None:
        session = self._at(index)
        if session is not None:
            session.is_renaming = False

    # --- messages ------------------------------------------------------------
    def _set_message(self, session: Session, kind: MessageKind, text: str) -> Message:
        self._next_token += 1
        session.message = Message(kind, text, self._next_token)
        return session.message

    def clear_message(self, handle: int, token: int) -> bool:
        """Clear a session's message if it is still the one identified by `token`."""
        session = self.get(handle)
        if session is None or session.message is None or session.message.token != token:
            return False
        session.message = None
        return True

    # --- codes ---------------------------------------------------------------
    def _generate(self, session: Session, now: Optional[int]) -> None:
        if now is None:
            now = self.clock()
        try:
            code, remaining = derive(
                session.secret_text,
                self.config.digits,
                self.config.period_seconds,
                now,
            )
        except EmptySecretError as e:
            session.current_code = None
            session.time_step = None
            self._set_message(session, MessageKind.ERROR, str(e))
            return
        except DerivationError as e:
            logger.warning("Code derivation failed for session %d: %s", session.handle, e)
            session.current_code = None
            session.time_step = None
            self._set_message(session, MessageKind.ERROR, f"Failed to generate token: {e}")
            return

        session.current_code = code
        session.remaining_seconds = remaining
        session.time_step = time_step(now, self.config.period_seconds)
        session.message = None

    def set_secret(self, index: int, text: str, now: Optional[int] = None) -> None:
        """
        Store new secret text and refresh the code right away.

        The previous message is dropped. Empty text clears the code without
        reporting an error.
        """
        session = self._at(index)
        if session is None:
            return
        session.secret_text = text
        session.message = None
        if text:
            self._generate(session, now)
        else:
            session.current_code = None
            session.time_step = None

    def regenerate(self, index: int, now: Optional[int] = None) -> None:
        """Derive the code again from the stored secret (reports an empty secret)."""
        session = self._at(index)
        if session is not None:
            self._generate(session, now)

    def regenerate_handle(self, handle: int, now: Optional[int] = None) -> None:
        session = self.get(handle)
        if session is not None:
            self._generate(session, now)

    # --- clipboard -----------------------------------------------------------
    def copy_code(self, index: int, clipboard) -> Optional[Tuple[int, int]]:
        """
        Put the session's code (spaces removed) on the clipboard.

        Sets an INFO message on success and an ERROR message carrying the
        cause on failure. Returns (handle, token) of that message, or None if
        there was nothing to copy.
        """
        session = self._at(index)
        if session is None or not session.has_code:
            return None
        try:
            clipboard.copy(session.current_code.replace(" ", ""))
        except ClipboardError as e:
            logger.warning("Clipboard copy failed for session %d: %s", session.handle, e)
            message = self._set_message(session, MessageKind.ERROR, str(e))
        else:
            message = self._set_message(session, MessageKind.INFO, COPY_SUCCESS_TEXT)
        return session.handle, message.token

    def copy_active_code(self, clipboard) -> Optional[Tuple[int, int]]:
        return self.copy_code(self.active_index, clipboard)
