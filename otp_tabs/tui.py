"""Terminal tab view for otp-tabs.

Manages curses setup/teardown, maps keys to session intents, and renders the
tab row, the active session's secret, code, countdown and message. All state
lives in the App; this module only reads it and posts events.
"""

import curses
from typing import List, Optional

from otp_tabs.events import (
    AddSession,
    App,
    ConfirmRename,
    CopyCode,
    NameChanged,
    Regenerate,
    RemoveSession,
    SecretChanged,
    SelectSession,
    StartRename,
)
from otp_tabs.formatting import countdown_bar, session_rows, truncate
from otp_tabs.sessions import MessageKind

TITLE = "TOTP Token Generator"
_HINTS = " ←/→ Tabs | ^T New | ^W Close | ^R Rename | ^Y Copy | ^G Refresh | Esc Quit"

# Color pair IDs
_PAIR_ACTIVE_TAB = 1
_PAIR_INACTIVE_TAB = 2
_PAIR_SUCCESS = 3
_PAIR_ERROR = 4
_PAIR_ACCENT = 5

# Control keys (raw mode, so ^C arrives as a key too)
_CTRL_C = 3
_CTRL_G = 7
_CTRL_Q = 17
_CTRL_R = 18
_CTRL_T = 20
_CTRL_W = 23
_CTRL_Y = 25
_ESC = 27
_BACKSPACE_KEYS = (curses.KEY_BACKSPACE, 127, 8)
_ENTER_KEYS = (curses.KEY_ENTER, ord("\n"), ord("\r"))


def _init_colors() -> None:
    """Initialize curses color pairs from the built-in palette."""
    curses.start_color()
    curses.use_default_colors()
    curses.init_pair(_PAIR_ACTIVE_TAB, curses.COLOR_BLACK, curses.COLOR_WHITE)
    curses.init_pair(_PAIR_INACTIVE_TAB, -1, -1)
    curses.init_pair(_PAIR_SUCCESS, curses.COLOR_GREEN, -1)
    curses.init_pair(_PAIR_ERROR, curses.COLOR_RED, -1)
    curses.init_pair(_PAIR_ACCENT, curses.COLOR_WHITE, curses.COLOR_BLUE)


def _addstr(stdscr: "curses.window", y: int, x: int, text: str, attr: int = 0) -> None:
    try:
        stdscr.addstr(y, x, text, attr)
    except curses.error:
        # Writing to the very last cell can raise on some terminals
        pass


def _centered(stdscr: "curses.window", y: int, width: int, text: str, attr: int = 0) -> None:
    text = truncate(text, width - 1)
    _addstr(stdscr, y, max(0, (width - len(text)) // 2), text, attr)


def _draw_tabs(stdscr: "curses.window", rows: List[dict], y: int, width: int) -> None:
    """Draw the tab row; the renaming tab shows an edit cursor."""
    x = 1
    for row in rows:
        name = truncate(row["display_name"] or " ", 16)
        label = f" {name}_ " if row["editing_name"] else f" {name} "
        if len(rows) > 1:
            label += "× "
        pair = _PAIR_ACTIVE_TAB if row["active"] else _PAIR_INACTIVE_TAB
        attr = curses.color_pair(pair) | (curses.A_BOLD if row["active"] else 0)
        if x + len(label) >= width - 3:
            _addstr(stdscr, y, x, "…")
            return
        _addstr(stdscr, y, x, label, attr)
        x += len(label) + 1
    _addstr(stdscr, y, x, " + ", curses.color_pair(_PAIR_SUCCESS) | curses.A_BOLD)


def _render(stdscr: "curses.window", app: App) -> None:
    """Perform a full render of the TUI."""
    stdscr.erase()
    max_y, max_x = stdscr.getmaxyx()

    if max_y < 14 or max_x < 30:
        _addstr(stdscr, 0, 0, "Terminal too small")
        stdscr.noutrefresh()
        curses.doupdate()
        return

    rows = session_rows(app.store)
    row = next(r for r in rows if r["active"])
    period = app.config.period_seconds

    _centered(stdscr, 0, max_x, TITLE, curses.A_BOLD)
    _draw_tabs(stdscr, rows, 2, max_x)
    _addstr(stdscr, 3, 0, "─" * (max_x - 1))

    secret = row["secret_text"] or "Enter your secret key"
    secret_attr = 0 if row["secret_text"] else curses.A_DIM
    _addstr(stdscr, 5, 2, "Secret: ")
    _addstr(stdscr, 5, 10, truncate(secret, max_x - 12), secret_attr)

    remaining = row["remaining_seconds"]
    if remaining is not None:
        _centered(stdscr, 7, max_x, row["current_code"], curses.A_BOLD)
        _centered(stdscr, 9, max_x, f"Code expires in {remaining} seconds", curses.A_DIM)
        bar_width = min(40, max_x - 4)
        _centered(
            stdscr, 10, max_x,
            countdown_bar(remaining, period, bar_width),
            curses.color_pair(_PAIR_ACCENT),
        )

    if row["last_message"] is not None:
        pair = _PAIR_ERROR if row["message_kind"] == MessageKind.ERROR.value else _PAIR_SUCCESS
        _centered(stdscr, 12, max_x, row["message_line"], curses.color_pair(pair))

    status = _HINTS[:max_x].ljust(max_x - 1)
    _addstr(stdscr, max_y - 1, 0, status, curses.color_pair(_PAIR_ACCENT) | curses.A_BOLD)

    stdscr.noutrefresh()
    curses.doupdate()


def handle_key(key: int, app: App) -> Optional[str]:
    """Translate a keypress into events on the app. Returns 'quit' or None."""
    index = app.store.active_index
    session = app.store.active

    if key in (_ESC, _CTRL_Q, _CTRL_C):
        return "quit"
    if key == curses.KEY_LEFT:
        if index > 0:
            app.post(SelectSession(index - 1))
    elif key == curses.KEY_RIGHT:
        app.post(SelectSession(index + 1))
    elif key == _CTRL_T:
        app.post(AddSession())
    elif key == _CTRL_W:
        app.post(RemoveSession(index))
    elif key == _CTRL_R:
        app.post(StartRename(index))
    elif key == _CTRL_Y:
        app.post(CopyCode(index))
    elif key == _CTRL_G:
        app.post(Regenerate(index))
    elif key in _ENTER_KEYS:
        if session.is_renaming:
            app.post(ConfirmRename(index))
    elif key in _BACKSPACE_KEYS:
        if session.is_renaming:
            app.post(NameChanged(index, session.display_name[:-1]))
        else:
            app.post(SecretChanged(index, session.secret_text[:-1]))
    elif 32 <= key < 127:
        char = chr(key)
        if session.is_renaming:
            app.post(NameChanged(index, session.display_name + char))
        else:
            app.post(SecretChanged(index, session.secret_text + char))
    return None


def _main(stdscr: "curses.window", app: App) -> None:
    """Curses main function, runs inside curses.wrapper."""
    try:
        curses.curs_set(0)
    except curses.error:
        pass
    curses.raw()
    stdscr.keypad(True)
    stdscr.timeout(100)  # 100ms so the countdown keeps moving without input
    _init_colors()

    while True:
        app.pump()
        _render(stdscr, app)

        try:
            key = stdscr.getch()
        except curses.error:
            continue

        if key == -1:
            continue
        if key == curses.KEY_RESIZE:
            stdscr.clear()
            continue

        if handle_key(key, app) == "quit":
            break
        app.pump()


def run(app: App) -> None:
    """Entry point for the tab view. Sets up curses and runs the main loop."""
    curses.wrapper(_main, app)
