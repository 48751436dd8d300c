import curses

import pytest

from otp_tabs import tui
from otp_tabs.formatting import format_code
from otp_tabs.tui import handle_key


def press(app, key):
    result = handle_key(key, app)
    app.pump()
    return result


def type_text(app, text):
    for char in text:
        press(app, ord(char))


def test_new_tab_typing_goes_to_name(app):
    type_text(app, "!")
    assert app.store[0].display_name == "New Tab!"
    press(app, 127)
    assert app.store[0].display_name == "New Tab"


def test_enter_confirms_name_then_typing_edits_secret(app):
    press(app, ord("\n"))
    type_text(app, "jbswy3dpehpk3pxp")
    session = app.store[0]
    assert not session.is_renaming
    assert session.secret_text == "jbswy3dpehpk3pxp"
    assert session.current_code is not None
    press(app, curses.KEY_BACKSPACE)
    assert app.store[0].secret_text == "jbswy3dpehpk3px"


def test_control_keys(app, clipboard):
    press(app, ord("\n"))
    type_text(app, "JBSWY3DPEHPK3PXP")

    press(app, 25)  # ^Y copy
    assert clipboard.copied == [app.store[0].current_code]

    press(app, 20)  # ^T new tab
    assert len(app.store) == 2
    assert app.store.active_index == 1

    press(app, curses.KEY_LEFT)
    assert app.store.active_index == 0
    press(app, curses.KEY_RIGHT)
    assert app.store.active_index == 1

    press(app, 23)  # ^W close
    assert len(app.store) == 1

    press(app, 18)  # ^R rename
    assert app.store[0].is_renaming


def test_regenerate_key_reports_empty_secret(app):
    press(app, ord("\n"))
    press(app, 7)  # ^G
    assert app.store[0].last_error == "Please enter a secret key"


def test_quit_keys(app):
    assert handle_key(27, app) == "quit"
    assert handle_key(17, app) == "quit"
    assert handle_key(ord("q"), app) is None


class FakeScreen:
    def __init__(self, height=24, width=80):
        self.size = (height, width)
        self.lines = {}

    def erase(self):
        self.lines.clear()

    def getmaxyx(self):
        return self.size

    def addstr(self, y, x, text, attr=0):
        self.lines[y] = self.lines.get(y, "") + text

    def noutrefresh(self):
        pass


@pytest.fixture
def screen(monkeypatch):
    monkeypatch.setattr(tui.curses, "color_pair", lambda pair: 0)
    monkeypatch.setattr(tui.curses, "doupdate", lambda: None)
    return FakeScreen()


def test_render_shows_active_session(app, screen):
    press(app, ord("\n"))
    type_text(app, "JBSWY3DPEHPK3PXP")
    press(app, 25)  # ^Y copy

    tui._render(screen, app)
    text = "\n".join(screen.lines.values())
    assert "New Tab" in screen.lines[2]
    assert "JBSWY3DPEHPK3PXP" in screen.lines[5]
    assert format_code(app.store[0].current_code) in screen.lines[7]
    assert "Code expires in 25 seconds" in screen.lines[9]
    assert "✓ Code copied to clipboard!" in screen.lines[12]
    assert "Esc Quit" in text


def test_render_prompts_for_secret(app, screen):
    tui._render(screen, app)
    assert "Enter your secret key" in screen.lines[5]
    assert "New Tab_" in screen.lines[2]
    assert 7 not in screen.lines


def test_render_small_terminal(app, screen):
    screen.size = (5, 20)
    tui._render(screen, app)
    assert screen.lines == {0: "Terminal too small"}
