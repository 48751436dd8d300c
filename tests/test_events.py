import pytest

from otp_tabs.events import (
    AddSession,
    ConfirmRename,
    CopyCode,
    EventLoop,
    NameChanged,
    Regenerate,
    RemoveSession,
    SecretChanged,
    SelectSession,
    StartRename,
    Tick,
)
from otp_tabs.key_decoder import decode_secret
from otp_tabs.sessions import COPY_SUCCESS_TEXT, MessageKind
from tests.conftest import reference_totp

SECRET = "JBSWY3DPEHPK3PXP"


def test_first_pump_ticks(app):
    assert app.pump() == 1


def test_ticks_are_spaced(app, clock):
    app.pump()
    assert app.pump() == 0
    clock.advance(0.5)
    assert app.pump() == 0
    clock.advance(0.5)
    assert app.pump() == 1


def test_events_are_handled_in_order():
    seen = []
    now = [0.0]
    loop = EventLoop(seen.append, monotonic=lambda: now[0])
    loop.post("a")
    loop.post("b")
    loop.pump()
    assert seen == ["a", "b", Tick()]


def test_deferred_events_wait_for_their_time():
    seen = []
    now = [0.0]
    loop = EventLoop(seen.append, tick_interval=100.0, monotonic=lambda: now[0])
    loop.call_later(2.0, "late")
    loop.call_later(1.0, "early")
    loop.pump()
    assert seen == [Tick()]
    assert loop.pending_timers == 2
    now[0] = 2.0
    loop.pump()
    assert seen == [Tick(), "early", "late"]
    assert loop.pending_timers == 0


def test_secret_edit_generates_code(app, clock):
    app.post(SecretChanged(0, SECRET))
    app.pump()
    session = app.store[0]
    assert session.current_code == reference_totp(decode_secret(SECRET), clock.now)
    assert session.remaining_seconds == 25


def test_code_rolls_over_on_tick(app, clock):
    app.post(SecretChanged(0, SECRET))
    app.pump()
    clock.advance(25)
    app.pump()
    session = app.store[0]
    assert session.remaining_seconds == 30
    assert session.current_code == reference_totp(decode_secret(SECRET), 60)


def test_copy_message_clears_after_delay(app, clock, clipboard):
    app.post(SecretChanged(0, SECRET))
    app.pump()
    app.post(CopyCode(0))
    app.pump()
    assert clipboard.copied == [app.store[0].current_code]
    assert app.store[0].message.text == COPY_SUCCESS_TEXT
    assert app.loop.pending_timers == 1

    clock.advance(2)
    app.pump()
    assert app.store[0].message is not None

    clock.advance(1)
    app.pump()
    assert app.store[0].message is None


def test_stale_clear_does_not_wipe_newer_message(app, clock):
    app.post(SecretChanged(0, SECRET))
    app.post(CopyCode(0))
    app.pump()

    clock.advance(2)
    app.post(SecretChanged(0, SECRET))
    app.post(CopyCode(0))
    app.pump()
    newer = app.store[0].message

    clock.advance(1)
    app.pump()
    assert app.store[0].message == newer

    clock.advance(2)
    app.pump()
    assert app.store[0].message is None


def test_copy_failure_is_reported_and_cleared(app, clock, clipboard):
    clipboard.error = "Failed to access clipboard: no clipboard tool found"
    app.post(SecretChanged(0, SECRET))
    app.post(CopyCode(0))
    app.pump()
    message = app.store[0].message
    assert message.kind is MessageKind.ERROR
    assert message.text == "Failed to access clipboard: no clipboard tool found"
    clock.advance(3)
    app.pump()
    assert app.store[0].message is None


def test_clear_after_session_removed(app, clock):
    app.post(AddSession())
    app.post(SecretChanged(1, SECRET))
    app.post(CopyCode(1))
    app.post(RemoveSession(1))
    app.pump()
    assert len(app.store) == 1
    clock.advance(3)
    app.pump()
    assert app.store[0].message is None


def test_session_intents(app):
    app.post(AddSession())
    app.post(NameChanged(1, "AWS"))
    app.post(ConfirmRename(1))
    app.post(SelectSession(0))
    app.post(StartRename(0))
    app.post(Regenerate(0))
    app.pump()
    assert [s.display_name for s in app.store] == ["New Tab", "AWS"]
    assert not app.store[1].is_renaming
    assert app.store[0].is_renaming
    assert app.store.active_index == 0
    assert app.store[0].last_error == "Please enter a secret key"


def test_unknown_event_is_rejected(app):
    with pytest.raises(TypeError):
        app.dispatch(object())
