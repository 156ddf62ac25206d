from io import StringIO

import pytest

from tuiwrap import Session, SessionError, Terminal, TerminalError, active_session
from tuiwrap.core import (
    END_ALT_BUFFER,
    END_REPORT_MOUSE,
    HIDE_CURSOR,
    SHOW_CURSOR,
    START_ALT_BUFFER,
    START_REPORT_MOUSE,
)


def test_session_acquire_sets_up_terminal(tty_terminal):
    session = Session.acquire(tty_terminal)

    output = tty_terminal.stream.getvalue()

    assert tty_terminal.raw_calls["enabled"]
    assert START_ALT_BUFFER in output
    assert HIDE_CURSOR in output
    assert START_REPORT_MOUSE in output
    assert session.raw_mode and session.alt_buffer and session.report_mouse
    assert active_session() is session

    session.release()


def test_session_release_round_trip(tty_terminal):
    session = Session.acquire(tty_terminal)
    tty_terminal.stream = stream = StringIO()

    session.release()

    output = stream.getvalue()

    assert not tty_terminal.raw_calls["enabled"]
    assert output.index(END_REPORT_MOUSE) < output.index(END_ALT_BUFFER)
    assert output.index(END_ALT_BUFFER) < output.index(SHOW_CURSOR)
    assert not (session.raw_mode or session.alt_buffer or session.report_mouse)
    assert session.released
    assert active_session() is None


def test_session_release_twice_is_noop(tty_terminal):
    session = Session.acquire(tty_terminal)
    session.release()

    tty_terminal.stream = stream = StringIO()
    session.release()

    assert stream.getvalue() == ""
    assert tty_terminal.raw_calls["calls"] == ["enable", "disable"]


def test_session_is_exclusive(tty_terminal):
    session = Session.acquire(tty_terminal)

    with pytest.raises(SessionError):
        Session.acquire(tty_terminal)

    session.release()

    Session.acquire(tty_terminal).release()


def test_session_requires_tty():
    terminal = Terminal(stream=StringIO(), input_stream=StringIO())

    with pytest.raises(TerminalError):
        Session.acquire(terminal)

    assert active_session() is None


def test_session_rolls_back_on_partial_failure(tty_terminal):
    def _fail(value: bool = True) -> None:
        raise TerminalError("mouse reporting is broken")

    tty_terminal.set_report_mouse = _fail

    with pytest.raises(TerminalError, match="mouse reporting"):
        Session.acquire(tty_terminal, report_mouse=True)

    output = tty_terminal.stream.getvalue()

    assert tty_terminal.raw_calls["calls"] == ["enable", "disable"]
    assert output.endswith(SHOW_CURSOR + END_ALT_BUFFER)
    assert active_session() is None


def test_session_context_manager_releases_on_error(tty_terminal):
    with pytest.raises(KeyError):
        with Session.acquire(tty_terminal) as session:
            raise KeyError("boom")

    assert session.released
    assert not tty_terminal.raw_calls["enabled"]
    assert active_session() is None


def test_session_release_attempts_every_step(tty_terminal):
    session = Session.acquire(tty_terminal)

    def _fail(value: bool = True) -> None:
        raise TerminalError("raw mode is stuck")

    tty_terminal.set_raw_mode = _fail
    tty_terminal.stream = stream = StringIO()

    with pytest.raises(TerminalError, match="raw mode"):
        session.release()

    assert SHOW_CURSOR in stream.getvalue()
    assert END_ALT_BUFFER in stream.getvalue()
    assert active_session() is None


def test_session_release_raises_last_failure(tty_terminal):
    session = Session.acquire(tty_terminal)

    def _fail_raw(value: bool = True) -> None:
        raise TerminalError("raw mode is stuck")

    def _fail_cursor(value: bool = True) -> None:
        raise TerminalError("cursor is stuck")

    tty_terminal.set_raw_mode = _fail_raw
    tty_terminal.show_cursor = _fail_cursor

    with pytest.raises(TerminalError, match="cursor") as info:
        session.release()

    assert isinstance(info.value.__context__, TerminalError)
    assert "raw mode" in str(info.value.__context__)
    assert session.released
    assert active_session() is None


def test_session_mouse_reporting_env_flag(tty_terminal, monkeypatch):
    monkeypatch.setenv("TUIWRAP_REPORT_MOUSE", "off")

    session = Session.acquire(tty_terminal)

    assert not session.report_mouse
    assert START_REPORT_MOUSE not in tty_terminal.stream.getvalue()

    session.release()

    assert END_REPORT_MOUSE not in tty_terminal.stream.getvalue()


def test_session_without_alt_buffer(tty_terminal):
    with Session.acquire(tty_terminal, alt_buffer=False) as session:
        assert not session.alt_buffer

    output = tty_terminal.stream.getvalue()

    assert START_ALT_BUFFER not in output
    assert END_ALT_BUFFER not in output
