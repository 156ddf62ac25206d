import time
from io import StringIO

import pytest

from tuiwrap import Terminal, active_session


class TTYStream(StringIO):
    """A StringIO that claims to be a terminal."""

    def isatty(self) -> bool:
        return True


class FakeClock:
    """A monotonic clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedTerminal(Terminal):
    """A terminal that replays a list of input events.

    Once the script runs out, polls wait out their whole timeout: on `clock` when
    given, otherwise in real time.
    """

    def __init__(self, events=(), clock=None):
        super().__init__(stream=StringIO(), input_stream=StringIO())

        self.script = list(events)
        self.clock = clock
        self.timeouts = []

    def poll_event(self, timeout):
        self.timeouts.append(timeout)

        if self.script:
            return self.script.pop(0)

        if self.clock is not None:
            self.clock.advance(timeout)

        else:
            time.sleep(timeout)

        return None

    def read_event(self):
        return self.script.pop(0)


@pytest.fixture(autouse=True)
def release_leftover_session():
    yield

    if (session := active_session()) is not None:
        session.release()


@pytest.fixture
def tty_terminal(monkeypatch):
    """A terminal over fake TTY streams, with raw mode switching recorded."""

    raw = {"enabled": False, "calls": []}

    def _enable(stream):
        raw["enabled"] = True
        raw["calls"].append("enable")

    def _disable(stream):
        raw["enabled"] = False
        raw["calls"].append("disable")

    monkeypatch.setattr("tuiwrap.terminal.enable_raw_mode", _enable)
    monkeypatch.setattr("tuiwrap.terminal.disable_raw_mode", _disable)

    terminal = Terminal(stream=TTYStream(), input_stream=TTYStream())
    terminal.raw_calls = raw

    return terminal
