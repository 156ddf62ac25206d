"""The run loop that hosts an application inside a terminal session.

A `UI` is built in one of two modes, and each mode has its own run method:

- `UI(app)` is run with `run()`: the loop blocks until input arrives.
- `UI.ticked(app, interval)` is run with `run_ticked()`: the loop waits for input
    at most until the next interval is due, then calls `app.on_interval()`.

Using the wrong run method for the construction mode is a programming error and
raises `ModeMismatchError`. `start()` always picks the right one.
"""

from __future__ import annotations

import logging
import math
import sys
from contextlib import contextmanager
from datetime import timedelta
from enum import Enum
from time import monotonic
from types import TracebackType
from typing import Any, Callable, Generator

from .app import AppKind, missing_capabilities
from .core import InputEvent, KeyEvent, TerminalError
from .event import CallbackError, Event
from .session import Session

__all__ = [
    "UI",
    "RunState",
    "ModeMismatchError",
    "remaining_wait",
]

logger = logging.getLogger(__name__)

PAIRING_HINT = (
    "Use the constructors and run methods in their respective pairs, which are:"
    " `UI(app)` + `run()`, and `UI.ticked(app, interval)` + `run_ticked()`."
)


class ModeMismatchError(RuntimeError):
    """Raised when a run method doesn't match the mode the UI was built in.

    This is deliberately not a `TerminalError`: it signals a bug in the calling code,
    not a condition to recover from.
    """


class RunState(Enum):
    """The lifecycle of a UI's run loop."""

    IDLE = "idle"
    """Constructed, not yet run."""

    RUNNING = "running"

    TERMINATED = "terminated"
    """The application asked to stop."""

    FAULTED = "faulted"
    """The loop was left through an error."""


def remaining_wait(interval: float, elapsed: float) -> float:
    """Returns how long to wait for input before the next interval is due.

    Never negative: when the previous iteration overran the interval, this is 0.
    """

    return max(0.0, interval - elapsed)


class UI:  # pylint: disable=too-many-instance-attributes
    """Hosts an application: renders it, feeds it input and, when ticked, times it.

    Args:
        app: The application. Must provide `render`, `handle_input` and
            `should_terminate`.
        session: The terminal session to run in. When not given, one is acquired,
            which takes over the process's terminal.
        time_source: A monotonic clock in seconds, used for interval timing.

    Raises:
        TypeError: `app` lacks one of the required capabilities.
        TerminalError: The session could not be acquired.
    """

    def __init__(
        self,
        app: Any,
        session: Session | None = None,
        *,
        time_source: Callable[[], float] | None = None,
    ) -> None:
        if missing := missing_capabilities(app):
            raise TypeError(f"{app!r} is missing required methods: {', '.join(missing)}.")

        self.app = app
        self.kind = AppKind.PLAIN
        self.interval: float | None = None
        self.state = RunState.IDLE
        self.frames = 0
        self.ticks = 0

        self.on_state_change: Event[RunState] = Event("run state changed")

        self._on_interval: Callable[[], None] | None = None
        self._time_source = time_source or monotonic

        self.session = session if session is not None else Session.acquire()

    @classmethod
    def ticked(
        cls,
        app: Any,
        interval: float | timedelta,
        session: Session | None = None,
        *,
        time_source: Callable[[], float] | None = None,
    ) -> UI:
        """Creates a UI that calls `app.on_interval()` every `interval`.

        Args:
            app: The application. Must provide `on_interval` on top of the
                capabilities `UI` requires.
            interval: The time between two `on_interval` calls, in seconds. Zero is
                allowed, and ticks on every iteration.
            session: See `UI`.
            time_source: See `UI`.

        Raises:
            ValueError: The interval is negative, infinite or NaN.
            TypeError: `app` lacks one of the required capabilities.
        """

        if isinstance(interval, timedelta):
            interval = interval.total_seconds()

        if not 0 <= interval < math.inf:
            raise ValueError(
                f"The interval must be a finite, non-negative number, got {interval!r}."
            )

        if missing := missing_capabilities(app, ticked=True):
            raise TypeError(f"{app!r} is missing required methods: {', '.join(missing)}.")

        ui = cls(app, session, time_source=time_source)
        ui.kind = AppKind.WITH_INTERVAL
        ui.interval = float(interval)
        ui._on_interval = app.on_interval

        return ui

    def __enter__(self) -> UI:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.destroy()

    @property
    def is_ticked(self) -> bool:
        """Returns whether this UI was built with `UI.ticked`."""

        return self.kind is AppKind.WITH_INTERVAL

    def start(self) -> None:
        """Runs the loop matching how this UI was constructed."""

        if self.is_ticked:
            self.run_ticked()

        else:
            self.run()

    def run(self) -> None:
        """Runs the application in unticked mode.

        Each iteration renders a frame, then blocks until one input event arrives.
        Only key events are handed to the application.

        Raises:
            ModeMismatchError: The UI was built with `UI.ticked`.
            TerminalError: Rendering or reading input failed.
        """

        if self.is_ticked:
            self._mode_mismatch("run", "UI.ticked")

        terminal = self.session.terminal

        with self._running():
            while not self.app.should_terminate():
                self._render()
                self._dispatch(terminal.read_event())

    def run_ticked(self) -> None:
        """Runs the application in ticked mode.

        Each iteration renders a frame, waits for input until the next interval is
        due, then calls `on_interval` if the interval has elapsed. The wait is
        recomputed from the last tick every time, so slow renders or handlers don't
        make the ticks drift.

        Raises:
            ModeMismatchError: The UI was built with `UI()` instead of `UI.ticked`.
            TerminalError: Rendering or polling input failed.
        """

        if not self.is_ticked:
            self._mode_mismatch("run_ticked", "UI")

        interval: float = self.interval  # type: ignore[assignment]
        on_interval: Callable[[], None] = self._on_interval  # type: ignore[assignment]
        terminal = self.session.terminal
        now = self._time_source

        with self._running():
            last_tick = now()

            while not self.app.should_terminate():
                self._render()

                event = terminal.poll_event(remaining_wait(interval, now() - last_tick))

                if event is not None:
                    self._dispatch(event)

                if now() - last_tick >= interval:
                    on_interval()
                    self.ticks += 1
                    last_tick = now()

    def destroy(self) -> None:
        """Releases the terminal session. Safe to call more than once."""

        self.session.release()

    def _render(self) -> None:
        with self.session.terminal.frame() as surface:
            self.app.render(surface)

        self.frames += 1

    def _dispatch(self, event: InputEvent) -> None:
        if isinstance(event, KeyEvent):
            self.app.handle_input(event)

    def _set_state(self, state: RunState) -> None:
        logger.debug("Run state: %s -> %s.", self.state.value, state.value)

        self.state = state
        self.on_state_change(state)

    def _fault(self) -> None:
        """Enters `FAULTED` while an error is already propagating.

        A failing state listener must not replace that error, so its own failure
        is only logged.
        """

        try:
            self._set_state(RunState.FAULTED)

        except CallbackError:
            logger.exception("A run state listener failed while the loop faulted.")

    @contextmanager
    def _running(self) -> Generator[None, None, None]:
        try:
            self._set_state(RunState.RUNNING)

            yield

        except TerminalError:
            logger.debug("Run loop stopped by a terminal error.", exc_info=True)
            self._fault()
            raise

        except BaseException:
            self._fault()
            raise

        self._set_state(RunState.TERMINATED)

    def _mode_mismatch(self, called: str, built_with: str) -> None:
        message = (
            f"`{called}()` can't be used on a UI built with `{built_with}(...)`. "
            + PAIRING_HINT
        )

        print(message, file=sys.stderr)
        logger.error(message)

        raise ModeMismatchError(message)
