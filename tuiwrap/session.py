"""Exclusive ownership of the terminal device for the length of one UI."""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass
from types import TracebackType

from .core import TerminalError, get_env_flag
from .terminal import Terminal

__all__ = [
    "Session",
    "SessionError",
    "active_session",
]

logger = logging.getLogger(__name__)

_active: Session | None = None


class SessionError(RuntimeError):
    """Raised when a session is acquired while another one is still active."""


def active_session() -> Session | None:
    """Returns the session currently holding the terminal, if any."""

    return _active


@dataclass
class Session:
    """A handle on the terminal in raw, alternate-screen mode.

    Sessions should be created through `acquire`, and given back through `release`.
    Using one as a context manager guarantees the release on every exit path:

        with Session.acquire() as session:
            ...
    """

    terminal: Terminal
    raw_mode: bool = False
    alt_buffer: bool = False
    report_mouse: bool = False
    cursor_hidden: bool = False
    released: bool = False

    @classmethod
    def acquire(
        cls,
        terminal: Terminal | None = None,
        *,
        report_mouse: bool | None = None,
        alt_buffer: bool = True,
    ) -> Session:
        """Takes over the terminal.

        Enables raw mode, switches to the alternate screen, hides the cursor, starts
        mouse reporting and starts watching for resizes. If any step fails, the steps
        already applied are reverted before the error propagates.

        Args:
            terminal: The terminal to take over. A new one over stdin/stdout is
                created when not given.
            report_mouse: Whether to enable mouse reporting. Defaults to the
                `TUIWRAP_REPORT_MOUSE` environment flag, which is on unless set to
                a falsy value.
            alt_buffer: Whether to switch to the alternate screen buffer.

        Raises:
            SessionError: Another session is still active.
            TerminalError: The terminal could not be set up, e.g. because the
                streams are not attached to a TTY.
        """

        global _active  # pylint: disable=global-statement

        if _active is not None:
            raise SessionError(
                "A session is already active; release it before acquiring a new one."
            )

        if terminal is None:
            terminal = Terminal()

        if report_mouse is None:
            report_mouse = get_env_flag("TUIWRAP_REPORT_MOUSE", True)

        if not terminal.isatty:
            raise TerminalError("Cannot acquire a session: not attached to a terminal.")

        session = cls(terminal)

        try:
            with ExitStack() as rollback:
                terminal.set_raw_mode(True)
                session.raw_mode = True
                rollback.callback(session._leave_raw_mode)

                if alt_buffer:
                    terminal.set_alt_buffer(True)
                    session.alt_buffer = True
                    rollback.callback(session._leave_alt_buffer)

                terminal.show_cursor(False)
                session.cursor_hidden = True
                rollback.callback(session._show_cursor)

                if report_mouse:
                    terminal.set_report_mouse(True)
                    session.report_mouse = True
                    rollback.callback(session._stop_report_mouse)

                terminal.watch_resize()
                rollback.pop_all()

        except TerminalError:
            logger.debug("Session acquisition failed, applied changes were rolled back.")
            raise

        _active = session
        logger.debug(
            "Acquired session (alt_buffer=%s, report_mouse=%s).", alt_buffer, report_mouse
        )

        return session

    def release(self) -> None:
        """Gives the terminal back in the state it was acquired in.

        Disables raw mode, stops mouse reporting, leaves the alternate screen and
        shows the cursor. Every step is attempted even if an earlier one fails. The
        last failure is raised afterwards, with earlier ones chained as its
        `__context__`. Releasing twice is a no-op.

        Raises:
            TerminalError: One of the steps failed.
        """

        if self.released:
            return

        # ExitStack runs callbacks last-in-first-out, so these run bottom to top.
        with ExitStack() as steps:
            steps.callback(self._finish_release)

            if self.cursor_hidden:
                steps.callback(self._show_cursor)

            if self.alt_buffer:
                steps.callback(self._leave_alt_buffer)

            if self.report_mouse:
                steps.callback(self._stop_report_mouse)

            if self.raw_mode:
                steps.callback(self._leave_raw_mode)

            steps.callback(self.terminal.stop_watching_resize)

    def _finish_release(self) -> None:
        global _active  # pylint: disable=global-statement

        self.released = True

        if _active is self:
            _active = None

        logger.debug("Released session.")

    def _leave_raw_mode(self) -> None:
        self.terminal.set_raw_mode(False)
        self.raw_mode = False

    def _leave_alt_buffer(self) -> None:
        self.terminal.set_alt_buffer(False)
        self.alt_buffer = False

    def _show_cursor(self) -> None:
        self.terminal.show_cursor(True)
        self.cursor_hidden = False

    def _stop_report_mouse(self) -> None:
        self.terminal.set_report_mouse(False)
        self.report_mouse = False

    def __enter__(self) -> Session:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.release()
