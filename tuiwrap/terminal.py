"""The Terminal class, which is the primary surface to interact with the emulator."""

from __future__ import annotations

import logging
import os
import signal
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from shutil import get_terminal_size
from typing import Any, Generator, TextIO

from .core import (
    BEGIN_SYNCHRONIZED_UPDATE,
    CLEAR_SCREEN,
    END_ALT_BUFFER,
    END_REPORT_MOUSE,
    END_SYNCHRONIZED_UPDATE,
    HIDE_CURSOR,
    SHOW_CURSOR,
    START_ALT_BUFFER,
    START_REPORT_MOUSE,
    InputEvent,
    ResizeEvent,
    TerminalError,
    disable_raw_mode,
    enable_raw_mode,
    has_fed_input,
    is_raw_mode,
    parse_event,
    read_sequence,
    wait_readable,
)
from .event import Event
from .screen import Screen, Surface

__all__ = [
    "Terminal",
]

logger = logging.getLogger(__name__)


@dataclass
class Terminal:  # pylint: disable=too-many-instance-attributes
    """An object to read & write data to and from the terminal."""

    stream: TextIO = field(default_factory=lambda: sys.stdout)
    input_stream: TextIO = field(default_factory=lambda: sys.stdin)
    origin: tuple[int, int] = (1, 1)

    on_resize: Event[tuple[int, int]] = field(init=False)

    _screen: Screen = field(init=False)
    _previous_size: tuple[int, int] | None = None
    _pending: list[InputEvent] = field(default_factory=list)
    _needs_redraw: bool = False
    _wakeup: tuple[int, int] | None = None
    _previous_sigwinch: Any = None

    def __post_init__(self) -> None:
        self._screen = Screen(*self.size)

        self.on_resize = Event("terminal resized")

        def _on_resize(size: tuple[int, int]) -> None:
            self._screen.resize(size)
            self._pending.append(ResizeEvent(size))
            self._needs_redraw = True

        self.on_resize += _on_resize

    @property
    def size(self) -> tuple[int, int]:
        """Returns the size (width, height) of the terminal.

        Querying the size is how resizes are detected: when it differs from the last
        query, `on_resize` is emitted.
        """

        size = tuple(get_terminal_size())

        if self._previous_size is not None and size != self._previous_size:
            self.on_resize(size)

        self._previous_size = size

        return size  # type: ignore

    @property
    def width(self) -> int:
        """Returns the width of the terminal."""

        return self.size[0]

    @property
    def height(self) -> int:
        """Returns the height of the terminal."""

        return self.size[1]

    @property
    def isatty(self) -> bool:
        """Returns whether both of this terminal's streams represent a TTY."""

        try:
            return self.stream.isatty() and self.input_stream.isatty()

        # TTY has most likely closed, like at the end of a pytest run.
        except ValueError:
            return False

    @property
    def raw_mode(self) -> bool:
        """Returns whether the input stream is in raw mode."""

        return is_raw_mode(self.input_stream)

    @contextmanager
    def batch(self) -> Generator[None, None, None]:
        """A context within which every `write` is batched into one draw call.

        This implements the [synchronized update]
        (https://gist.github.com/christianparpart/d8a62cc1ab659194337d73e399004036)
        protocol.
        """

        try:
            self.write_control(BEGIN_SYNCHRONIZED_UPDATE, flush=False)

            yield

        finally:
            self.write_control(END_SYNCHRONIZED_UPDATE)

    @contextmanager
    def frame(self) -> Generator[Surface, None, None]:
        """Obtains a surface to draw into, and commits it to the terminal on exit.

        If the body raises, nothing is drawn and the error propagates.
        """

        _ = self.size

        yield Surface(self._screen)

        with self.batch():
            self.draw()

    def set_raw_mode(self, value: bool = True) -> None:
        """Enables or disables raw mode on the input stream."""

        if value:
            enable_raw_mode(self.input_stream)

        else:
            disable_raw_mode(self.input_stream)

    def set_alt_buffer(self, value: bool = True) -> None:
        """Switches to (or back from) the alternate screen buffer."""

        if value:
            self.write_control(START_ALT_BUFFER)
            self._needs_redraw = True

        else:
            self.write_control(END_ALT_BUFFER)

    def show_cursor(self, value: bool = True) -> None:
        """Shows or hides the terminal's cursor."""

        if value:
            self.write_control(SHOW_CURSOR)

        else:
            self.write_control(HIDE_CURSOR)

    def set_report_mouse(self, value: bool = True) -> None:
        """Starts or stops listening to SGR 1006 mouse events."""

        if value:
            self.write_control(START_REPORT_MOUSE)

        else:
            self.write_control(END_REPORT_MOUSE)

    def watch_resize(self) -> None:
        """Makes `SIGWINCH` wake up a pending `poll_event` call.

        Without this, resizes are still noticed, but only once a poll returns. This
        is a no-op outside of the main thread and on systems without `SIGWINCH`.
        """

        if self._wakeup is not None or not hasattr(signal, "SIGWINCH"):
            return

        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not watching SIGWINCH outside of the main thread.")
            return

        read_fd, write_fd = os.pipe()
        os.set_blocking(read_fd, False)
        os.set_blocking(write_fd, False)

        def _on_sigwinch(signum: int, frame: Any) -> None:
            try:
                os.write(write_fd, b"\0")

            # The pipe is full, so a wakeup is already pending.
            except BlockingIOError:
                pass

        self._previous_sigwinch = signal.signal(signal.SIGWINCH, _on_sigwinch)
        self._wakeup = (read_fd, write_fd)

    def stop_watching_resize(self) -> None:
        """Reverts `watch_resize`."""

        if self._wakeup is None:
            return

        signal.signal(signal.SIGWINCH, self._previous_sigwinch or signal.SIG_DFL)

        for descriptor in self._wakeup:
            os.close(descriptor)

        self._wakeup = None
        self._previous_sigwinch = None

    def _drain_wakeup(self) -> None:
        if self._wakeup is None:
            return

        try:
            while os.read(self._wakeup[0], 1024):
                pass

        except BlockingIOError:
            pass

    def poll_event(self, timeout: float | None) -> InputEvent | None:
        """Waits for one input event.

        Args:
            timeout: The longest time to wait, in seconds. `None` waits until an
                event arrives.

        Returns:
            The event, or None if the timeout ran out first.
        """

        _ = self.size

        if self._pending:
            return self._pending.pop(0)

        if has_fed_input():
            return parse_event(read_sequence(self.input_stream))

        try:
            descriptor = self.input_stream.fileno()

        except (OSError, ValueError) as error:
            raise TerminalError("The input stream has no file descriptor.") from error

        descriptors = [descriptor]

        if self._wakeup is not None:
            descriptors.append(self._wakeup[0])

        ready = wait_readable(descriptors, timeout)

        if self._wakeup is not None and self._wakeup[0] in ready:
            self._drain_wakeup()
            _ = self.size

            if self._pending:
                return self._pending.pop(0)

        if descriptor in ready:
            return parse_event(read_sequence(self.input_stream))

        return None

    def read_event(self) -> InputEvent:
        """Blocks until exactly one input event arrives, and returns it."""

        while (event := self.poll_event(None)) is None:
            pass

        return event

    def clear(self, fillchar: str = " ") -> None:
        """Clears the screen's entire matrix.

        Args:
            fillchar: The character to fill the matrix with.
        """

        self._screen.clear(fillchar)

    def write(
        self,
        text: str,
        cursor: tuple[int, int] | None = None,
        force_overwrite: bool = False,
    ) -> int:
        """Writes text to the screen at the given cursor position.

        Returns:
            The number of cells that have been updated as a result of the write.
        """

        return self._screen.write(text, cursor=cursor, force_overwrite=force_overwrite)

    def write_control(self, sequence: str, flush: bool = True) -> None:
        """Writes some control sequence to the terminal.

        This method writes directly to the stream, bypassing the screen mechanism.

        Args:
            sequence: The control sequence to write.
            flush: If set, the stream will be flushed after writing.
        """

        try:
            self.stream.write(sequence)

            if flush:
                self.stream.flush()

        except (OSError, ValueError) as error:
            raise TerminalError(f"Could not write to the terminal: {error}") from error

    def draw(self, redraw: bool = False) -> None:
        """Draws the current screen to the terminal.

        Args:
            redraw: If set, the screen will do a complete redraw, instead of only
                writing changes. This also happens after a resize or after entering
                the alternate buffer.
        """

        if self._needs_redraw:
            self._needs_redraw = False
            self.write_control(CLEAR_SCREEN, flush=False)
            redraw = True

        self.write_control(self._screen.render(origin=self.origin, redraw=redraw))
