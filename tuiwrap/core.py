"""A set of non-object specific terminal API implementations.

Most of these are best used from the `Terminal` and `Session` objects.
"""

from __future__ import annotations

import os
import sys
import time
from codecs import getincrementaldecoder
from dataclasses import dataclass
from io import StringIO
from select import select
from typing import Any, Iterator, TextIO, Union

from .key_names import NT_KEY_NAMES, POSIX_KEY_NAMES

try:
    import msvcrt

except ImportError:
    import termios
    import tty

    if os.name != "posix":  # no-cov
        raise NotImplementedError(f"Platform {os.name!r} is not supported.") from None

__all__ = [
    "TerminalError",
    "Key",
    "KeyEvent",
    "MouseEvent",
    "ResizeEvent",
    "InputEvent",
    "enable_raw_mode",
    "disable_raw_mode",
    "is_raw_mode",
    "feed",
    "get_env_flag",
    "parse_event",
    "parse_mouse_event",
    "read_sequence",
    "wait_readable",
]

_MODIFIERS = (
    "",
    "shift_",
    "option_",
    "shift_option_",
    "ctrl_",
    "shift_ctrl_",
    "ctrl_option_",
    "shift_ctrl_option_",
)

START_ALT_BUFFER = "\x1b[?1049h"
END_ALT_BUFFER = "\x1b[?1049l"
SHOW_CURSOR = "\x1b[?25h"
HIDE_CURSOR = "\x1b[?25l"
CLEAR_SCREEN = "\x1b[2J"

START_REPORT_MOUSE = "\x1b[?1000h\x1b[?1002h\x1b[?1003h\x1b[?1006h"
END_REPORT_MOUSE = "\x1b[?1006l\x1b[?1003l\x1b[?1002l\x1b[?1000l"

BEGIN_SYNCHRONIZED_UPDATE = "\x1b[?2026$h"
END_SYNCHRONIZED_UPDATE = "\x1b[?2026$l"

FALSY_FLAGS = ("0", "false", "no", "off")

feeder_stream = StringIO()

# Original terminal attributes, keyed by file descriptor, for each stream in raw mode.
_saved_modes: dict[int, list[Any]] = {}


class TerminalError(OSError):
    """Raised when an operation on the terminal device fails."""


@dataclass
class Key:
    """The key carried by a `KeyEvent`.

    This allows for checking equality against multiple possible keyboard inputs,
    like `ctrl-i` and `tab`, through the same object.
    """

    possible_values: tuple[str, ...]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Key):
            return self.possible_values == other.possible_values

        if not isinstance(other, str):
            return False

        return other in self.possible_values

    def __str__(self) -> str:
        return self.possible_values[0]

    def __iter__(self) -> Iterator[str]:
        return iter(self.possible_values)


@dataclass
class KeyEvent:
    """A key press. Compares equal to any of its key's names."""

    key: Key

    def __eq__(self, other: object) -> bool:
        if isinstance(other, KeyEvent):
            return self.key == other.key

        if isinstance(other, str):
            return self.key == other

        return NotImplemented

    def __str__(self) -> str:
        return str(self.key)


@dataclass(frozen=True)
class MouseEvent:
    """A decoded SGR 1006 mouse report.

    `position` is zero-based, so it can be passed straight to `Surface.write`.
    """

    action: str
    position: tuple[int, int]

    def __str__(self) -> str:
        return f"mouse:{self.action}@{self.position[0]};{self.position[1]}"


@dataclass(frozen=True)
class ResizeEvent:
    """The terminal's size (width, height) changed."""

    size: tuple[int, int]


InputEvent = Union[KeyEvent, MouseEvent, ResizeEvent]


def _build_event(
    name: str, *, base: int, has_alternate: bool = False
) -> dict[str, str]:
    """Generates a mouse event's encoded identifier.

    Args:
        name: The event name to add as a sufix.
        base: The index where the event starts.
        has_alternate: If set, a "left_" and "right_" pair of events will be
            generated, instead of just one with no prefix.

    Returns:
        A dictionary of the event's encoded identifier (as str) mapping to the
        event's name, formatted as `{modifier}{event}` or, with `has_alternate`,
        `{modifier}left_{event}` and `{modifier}right_{event}`.
    """

    event = {}

    for modifier in _MODIFIERS:
        if has_alternate:
            event[str(base)] = modifier + "left_" + name
            event[str(base + 2)] = modifier + "right_" + name
        else:
            event[str(base)] = modifier + name

        base += 4

    return event


# SGR (1006) mouse event decoding
MOUSE_EVENTS = {
    **_build_event("click", base=0, has_alternate=True),
    **_build_event("drag", base=32, has_alternate=True),
    **_build_event("hover", base=35),
    **_build_event("scroll_up", base=64),
    **_build_event("scroll_down", base=65),
    **_build_event("scroll_left", base=66),
    **_build_event("scroll_right", base=67),
}


def get_env_flag(name: str, default: bool = True) -> bool:
    """Reads a boolean flag from the environment.

    Any of `0`, `false`, `no` or `off` (case-insensitive) turns the flag off, any
    other non-empty value turns it on. Unset or empty values return `default`.
    """

    value = os.getenv(name, "").strip().lower()

    if value == "":
        return default

    return value not in FALSY_FLAGS


def parse_mouse_event(code: str) -> MouseEvent | None:
    """Parses a mouse event.

    Args:
        code: The event sequence sent by the terminal, e.g. `\\x1b[<0;12;23M`.

    Returns:
        None if the code cannot be parsed as a mouse event, otherwise the decoded
        `MouseEvent`.
    """

    if not code.startswith("\x1b[<") or code[-1] not in "Mm" or code.count(";") != 2:
        return None

    event, posx, posy = code[3:-1].split(";")
    pressed = code[-1] == "M"

    event_name = MOUSE_EVENTS.get(event)

    if event_name is None or not (posx.isdigit() and posy.isdigit()):
        return None

    if not pressed:
        event_name = event_name.replace("click", "release")

    return MouseEvent(event_name, (int(posx) - 1, int(posy) - 1))


def parse_event(sequence: str) -> InputEvent:
    """Turns a raw input sequence into an input event.

    When several mouse reports arrive in one read, only the latest is kept.
    """

    if event := parse_mouse_event("\x1b" + sequence.split("\x1b")[-1]):
        return event

    names = NT_KEY_NAMES if os.name == "nt" else POSIX_KEY_NAMES

    return KeyEvent(Key(names.get(sequence, (sequence,))))


def feed(text: str) -> None:
    """Feeds some text to be read by `read_sequence`.

    This can be used to manually "interrupt" an ongoing poll, or to script input.
    """

    feeder_stream.seek(0, 2)
    feeder_stream.write(text)
    feeder_stream.seek(0)


def has_fed_input() -> bool:
    """Returns whether `feed` left content that has not been read yet."""

    return feeder_stream.getvalue() != ""


def _take_fed_input() -> str:
    content = feeder_stream.getvalue()
    feeder_stream.truncate(0)
    feeder_stream.seek(0)

    return content


def _descriptor(stream: TextIO) -> int:
    try:
        return stream.fileno()

    except (OSError, ValueError) as error:
        raise TerminalError(f"Stream {stream!r} has no usable file descriptor.") from error


def enable_raw_mode(stream: TextIO = sys.stdin) -> None:
    """Puts the terminal attached to `stream` into raw mode.

    Raw mode disables line buffering, local echo and the signals generated by
    control characters like `ctrl-c`. The previous attributes are stored so that
    `disable_raw_mode` can restore them. Calling this twice is a no-op.
    """

    if os.name == "nt":  # no-cov
        return

    descriptor = _descriptor(stream)

    if descriptor in _saved_modes:
        return

    try:
        settings = termios.tcgetattr(descriptor)
        tty.setraw(descriptor, termios.TCSADRAIN)

    except (termios.error, OSError) as error:
        raise TerminalError(f"Could not enable raw mode: {error}") from error

    _saved_modes[descriptor] = settings


def disable_raw_mode(stream: TextIO = sys.stdin) -> None:
    """Restores the attributes `enable_raw_mode` replaced."""

    if os.name == "nt":  # no-cov
        return

    descriptor = _descriptor(stream)
    settings = _saved_modes.pop(descriptor, None)

    if settings is None:
        return

    try:
        termios.tcsetattr(descriptor, termios.TCSADRAIN, settings)

    except (termios.error, OSError) as error:
        raise TerminalError(f"Could not disable raw mode: {error}") from error


def is_raw_mode(stream: TextIO = sys.stdin) -> bool:
    """Returns whether `enable_raw_mode` is in effect for the stream."""

    try:
        return stream.fileno() in _saved_modes

    except (OSError, ValueError):
        return False


def wait_readable(descriptors: list[int], timeout: float | None) -> list[int]:
    """Waits until any of the descriptors can be read from.

    Args:
        descriptors: The file descriptors to watch.
        timeout: The longest time to wait, in seconds. `None` waits indefinitely.

    Returns:
        The descriptors that are ready. Empty if the timeout ran out.
    """

    if os.name == "nt":  # no-cov
        return _wait_readable_nt(descriptors, timeout)

    try:
        ready, _, _ = select(descriptors, [], [], timeout)

    except (OSError, ValueError) as error:
        raise TerminalError(f"Could not poll for input: {error}") from error

    return ready


def _wait_readable_nt(descriptors: list[int], timeout: float | None) -> list[int]:  # no-cov
    """Polls `msvcrt.kbhit`, as `select` doesn't work on console handles."""

    deadline = None if timeout is None else time.monotonic() + timeout

    while not msvcrt.kbhit():  # type: ignore
        if deadline is not None and time.monotonic() >= deadline:
            return []

        time.sleep(0.005)

    return descriptors[:1]


def _is_ready(descriptor: int) -> bool:  # no-cov
    """Determines if the descriptor has unread content."""

    return len(wait_readable([descriptor], 0.0)) > 0


def _read_posix(stream: TextIO) -> str:  # no-cov
    """Reads the maximum-length sequence of characters currently available.

    Blocks until at least one character has arrived.
    """

    descriptor = _descriptor(stream)
    decode = getincrementaldecoder(stream.encoding or "utf-8")(errors="replace").decode

    def _read_char() -> str:
        buff = ""

        while not buff:
            try:
                char = os.read(descriptor, 1)

            except OSError as error:
                raise TerminalError(f"Could not read input: {error}") from error

            if char == b"":
                raise TerminalError("The input stream was closed.")

            buff = decode(char)

        return buff

    buff = _read_char()

    while _is_ready(descriptor):
        buff += _read_char()

    return buff


def _read_nt() -> str:  # no-cov
    """Reads the maximum-length sequence of characters on NT systems."""

    def _ensure_str(string: bytes | str) -> str:
        if isinstance(string, bytes):
            return string.decode("utf-8", errors="replace")

        return string

    char = msvcrt.getch()  # type: ignore
    if char == b"\xe0":
        char = "\x1b"

    buff = _ensure_str(char)

    while msvcrt.kbhit():  # type: ignore
        buff += _ensure_str(msvcrt.getch())  # type: ignore

    return buff


def read_sequence(stream: TextIO = sys.stdin) -> str:
    """Reads one input sequence, blocking until there is one.

    Content given to `feed` is returned first.
    """

    if has_fed_input():
        return _take_fed_input()

    if os.name == "nt":  # no-cov
        return _read_nt()

    return _read_posix(stream)
