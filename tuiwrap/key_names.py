"""Canonical names for the raw sequences sent by keyboards."""

from __future__ import annotations

__all__ = [
    "POSIX_KEY_NAMES",
    "NT_KEY_NAMES",
]


def _control_keys() -> dict[str, tuple[str, ...]]:
    """Generates the `ctrl-a` through `ctrl-z` mapping."""

    keys = {}

    for i, letter in enumerate("abcdefghijklmnopqrstuvwxyz", start=1):
        keys[chr(i)] = (f"ctrl-{letter}",)

    return keys


POSIX_KEY_NAMES: dict[str, tuple[str, ...]] = {
    **_control_keys(),
    "\x1b": ("escape", "esc"),
    "\x7f": ("backspace", "ctrl-?"),
    "\x08": ("backspace", "ctrl-h"),
    "\t": ("tab", "ctrl-i"),
    "\r": ("enter", "return", "ctrl-m"),
    "\n": ("ctrl-j", "enter"),
    " ": ("space", " "),
    "\x1b[Z": ("shift-tab",),
    "\x1b[A": ("up",),
    "\x1b[B": ("down",),
    "\x1b[C": ("right",),
    "\x1b[D": ("left",),
    "\x1bOA": ("up",),
    "\x1bOB": ("down",),
    "\x1bOC": ("right",),
    "\x1bOD": ("left",),
    "\x1b[1;2A": ("shift-up",),
    "\x1b[1;2B": ("shift-down",),
    "\x1b[1;2C": ("shift-right",),
    "\x1b[1;2D": ("shift-left",),
    "\x1b[1;3A": ("alt-up",),
    "\x1b[1;3B": ("alt-down",),
    "\x1b[1;3C": ("alt-right",),
    "\x1b[1;3D": ("alt-left",),
    "\x1b[1;5A": ("ctrl-up",),
    "\x1b[1;5B": ("ctrl-down",),
    "\x1b[1;5C": ("ctrl-right",),
    "\x1b[1;5D": ("ctrl-left",),
    "\x1b[H": ("home",),
    "\x1b[F": ("end",),
    "\x1bOH": ("home",),
    "\x1bOF": ("end",),
    "\x1b[1~": ("home",),
    "\x1b[4~": ("end",),
    "\x1b[2~": ("insert",),
    "\x1b[3~": ("delete",),
    "\x1b[5~": ("page_up",),
    "\x1b[6~": ("page_down",),
    "\x1bOP": ("f1",),
    "\x1bOQ": ("f2",),
    "\x1bOR": ("f3",),
    "\x1bOS": ("f4",),
    "\x1b[15~": ("f5",),
    "\x1b[17~": ("f6",),
    "\x1b[18~": ("f7",),
    "\x1b[19~": ("f8",),
    "\x1b[20~": ("f9",),
    "\x1b[21~": ("f10",),
    "\x1b[23~": ("f11",),
    "\x1b[24~": ("f12",),
}

# `msvcrt.getch` prefixes special keys with `\xe0`, which `getch` rewrites to `\x1b`.
NT_KEY_NAMES: dict[str, tuple[str, ...]] = {
    **_control_keys(),
    "\x1b": ("escape", "esc"),
    "\x08": ("backspace", "ctrl-h"),
    "\t": ("tab", "ctrl-i"),
    "\r": ("enter", "return", "ctrl-m"),
    " ": ("space", " "),
    "\x1bH": ("up",),
    "\x1bP": ("down",),
    "\x1bM": ("right",),
    "\x1bK": ("left",),
    "\x1bG": ("home",),
    "\x1bO": ("end",),
    "\x1bR": ("insert",),
    "\x1bS": ("delete",),
    "\x1bI": ("page_up",),
    "\x1bQ": ("page_down",),
}
