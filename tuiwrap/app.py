"""The capabilities a hosted application provides to the run loop."""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable

from .core import KeyEvent
from .screen import Surface

__all__ = [
    "App",
    "TickedApp",
    "AppKind",
]

REQUIRED_CAPABILITIES = ("render", "handle_input", "should_terminate")


@runtime_checkable
class App(Protocol):
    """The interface every hosted application implements.

    The run loop calls these in order each iteration: `render`, then `handle_input`
    for the key event received (if any). `should_terminate` is checked before every
    iteration.
    """

    def render(self, surface: Surface) -> None:
        """Draws the application onto the surface."""

    def handle_input(self, event: KeyEvent) -> None:
        """Reacts to a key press."""

    def should_terminate(self) -> bool:
        """Returns whether the run loop should stop."""


@runtime_checkable
class TickedApp(App, Protocol):
    """An application that also does periodic work, hosted with `UI.ticked`."""

    def on_interval(self) -> None:
        """Called once every time the configured interval elapses."""


class AppKind(Enum):
    """Which capability set a UI was built to drive."""

    PLAIN = "plain"
    """Only `App` capabilities are used, through `UI.run`."""

    WITH_INTERVAL = "with_interval"
    """`on_interval` is used as well, through `UI.run_ticked`."""


def missing_capabilities(app: object, ticked: bool = False) -> list[str]:
    """Returns the names of the capabilities `app` doesn't provide."""

    required = REQUIRED_CAPABILITIES + (("on_interval",) if ticked else ())

    return [name for name in required if not callable(getattr(app, name, None))]
