"""Change notifications for terminal resizes and run state transitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar

__all__ = [
    "Event",
    "CallbackError",
]

T = TypeVar("T")


class CallbackError(Exception):
    """Raised after an emission in which at least one listener failed.

    Attributes:
        failures: Every listener that raised, paired with what it raised, in the
            order the listeners ran.
    """

    def __init__(
        self, message: str, failures: list[tuple[Callable[..., Any], Exception]]
    ) -> None:
        super().__init__(message)

        self.failures = failures


@dataclass
class Event(Generic[T]):
    """A named notification that listeners can subscribe to.

    Listeners are added with `+=`, removed with `-=` and notified by calling the
    event with the new value:

        terminal.on_resize += lambda size: print(size)

    A failing listener never keeps the ones after it from being notified.
    """

    name: str

    _listeners: list[Callable[[T], Any]] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self._listeners)

    def __iadd__(self, listener: Callable[[T], Any]) -> Event[T]:
        if not callable(listener):
            raise ValueError(
                f"Listeners of {self.name!r} must be callable, got {listener!r}."
            )

        self._listeners.append(listener)

        return self

    def __isub__(self, listener: Callable[[T], Any]) -> Event[T]:
        if listener in self._listeners:
            self._listeners.remove(listener)

        return self

    def __call__(self, value: T) -> None:
        """Notifies every listener of `value`, in subscription order.

        Raises:
            CallbackError: One or more listeners raised. It is chained from the
                first failure, and lists all of them in `failures`.
        """

        failures = []

        # Listeners may unsubscribe themselves while being notified.
        for listener in list(self._listeners):
            try:
                listener(value)

            except Exception as error:  # pylint: disable=broad-exception-caught
                failures.append((listener, error))

        if failures:
            listener, error = failures[0]

            raise CallbackError(
                f"{len(failures)} listener(s) of {self.name!r} failed,"
                f" first {listener!r}: {error!r}",
                failures,
            ) from error

    def clear(self) -> None:
        """Unsubscribes every listener."""

        self._listeners.clear()
