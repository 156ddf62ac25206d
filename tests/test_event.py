import pytest

from tuiwrap.event import CallbackError, Event


def test_event_notifies_in_order():
    received = []

    resized = Event("resized")
    resized += lambda size: received.append(("first", size))
    resized += lambda size: received.append(("second", size))

    assert resized
    assert resized((80, 24)) is None
    assert received == [("first", (80, 24)), ("second", (80, 24))]


def test_event_remove_listener():
    received = []

    resized = Event("resized")
    resized += received.append
    resized -= received.append

    assert not resized
    resized((80, 24))
    assert received == []


def test_event_remove_unknown_listener_is_ignored():
    resized = Event("resized")
    resized -= print

    assert not resized


def test_event_bad_listener():
    resized = Event("resized")

    with pytest.raises(ValueError):
        resized += "this won't work"


def test_event_failure_does_not_skip_later_listeners():
    received = []

    def _bad_listener(_):
        1 / 0

    resized = Event("resized")
    resized += _bad_listener
    resized += received.append

    with pytest.raises(CallbackError) as info:
        resized((10, 5))

    assert received == [(10, 5)]
    assert isinstance(info.value.__cause__, ZeroDivisionError)
    assert [listener for listener, _ in info.value.failures] == [_bad_listener]


def test_event_reports_every_failure():
    def _first(_):
        raise KeyError("first")

    def _second(_):
        raise ValueError("second")

    changed = Event("changed")
    changed += _first
    changed += _second

    with pytest.raises(CallbackError) as info:
        changed("value")

    assert isinstance(info.value.__cause__, KeyError)
    assert [type(error) for _, error in info.value.failures] == [KeyError, ValueError]


def test_event_listener_can_unsubscribe_itself():
    calls = []
    changed = Event("changed")

    def _once(value):
        nonlocal changed

        calls.append(value)
        changed -= _once

    changed += _once
    changed("a")
    changed("b")

    assert calls == ["a"]


def test_event_clear():
    changed = Event("changed")
    changed += print
    changed.clear()

    assert not changed
