"""Tests for ListenerSet."""

from unittest.mock import Mock

from projector_feed.directory.base import ListenerSet
from projector_feed.models import Projector


def test_emit_calls_listeners_in_order():
    listeners = ListenerSet()
    calls: list[str] = []
    listeners.add(lambda p: calls.append(f"first-{p.id}"))
    listeners.add(lambda p: calls.append(f"second-{p.id}"))

    listeners.emit(Projector(id=3))

    assert calls == ["first-3", "second-3"]
    assert len(listeners) == 2


def test_unsubscribe_removes_listener():
    listeners = ListenerSet()
    listener = Mock()
    unsubscribe = listeners.add(listener)

    unsubscribe()
    unsubscribe()
    listeners.emit(Projector(id=1))

    listener.assert_not_called()
    assert len(listeners) == 0


def test_failing_listener_does_not_stop_others():
    """A listener error is logged and the snapshot still reaches later listeners."""
    listeners = ListenerSet()
    failing = Mock(side_effect=RuntimeError("boom"))
    healthy = Mock()
    listeners.add(failing)
    listeners.add(healthy)
    projector = Projector(id=1)

    listeners.emit(projector)

    failing.assert_called_once_with(projector)
    healthy.assert_called_once_with(projector)
