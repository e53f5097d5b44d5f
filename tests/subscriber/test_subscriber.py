"""Tests for the polling Subscriber with patched category reads."""

import threading
from unittest.mock import Mock, patch

import pytest

from projector_feed.store import Message
from projector_feed.subscriber import MessageHandler, Subscriber, SubscriberError

MODULE = "projector_feed.subscriber.base"


@pytest.fixture
def client():
    return Mock()


def test_message_handler_protocol_sync(make_message):
    """Sync functions satisfy the MessageHandler protocol."""
    received: list[Message] = []

    def sync_handler(message: Message) -> None:
        received.append(message)

    handler: MessageHandler = sync_handler
    handler(make_message("ElementProjected"))

    assert len(received) == 1


class TestPoll:
    """Tests for Subscriber.poll."""

    @patch(f"{MODULE}.get_category_messages")
    def test_poll_advances_position(self, mock_read, client, make_message):
        mock_read.return_value = [
            make_message("ElementProjected", global_position=5),
            make_message("ElementRemoved", global_position=9),
        ]
        subscriber = Subscriber("projector:v0", Mock(), client, batch_size=20, position=5)

        messages = subscriber.poll()

        assert len(messages) == 2
        assert subscriber.position == 10
        mock_read.assert_called_once_with(
            client=client, category="projector:v0", position=5, batch_size=20
        )

    @patch(f"{MODULE}.get_category_messages")
    def test_empty_poll_keeps_position(self, mock_read, client):
        mock_read.return_value = []
        subscriber = Subscriber("projector:v0", Mock(), client, position=3)

        assert subscriber.poll() == []
        assert subscriber.position == 3


class TestPollingLoop:
    """Tests for start and stop."""

    @patch(f"{MODULE}.get_category_messages")
    def test_handles_messages_in_order_until_stopped(self, mock_read, client, make_message):
        first = make_message("ElementProjected", global_position=1)
        second = make_message("ElementRemoved", global_position=2)
        mock_read.side_effect = [[first, second], []]
        handled: list[Message] = []
        subscriber: Subscriber

        def handler(message: Message) -> None:
            handled.append(message)
            if message is second:
                subscriber.stop()

        subscriber = Subscriber("projector:v0", handler, client, poll_interval_ms=1)
        subscriber.start()

        assert handled == [first, second]
        assert subscriber.position == 3
        assert subscriber.is_running is False

    @patch(f"{MODULE}.get_category_messages")
    def test_handler_errors_are_skipped(self, mock_read, client, make_message):
        """A failing handler does not stop the following messages."""
        failing = make_message("ElementProjected", global_position=1)
        passing = make_message("ElementRemoved", global_position=2)
        mock_read.return_value = [failing, passing]
        handled: list[Message] = []
        subscriber: Subscriber

        def handler(message: Message) -> None:
            if message is failing:
                raise RuntimeError("handler failed")
            handled.append(message)
            subscriber.stop()

        subscriber = Subscriber("projector:v0", handler, client, poll_interval_ms=1)
        subscriber.start()

        assert handled == [passing]

    @patch(f"{MODULE}.get_category_messages")
    def test_polling_errors_are_retried(self, mock_read, client, make_message):
        message = make_message("ElementProjected", global_position=1)
        mock_read.side_effect = [RuntimeError("connection lost"), [message]]
        subscriber: Subscriber
        handler = Mock(side_effect=lambda m: subscriber.stop())

        subscriber = Subscriber("projector:v0", handler, client, poll_interval_ms=1)
        subscriber.start()

        handler.assert_called_once_with(message)

    @patch(f"{MODULE}.get_category_messages")
    def test_async_handler(self, mock_read, client, make_message):
        message = make_message("ElementProjected", global_position=4)
        mock_read.return_value = [message]
        handled: list[Message] = []
        subscriber: Subscriber

        async def handler(m: Message) -> None:
            handled.append(m)
            subscriber.stop()

        subscriber = Subscriber("projector:v0", handler, client, poll_interval_ms=1)
        subscriber.start()

        assert handled == [message]

    @patch(f"{MODULE}.get_category_messages")
    def test_start_twice_raises(self, mock_read, client):
        mock_read.return_value = []
        subscriber = Subscriber("projector:v0", Mock(), client, poll_interval_ms=1)
        thread = threading.Thread(target=subscriber.start)
        thread.start()
        try:
            for _ in range(200):
                if subscriber.is_running:
                    break
                threading.Event().wait(0.005)

            with pytest.raises(SubscriberError, match="already running"):
                subscriber.start()
        finally:
            subscriber.stop()
            thread.join(timeout=5)

        assert subscriber.is_running is False
