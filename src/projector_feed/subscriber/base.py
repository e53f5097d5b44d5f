"""Polling subscriber for Message DB categories.

Message DB has no push notifications; a subscriber repeatedly reads the next
batch of a category and hands each message to a handler. The directory uses
it as its change feed.
"""

import asyncio
import inspect
import time
from collections.abc import Awaitable
from typing import Protocol

import structlog

from projector_feed.store.category import get_category_messages
from projector_feed.store.client import MessageDBClient
from projector_feed.store.operations import Message

logger = structlog.get_logger(__name__)


class SubscriberError(Exception):
    """Raised when a subscriber cannot be started or stops on a fatal error."""

    pass


class MessageHandler(Protocol):
    """Callable taking one message; may be a coroutine function."""

    def __call__(self, message: Message) -> None | Awaitable[None]: ...


class Subscriber:
    """Polls a category and hands every message to a handler, in order.

    A failing handler is logged and the next message is processed. A failing
    read is logged and retried after the poll interval from the same position.

    Example:
        >>> subscriber = Subscriber(
        ...     category="projector:v0",
        ...     handler=directory.handle_message,
        ...     store_client=client,
        ... )
        >>> threading.Thread(target=subscriber.start, daemon=True).start()
        >>> subscriber.stop()
    """

    def __init__(
        self,
        category: str,
        handler: MessageHandler,
        store_client: MessageDBClient,
        poll_interval_ms: int = 100,
        batch_size: int = 1000,
        position: int = 0,
    ):
        """Initialize the subscriber.

        Args:
            category: Category to read, e.g. "projector:v0"
            handler: Called with each message (sync or async)
            store_client: Connected Message DB client
            poll_interval_ms: Pause after each poll in milliseconds
            batch_size: Maximum number of messages per poll
            position: Global position of the first message to read
        """
        self.category = category
        self.handler = handler
        self.store_client = store_client
        self.poll_interval_ms = poll_interval_ms
        self.batch_size = batch_size
        self.position = position
        self._stop_requested = False
        self._running = False
        self._async_handler = inspect.iscoroutinefunction(handler)
        self._logger = logger.bind(category=category)

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Poll until ``stop()`` is called. Blocks the calling thread.

        Raises:
            SubscriberError: If the subscriber is already running or fails fatally
        """
        if self._running:
            raise SubscriberError("Subscriber is already running")

        self._stop_requested = False
        self._running = True
        self._logger.info(
            "subscriber_started", position=self.position, async_handler=self._async_handler
        )
        try:
            if self._async_handler:
                asyncio.run(self._run_async())
            else:
                self._run_sync()
        except Exception as e:
            self._logger.error("subscriber_fatal_error", error=str(e), exc_info=True)
            raise SubscriberError(f"Fatal error in subscriber: {e}") from e
        finally:
            self._running = False
            self._logger.info("subscriber_stopped", position=self.position)

    def stop(self) -> None:
        """Ask the polling loop to exit after the current batch."""
        self._stop_requested = True

    def poll(self) -> list[Message]:
        """Read the next batch and move the position past it."""
        messages = get_category_messages(
            client=self.store_client,
            category=self.category,
            position=self.position,
            batch_size=self.batch_size,
        )
        if messages:
            self.position = max(m.global_position for m in messages) + 1
            self._logger.debug("subscriber_batch", count=len(messages), next_position=self.position)
        return messages

    def _handler_failed(self, message: Message, error: Exception) -> None:
        self._logger.error(
            "handler_error",
            message_type=message.type,
            stream_name=message.stream_name,
            global_position=message.global_position,
            error=str(error),
            exc_info=True,
        )

    def _poll_safely(self) -> list[Message]:
        try:
            return self.poll()
        except Exception as e:
            self._logger.error(
                "subscriber_polling_error", position=self.position, error=str(e), exc_info=True
            )
            return []

    def _run_sync(self) -> None:
        while not self._stop_requested:
            for message in self._poll_safely():
                try:
                    self.handler(message)
                except Exception as e:
                    self._handler_failed(message, e)
            time.sleep(self.poll_interval_ms / 1000)

    async def _run_async(self) -> None:
        while not self._stop_requested:
            for message in self._poll_safely():
                try:
                    result = self.handler(message)
                    if inspect.isawaitable(result):
                        await result
                except Exception as e:
                    self._handler_failed(message, e)
            await asyncio.sleep(self.poll_interval_ms / 1000)
