"""Live notification channels for the current agenda item of each projector.

``NotificationChannel`` holds the latest value and pushes every new value to
its subscribers; a new subscriber first receives the value held at the time
it subscribes. ``CurrentItemChannels`` keeps one channel per projector id,
created on first request, and feeds it from the projector directory.

Channels are never removed. The registry grows with the number of distinct
projectors that were asked for, which is bounded by the physical projectors
of an installation.
"""

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

import structlog

from projector_feed.content import ContentRepository
from projector_feed.current_item import get_current_agenda_item
from projector_feed.directory.base import ProjectorDirectory
from projector_feed.models.agenda import Item
from projector_feed.models.projector import Projector
from projector_feed.slides.manager import SlideManager

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle returned by ``NotificationChannel.subscribe``."""

    def __init__(self, cancel: Callable[[], None]) -> None:
        self._cancel = cancel
        self.closed = False

    def unsubscribe(self) -> None:
        if not self.closed:
            self.closed = True
            self._cancel()


class NotificationChannel(Generic[T]):
    """Holder of a value that notifies subscribers of every new value.

    Pushes are delivered as they come: pushing a value equal to the current
    one notifies subscribers again.

    Example:
        >>> channel = NotificationChannel[int | None](None)
        >>> seen = []
        >>> subscription = channel.subscribe(seen.append)
        >>> channel.push(3)
        >>> seen
        [None, 3]
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._subscribers: list[Callable[[T], None]] = []
        # Reentrant so callbacks may push or subscribe on the same thread
        self._lock = threading.RLock()

    @property
    def value(self) -> T:
        """The most recently pushed value."""
        return self._value

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        """Call ``callback`` with the current value now and with every pushed value."""
        with self._lock:
            # A callback that fails on the current value is never registered
            callback(self._value)
            self._subscribers.append(callback)

        def cancel() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return Subscription(cancel)

    def push(self, value: T) -> None:
        """Store a new value and deliver it to all subscribers.

        A failing subscriber is logged and the others still receive the value.
        """
        with self._lock:
            self._value = value
            for callback in list(self._subscribers):
                try:
                    callback(value)
                except Exception as e:
                    logger.error("channel_subscriber_error", error=str(e), exc_info=True)


class CurrentItemChannels:
    """Registry of current agenda item channels, one per projector.

    The registry listens to the projector directory from construction on.
    Snapshots of projectors that have a channel are resolved and pushed into
    it; snapshots of other projectors are ignored.

    Example:
        >>> channels = CurrentItemChannels(directory, SlideManager(), content)
        >>> channel = channels.get_channel(directory.get_projector(7))
        >>> channel.value.id
        3
    """

    def __init__(
        self,
        directory: ProjectorDirectory,
        slide_manager: SlideManager,
        content: ContentRepository,
    ) -> None:
        self.slide_manager = slide_manager
        self.content = content
        self._channels: dict[int, NotificationChannel[Item | None]] = {}
        self._lock = threading.Lock()
        self._update_lock = threading.RLock()
        self._unsubscribe = directory.subscribe(self.on_projector_changed)

    @property
    def channel_count(self) -> int:
        with self._lock:
            return len(self._channels)

    def resolve(self, projector: Projector) -> Item | None:
        return get_current_agenda_item(projector, self.slide_manager, self.content)

    def get_channel(self, projector: Projector) -> NotificationChannel[Item | None]:
        """Return the channel of a projector, creating it on first request.

        A new channel starts with the item resolved from the given snapshot.
        """
        with self._lock:
            channel = self._channels.get(projector.id)
            if channel is None:
                channel = NotificationChannel(self.resolve(projector))
                self._channels[projector.id] = channel
                logger.debug("current_item_channel_created", projector_id=projector.id)
        return channel

    def on_projector_changed(self, projector: Projector) -> None:
        """Push the current item of a changed projector into its channel, if any."""
        with self._lock:
            channel = self._channels.get(projector.id)
        if channel is None:
            logger.debug("projector_change_without_channel", projector_id=projector.id)
            return
        # Resolve and push as one step so snapshots reach the channel in arrival order
        with self._update_lock:
            item = self.resolve(projector)
            logger.debug(
                "current_item_pushed",
                projector_id=projector.id,
                item_id=item.id if item is not None else None,
            )
            channel.push(item)

    def close(self) -> None:
        """Stop listening to the directory. Existing channels keep their last value."""
        self._unsubscribe()
