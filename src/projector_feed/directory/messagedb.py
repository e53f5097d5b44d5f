"""Event-sourced projector directory on Message DB.

Each projector lives in its own stream ("projector:v0-{id}"). Mutations
append events to that stream; the current snapshot is the fold of the stream
(see ``project_to_projector``). Listeners are fed by a category subscriber
created with ``watch()``: every message re-projects the stream it belongs to
and the resulting snapshot is sent to all listeners.

Writes carry the stream version read right before them, so two writers that
race on the same projector cannot both succeed; the loser gets an
``OptimisticConcurrencyError``.
"""

import asyncio
import functools
from collections.abc import Callable
from typing import Any, TypeVar

import structlog

from projector_feed.config import DirectoryConfig
from projector_feed.directory.base import ListenerSet, ProjectorListener, Unsubscribe
from projector_feed.directory.events import (
    ELEMENT_PROJECTED,
    ELEMENT_REMOVED,
    PROJECTOR_CLEARED,
    PROJECTOR_CREATED,
    ElementProjectedData,
    ElementRemovedData,
    ProjectorCreatedData,
)
from projector_feed.directory.projection import (
    check_can_project,
    check_can_remove,
    project_to_projector,
)
from projector_feed.errors import ProjectionConflictError, ProjectorNotFoundError
from projector_feed.models.projector import ElementDescriptor, Projector
from projector_feed.store.category import get_category_head
from projector_feed.store.client import MessageDBClient
from projector_feed.store.operations import (
    Message,
    OptimisticConcurrencyError,
    read_stream,
    write_message,
)
from projector_feed.store.stream import build_category_name, build_stream_name, parse_stream_name
from projector_feed.subscriber.base import Subscriber
from projector_feed.subscriber.handlers import same_handler_for

logger = structlog.get_logger(__name__)

T = TypeVar("T")

PROJECTOR_EVENT_TYPES = (PROJECTOR_CREATED, ELEMENT_PROJECTED, ELEMENT_REMOVED, PROJECTOR_CLEARED)


class MessageDBProjectorDirectory:
    """Projector directory that stores projectors as Message DB streams.

    Example:
        ```python
        with MessageDBClient(config.message_db) as client:
            directory = MessageDBProjectorDirectory(client, config.directory)
            directory.create_projector(1, name="Main")
            subscriber = directory.watch()
            threading.Thread(target=subscriber.start, daemon=True).start()
        ```
    """

    def __init__(self, client: MessageDBClient, config: DirectoryConfig | None = None) -> None:
        self.client = client
        self.config = config or DirectoryConfig()
        self._listeners = ListenerSet()
        self._logger = logger.bind(category=self.category)

    @property
    def category(self) -> str:
        return build_category_name(self.config.category, self.config.version)

    def stream_name(self, projector_id: int) -> str:
        return build_stream_name(self.config.category, self.config.version, projector_id)

    def _read_all(self, projector_id: int) -> list[Message]:
        stream_name = self.stream_name(projector_id)
        messages: list[Message] = []
        while True:
            batch = read_stream(
                self.client,
                stream_name,
                position=len(messages),
                batch_size=self.config.batch_size,
            )
            messages.extend(batch)
            if len(batch) < self.config.batch_size:
                return messages

    def load(self, projector_id: int) -> tuple[Projector, int]:
        """Return the projector snapshot and the version of its stream.

        Raises:
            ProjectorNotFoundError: If the stream holds no ProjectorCreated event
        """
        messages = self._read_all(projector_id)
        projector = project_to_projector(messages, projector_id)
        if projector is None:
            raise ProjectorNotFoundError(projector_id)
        return projector, messages[-1].position

    def get_projector(self, projector_id: int) -> Projector:
        projector, _ = self.load(projector_id)
        return projector

    def subscribe(self, listener: ProjectorListener) -> Unsubscribe:
        return self._listeners.add(listener)

    def create_projector(self, projector_id: int, name: str = "") -> None:
        """Create a projector without elements.

        Raises:
            ProjectionConflictError: If the projector already exists
        """
        data = ProjectorCreatedData(projector_id=projector_id, name=name)
        try:
            write_message(
                self.client,
                self.stream_name(projector_id),
                PROJECTOR_CREATED,
                {"projector_id": data.projector_id, "name": data.name},
                expected_version=-1,
            )
        except OptimisticConcurrencyError as e:
            raise ProjectionConflictError(projector_id, "projector", "already exists") from e
        self._logger.info("projector_created", projector_id=projector_id)

    def clear_projector(self, projector_id: int) -> None:
        """Remove the non-stable element from a projector.

        Raises:
            ProjectorNotFoundError: If the projector does not exist
            OptimisticConcurrencyError: If the projector changed concurrently
        """
        _, version = self.load(projector_id)
        write_message(
            self.client,
            self.stream_name(projector_id),
            PROJECTOR_CLEARED,
            {},
            expected_version=version,
        )
        self._logger.info("projector_cleared", projector_id=projector_id)

    def _project_on(self, projector_id: int, descriptor: ElementDescriptor) -> None:
        projector, version = self.load(projector_id)
        check_can_project(projector, descriptor)
        data = ElementProjectedData(element=descriptor.to_element().to_dict())
        write_message(
            self.client,
            self.stream_name(projector_id),
            ELEMENT_PROJECTED,
            {"element": data.element},
            expected_version=version,
        )
        self._logger.info("element_projected", projector_id=projector_id, slide=descriptor.name)

    def _remove_from(self, projector_id: int, descriptor: ElementDescriptor) -> None:
        projector, version = self.load(projector_id)
        check_can_remove(projector, descriptor)
        data = ElementRemovedData(
            element={key: descriptor.get(key) for key in descriptor.identifiers},
            identifiers=list(descriptor.identifiers),
        )
        write_message(
            self.client,
            self.stream_name(projector_id),
            ELEMENT_REMOVED,
            {"element": data.element, "identifiers": data.identifiers},
            expected_version=version,
        )
        self._logger.info("element_removed", projector_id=projector_id, slide=descriptor.name)

    def _is_projected_on(self, projector_id: int, descriptor: ElementDescriptor) -> bool:
        projector = self.get_projector(projector_id)
        return any(descriptor.matches(e) for e in projector.elements)

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        # psycopg calls block; keep them off the event loop
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args))

    async def is_projected_on(self, projector_id: int, descriptor: ElementDescriptor) -> bool:
        return await self._run(self._is_projected_on, projector_id, descriptor)

    async def project_on(self, projector_id: int, descriptor: ElementDescriptor) -> None:
        await self._run(self._project_on, projector_id, descriptor)

    async def remove_from(self, projector_id: int, descriptor: ElementDescriptor) -> None:
        await self._run(self._remove_from, projector_id, descriptor)

    def handle_message(self, message: Message) -> None:
        """Re-project the stream a message belongs to and notify listeners."""
        if not self._listeners:
            return
        _, _, projector_id = parse_stream_name(message.stream_name)
        try:
            projector = self.get_projector(projector_id)
        except ProjectorNotFoundError:
            self._logger.warning(
                "projector_stream_without_creation",
                projector_id=projector_id,
                event_type=message.type,
            )
            return
        self._listeners.emit(projector)

    def next_position(self) -> int:
        """Global position right after the newest projector event."""
        return get_category_head(self.client, self.category) + 1

    def watch(self, position: int | None = None) -> Subscriber:
        """Create a subscriber feeding projector changes to the listeners.

        Without a position the subscriber starts after the newest projector
        event, so only changes made from now on are delivered. Read
        ``next_position()`` before loading the snapshots a caller starts from
        to not miss changes in between.

        The subscriber is returned unstarted; run ``start()`` in a thread.
        """
        if position is None:
            position = self.next_position()
        return Subscriber(
            category=self.category,
            handler=same_handler_for(PROJECTOR_EVENT_TYPES, self.handle_message),
            store_client=self.client,
            poll_interval_ms=self.config.poll_interval_ms,
            batch_size=self.config.batch_size,
            position=position,
        )
